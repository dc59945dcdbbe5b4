from __future__ import annotations

import sqlite3

from adapters.base import DatabaseHandle
from adapters.errors import InvalidConnectionStringError
from adapters.factory import register_driver


class SQLiteHandle(DatabaseHandle):
    """Handle over ``sqlite3``. The connection-string rest is a file path, ``:memory:`` or a ``file:`` URI."""

    engine = "sqlite"

    @classmethod
    def create(cls, rest: str) -> "SQLiteHandle":
        path = (rest or "").strip()
        if not path:
            raise InvalidConnectionStringError("sqlite connection string needs a database path")
        return cls(path).open()

    def _connect(self) -> sqlite3.Connection:
        # isolation_level=None keeps sqlite3 from opening implicit transactions
        return sqlite3.connect(self.dsn, isolation_level=None, uri=self.dsn.startswith("file:"))


register_driver("sqlite", SQLiteHandle.create)

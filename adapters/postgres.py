from __future__ import annotations

from adapters.base import DatabaseHandle
from adapters.factory import register_driver


class PostgresHandle(DatabaseHandle):
    """Handle over psycopg (or psycopg2); the rest of the connection string is a libpq URI tail."""

    engine = "postgres"

    def __init__(self, dsn: str):
        super().__init__(dsn)
        self.driver = None

    @classmethod
    def create(cls, rest: str) -> "PostgresHandle":
        return cls(f"postgresql://{rest}").open()

    def _connect(self):
        try:
            import psycopg  # type: ignore

            self.driver = "psycopg"
            return psycopg.connect(self.dsn, autocommit=True)
        except ImportError:
            try:
                import psycopg2  # type: ignore
            except ImportError as exc:
                raise ImportError(
                    "No PostgreSQL driver found. Install one of: "
                    '`python -m pip install "psycopg[binary]"` or `python -m pip install psycopg2-binary`.'
                ) from exc

            self.driver = "psycopg2"
            conn = psycopg2.connect(self.dsn)
            conn.autocommit = True
            return conn


register_driver("postgres", PostgresHandle.create)
register_driver("postgresql", PostgresHandle.create)

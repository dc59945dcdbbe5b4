from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple, TypeVar

from adapters.errors import ConnectivityError, NotOpenError
from adapters.sql_renderer import SQLDialect, bind_named, count_sql, get_sql_dialect, limit_one
from adapters.values import Row

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ExecResult:
    rowcount: int
    lastrowid: Optional[int] = None


def _columns(cursor) -> List[str]:
    return [desc[0] for desc in (cursor.description or [])]


class Transaction:
    """Statement surface bound to the connection of an open transaction."""

    def __init__(self, handle: "DatabaseHandle", conn):
        self._handle = handle
        self._conn = conn

    def execute(self, sql: str, *args: Any) -> ExecResult:
        return self._handle._execute_on(self._conn, sql, args)

    def query_rows(self, sql: str, *args: Any) -> List[Row]:
        return list(self._handle._iter_on(self._conn, sql, args))

    def query_row(self, sql: str, *args: Any) -> Optional[Row]:
        return self._handle._first_on(self._conn, limit_one(sql), args)


class DatabaseHandle(ABC):
    """One open connection to a database, in autocommit mode.

    Transactions are opened explicitly through :meth:`transaction`. A single
    mapping argument to any statement method binds ``@name`` placeholders,
    anything else binds positionally.
    """

    engine: str = "unknown"

    def __init__(self, dsn: str):
        self.dsn = dsn
        self._conn = None

    @property
    def dialect(self) -> SQLDialect:
        return get_sql_dialect(self.engine)

    @abstractmethod
    def _connect(self):
        raise NotImplementedError

    def _ping(self, conn) -> None:
        cur = self._cursor(conn)
        try:
            cur.execute("SELECT 1")
            cur.fetchall()
        finally:
            cur.close()

    def open(self) -> "DatabaseHandle":
        if self._conn is None:
            self._conn = self._connect()
        return self

    def close(self) -> None:
        conn, self._conn = self._conn, None
        if conn is not None:
            conn.close()

    def __enter__(self) -> "DatabaseHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    def _ensure_connection(self):
        if self._conn is None:
            raise NotOpenError()
        try:
            self._ping(self._conn)
        except Exception as exc:
            raise ConnectivityError(f"{self.engine} liveness check failed: {exc}") from exc
        return self._conn

    def _prepare(self, sql: str, args: Sequence[Any]) -> Tuple[str, Sequence[Any]]:
        if len(args) == 1 and isinstance(args[0], Mapping):
            return self.parse_named_sql(sql, args[0])
        return sql, args

    def _cursor(self, conn):
        return conn.cursor()

    def _run(self, conn, sql: str, args: Sequence[Any]):
        sql, params = self._prepare(sql, args)
        logger.debug("%s \n\tArgs: %r", sql, list(params))
        cur = self._cursor(conn)
        try:
            if params:
                cur.execute(sql, tuple(params))
            else:
                cur.execute(sql)
        except Exception:
            cur.close()
            raise
        return cur

    def _rows_of(self, cur) -> Iterator[Row]:
        columns = _columns(cur)
        for raw in cur:
            yield Row.from_pairs(zip(columns, raw))

    def _iter_on(self, conn, sql: str, args: Sequence[Any]) -> Iterator[Row]:
        cur = self._run(conn, sql, args)
        try:
            yield from self._rows_of(cur)
        finally:
            cur.close()

    def _first_on(self, conn, sql: str, args: Sequence[Any]) -> Optional[Row]:
        cur = self._run(conn, sql, args)
        try:
            raw = cur.fetchone()
            if raw is None:
                return None
            return Row.from_pairs(zip(_columns(cur), raw))
        finally:
            cur.close()

    def _execute_on(self, conn, sql: str, args: Sequence[Any]) -> ExecResult:
        cur = self._run(conn, sql, args)
        try:
            return ExecResult(rowcount=cur.rowcount, lastrowid=getattr(cur, "lastrowid", None))
        finally:
            cur.close()

    def query_rows(self, sql: str, *args: Any) -> List[Row]:
        conn = self._ensure_connection()
        return list(self._iter_on(conn, sql, args))

    def iter_rows(self, sql: str, *args: Any) -> Iterator[Row]:
        conn = self._ensure_connection()
        return self._iter_on(conn, sql, args)

    def query_rows_streaming(self, sql: str, callback: Optional[Callable[[Iterator[Row]], Any]], *args: Any) -> None:
        conn = self._ensure_connection()
        # The statement runs before the callback sees the rows.
        cur = self._run(conn, sql, args)
        try:
            if callback is not None:
                callback(self._rows_of(cur))
        finally:
            cur.close()

    def query_row(self, sql: str, *args: Any) -> Optional[Row]:
        conn = self._ensure_connection()
        return self._first_on(conn, limit_one(sql), args)

    def execute(self, sql: str, *args: Any) -> ExecResult:
        conn = self._ensure_connection()
        return self._execute_on(conn, sql, args)

    def count(self, sql: str, *args: Any) -> int:
        conn = self._ensure_connection()
        row = self._first_on(conn, count_sql(sql), args)
        if row is None:
            return 0
        return int(next(iter(row.values())))

    def parse_named_sql(self, sql: str, args: Optional[Mapping[str, Any]]) -> Tuple[str, List[Any]]:
        return bind_named(sql, args, placeholder=self.dialect.placeholder)

    def _statement(self, conn, sql: str) -> None:
        logger.debug(sql)
        cur = self._cursor(conn)
        try:
            cur.execute(sql)
        finally:
            cur.close()

    def _begin(self, conn) -> None:
        self._statement(conn, "BEGIN")

    def _commit(self, conn) -> None:
        self._statement(conn, "COMMIT")

    def _rollback(self, conn) -> None:
        self._statement(conn, "ROLLBACK")

    def _safe_rollback(self, conn) -> None:
        try:
            self._rollback(conn)
        except Exception as exc:
            logger.error("Transaction rollback failed: %s", exc)

    def transaction(self, fn: Callable[[Transaction], T]) -> T:
        conn = self._ensure_connection()
        try:
            self._begin(conn)
        except Exception as exc:
            logger.error("Transaction begin failed: %s", exc)
            raise
        try:
            result = fn(Transaction(self, conn))
        except BaseException:
            self._safe_rollback(conn)
            raise
        try:
            self._commit(conn)
        except Exception as exc:
            logger.error("Transaction commit failed: %s", exc)
            self._safe_rollback(conn)
            raise
        return result

    def get_raw(self):
        return self._ensure_connection()

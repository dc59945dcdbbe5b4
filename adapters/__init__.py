"""Database handles selected by connection-string scheme, plus SQL rewriting helpers."""

from adapters.base import DatabaseHandle, ExecResult, Transaction
from adapters.config import DatabaseSettings, build_connection_string
from adapters.errors import (
    AdapterError,
    ConnectivityError,
    DuplicateDriverError,
    InvalidConnectionStringError,
    MissingParameterError,
    NotOpenError,
    UnknownDriverError,
)
from adapters.factory import DriverRegistry, get_adapter, open_handle, register_driver, registered_drivers
from adapters.mysql import MySQLHandle
from adapters.postgres import PostgresHandle
from adapters.sql_renderer import bind_named, count_sql, get_sql_dialect, limit_one
from adapters.sqlite import SQLiteHandle
from adapters.values import Row, ValueKind

__all__ = [
    "AdapterError",
    "ConnectivityError",
    "DatabaseHandle",
    "DatabaseSettings",
    "DriverRegistry",
    "DuplicateDriverError",
    "ExecResult",
    "InvalidConnectionStringError",
    "MissingParameterError",
    "MySQLHandle",
    "NotOpenError",
    "PostgresHandle",
    "Row",
    "SQLiteHandle",
    "Transaction",
    "UnknownDriverError",
    "ValueKind",
    "bind_named",
    "build_connection_string",
    "count_sql",
    "get_adapter",
    "get_sql_dialect",
    "limit_one",
    "open_handle",
    "register_driver",
    "registered_drivers",
]

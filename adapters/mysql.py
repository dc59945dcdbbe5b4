from __future__ import annotations

import logging
import re
from typing import Any, Dict
from urllib.parse import parse_qsl, unquote, urlsplit

from adapters.base import DatabaseHandle
from adapters.errors import InvalidConnectionStringError
from adapters.factory import register_driver

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3306

_PROTOCOL_RE = re.compile(r"@(tcp|unix)\(([^)]*)\)")
_PASSTHROUGH_OPTIONS = {"charset": str, "connect_timeout": int}


def parse_mysql_dsn(rest: str) -> Dict[str, Any]:
    """Parse ``user:pass@host:port/db?opts`` into connect() keyword arguments.

    The ``user:pass@tcp(host:port)/db`` and ``user:pass@unix(/path)/db`` forms
    are accepted as well.
    """
    unix_socket = None
    match = _PROTOCOL_RE.search(rest)
    if match:
        protocol, address = match.groups()
        if protocol == "unix":
            unix_socket = address
            rest = rest[: match.start()] + "@" + DEFAULT_HOST + rest[match.end():]
        else:
            rest = rest[: match.start()] + "@" + address + rest[match.end():]

    parts = urlsplit("//" + rest)
    try:
        port = parts.port
    except ValueError as exc:
        raise InvalidConnectionStringError(f"Invalid mysql port in {rest!r}") from exc

    database = unquote(parts.path.lstrip("/"))
    if not parts.username:
        raise InvalidConnectionStringError("mysql connection string needs a user")
    params: Dict[str, Any] = {
        "host": parts.hostname or DEFAULT_HOST,
        "port": port or DEFAULT_PORT,
        "user": unquote(parts.username),
        "password": unquote(parts.password or ""),
    }
    if database:
        params["database"] = database
    if unix_socket:
        params["unix_socket"] = unix_socket

    for key, value in parse_qsl(parts.query):
        convert = _PASSTHROUGH_OPTIONS.get(key)
        if convert is None:
            logger.debug("Ignoring mysql option %s=%s", key, value)
            continue
        params[key] = convert(value)
    return params


class MySQLHandle(DatabaseHandle):
    engine = "mysql"

    def __init__(self, dsn: str):
        super().__init__(dsn)
        self.driver = None

    @classmethod
    def create(cls, rest: str) -> "MySQLHandle":
        return cls(rest).open()

    def _connect(self):
        params = parse_mysql_dsn(self.dsn)
        try:
            import mysql.connector  # type: ignore

            self.driver = "mysql.connector"
            return mysql.connector.connect(autocommit=True, **params)
        except ImportError:
            try:
                import pymysql  # type: ignore
            except ImportError as exc:
                raise ImportError(
                    "No MySQL driver found. Install one of: "
                    "`python -m pip install mysql-connector-python` or `python -m pip install pymysql`."
                ) from exc

            self.driver = "pymysql"
            return pymysql.connect(autocommit=True, **params)

    def _cursor(self, conn):
        if self.driver == "mysql.connector":
            # unbuffered mysql.connector cursors refuse to close with unread rows
            return conn.cursor(buffered=True)
        return conn.cursor()

    def _ping(self, conn) -> None:
        conn.ping(reconnect=True)


register_driver("mysql", MySQLHandle.create)

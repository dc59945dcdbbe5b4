from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Union

from adapters.base import DatabaseHandle
from adapters.config import DatabaseSettings
from adapters.errors import DuplicateDriverError, InvalidConnectionStringError, UnknownDriverError

logger = logging.getLogger(__name__)

SCHEME_SEPARATOR = "://"

HandleFactory = Union[Callable[[str], DatabaseHandle], Any]


def _normalize_scheme(scheme: str) -> str:
    return (scheme or "").strip().lower()


def _creator(factory: HandleFactory) -> Callable[[str], DatabaseHandle]:
    create = getattr(factory, "create", None)
    if callable(create):
        return create
    if callable(factory):
        return factory
    raise TypeError(f"Driver factory must be callable or define create(), got: {type(factory).__name__}")


class DriverRegistry:
    """Maps connection-string schemes to handle factories.

    Entries are write-once: a scheme can be registered a single time for the
    life of the registry.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._factories: Dict[str, Callable[[str], DatabaseHandle]] = {}

    def register(self, scheme: str, factory: HandleFactory) -> None:
        if factory is None:
            raise TypeError("Driver factory is None")
        create = _creator(factory)
        key = _normalize_scheme(scheme)
        if not key:
            raise ValueError("Driver scheme is required")
        with self._lock:
            if key in self._factories:
                raise DuplicateDriverError(key)
            self._factories[key] = create

    def drivers(self) -> List[str]:
        with self._lock:
            return sorted(self._factories)

    def open(self, connection_string: str) -> DatabaseHandle:
        parts = (connection_string or "").split(SCHEME_SEPARATOR, 1)
        if len(parts) < 2:
            raise InvalidConnectionStringError(
                f"Connection string must look like scheme{SCHEME_SEPARATOR}rest, got: {connection_string!r}"
            )
        scheme, rest = parts
        key = _normalize_scheme(scheme)
        with self._lock:
            create = self._factories.get(key)
        if create is None:
            raise UnknownDriverError(key)
        try:
            return create(rest)
        except Exception as exc:
            logger.error("Opening %s connection failed: %s", key, exc)
            raise


default_registry = DriverRegistry()


def register_driver(scheme: str, factory: HandleFactory) -> None:
    default_registry.register(scheme, factory)


def registered_drivers() -> List[str]:
    return default_registry.drivers()


def open_handle(connection_string: str) -> DatabaseHandle:
    return default_registry.open(connection_string)


def get_adapter(connection_string: Optional[str] = None) -> DatabaseHandle:
    if connection_string is None:
        connection_string = DatabaseSettings.from_env().connection_string()
    return open_handle(connection_string)

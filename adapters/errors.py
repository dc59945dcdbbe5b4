from __future__ import annotations


class AdapterError(RuntimeError):
    pass


class NotOpenError(AdapterError):
    def __init__(self, message: str = "Database not open, open a handle before using it"):
        super().__init__(message)


class ConnectivityError(AdapterError):
    pass


class InvalidConnectionStringError(AdapterError):
    pass


class UnknownDriverError(AdapterError):
    def __init__(self, scheme: str):
        super().__init__(f"Unknown driver: {scheme!r}")
        self.scheme = scheme


class DuplicateDriverError(AdapterError):
    def __init__(self, scheme: str):
        super().__init__(f"Driver already registered: {scheme!r}")
        self.scheme = scheme


class MissingParameterError(AdapterError):
    def __init__(self, token: str):
        super().__init__(f"Missing value for parameter [{token}]")
        self.token = token

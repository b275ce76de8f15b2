"""
Client failure error classifications.

These exceptions represent failures talking to the backend or to local
storage. None of them are retried automatically.
"""

from typing import Optional, Dict, Any


class ClientError(Exception):
    """Base class for backend and storage failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class ApiRequestError(ClientError):
    """Backend answered with a non-success HTTP status."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 endpoint: Optional[str] = None,
                 payload: Optional[Dict[str, Any]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.endpoint = endpoint
        self.payload = payload or {}


class AuthenticationRequiredError(ApiRequestError):
    """No token, an expired token, or a rejected login."""

    def __init__(self, message: str = "Authentication required", **kwargs):
        kwargs.setdefault("status_code", 401)
        super().__init__(message, **kwargs)


class NetworkError(ClientError):
    """The request never produced an HTTP response."""

    def __init__(self, message: str = "Network error",
                 endpoint: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.endpoint = endpoint
        self.recoverable = True


class StreamError(ClientError):
    """The coach stream could not be opened or read."""

    def __init__(self, message: str, endpoint: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.endpoint = endpoint


class PersistenceError(ClientError):
    """Local SQLite storage failures."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target


class NoTradesToExportError(ClientError):
    """An export matched no trades."""

    def __init__(self, message: str = "There are no trades matching your filters", **kwargs):
        super().__init__(message, **kwargs)
        self.recoverable = True

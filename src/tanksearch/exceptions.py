"""Custom exception hierarchy for tanksearch.

Every failure a client call can produce maps to one of these classes so
callers can tell a missing index from a rejected document from a broken
connection. Nothing here is retried.
"""

from __future__ import annotations

from typing import Optional


class TankSearchError(Exception):
    """Base class for all tanksearch exceptions."""


class ConfigError(TankSearchError):
    """Raised when configuration loading or validation fails (e.g. a bad API URL)."""


class ValidationError(TankSearchError):
    """Raised when input is rejected before anything is sent to the server."""


class ConnectionFailure(TankSearchError):
    """Raised when the HTTP layer fails (DNS, refused connection, timeout, TLS)."""


class MalformedResponse(TankSearchError):
    """Raised when a response body is not the JSON shape the call expects."""


class IndexNotFound(TankSearchError):
    """Raised on a 404 from any index-scoped call."""


class IndexAlreadyExists(TankSearchError):
    """Raised when creating an index whose name is already taken."""


class IndexLimitExceeded(TankSearchError):
    """Raised when the account has reached its maximum number of indexes."""


class ServerError(TankSearchError):
    """Raised for any other non-2xx response.

    Attributes
    ----------
    status_code: int
        HTTP status returned by the server.
    reason: str
        Reason phrase, or the response body when the server sent one.
    """

    def __init__(self, status_code: int, reason: str = "", message: Optional[str] = None) -> None:
        self.status_code = status_code
        self.reason = reason
        super().__init__(message or f"Unexpected HTTP {status_code}: {reason}")


class BadRequest(ServerError):
    """A 400 response; `reason` holds the server's error detail."""

    def __init__(self, detail: str) -> None:
        super().__init__(400, detail, message=detail or "HTTP 400 Bad Request")

    @property
    def detail(self) -> str:
        return self.reason


class BatchConsistencyError(TankSearchError):
    """Raised when a batch response does not line up with its request.

    The server must return exactly one outcome per submitted item; when it
    does not, no partial result can be trusted.
    """

"""
Exception hierarchy for the resource API and UAA clients.
"""

from typing import Optional


class CFAPIError(Exception):
    """Base exception for every cfapi failure."""


class InvalidOptionsError(CFAPIError):
    """Request options are not a flat string to string mapping."""


class CFConnectionError(CFAPIError):
    """The request could not be delivered (DNS, refused connection, timeout)."""


class ParseError(CFAPIError):
    """A successful response body could not be decoded into the target."""


class HTTPStatusError(CFAPIError):
    """Raised when the API answers with an error status.

    Attributes:
        message: Human-readable error message
        status_code: HTTP status code from the response
        body: Raw response body
    """

    def __init__(self, message: str, status_code: int, body: str = "") -> None:
        self.message = message
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class ClientError(HTTPStatusError):
    """4xx response."""


class UnauthorizedError(ClientError):
    """401 response; the access token was rejected."""


class ServerError(HTTPStatusError):
    """5xx response."""


class RefreshError(CFAPIError):
    """Obtaining tokens from UAA failed."""


class UAAProtocolError(RefreshError):
    """UAA answered with an error code instead of tokens."""

    def __init__(self, error: str, description: Optional[str] = None) -> None:
        self.error = error
        self.description = description or ""
        super().__init__(f"UAA Error: {self.description} ({error})")

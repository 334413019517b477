"""
cfapi — Cloud Foundry API client with transparent OAuth2 token refresh.
"""

from .client import Client, RefresherClient, parse_response
from .errors import (
    CFAPIError,
    CFConnectionError,
    ClientError,
    HTTPStatusError,
    InvalidOptionsError,
    ParseError,
    RefreshError,
    ServerError,
    UAAProtocolError,
    UnauthorizedError,
)
from .types import Request, Tokens
from .uaa import TokenRefresher, UAAClient

__all__ = [
    "CFAPIError",
    "CFConnectionError",
    "Client",
    "ClientError",
    "HTTPStatusError",
    "InvalidOptionsError",
    "ParseError",
    "RefreshError",
    "RefresherClient",
    "Request",
    "ServerError",
    "TokenRefresher",
    "Tokens",
    "UAAClient",
    "UAAProtocolError",
    "UnauthorizedError",
    "parse_response",
]
__version__ = "0.1.0"

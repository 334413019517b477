"""
Shared types for the cfapi clients.
"""

from dataclasses import dataclass
from typing import Optional

METHODS = ("GET", "PUT", "POST", "DELETE")


@dataclass(frozen=True)
class Tokens:
    access_token: str
    refresh_token: str
    token_type: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "token_type": self.token_type,
        }


@dataclass(frozen=True)
class Request:
    """One call against the resource API, replayable after a refresh."""

    method: str
    path: str
    options: Optional[dict[str, str]] = None

    def __post_init__(self) -> None:
        if self.method not in METHODS:
            raise ValueError(f"Unsupported method: {self.method}")

"""
Shared fixtures for cfapi test suite.
"""

import json
from dataclasses import dataclass
from typing import Optional
from unittest.mock import MagicMock

import pytest
import requests

from cfapi.types import Tokens
from cfapi.uaa import UAAClient


# ── Token fixtures ───────────────────────────────────────────

@pytest.fixture
def tokens():
    return Tokens(access_token="12345", refresh_token="old-refresh-token")


@pytest.fixture
def new_tokens():
    return Tokens(
        access_token="refreshed-access-token",
        refresh_token="another-refresh-token",
        token_type="bearer",
    )


@pytest.fixture
def refresher(new_tokens):
    """UAA double whose refresh always succeeds."""
    fake = MagicMock(spec=UAAClient)
    fake.refresh_token.return_value = new_tokens
    return fake


# ── Response factories ──────────────────────────────────────

def build_response(
    status_code: int = 200, body=b"", reason: Optional[str] = None
) -> requests.Response:
    """A real requests.Response with a canned body."""
    if isinstance(body, (dict, list)):
        body = json.dumps(body)
    if isinstance(body, str):
        body = body.encode("utf-8")

    resp = requests.Response()
    resp.status_code = status_code
    resp._content = body
    resp.encoding = "utf-8"
    resp.reason = reason
    return resp


@pytest.fixture
def make_response():
    return build_response


@pytest.fixture
def app_response():
    """Single application, in the metadata/entity envelope."""
    return {
        "metadata": {
            "guid": "49934910-756a-46c5-bae1-b82540e28937",
            "url": "/v2/apps/49934910-756a-46c5-bae1-b82540e28937",
        },
        "entity": {
            "name": "name-475",
            "memory": 1024,
            "instances": 1,
            "state": "STOPPED",
        },
    }


@dataclass
class AppResource:
    guid: str
    name: str
    memory: int

    @classmethod
    def from_dict(cls, data: dict) -> "AppResource":
        return cls(
            guid=data["metadata"]["guid"],
            name=data["entity"]["name"],
            memory=data["entity"]["memory"],
        )


@pytest.fixture
def app_resource():
    return AppResource

"""
UAA token client
Password and refresh-token grants against the authorization server.
"""

import argparse
import base64
import json
import logging
import sys
from typing import Optional, Protocol

import requests

from .errors import CFAPIError, RefreshError, UAAProtocolError
from .types import Tokens

logger = logging.getLogger(__name__)

# Public "cf" client with an empty secret, as used by the cf CLI.
CLIENT_CREDENTIALS = base64.b64encode(b"cf:").decode("ascii")

TOKEN_HEADERS = {
    "Content-Type": "application/x-www-form-urlencoded",
    "Authorization": f"Basic {CLIENT_CREDENTIALS}",
    "Accept": "application/json",
}


class TokenRefresher(Protocol):
    """Anything that can trade credentials for a fresh Tokens value."""

    def refresh_token(self, refresh_token: str) -> Tokens: ...

    def authenticate(self, username: str, password: str) -> Tokens: ...


class UAAClient:
    """Token endpoint client. Implements TokenRefresher."""

    def __init__(
        self,
        endpoint: str,
        verify: bool = True,
        timeout: Optional[float] = None,
    ):
        self._endpoint = endpoint.rstrip("/")
        self._verify = verify
        self._timeout = timeout
        if not verify:
            logger.warning(
                "TLS certificate verification disabled for %s", self._endpoint
            )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def authenticate(self, username: str, password: str) -> Tokens:
        """Password grant."""
        return self._fetch_token({
            "grant_type": "password",
            "scope": "",
            "username": username,
            "password": password,
        })

    def refresh_token(self, refresh_token: str) -> Tokens:
        """Refresh-token grant."""
        return self._fetch_token({
            "grant_type": "refresh_token",
            "scope": "",
            "refresh_token": refresh_token,
        })

    def _fetch_token(self, form: dict[str, str]) -> Tokens:
        url = f"{self._endpoint}/oauth/token"
        logger.debug("POST %s grant_type=%s", url, form["grant_type"])
        try:
            resp = requests.post(
                url,
                headers=TOKEN_HEADERS,
                data=form,
                verify=self._verify,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise RefreshError(f"Failed to connect: {exc}") from exc

        try:
            body = resp.json()
        except ValueError as exc:
            raise RefreshError(f"Failed to parse response ({exc})") from exc
        if not isinstance(body, dict):
            raise RefreshError(
                f"Failed to parse response (unexpected body: {resp.text})"
            )

        if body.get("error"):
            raise UAAProtocolError(body["error"], body.get("error_description"))

        if resp.status_code >= 400:
            raise RefreshError(
                f"Token request failed ({resp.status_code}): {resp.text}"
            )

        access_token = body.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise RefreshError(
                f"Failed to parse response (unexpected body: {resp.text})"
            )

        return Tokens(
            access_token=access_token,
            refresh_token=body.get("refresh_token", ""),
            token_type=body.get("token_type", ""),
        )


# ── CLI ───────────────────────────────────────────────────


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Authenticate against UAA")
    parser.add_argument("--uaa-endpoint", required=True)
    parser.add_argument("--username", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--skip-ssl-validation", action="store_true")
    parser.add_argument("--timeout", type=float)
    return parser


def main() -> None:
    """CLI entry point: authenticate and print tokens as JSON."""
    args = _build_parser().parse_args()
    client = UAAClient(
        args.uaa_endpoint, verify=not args.skip_ssl_validation, timeout=args.timeout
    )

    print(f"[*] Authenticating {args.username}...", file=sys.stderr)
    try:
        tokens = client.authenticate(args.username, args.password)
    except CFAPIError as exc:
        print(json.dumps({"error": str(exc)}), file=sys.stderr)
        sys.exit(1)

    print("[+] Ready", file=sys.stderr)
    json.dump(tokens.to_dict(), sys.stdout, indent=2)
    print()

"""
Cloud Controller API client
Bearer-authenticated JSON requests, with a wrapper that refreshes on 401.
"""

import argparse
import json
import logging
import sys
import threading
from abc import ABC, abstractmethod
from collections.abc import Mapping
from http import HTTPStatus
from typing import Any, Callable, Optional

import requests

from .errors import (
    CFAPIError,
    CFConnectionError,
    ClientError,
    InvalidOptionsError,
    ParseError,
    ServerError,
    UnauthorizedError,
)
from .types import Request, Tokens
from .uaa import TokenRefresher, UAAClient

logger = logging.getLogger(__name__)

Converter = Callable[[Any], Any]


def _status_text(resp: requests.Response) -> str:
    try:
        return HTTPStatus(resp.status_code).phrase
    except ValueError:
        return resp.reason or str(resp.status_code)


def _description(resp: requests.Response) -> Optional[str]:
    """Pull `description` out of an error envelope, None if there is none."""
    try:
        envelope = resp.json()
    except ValueError:
        return None
    if not isinstance(envelope, dict):
        return None
    description = envelope.get("description")
    if not isinstance(description, str):
        return None
    return description.strip()


def parse_response(resp: requests.Response, into: Optional[Converter] = None) -> Any:
    """Classify a response by status code.

    5xx raises ServerError, 4xx raises ClientError (UnauthorizedError for
    401). Otherwise the decoded JSON body is passed through `into` and the
    result returned; without `into`, or with an empty body, nothing is parsed.
    """
    status = resp.status_code

    if status >= 500:
        description = _description(resp)
        if description is None:
            raise ServerError(f"{_status_text(resp)}: {resp.text}", status, resp.text)
        raise ServerError(description, status, resp.text)

    if status >= 400:
        description = _description(resp)
        message = description if description is not None else _status_text(resp)
        error_cls = UnauthorizedError if status == HTTPStatus.UNAUTHORIZED else ClientError
        raise error_cls(message, status, resp.text)

    if into is None or not resp.content:
        return None

    try:
        return into(resp.json())
    except (TypeError, LookupError, ValueError, AttributeError) as exc:
        raise ParseError(f"Failed to parse response: {exc}") from exc


def _check_options(options: Optional[Mapping]) -> None:
    if options is None:
        return
    if not isinstance(options, Mapping):
        raise InvalidOptionsError(
            f"Invalid options format: expected a mapping, got {type(options).__name__}"
        )
    for key, value in options.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise InvalidOptionsError(
                f"Invalid options format: {key!r}={value!r} is not a string pair"
            )


class _Operations(ABC):
    """The four verbs, expressed over `execute`."""

    @abstractmethod
    def execute(self, request: Request, into: Optional[Converter] = None) -> Any:
        ...

    def get(self, path: str, into: Optional[Converter] = None) -> Any:
        return self.execute(Request("GET", path), into)

    def put(
        self, path: str, options: Optional[dict[str, str]], into: Optional[Converter] = None
    ) -> Any:
        return self.execute(Request("PUT", path, options), into)

    def post(
        self, path: str, options: Optional[dict[str, str]], into: Optional[Converter] = None
    ) -> Any:
        return self.execute(Request("POST", path, options), into)

    def delete(self, path: str, options: Optional[dict[str, str]] = None) -> None:
        self.execute(Request("DELETE", path, options))


class Client(_Operations):
    """API client bound to one endpoint and one access token."""

    def __init__(self, endpoint: str, access_token: str, timeout: Optional[float] = None):
        self._endpoint = endpoint
        self._access_token = access_token
        self._timeout = timeout

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def access_token(self) -> str:
        return self._access_token

    def current_tokens(self) -> Tokens:
        return Tokens(access_token=self._access_token, refresh_token="")

    def _headers(self) -> dict:
        return {
            "Authorization": f"bearer {self._access_token}",
            "Content-Type": "application/json",
        }

    def execute(self, request: Request, into: Optional[Converter] = None) -> Any:
        _check_options(request.options)
        url = f"{self._endpoint}{request.path}"
        logger.debug("%s %s", request.method, url)

        try:
            resp = requests.request(
                request.method,
                url,
                headers=self._headers(),
                json=request.options,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise CFConnectionError(f"Failed to connect: {exc}") from exc

        logger.debug("%s %s -> %s", request.method, url, resp.status_code)
        return parse_response(resp, into)


class RefresherClient(_Operations):
    """API client that trades the refresh token for new tokens on 401.

    The failed call is retried once with the new access token. All calls on
    one instance are serialized, so concurrent callers never race a refresh.
    """

    def __init__(
        self,
        endpoint: str,
        tokens: Tokens,
        refresher: TokenRefresher,
        on_refresh: Optional[Callable[[Tokens], None]] = None,
        timeout: Optional[float] = None,
    ):
        self._endpoint = endpoint
        self._timeout = timeout
        self._refresher = refresher
        self._tokens = tokens
        self._client = Client(endpoint, tokens.access_token, timeout=timeout)
        self._lock = threading.RLock()
        self.on_refresh = on_refresh

    @property
    def tokens(self) -> Tokens:
        return self._tokens

    @property
    def client(self) -> Client:
        return self._client

    def execute(self, request: Request, into: Optional[Converter] = None) -> Any:
        with self._lock:
            try:
                return self._client.execute(request, into)
            except UnauthorizedError:
                logger.debug("%s %s unauthorized, refreshing", request.method, request.path)

            self._refresh()
            return self._client.execute(request, into)

    def _refresh(self) -> None:
        tokens = self._refresher.refresh_token(self._tokens.refresh_token)
        client = Client(self._endpoint, tokens.access_token, timeout=self._timeout)
        self._tokens, self._client = tokens, client
        logger.info("Access token refreshed for %s", self._endpoint)

        if self.on_refresh is not None:
            self.on_refresh(tokens)


# ── CLI ───────────────────────────────────────────────────


def _identity(data: Any) -> Any:
    return data


def _parse_option(raw: str) -> tuple[str, str]:
    key, sep, value = raw.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected key=value, got {raw!r}")
    return key, value


def _options(args: argparse.Namespace) -> Optional[dict[str, str]]:
    return dict(args.option) if args.option else None


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cloud Controller API client")
    parser.add_argument("--endpoint", required=True)
    parser.add_argument("--uaa-endpoint", required=True)
    parser.add_argument("--access-token", required=True)
    parser.add_argument("--refresh-token", required=True)
    parser.add_argument("--skip-ssl-validation", action="store_true")
    parser.add_argument("--timeout", type=float)

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("get")
    p.add_argument("path")

    for verb in ("put", "post", "delete"):
        p = sub.add_parser(verb)
        p.add_argument("path")
        p.add_argument(
            "-o", "--option", action="append", type=_parse_option, default=[]
        )

    return parser


_DISPATCH = {
    "get": lambda c, a: c.get(a.path, into=_identity),
    "put": lambda c, a: c.put(a.path, _options(a), into=_identity),
    "post": lambda c, a: c.post(a.path, _options(a), into=_identity),
    "delete": lambda c, a: c.delete(a.path, _options(a)),
}


def _report_refresh(tokens: Tokens) -> None:
    print("[+] Tokens refreshed", file=sys.stderr)
    print(json.dumps(tokens.to_dict()), file=sys.stderr)


def main() -> None:
    """CLI entry point for API operations."""
    args = _build_parser().parse_args()
    refresher = UAAClient(
        args.uaa_endpoint, verify=not args.skip_ssl_validation, timeout=args.timeout
    )
    client = RefresherClient(
        args.endpoint,
        Tokens(args.access_token, args.refresh_token),
        refresher,
        on_refresh=_report_refresh,
        timeout=args.timeout,
    )

    handler = _DISPATCH.get(args.command)
    if not handler:
        print("Unknown command", file=sys.stderr)
        sys.exit(1)

    try:
        result = handler(client, args)
    except CFAPIError as exc:
        print(json.dumps({"error": str(exc)}), file=sys.stderr)
        sys.exit(1)

    if result is not None:
        json.dump(result, sys.stdout, ensure_ascii=False, indent=2)
        print()

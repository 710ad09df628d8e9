"""ChamberClient — async HTTP access to the realm chamber service.

Wire contract (paths are encoded with :mod:`realmctl.domain.paths`)::

    GET    {address}/{prefix}/chambers/a/b/?list=true   -> {"data": ["." , "x"]}
    GET    {address}/{prefix}/chambers/a/b/             -> {"data": {"rules": {...}}}
    POST   {address}/{prefix}/chambers/a/b/c  {"rules": {}}
    DELETE {address}/{prefix}/chambers/a/b/c

HTTP 404 becomes :class:`NotFound`; every other failure (status >= 400,
connection errors, timeouts, malformed bodies, ``errors`` arrays) becomes
:class:`TransportFailure`. Retrying is left to the caller.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

import httpx
import pydantic
import structlog

from realmctl.domain.chambers import (
    ChamberListing,
    RuleSet,
    listing_from_response,
    rules_from_response,
)
from realmctl.domain.errors import NotFound, TransportFailure
from realmctl.domain.paths import directory_path, encode

log = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 15.0
DEFAULT_API_PREFIX = "v1"


def parse_address(address: str) -> httpx.URL:
    """Validate a server address; it must carry a scheme and a host."""
    if not address:
        msg = "address must not be empty"
        raise ValueError(msg)
    try:
        url = httpx.URL(address)
    except httpx.InvalidURL as exc:
        msg = f"could not parse address {address!r}: {exc}"
        raise ValueError(msg) from exc
    if not url.scheme or not url.host:
        msg = f"address {address!r} must include a scheme and host"
        raise ValueError(msg)
    return url


class ChamberClient:
    """Thin async client for the chamber endpoints.

    The underlying :class:`httpx.AsyncClient` is created lazily and closed
    by :meth:`close` (or the async context manager). Pass *transport* to
    route requests elsewhere, e.g. an ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        address: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        api_prefix: str = DEFAULT_API_PREFIX,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = parse_address(address)
        self.timeout = timeout if timeout > 0 else DEFAULT_TIMEOUT
        self.api_prefix = api_prefix.strip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """The HTTP client (created on first access)."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Content-Type": "application/json", "Accept": "application/json"},
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> ChamberClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    def chamber_url(self, encoded_path: str) -> str:
        """Request path for an encoded chamber path, relative to the base URL."""
        prefix = f"/{self.api_prefix}" if self.api_prefix else ""
        return f"{prefix}/chambers{encoded_path}"

    async def list_chambers(self, path: Sequence[str]) -> ChamberListing:
        """Read the child names of the chamber at *path*."""
        body = await self._read(directory_path(path), params={"list": "true"})
        return self._parse(listing_from_response, body)

    async def get_chamber(self, path: Sequence[str]) -> RuleSet:
        """Read the rule set of the chamber at *path*."""
        body = await self._read(directory_path(path))
        return self._parse(rules_from_response, body)

    async def create_chamber(self, path: Sequence[str]) -> int:
        """Create the chamber at *path* with an empty rule set. Returns the status."""
        return await self._write("POST", encode(path), json={"rules": {}})

    async def delete_chamber(self, path: Sequence[str]) -> int:
        """Delete the chamber at *path*. Returns the status."""
        return await self._write("DELETE", encode(path))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _send(self, method: str, encoded_path: str, **kwargs: Any) -> httpx.Response:
        url = self.chamber_url(encoded_path)
        log.debug("request.start", method=method, path=url)
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            msg = f"{method} {url} timed out"
            raise TransportFailure(msg) from exc
        except httpx.HTTPError as exc:
            msg = f"{method} {url} failed: {exc}"
            raise TransportFailure(msg) from exc
        log.debug("request.done", method=method, path=url, status=response.status_code)
        return response

    async def _read(self, encoded_path: str, **kwargs: Any) -> dict[str, Any]:
        response = await self._send("GET", encoded_path, **kwargs)
        self._raise_for_status(response, encoded_path)
        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            msg = f"Invalid response format for {encoded_path}"
            raise TransportFailure(msg, status_code=response.status_code) from exc
        if not isinstance(body, dict):
            msg = f"Unexpected response shape for {encoded_path}"
            raise TransportFailure(msg, status_code=response.status_code)
        _raise_for_errors(body, response.status_code)
        return body

    async def _write(self, method: str, encoded_path: str, **kwargs: Any) -> int:
        """Send a mutation; an empty or non-JSON success body is accepted."""
        response = await self._send(method, encoded_path, **kwargs)
        self._raise_for_status(response, encoded_path)
        if response.content.strip():
            try:
                body = response.json()
            except (json.JSONDecodeError, UnicodeDecodeError):
                body = None
            if isinstance(body, dict):
                _raise_for_errors(body, response.status_code)
        return response.status_code

    @staticmethod
    def _raise_for_status(response: httpx.Response, encoded_path: str) -> None:
        status = response.status_code
        if status < 400:
            return
        if status == 404:
            raise NotFound(encoded_path)
        raise TransportFailure(_error_message(response), status_code=status)

    @staticmethod
    def _parse(parser: Any, body: dict[str, Any]) -> Any:
        try:
            return parser(body)
        except (pydantic.ValidationError, AttributeError, TypeError) as exc:
            msg = f"Malformed chamber payload: {exc}"
            raise TransportFailure(msg) from exc


def _raise_for_errors(body: dict[str, Any], status_code: int) -> None:
    errors = body.get("errors")
    if errors:
        raise TransportFailure("; ".join(map(str, errors)), status_code=status_code)


def _error_message(response: httpx.Response) -> str:
    """Best-effort error text: ``errors`` array, else body text, else status."""
    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        payload = None
    if isinstance(payload, dict) and payload.get("errors"):
        return "; ".join(map(str, payload["errors"]))
    text = response.text.strip()
    return text or f"Server error: {response.status_code}"

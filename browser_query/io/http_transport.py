"""
httpx-based Transport implementation.

Conforms to io/transport.py's Transport Protocol:
- send(request) -> value payload
- close()

Failure mapping:
- HTTP status >= 400 with a W3C error body -> typed WebDriverError (core.errors.parse_error)
- network-level failure (refused, reset, read timeout) -> ConnectionFailureError
- success status with a non-JSON / non-W3C body -> UnknownResponseError
"""

from __future__ import annotations

from typing import Any

import httpx

from ..core.errors import ConnectionFailureError, UnknownResponseError, parse_error
from ..core.logging import get_logger
from ..core.settings import settings
from .transport import WireRequest

logger = get_logger(__name__)


class HttpTransport:
    """
    Talks W3C WebDriver over HTTP with a single pooled httpx.AsyncClient.
    The client is created lazily on first send so the transport can be built
    outside of a running event loop.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout_seconds: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        base_url = base_url or settings.server_url
        if not base_url.endswith("/"):
            base_url = base_url + "/"
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds or settings.request_timeout_seconds
        self._client: httpx.AsyncClient | None = client

    async def __aenter__(self) -> "HttpTransport":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ---------------- Transport ----------------

    async def send(self, request: WireRequest) -> Any:
        client = self._ensure_client()
        path = request.path.lstrip("/")
        logger.debug("webdriver request", method=request.method, path=path)

        try:
            response = await client.request(request.method, path, json=request.body)
        except httpx.TransportError as e:
            logger.warning(
                "webdriver request failed", method=request.method, path=path, error=str(e)
            )
            raise ConnectionFailureError(
                f"failed to send request to webdriver: {e}", error="connection failure"
            ) from e

        if response.status_code >= 400:
            err = parse_error(response.status_code, response.text)
            logger.debug(
                "webdriver error response",
                path=path,
                status=response.status_code,
                error=err.error,
            )
            raise err

        try:
            payload = response.json()
        except ValueError as e:
            raise UnknownResponseError(response.status_code, response.text) from e

        if not isinstance(payload, dict) or "value" not in payload:
            raise UnknownResponseError(response.status_code, response.text)
        return payload["value"]

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ---------------- internals ----------------

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Content-Type": "application/json; charset=utf-8"},
                timeout=httpx.Timeout(self.timeout_seconds),
            )
        return self._client

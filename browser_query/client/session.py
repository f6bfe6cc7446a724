"""
WebDriver: one remote browser session.

    async with await WebDriver.create("http://localhost:4444") as driver:
        await driver.goto("https://example.com")
        link = await driver.query(By.link_text("More information...")).and_clickable().first()

The session owns its Transport and the default polling strategy used by every
query / wait started from it (override per call with `.wait()` / `.nowait()` /
`.with_poller()`, or for the whole session with `set_query_poller()`).
"""

from __future__ import annotations

from typing import Any

from ..core.errors import SessionNotCreatedError
from ..core.logging import get_logger
from ..core.settings import settings
from ..io.http_transport import HttpTransport
from ..io.transport import Transport, WireRequest
from ..query.element_query import ElementQuery
from ..query.locator import By
from ..query.poller import PollingStrategy, default_strategy
from .element import WebElement, element_id_from

logger = get_logger(__name__)


def default_capabilities(browser_name: str | None = None, *, headless: bool | None = None) -> dict:
    """Minimal W3C capabilities for the configured browser."""
    name = browser_name or settings.browser_name
    headless = settings.headless if headless is None else headless
    caps: dict[str, Any] = {"browserName": name}
    if headless:
        if name == "chrome":
            caps["goog:chromeOptions"] = {"args": ["--headless=new"]}
        elif name == "firefox":
            caps["moz:firefoxOptions"] = {"args": ["-headless"]}
        elif name in ("MicrosoftEdge", "edge"):
            caps["ms:edgeOptions"] = {"args": ["--headless=new"]}
    return caps


class WebDriver:
    def __init__(
        self,
        transport: Transport,
        session_id: str,
        *,
        capabilities: dict | None = None,
        poller: PollingStrategy | None = None,
    ) -> None:
        self.transport = transport
        self.session_id = session_id
        self.capabilities: dict = capabilities or {}
        self._query_poller: PollingStrategy = poller or default_strategy()

    @classmethod
    async def create(
        cls,
        server_url: str | None = None,
        capabilities: dict | None = None,
        *,
        transport: Transport | None = None,
        poller: PollingStrategy | None = None,
    ) -> "WebDriver":
        """Start a new session (W3C New Session)."""
        transport = transport or HttpTransport(server_url)
        payload = {"capabilities": {"alwaysMatch": capabilities or default_capabilities()}}
        try:
            value = await transport.send(WireRequest.post("session", payload))
            session_id = value.get("sessionId") if isinstance(value, dict) else None
            if not session_id:
                raise SessionNotCreatedError("no session id in New Session response")
        except BaseException:
            await transport.close()
            raise

        logger.info("webdriver session started", session_id=session_id)
        return cls(
            transport,
            session_id,
            capabilities=value.get("capabilities") or {},
            poller=poller,
        )

    async def __aenter__(self) -> "WebDriver":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.quit()

    async def quit(self) -> None:
        """Delete the session and release the transport."""
        try:
            await self.transport.send(WireRequest.delete(f"session/{self.session_id}"))
            logger.info("webdriver session ended", session_id=self.session_id)
        finally:
            await self.transport.close()

    # ---------------- polling config ----------------

    @property
    def query_poller(self) -> PollingStrategy:
        return self._query_poller

    def set_query_poller(self, poller: PollingStrategy) -> None:
        """Default strategy for queries and waits started after this call."""
        self._query_poller = poller

    # ---------------- navigation ----------------

    async def goto(self, url: str) -> None:
        await self._send(WireRequest.post(self._path("url"), {"url": url}))

    async def current_url(self) -> str:
        return str(await self._send(WireRequest.get(self._path("url"))))

    async def title(self) -> str:
        return str(await self._send(WireRequest.get(self._path("title"))))

    # ---------------- elements ----------------

    async def find(self, by: By) -> WebElement:
        value = await self._send(WireRequest.post(self._path("element"), by.to_wire()))
        return WebElement(self, element_id_from(value))

    async def find_all(self, by: By) -> list[WebElement]:
        value = await self._send(WireRequest.post(self._path("elements"), by.to_wire()))
        return [WebElement(self, element_id_from(v)) for v in value or []]

    def query(self, by: By) -> ElementQuery:
        """Start an ElementQuery against the whole page."""
        return ElementQuery(self, by)

    async def execute(self, script: str, *args: Any) -> Any:
        """Run synchronous JavaScript; WebElement arguments are passed by reference."""
        wire_args = [a.to_json() if isinstance(a, WebElement) else a for a in args]
        return await self._send(
            WireRequest.post(self._path("execute/sync"), {"script": script, "args": wire_args})
        )

    # ---------------- internals ----------------

    def _path(self, command: str) -> str:
        return f"session/{self.session_id}/{command}"

    async def _send(self, request: WireRequest) -> Any:
        return await self.transport.send(request)

"""
WebElement: a server-side element reference bound to its session.

Each accessor issues one W3C command through the session's Transport.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..core.errors import NoSuchElementError, StaleElementReferenceError, UnknownResponseError
from ..io.transport import WireRequest
from ..query.element_query import ElementQuery
from ..query.element_waiter import ElementWaiter
from ..query.locator import By
from ..query.poller import PollingStrategy

if TYPE_CHECKING:
    from .session import WebDriver

# W3C web element identifier; "ELEMENT" is the legacy JSON wire protocol key
ELEMENT_KEY = "element-6066-11e4-a52e-4f735466cecf"
LEGACY_ELEMENT_KEY = "ELEMENT"


def element_id_from(value: Any) -> str:
    if isinstance(value, dict):
        element_id = value.get(ELEMENT_KEY) or value.get(LEGACY_ELEMENT_KEY)
        if isinstance(element_id, str) and element_id:
            return element_id
    raise UnknownResponseError(200, f"not a web element reference: {value!r}")


class WebElement:
    def __init__(self, session: "WebDriver", element_id: str) -> None:
        self.session = session
        self.element_id = element_id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WebElement):
            return NotImplemented
        return self.element_id == other.element_id and self.session is other.session

    def __hash__(self) -> int:
        return hash(self.element_id)

    def __repr__(self) -> str:
        return f"WebElement(id={self.element_id!r})"

    def to_json(self) -> dict[str, str]:
        """Reference form for script arguments."""
        return {ELEMENT_KEY: self.element_id}

    # ---------------- lookup ----------------

    @property
    def query_poller(self) -> PollingStrategy:
        return self.session.query_poller

    async def find(self, by: By) -> "WebElement":
        value = await self._send(WireRequest.post(self._path("element"), by.to_wire()))
        return WebElement(self.session, element_id_from(value))

    async def find_all(self, by: By) -> list["WebElement"]:
        value = await self._send(WireRequest.post(self._path("elements"), by.to_wire()))
        return [WebElement(self.session, element_id_from(v)) for v in value or []]

    def query(self, by: By) -> ElementQuery:
        """Query child elements of this element (see ElementQuery)."""
        return ElementQuery(self, by)

    def wait_until(self) -> ElementWaiter:
        """Explicit waits on this element (see ElementWaiter)."""
        return ElementWaiter(self, self.session.query_poller)

    # ---------------- state ----------------

    async def is_displayed(self) -> bool:
        return bool(await self._send(WireRequest.get(self._path("displayed"))))

    async def is_enabled(self) -> bool:
        return bool(await self._send(WireRequest.get(self._path("enabled"))))

    async def is_selected(self) -> bool:
        return bool(await self._send(WireRequest.get(self._path("selected"))))

    async def is_clickable(self) -> bool:
        return await self.is_displayed() and await self.is_enabled()

    async def is_present(self) -> bool:
        """
        False once the reference went stale. Note a re-rendered node counts
        as gone even if it looks identical to the user.
        """
        try:
            await self.tag_name()
        except (NoSuchElementError, StaleElementReferenceError):
            return False
        return True

    # ---------------- properties ----------------

    async def tag_name(self) -> str:
        return str(await self._send(WireRequest.get(self._path("name"))))

    async def text(self) -> str:
        return str(await self._send(WireRequest.get(self._path("text"))) or "")

    async def attr(self, name: str) -> str | None:
        value = await self._send(WireRequest.get(self._path(f"attribute/{name}")))
        return None if value is None else str(value)

    async def prop(self, name: str) -> str | None:
        value = await self._send(WireRequest.get(self._path(f"property/{name}")))
        if value is None:
            return None
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    async def css_value(self, name: str) -> str:
        return str(await self._send(WireRequest.get(self._path(f"css/{name}"))) or "")

    async def class_name(self) -> str | None:
        return await self.attr("class")

    async def id(self) -> str | None:
        return await self.attr("id")

    async def value(self) -> str | None:
        return await self.prop("value")

    # ---------------- interactions ----------------

    async def click(self) -> None:
        await self._send(WireRequest.post(self._path("click")))

    async def clear(self) -> None:
        await self._send(WireRequest.post(self._path("clear")))

    async def send_keys(self, text: str) -> None:
        await self._send(WireRequest.post(self._path("value"), {"text": text}))

    # ---------------- internals ----------------

    def _path(self, command: str) -> str:
        return f"session/{self.session.session_id}/element/{self.element_id}/{command}"

    async def _send(self, request: WireRequest) -> Any:
        return await self.session.transport.send(request)

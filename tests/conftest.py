"""Shared fixtures: an in-memory WebDriver server stand-in.

FakeTransport implements the Transport protocol over a tiny fake DOM so the
query / wait engine can be exercised without a browser.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

import pytest
import structlog
import structlog.testing

from browser_query.client.element import ELEMENT_KEY
from browser_query.client.session import WebDriver
from browser_query.core.errors import (
    NoSuchElementError,
    StaleElementReferenceError,
    UnknownCommandError,
    WebDriverError,
)
from browser_query.io.transport import WireRequest
from browser_query.query.locator import By
from browser_query.query.poller import FixedTimeout

SESSION_ID = "sess-1"

Matcher = Callable[[], list[str]]


@dataclass
class FakeNode:
    tag: str = "div"
    text: str | Callable[[], str] = ""
    attrs: dict[str, str] = field(default_factory=dict)
    props: dict[str, Any] = field(default_factory=dict)
    css: dict[str, str] = field(default_factory=dict)
    displayed: bool = True
    enabled: bool = True
    selected: bool = False


class FakeTransport:
    def __init__(self) -> None:
        self.nodes: dict[str, FakeNode] = {}
        self.stale: set[str] = set()
        self.requests: list[WireRequest] = []
        self.find_calls = 0
        self.closed = False
        self.url = "about:blank"
        self._matches: dict[tuple[str | None, str, str], list[str] | Matcher] = {}
        self._errors: list[tuple[str, WebDriverError]] = []

    # -------- test setup helpers --------

    def add(self, node_id: str, **kwargs: Any) -> FakeNode:
        node = FakeNode(**kwargs)
        self.nodes[node_id] = node
        return node

    def match(self, by: By, *ids: str, parent: str | None = None) -> None:
        wire = by.to_wire()
        self._matches[(parent, wire["using"], wire["value"])] = list(ids)

    def match_dynamic(self, by: By, fn: Matcher, *, parent: str | None = None) -> None:
        wire = by.to_wire()
        self._matches[(parent, wire["using"], wire["value"])] = fn

    def make_stale(self, node_id: str) -> None:
        self.stale.add(node_id)

    def fail(self, path_part: str, error: WebDriverError, *, times: int = 1) -> None:
        for _ in range(times):
            self._errors.append((path_part, error))

    # -------- Transport --------

    async def send(self, request: WireRequest) -> Any:
        self.requests.append(request)
        for i, (part, err) in enumerate(self._errors):
            if part in request.path:
                del self._errors[i]
                raise err

        parts = request.path.split("/")
        if parts == ["session"]:
            return {"sessionId": SESSION_ID, "capabilities": {"browserName": "fake"}}
        if request.method == "DELETE":
            return None
        assert parts[:2] == ["session", SESSION_ID], request.path
        rest = parts[2:]

        if rest in (["element"], ["elements"]):
            return self._find(None, request.body or {}, single=rest == ["element"])
        if rest[0] == "element" and len(rest) >= 3:
            node_id, command = rest[1], rest[2:]
            if command in (["element"], ["elements"]):
                self._check_live(node_id)
                return self._find(node_id, request.body or {}, single=command == ["element"])
            return self._element_command(node_id, command, request)
        if rest == ["url"]:
            if request.method == "POST":
                self.url = (request.body or {}).get("url", "")
                return None
            return self.url
        if rest == ["title"]:
            return "Fake"
        if rest == ["execute", "sync"]:
            # echo the arguments back so tests can check how they were serialized
            return (request.body or {}).get("args")
        raise UnknownCommandError(f"fake server has no command {request.path}")

    async def close(self) -> None:
        self.closed = True

    # -------- internals --------

    def _find(self, parent: str | None, body: dict, *, single: bool) -> Any:
        self.find_calls += 1
        entry = self._matches.get((parent, body.get("using"), body.get("value")), [])
        ids = entry() if callable(entry) else entry
        ids = [i for i in ids if i not in self.stale]
        refs = [{ELEMENT_KEY: i} for i in ids]
        if single:
            if not refs:
                raise NoSuchElementError("no such element", status=404)
            return refs[0]
        return refs

    def _check_live(self, node_id: str) -> FakeNode:
        if node_id in self.stale or node_id not in self.nodes:
            raise StaleElementReferenceError("stale element reference", status=404)
        return self.nodes[node_id]

    def _element_command(self, node_id: str, command: list[str], request: WireRequest) -> Any:
        node = self._check_live(node_id)
        name = command[0]
        if name == "displayed":
            return node.displayed
        if name == "enabled":
            return node.enabled
        if name == "selected":
            return node.selected
        if name == "name":
            return node.tag
        if name == "text":
            return node.text() if callable(node.text) else node.text
        if name == "attribute":
            return node.attrs.get(command[1])
        if name == "property":
            return node.props.get(command[1])
        if name == "css":
            return node.css.get(command[1], "")
        if name in ("click", "clear", "value"):
            return None
        raise UnknownCommandError(f"fake server has no element command {request.path}")


# fast default poller so failing queries finish quickly
FAST_POLLER = FixedTimeout(timeout=0.3, interval=0.05)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def driver(transport: FakeTransport) -> WebDriver:
    return WebDriver(transport, SESSION_ID, poller=FAST_POLLER)


class FakeClock:
    """Monotonic clock + sleep pair for deterministic poller tests."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def captured_logs(monkeypatch):
    """Log events emitted by the query and wait loops, as dicts."""
    from browser_query.query import element_query, element_waiter

    with structlog.testing.capture_logs() as logs:
        # fresh proxies so loggers cached by an earlier configure_logging() are bypassed
        monkeypatch.setattr(element_query, "logger", structlog.get_logger(element_query.__name__))
        monkeypatch.setattr(element_waiter, "logger", structlog.get_logger(element_waiter.__name__))
        yield logs

"""WebDriver session lifecycle and element accessors."""

import pytest

from browser_query.client.element import ELEMENT_KEY, LEGACY_ELEMENT_KEY, WebElement, element_id_from
from browser_query.client.session import WebDriver, default_capabilities
from browser_query.core.errors import (
    ConnectionFailureError,
    NoSuchElementError,
    SessionNotCreatedError,
    UnknownResponseError,
)
from browser_query.core.settings import Settings
from browser_query.query.locator import By
from browser_query.query.poller import NoWait

SESSION_ID = "sess-1"


@pytest.mark.asyncio
async def test_create_and_quit(transport) -> None:
    driver = await WebDriver.create(capabilities={"browserName": "fake"}, transport=transport)
    assert driver.session_id == SESSION_ID
    assert driver.capabilities == {"browserName": "fake"}
    assert transport.requests[0].body == {"capabilities": {"alwaysMatch": {"browserName": "fake"}}}

    await driver.quit()
    assert transport.requests[-1].method == "DELETE"
    assert transport.requests[-1].path == f"session/{SESSION_ID}"
    assert transport.closed


@pytest.mark.asyncio
async def test_create_without_session_id_closes_transport() -> None:
    class NoSession:
        closed = False

        async def send(self, request):
            return {"capabilities": {}}

        async def close(self) -> None:
            self.closed = True

    transport = NoSession()
    with pytest.raises(SessionNotCreatedError):
        await WebDriver.create(transport=transport)
    assert transport.closed


@pytest.mark.asyncio
async def test_create_error_response_closes_transport(transport) -> None:
    transport.fail("session", SessionNotCreatedError("chrome failed to start", status=500))
    with pytest.raises(SessionNotCreatedError):
        await WebDriver.create(transport=transport)
    assert transport.closed


@pytest.mark.asyncio
async def test_create_connection_failure_closes_transport(transport) -> None:
    transport.fail("session", ConnectionFailureError("connection refused"))
    with pytest.raises(ConnectionFailureError):
        await WebDriver.create(transport=transport)
    assert transport.closed


@pytest.mark.asyncio
async def test_context_manager_quits(transport) -> None:
    async with await WebDriver.create(transport=transport, poller=NoWait()) as driver:
        assert driver.query_poller == NoWait()
        assert await driver.title() == "Fake"
    assert transport.closed


@pytest.mark.asyncio
async def test_navigation_and_script(driver, transport) -> None:
    transport.add("e1")
    transport.match(By.css("div"), "e1")
    assert await driver.current_url() == "about:blank"
    await driver.goto("https://example.com/")
    assert await driver.current_url() == "https://example.com/"

    elems = await driver.find_all(By.css("div"))
    assert elems == [WebElement(driver, "e1")]
    args = await driver.execute("return arguments;", elems[0], 3)
    assert args == [{ELEMENT_KEY: "e1"}, 3]


@pytest.mark.asyncio
async def test_element_accessors(driver, transport) -> None:
    transport.add(
        "e1",
        tag="input",
        text="",
        attrs={"id": "email", "class": "field"},
        props={"value": "x@y.z", "disabled": True},
        css={"display": "block"},
    )
    elem = WebElement(driver, "e1")

    assert await elem.tag_name() == "input"
    assert await elem.id() == "email"
    assert await elem.class_name() == "field"
    assert await elem.value() == "x@y.z"
    assert await elem.prop("disabled") == "true"
    assert await elem.attr("missing") is None
    assert await elem.css_value("display") == "block"
    assert await elem.is_clickable() is True
    assert await elem.is_present() is True

    transport.make_stale("e1")
    assert await elem.is_present() is False


@pytest.mark.asyncio
async def test_interactions_send_expected_commands(driver, transport) -> None:
    transport.add("e1")
    elem = WebElement(driver, "e1")
    await elem.click()
    await elem.clear()
    await elem.send_keys("hello")

    sent = [(r.method, r.path.rsplit("/", 1)[-1], r.body) for r in transport.requests]
    assert sent == [
        ("POST", "click", {}),
        ("POST", "clear", {}),
        ("POST", "value", {"text": "hello"}),
    ]


@pytest.mark.asyncio
async def test_find_raises_for_missing_element(driver) -> None:
    with pytest.raises(NoSuchElementError):
        await driver.find(By.id("nope"))


def test_element_identity_and_reference() -> None:
    assert element_id_from({ELEMENT_KEY: "a"}) == "a"
    assert element_id_from({LEGACY_ELEMENT_KEY: "b"}) == "b"
    with pytest.raises(UnknownResponseError):
        element_id_from({"foo": "bar"})

    session = object()
    assert WebElement(session, "a") == WebElement(session, "a")
    assert WebElement(session, "a") != WebElement(object(), "a")
    assert WebElement(session, "a").to_json() == {ELEMENT_KEY: "a"}


def test_default_capabilities_headless() -> None:
    caps = default_capabilities("chrome", headless=True)
    assert caps["goog:chromeOptions"] == {"args": ["--headless=new"]}
    assert default_capabilities("firefox", headless=False) == {"browserName": "firefox"}


def test_settings_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("BQ_QUERY_TIMEOUT_SECONDS", "3.5")
    monkeypatch.setenv("BQ_SERVER_URL", "http://grid:4444/wd/hub")
    cfg = Settings()
    assert cfg.query_timeout_seconds == 3.5
    assert cfg.server_url == "http://grid:4444/wd/hub"


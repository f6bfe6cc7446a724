"""ElementWaiter conditions on an already-resolved element."""

import asyncio
import time

import pytest

from browser_query.client.element import WebElement
from browser_query.core.errors import (
    NoSuchElementError,
    StaleElementReferenceError,
    WaitTimeoutError,
)
from browser_query.query.matching import StringMatch
from browser_query.query.poller import FixedTimeout, FixedTries


def _text_reads(transport, node_id: str) -> int:
    return sum(1 for r in transport.requests if r.path.endswith(f"/element/{node_id}/text"))


@pytest.mark.asyncio
async def test_displayed_already_true(driver, transport) -> None:
    transport.add("e1")
    elem = WebElement(driver, "e1")
    await elem.wait_until().displayed()
    assert len(transport.requests) == 1


@pytest.mark.asyncio
async def test_has_text_waits_for_transition(driver, transport) -> None:
    reads = {"n": 0}

    def text() -> str:
        reads["n"] += 1
        return "Done" if reads["n"] >= 4 else "Loading"

    transport.add("status", text=text)
    elem = WebElement(driver, "status")

    await elem.wait_until().with_poller(FixedTries(count=10, interval=0)).has_text("Done")
    assert _text_reads(transport, "status") == 4


@pytest.mark.asyncio
async def test_timeout_carries_custom_message(driver, transport) -> None:
    transport.add("spinner", displayed=True)
    elem = WebElement(driver, "spinner")

    with pytest.raises(WaitTimeoutError) as exc:
        await (
            elem.wait_until()
            .with_poller(FixedTries(count=3, interval=0))
            .error("spinner never went away")
            .not_displayed()
        )
    assert "spinner never went away" in str(exc.value)
    assert exc.value.tries == 3


@pytest.mark.asyncio
async def test_timeout_default_message_names_element(driver, transport) -> None:
    transport.add("e1", enabled=False)
    with pytest.raises(WaitTimeoutError) as exc:
        await WebElement(driver, "e1").wait_until().nowait().enabled()
    assert "e1" in str(exc.value)
    assert exc.value.tries == 1


@pytest.mark.asyncio
async def test_stale_succeeds_once_reference_is_gone(driver, transport) -> None:
    transport.add("old")
    elem = WebElement(driver, "old")
    transport.make_stale("old")
    await elem.wait_until().nowait().stale()


@pytest.mark.asyncio
async def test_stale_accepts_no_such_element(driver, transport) -> None:
    transport.add("old")
    transport.fail("/element/old/name", NoSuchElementError("no such element"))
    await WebElement(driver, "old").wait_until().nowait().stale()


@pytest.mark.asyncio
async def test_stale_times_out_while_element_lives(driver, transport) -> None:
    transport.add("alive")
    with pytest.raises(WaitTimeoutError):
        waiter = WebElement(driver, "alive").wait_until()
        await waiter.with_poller(FixedTries(count=2, interval=0)).stale()


@pytest.mark.asyncio
async def test_stale_error_propagates_by_default(driver, transport) -> None:
    transport.add("gone")
    transport.make_stale("gone")

    with pytest.raises(StaleElementReferenceError):
        waiter = WebElement(driver, "gone").wait_until()
        await waiter.with_poller(FixedTries(count=5, interval=0)).displayed()
    assert len(transport.requests) == 1


@pytest.mark.asyncio
async def test_ignore_errors_keeps_polling_through_stale(driver, transport) -> None:
    transport.add("flaky")
    transport.fail("/element/flaky/displayed", StaleElementReferenceError("stale"), times=2)

    elem = WebElement(driver, "flaky")
    await elem.wait_until().ignore_errors().with_poller(FixedTries(count=5, interval=0)).displayed()
    assert len(transport.requests) == 3


@pytest.mark.asyncio
async def test_clickable_requires_enabled(driver, transport) -> None:
    node = transport.add("btn", enabled=False)
    elem = WebElement(driver, "btn")

    with pytest.raises(WaitTimeoutError):
        await elem.wait_until().nowait().clickable()

    node.enabled = True
    await elem.wait_until().nowait().clickable()


@pytest.mark.asyncio
async def test_attribute_property_and_css_conditions(driver, transport) -> None:
    transport.add(
        "input",
        tag="input",
        attrs={"class": "field is-valid", "type": "email"},
        props={"value": "a@b.c", "checked": False},
        css={"color": "rgba(0, 0, 0, 1)"},
    )
    waiter = WebElement(driver, "input").wait_until().nowait()

    await waiter.has_class(StringMatch.word("is-valid"))
    await waiter.lacks_class(StringMatch.word("is-invalid"))
    await waiter.has_attribute("type", "email")
    await waiter.lacks_attribute("placeholder", "anything")
    await waiter.has_attributes([("type", "email"), ("class", StringMatch.partial("field"))])
    await waiter.has_value("a@b.c")
    await waiter.has_property("checked", "false")
    await waiter.has_properties([("value", StringMatch.partial("@")), ("checked", "false")])
    await waiter.has_css_property("color", StringMatch.partial("0, 0, 0"))

    with pytest.raises(WaitTimeoutError):
        await waiter.lacks_value("a@b.c")


@pytest.mark.asyncio
async def test_custom_conditions_must_hold_together(driver, transport) -> None:
    transport.add("e1", text="ready", selected=True)
    elem = WebElement(driver, "e1")

    async def is_ready(e: WebElement) -> bool:
        return await e.text() == "ready"

    async def is_selected(e: WebElement) -> bool:
        return await e.is_selected()

    async def never(e: WebElement) -> bool:
        return False

    await elem.wait_until().nowait().conditions([is_ready, is_selected])
    await elem.wait_until().nowait().execute(is_ready)
    with pytest.raises(WaitTimeoutError):
        await elem.wait_until().nowait().conditions([is_ready, never])


@pytest.mark.asyncio
async def test_text_changes_while_waiting_with_real_clock(driver, transport) -> None:
    node = transport.add("status", text="Loading")
    elem = WebElement(driver, "status")

    loop = asyncio.get_running_loop()
    loop.call_later(0.3, setattr, node, "text", "Done")

    start = time.monotonic()
    await elem.wait_until().with_poller(FixedTimeout(timeout=5, interval=0.1)).has_text("Done")
    assert time.monotonic() - start < 1.5


@pytest.mark.asyncio
async def test_wait_logs_start_retries_and_exhaustion(driver, transport, captured_logs) -> None:
    transport.add("e1", displayed=False)
    waiter = WebElement(driver, "e1").wait_until().with_poller(FixedTries(count=2, interval=0))
    with pytest.raises(WaitTimeoutError):
        await waiter.displayed()

    events = [e["event"] for e in captured_logs]
    assert events == ["wait start", "wait retry", "wait exhausted"]
    assert all(e["element"] == "e1" for e in captured_logs)

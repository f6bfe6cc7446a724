"""
ElementWaiter: explicit waits on an element that is already resolved.

    await elem.wait_until().displayed()
    await elem.wait_until().error("spinner never went away").not_displayed()
    await elem.wait_until().wait(5, 0.2).has_text(StringMatch.partial("Done"))
    await elem.wait_until().condition(my_async_predicate)

The waiter only observes the element, it never creates or re-finds it.
By default errors raised while evaluating a condition propagate at once,
so a stale element during `displayed()` is reported instead of being waited
out; `stale()` is the exception, observing the stale error is its success.
Call `.ignore_errors()` to keep polling through transient errors.
"""
# @file purpose: ElementWaiter builder and polling loop.

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from ..core.errors import WaitTimeoutError
from ..core.logging import get_logger
from . import conditions
from .conditions import ElementPredicate
from .matching import NeedleLike
from .poller import FixedTimeout, NoWait, PollingStrategy

if TYPE_CHECKING:
    from ..client.element import WebElement

logger = get_logger(__name__)


class ElementWaiter:
    def __init__(self, element: "WebElement", poller: PollingStrategy) -> None:
        self._element = element
        self._poller: PollingStrategy = poller
        self._message = ""
        self._ignore_errors = False

    # ---------------- configuration ----------------

    def with_poller(self, poller: PollingStrategy) -> "ElementWaiter":
        self._poller = poller
        return self

    def wait(self, timeout: float, interval: float) -> "ElementWaiter":
        return self.with_poller(FixedTimeout(timeout=timeout, interval=interval))

    def nowait(self) -> "ElementWaiter":
        return self.with_poller(NoWait())

    def error(self, message: str) -> "ElementWaiter":
        """Message carried by the WaitTimeoutError if the condition never holds."""
        self._message = message
        return self

    def ignore_errors(self, ignore: bool = True) -> "ElementWaiter":
        self._ignore_errors = ignore
        return self

    # ---------------- polling loop ----------------

    async def conditions(self, preds: Sequence[ElementPredicate]) -> None:
        """Wait until every predicate holds at the same time."""
        poller = self._poller.start()
        log = logger.bind(element=self._element.element_id, conditions=len(preds))
        log.debug("wait start", strategy=poller.strategy.kind)
        while True:
            met = True
            for pred in preds:
                if not await pred(self._element):
                    met = False
                    break
            if met:
                return

            if not await poller.tick():
                break
            log.debug("wait retry", tries=poller.tries, elapsed=round(poller.elapsed, 3))

        log.debug("wait exhausted", tries=poller.tries, elapsed=round(poller.elapsed, 3))
        message = self._message or f"timed out waiting for element {self._element.element_id}"
        raise WaitTimeoutError(message, description=self._message or None, tries=poller.tries)

    async def condition(self, pred: ElementPredicate) -> None:
        await self.conditions([pred])

    async def execute(self, pred: ElementPredicate) -> None:
        await self.conditions([pred])

    # ---------------- built-in conditions ----------------

    async def stale(self) -> None:
        await self.condition(conditions.element_is_stale())

    async def displayed(self) -> None:
        await self.condition(conditions.element_is_displayed(self._ignore_errors))

    async def not_displayed(self) -> None:
        await self.condition(conditions.element_is_not_displayed(self._ignore_errors))

    async def enabled(self) -> None:
        await self.condition(conditions.element_is_enabled(self._ignore_errors))

    async def not_enabled(self) -> None:
        await self.condition(conditions.element_is_not_enabled(self._ignore_errors))

    async def selected(self) -> None:
        await self.condition(conditions.element_is_selected(self._ignore_errors))

    async def not_selected(self) -> None:
        await self.condition(conditions.element_is_not_selected(self._ignore_errors))

    async def clickable(self) -> None:
        await self.condition(conditions.element_is_clickable(self._ignore_errors))

    async def not_clickable(self) -> None:
        await self.condition(conditions.element_is_not_clickable(self._ignore_errors))

    async def has_text(self, text: NeedleLike) -> None:
        await self.condition(conditions.element_has_text(text, self._ignore_errors))

    async def lacks_text(self, text: NeedleLike) -> None:
        await self.condition(conditions.element_lacks_text(text, self._ignore_errors))

    async def has_class(self, class_name: NeedleLike) -> None:
        await self.condition(conditions.element_has_class(class_name, self._ignore_errors))

    async def lacks_class(self, class_name: NeedleLike) -> None:
        await self.condition(conditions.element_lacks_class(class_name, self._ignore_errors))

    async def has_value(self, value: NeedleLike) -> None:
        await self.condition(conditions.element_has_value(value, self._ignore_errors))

    async def lacks_value(self, value: NeedleLike) -> None:
        await self.condition(conditions.element_lacks_value(value, self._ignore_errors))

    async def has_attribute(self, name: str, value: NeedleLike) -> None:
        await self.condition(conditions.element_has_attribute(name, value, self._ignore_errors))

    async def lacks_attribute(self, name: str, value: NeedleLike) -> None:
        await self.condition(conditions.element_lacks_attribute(name, value, self._ignore_errors))

    async def has_attributes(self, desired: Sequence[tuple[str, NeedleLike]]) -> None:
        await self.condition(conditions.element_has_attributes(desired, self._ignore_errors))

    async def has_property(self, name: str, value: NeedleLike) -> None:
        await self.condition(conditions.element_has_property(name, value, self._ignore_errors))

    async def lacks_property(self, name: str, value: NeedleLike) -> None:
        await self.condition(conditions.element_lacks_property(name, value, self._ignore_errors))

    async def has_properties(self, desired: Sequence[tuple[str, NeedleLike]]) -> None:
        await self.condition(conditions.element_has_properties(desired, self._ignore_errors))

    async def has_css_property(self, name: str, value: NeedleLike) -> None:
        await self.condition(
            conditions.element_has_css_property(name, value, self._ignore_errors)
        )

    async def lacks_css_property(self, name: str, value: NeedleLike) -> None:
        await self.condition(
            conditions.element_lacks_css_property(name, value, self._ignore_errors)
        )

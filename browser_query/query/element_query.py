"""
ElementQuery: resolve zero, one or many elements with polling.

    elem = await driver.query(By.css("thiswont.match")).or_(By.id("button1")).first()
    rows = await driver.query(By.css("tr.row")).and_displayed().wait(5, 0.25).all_required()
    await driver.query(By.id("spinner")).not_exists()

Every poll iteration runs each alternative (`or_`) in the configured order
and applies that alternative's filters to what it found. The terminal method
decides what counts as success:

- first / first_opt: any alternative yields at least one element
- single:            the first alternative that yields anything yields exactly one;
                     more than one raises AmbiguousElementError straight away
- all / all_required: the elements of the first alternative that yields anything
                     (every alternative's elements with `.union()`)
- exists / not_exists: presence / absence across all alternatives

`NoSuchElementError` from the server simply means "nothing this attempt".
Other transient errors (stale element) are tolerated while `ignore_errors` is
on (default) and surface immediately when it is off; non-transient errors
always propagate without consuming further attempts.
"""
# @file purpose: ElementQuery builder and polling loop.

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol, Sequence

from ..core.errors import (
    AmbiguousElementError,
    ElementNotFoundError,
    ElementStillPresentError,
    NoSuchElementError,
    WebDriverError,
)
from ..core.logging import get_logger
from . import conditions
from .conditions import ElementPredicate
from .locator import By
from .matching import NeedleLike
from .poller import FixedTimeout, NoWait, PollingStrategy

if TYPE_CHECKING:
    from ..client.element import WebElement

logger = get_logger(__name__)


class QueryMode(str, Enum):
    FIRST = "first"
    SINGLE = "single"
    ALL = "all"
    ALL_REQUIRED = "all_required"
    EXISTS = "exists"
    NOT_EXISTS = "not_exists"


class ElementQuerySource(Protocol):
    """Anything elements can be searched from: a session or a parent element."""

    @property
    def query_poller(self) -> PollingStrategy: ...

    async def find_all(self, by: By) -> list["WebElement"]: ...


@dataclass
class ElementSelector:
    """One alternative: a locator plus the filters applied to whatever it matches."""

    by: By
    filters: list[ElementPredicate] = field(default_factory=list)
    description: str | None = None

    def __str__(self) -> str:
        return f"{self.by} \"{self.description}\"" if self.description else str(self.by)


@dataclass
class _Attempt:
    matched: list["WebElement"] | None = None
    error: WebDriverError | None = None


def selector_summary(selectors: Sequence[ElementSelector]) -> list[str]:
    return [str(s) for s in selectors]


async def filter_elements(
    elements: list["WebElement"],
    filters: Sequence[ElementPredicate],
    *,
    ignore_errors: bool = True,
) -> list["WebElement"]:
    """Keep only elements that pass every filter (filters run in order, short-circuit on empty)."""
    for pred in filters:
        kept: list["WebElement"] = []
        for elem in elements:
            try:
                if await pred(elem):
                    kept.append(elem)
            except WebDriverError as e:
                if not (ignore_errors and e.transient):
                    raise
        elements = kept
        if not elements:
            break
    return elements


class ElementQuery:
    """
    Builder for element queries. Configuration methods return the query itself;
    each terminal call builds a fresh Poller, so a query object can be awaited
    more than once.
    """

    def __init__(self, source: ElementQuerySource, by: By) -> None:
        self._source = source
        self._poller: PollingStrategy = source.query_poller
        self._selectors: list[ElementSelector] = [ElementSelector(by)]
        self._ignore_errors = True
        self._description = ""
        self._union = False

    # ---------------- configuration ----------------

    def desc(self, description: str) -> "ElementQuery":
        """Name included in the error message if the query fails."""
        self._description = description
        return self

    def ignore_errors(self, ignore: bool = True) -> "ElementQuery":
        """Tolerate transient errors (stale elements) while polling; on by default."""
        self._ignore_errors = ignore
        return self

    def with_poller(self, poller: PollingStrategy) -> "ElementQuery":
        """Override the session's default strategy for this query only."""
        self._poller = poller
        return self

    def wait(self, timeout: float, interval: float) -> "ElementQuery":
        return self.with_poller(FixedTimeout(timeout=timeout, interval=interval))

    def nowait(self) -> "ElementQuery":
        return self.with_poller(NoWait())

    def or_(self, by: By, description: str | None = None) -> "ElementQuery":
        """Add an alternative. Filters added afterwards apply to this alternative."""
        self._selectors.append(ElementSelector(by, description=description))
        return self

    def union(self, enabled: bool = True) -> "ElementQuery":
        """all()/all_required(): collect from every alternative instead of the first match."""
        self._union = enabled
        return self

    def with_filter(self, pred: ElementPredicate) -> "ElementQuery":
        """Add a predicate to the most recent alternative."""
        self._selectors[-1].filters.append(pred)
        return self

    # ---------------- terminals ----------------

    async def first(self) -> "WebElement":
        """First matching element, or ElementNotFoundError."""
        elements = await self._run(QueryMode.FIRST)
        return elements[0]

    async def first_opt(self) -> "WebElement | None":
        """First matching element, or None once the poller gives up."""
        try:
            return await self.first()
        except ElementNotFoundError:
            return None

    async def single(self) -> "WebElement":
        """Exactly one matching element; zero -> ElementNotFoundError, several -> AmbiguousElementError."""
        elements = await self._run(QueryMode.SINGLE)
        return elements[0]

    async def all(self) -> list["WebElement"]:
        """All matching elements; an empty list once the poller gives up."""
        return await self._run(QueryMode.ALL)

    async def all_required(self) -> list["WebElement"]:
        """All matching elements; ElementNotFoundError if there are none."""
        return await self._run(QueryMode.ALL_REQUIRED)

    async def exists(self) -> bool:
        return bool(await self._run(QueryMode.EXISTS))

    async def not_exists(self) -> None:
        """Wait until no alternative matches; ElementStillPresentError otherwise."""
        await self._run(QueryMode.NOT_EXISTS)

    # ---------------- polling loop ----------------

    async def _run(self, mode: QueryMode) -> list["WebElement"]:
        poller = self._poller.start()
        log = logger.bind(
            mode=mode.value,
            selectors=selector_summary(self._selectors),
            description=self._description or None,
        )
        last_error: WebDriverError | None = None
        log.debug("query start", strategy=poller.strategy.kind)

        while True:
            attempt = await self._attempt(mode)
            if attempt.error is not None:
                last_error = attempt.error
            if attempt.matched is not None:
                return attempt.matched

            if not await poller.tick():
                break
            log.debug("query retry", tries=poller.tries, elapsed=round(poller.elapsed, 3))

        log.debug("query exhausted", tries=poller.tries, elapsed=round(poller.elapsed, 3))
        if mode in (QueryMode.ALL, QueryMode.EXISTS):
            return []
        if mode is QueryMode.NOT_EXISTS:
            raise ElementStillPresentError(
                f"{self._subject()} still present", **self._error_context(poller.tries)
            )
        raise ElementNotFoundError(
            f"{self._subject()} not found", **self._error_context(poller.tries)
        ) from last_error

    async def _attempt(self, mode: QueryMode) -> _Attempt:
        """One pass over every alternative. `matched` is set only when `mode` is satisfied."""
        attempt = _Attempt()
        collected: list["WebElement"] = []

        for selector in self._selectors:
            try:
                elements = await self._fetch(selector.by)
                if elements:
                    elements = await filter_elements(
                        elements, selector.filters, ignore_errors=self._ignore_errors
                    )
            except WebDriverError as e:
                if not (self._ignore_errors and e.transient):
                    raise
                attempt.error = e
                elements = []

            if mode is QueryMode.NOT_EXISTS:
                if elements:
                    return attempt
                continue
            if not elements:
                continue

            if mode is QueryMode.SINGLE:
                if len(elements) > 1:
                    raise AmbiguousElementError(
                        f"{self._subject()} matched {len(elements)} elements using {selector}",
                        count=len(elements),
                        **self._error_context(None),
                    )
                attempt.matched = elements
                return attempt

            if self._union and mode in (QueryMode.ALL, QueryMode.ALL_REQUIRED):
                for elem in elements:
                    if elem not in collected:
                        collected.append(elem)
                continue

            attempt.matched = elements
            return attempt

        if mode is QueryMode.NOT_EXISTS:
            attempt.matched = []
        elif collected:
            attempt.matched = collected
        return attempt

    async def _fetch(self, by: By) -> list["WebElement"]:
        try:
            return await self._source.find_all(by)
        except NoSuchElementError:
            return []

    # ---------------- diagnostics ----------------

    def _subject(self) -> str:
        return f"'{self._description}' element(s)" if self._description else "Element(s)"

    def _error_context(self, tries: int | None) -> dict:
        return {
            "description": self._description or None,
            "selectors": selector_summary(self._selectors),
            "tries": tries,
        }

    # ---------------- filters ----------------

    def and_enabled(self) -> "ElementQuery":
        return self.with_filter(conditions.element_is_enabled(self._ignore_errors))

    def and_not_enabled(self) -> "ElementQuery":
        return self.with_filter(conditions.element_is_not_enabled(self._ignore_errors))

    def and_selected(self) -> "ElementQuery":
        return self.with_filter(conditions.element_is_selected(self._ignore_errors))

    def and_not_selected(self) -> "ElementQuery":
        return self.with_filter(conditions.element_is_not_selected(self._ignore_errors))

    def and_displayed(self) -> "ElementQuery":
        return self.with_filter(conditions.element_is_displayed(self._ignore_errors))

    def and_not_displayed(self) -> "ElementQuery":
        return self.with_filter(conditions.element_is_not_displayed(self._ignore_errors))

    def and_clickable(self) -> "ElementQuery":
        return self.with_filter(conditions.element_is_clickable(self._ignore_errors))

    def and_not_clickable(self) -> "ElementQuery":
        return self.with_filter(conditions.element_is_not_clickable(self._ignore_errors))

    def and_present(self) -> "ElementQuery":
        """Drop elements whose reference went stale between the find and the filters."""
        return self.with_filter(conditions.element_is_present(self._ignore_errors))

    def with_text(self, text: NeedleLike) -> "ElementQuery":
        return self.with_filter(conditions.element_has_text(text, self._ignore_errors))

    def without_text(self, text: NeedleLike) -> "ElementQuery":
        return self.with_filter(conditions.element_lacks_text(text, self._ignore_errors))

    def with_id(self, id_: NeedleLike) -> "ElementQuery":
        return self.with_filter(conditions.element_has_id(id_, self._ignore_errors))

    def without_id(self, id_: NeedleLike) -> "ElementQuery":
        return self.with_filter(conditions.element_lacks_id(id_, self._ignore_errors))

    def with_class(self, class_name: NeedleLike) -> "ElementQuery":
        return self.with_filter(conditions.element_has_class(class_name, self._ignore_errors))

    def without_class(self, class_name: NeedleLike) -> "ElementQuery":
        return self.with_filter(conditions.element_lacks_class(class_name, self._ignore_errors))

    def with_tag(self, tag_name: NeedleLike) -> "ElementQuery":
        return self.with_filter(conditions.element_has_tag(tag_name, self._ignore_errors))

    def without_tag(self, tag_name: NeedleLike) -> "ElementQuery":
        return self.with_filter(conditions.element_lacks_tag(tag_name, self._ignore_errors))

    def with_value(self, value: NeedleLike) -> "ElementQuery":
        return self.with_filter(conditions.element_has_value(value, self._ignore_errors))

    def without_value(self, value: NeedleLike) -> "ElementQuery":
        return self.with_filter(conditions.element_lacks_value(value, self._ignore_errors))

    def with_attribute(self, name: str, value: NeedleLike) -> "ElementQuery":
        return self.with_filter(conditions.element_has_attribute(name, value, self._ignore_errors))

    def without_attribute(self, name: str, value: NeedleLike) -> "ElementQuery":
        return self.with_filter(
            conditions.element_lacks_attribute(name, value, self._ignore_errors)
        )

    def with_attributes(self, desired: Sequence[tuple[str, NeedleLike]]) -> "ElementQuery":
        return self.with_filter(conditions.element_has_attributes(desired, self._ignore_errors))

    def without_attributes(self, desired: Sequence[tuple[str, NeedleLike]]) -> "ElementQuery":
        return self.with_filter(conditions.element_lacks_attributes(desired, self._ignore_errors))

    def with_property(self, name: str, value: NeedleLike) -> "ElementQuery":
        return self.with_filter(conditions.element_has_property(name, value, self._ignore_errors))

    def without_property(self, name: str, value: NeedleLike) -> "ElementQuery":
        return self.with_filter(
            conditions.element_lacks_property(name, value, self._ignore_errors)
        )

    def with_properties(self, desired: Sequence[tuple[str, NeedleLike]]) -> "ElementQuery":
        return self.with_filter(conditions.element_has_properties(desired, self._ignore_errors))

    def without_properties(self, desired: Sequence[tuple[str, NeedleLike]]) -> "ElementQuery":
        return self.with_filter(conditions.element_lacks_properties(desired, self._ignore_errors))

    def with_css_property(self, name: str, value: NeedleLike) -> "ElementQuery":
        return self.with_filter(
            conditions.element_has_css_property(name, value, self._ignore_errors)
        )

    def without_css_property(self, name: str, value: NeedleLike) -> "ElementQuery":
        return self.with_filter(
            conditions.element_lacks_css_property(name, value, self._ignore_errors)
        )

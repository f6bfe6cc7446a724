"""
Element predicates shared by ElementQuery filters and ElementWaiter conditions.

Every factory takes `ignore_errors`. When it is set, a *transient* wire error
raised while evaluating the predicate (stale element, no such element) counts
as "condition not met" so the caller keeps polling; any other error always
propagates.
"""
# @file purpose: Predicate factories for element filters and waits.

from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, Callable, Iterable, Sequence

from ..core.errors import NoSuchElementError, StaleElementReferenceError, WebDriverError
from .matching import NeedleLike, as_needle

if TYPE_CHECKING:
    from ..client.element import WebElement

ElementPredicate = Callable[["WebElement"], Awaitable[bool]]


async def handle_errors(check: Awaitable[bool], ignore_errors: bool) -> bool:
    try:
        return await check
    except WebDriverError as e:
        if ignore_errors and e.transient:
            return False
        raise


async def negate(check: Awaitable[bool], ignore_errors: bool) -> bool:
    async def _inverted() -> bool:
        return not await check

    return await handle_errors(_inverted(), ignore_errors)


def _optional_match(
    getter: Callable[["WebElement"], Awaitable[str | None]],
    needle: NeedleLike,
    ignore_errors: bool,
    *,
    invert: bool = False,
) -> ElementPredicate:
    # a missing value (None) never matches, so "lacks" is True for it
    match = as_needle(needle)

    async def pred(elem: "WebElement") -> bool:
        async def _check() -> bool:
            value = await getter(elem)
            if value is None:
                return invert
            return match(value) != invert

        return await handle_errors(_check(), ignore_errors)

    return pred


def _all_match(
    getter: Callable[["WebElement", str], Awaitable[str | None]],
    desired: Iterable[tuple[str, NeedleLike]],
    ignore_errors: bool,
    *,
    invert: bool = False,
) -> ElementPredicate:
    # has_*: every (name, needle) pair matches; lacks_*: none of them does
    pairs = [(name, as_needle(needle)) for name, needle in desired]

    async def pred(elem: "WebElement") -> bool:
        async def _check() -> bool:
            for name, match in pairs:
                value = await getter(elem, name)
                matched = value is not None and match(value)
                if matched == invert:
                    return False
            return True

        return await handle_errors(_check(), ignore_errors)

    return pred


# -------- state --------


def element_is_enabled(ignore_errors: bool) -> ElementPredicate:
    async def pred(elem: "WebElement") -> bool:
        return await handle_errors(elem.is_enabled(), ignore_errors)

    return pred


def element_is_not_enabled(ignore_errors: bool) -> ElementPredicate:
    async def pred(elem: "WebElement") -> bool:
        return await negate(elem.is_enabled(), ignore_errors)

    return pred


def element_is_selected(ignore_errors: bool) -> ElementPredicate:
    async def pred(elem: "WebElement") -> bool:
        return await handle_errors(elem.is_selected(), ignore_errors)

    return pred


def element_is_not_selected(ignore_errors: bool) -> ElementPredicate:
    async def pred(elem: "WebElement") -> bool:
        return await negate(elem.is_selected(), ignore_errors)

    return pred


def element_is_displayed(ignore_errors: bool) -> ElementPredicate:
    async def pred(elem: "WebElement") -> bool:
        return await handle_errors(elem.is_displayed(), ignore_errors)

    return pred


def element_is_not_displayed(ignore_errors: bool) -> ElementPredicate:
    async def pred(elem: "WebElement") -> bool:
        return await negate(elem.is_displayed(), ignore_errors)

    return pred


def element_is_clickable(ignore_errors: bool) -> ElementPredicate:
    async def pred(elem: "WebElement") -> bool:
        return await handle_errors(elem.is_clickable(), ignore_errors)

    return pred


def element_is_not_clickable(ignore_errors: bool) -> ElementPredicate:
    async def pred(elem: "WebElement") -> bool:
        return await negate(elem.is_clickable(), ignore_errors)

    return pred


def element_is_present(ignore_errors: bool) -> ElementPredicate:
    async def pred(elem: "WebElement") -> bool:
        return await handle_errors(elem.is_present(), ignore_errors)

    return pred


def element_is_stale() -> ElementPredicate:
    """
    True once the element reference no longer resolves.
    Observing the stale / no-such-element error IS the success signal here,
    so those errors are never surfaced; anything else propagates.
    """

    async def pred(elem: "WebElement") -> bool:
        try:
            await elem.tag_name()
        except (StaleElementReferenceError, NoSuchElementError):
            return True
        return False

    return pred


# -------- text / value / class --------


def element_has_text(text: NeedleLike, ignore_errors: bool) -> ElementPredicate:
    return _optional_match(lambda e: e.text(), text, ignore_errors)


def element_lacks_text(text: NeedleLike, ignore_errors: bool) -> ElementPredicate:
    return _optional_match(lambda e: e.text(), text, ignore_errors, invert=True)


def element_has_value(value: NeedleLike, ignore_errors: bool) -> ElementPredicate:
    return _optional_match(lambda e: e.value(), value, ignore_errors)


def element_lacks_value(value: NeedleLike, ignore_errors: bool) -> ElementPredicate:
    return _optional_match(lambda e: e.value(), value, ignore_errors, invert=True)


def element_has_class(class_name: NeedleLike, ignore_errors: bool) -> ElementPredicate:
    """Match against the whole `class` attribute; use StringMatch.word() for a single class."""
    return _optional_match(lambda e: e.class_name(), class_name, ignore_errors)


def element_lacks_class(class_name: NeedleLike, ignore_errors: bool) -> ElementPredicate:
    return _optional_match(lambda e: e.class_name(), class_name, ignore_errors, invert=True)


def element_has_id(id_: NeedleLike, ignore_errors: bool) -> ElementPredicate:
    return _optional_match(lambda e: e.id(), id_, ignore_errors)


def element_lacks_id(id_: NeedleLike, ignore_errors: bool) -> ElementPredicate:
    return _optional_match(lambda e: e.id(), id_, ignore_errors, invert=True)


def element_has_tag(tag_name: NeedleLike, ignore_errors: bool) -> ElementPredicate:
    return _optional_match(lambda e: e.tag_name(), tag_name, ignore_errors)


def element_lacks_tag(tag_name: NeedleLike, ignore_errors: bool) -> ElementPredicate:
    return _optional_match(lambda e: e.tag_name(), tag_name, ignore_errors, invert=True)


# -------- attributes / properties / css --------


def element_has_attribute(name: str, value: NeedleLike, ignore_errors: bool) -> ElementPredicate:
    return _optional_match(lambda e: e.attr(name), value, ignore_errors)


def element_lacks_attribute(name: str, value: NeedleLike, ignore_errors: bool) -> ElementPredicate:
    return _optional_match(lambda e: e.attr(name), value, ignore_errors, invert=True)


def element_has_attributes(
    desired: Sequence[tuple[str, NeedleLike]], ignore_errors: bool
) -> ElementPredicate:
    return _all_match(lambda e, n: e.attr(n), desired, ignore_errors)


def element_lacks_attributes(
    desired: Sequence[tuple[str, NeedleLike]], ignore_errors: bool
) -> ElementPredicate:
    return _all_match(lambda e, n: e.attr(n), desired, ignore_errors, invert=True)


def element_has_property(name: str, value: NeedleLike, ignore_errors: bool) -> ElementPredicate:
    return _optional_match(lambda e: e.prop(name), value, ignore_errors)


def element_lacks_property(name: str, value: NeedleLike, ignore_errors: bool) -> ElementPredicate:
    return _optional_match(lambda e: e.prop(name), value, ignore_errors, invert=True)


def element_has_properties(
    desired: Sequence[tuple[str, NeedleLike]], ignore_errors: bool
) -> ElementPredicate:
    return _all_match(lambda e, n: e.prop(n), desired, ignore_errors)


def element_lacks_properties(
    desired: Sequence[tuple[str, NeedleLike]], ignore_errors: bool
) -> ElementPredicate:
    return _all_match(lambda e, n: e.prop(n), desired, ignore_errors, invert=True)


def element_has_css_property(
    name: str, value: NeedleLike, ignore_errors: bool
) -> ElementPredicate:
    return _optional_match(lambda e: e.css_value(name), value, ignore_errors)


def element_lacks_css_property(
    name: str, value: NeedleLike, ignore_errors: bool
) -> ElementPredicate:
    return _optional_match(lambda e: e.css_value(name), value, ignore_errors, invert=True)

"""
Element locators.

`By` is an immutable (kind, query) pair. W3C WebDriver only knows five
location strategies, so id / name / class name are translated into CSS
selectors before they go on the wire.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any


class LocatorKind(str, Enum):
    ID = "id"
    CSS = "css"
    XPATH = "xpath"
    TAG = "tag"
    CLASS_NAME = "class"
    NAME = "name"
    LINK_TEXT = "link text"
    PARTIAL_LINK_TEXT = "partial link text"


# characters that must be backslash-escaped inside a CSS identifier
_CSS_SPECIAL = re.compile(r"([!\"#$%&'()*+,./:;<=>?@\[\\\]^`{|}~])")


def escape_css_identifier(value: str) -> str:
    """Escape a raw string so it can be used as a CSS identifier (#id, .class)."""
    if not value:
        return value
    escaped = _CSS_SPECIAL.sub(r"\\\1", value)
    # whitespace can't be backslash-escaped literally, use the code point form
    escaped = re.sub(r"\s", lambda m: f"\\{ord(m.group(0)):x} ", escaped)
    if escaped[0].isdigit():
        escaped = f"\\{ord(escaped[0]):x} {escaped[1:]}"
    return escaped


def _css_string(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


_LABELS = {
    LocatorKind.ID: "Id",
    LocatorKind.CSS: "Css",
    LocatorKind.XPATH: "XPath",
    LocatorKind.TAG: "Tag",
    LocatorKind.CLASS_NAME: "ClassName",
    LocatorKind.NAME: "Name",
    LocatorKind.LINK_TEXT: "LinkText",
    LocatorKind.PARTIAL_LINK_TEXT: "PartialLinkText",
}


@dataclass(frozen=True)
class By:
    kind: LocatorKind
    query: str

    def __post_init__(self) -> None:
        if not self.query:
            raise ValueError(f"{_LABELS[self.kind]} locator requires a non-empty query")

    # -------- factories --------

    @classmethod
    def id(cls, value: str) -> "By":
        return cls(LocatorKind.ID, value)

    @classmethod
    def css(cls, value: str) -> "By":
        return cls(LocatorKind.CSS, value)

    @classmethod
    def xpath(cls, value: str) -> "By":
        return cls(LocatorKind.XPATH, value)

    @classmethod
    def tag(cls, value: str) -> "By":
        return cls(LocatorKind.TAG, value)

    @classmethod
    def class_name(cls, value: str) -> "By":
        return cls(LocatorKind.CLASS_NAME, value)

    @classmethod
    def name(cls, value: str) -> "By":
        return cls(LocatorKind.NAME, value)

    @classmethod
    def link_text(cls, value: str) -> "By":
        return cls(LocatorKind.LINK_TEXT, value)

    @classmethod
    def partial_link_text(cls, value: str) -> "By":
        return cls(LocatorKind.PARTIAL_LINK_TEXT, value)

    # -------- wire --------

    def to_wire(self) -> dict[str, Any]:
        """Body for the W3C Find Element(s) commands: {"using": ..., "value": ...}."""
        if self.kind is LocatorKind.ID:
            return {"using": "css selector", "value": f"#{escape_css_identifier(self.query)}"}
        if self.kind is LocatorKind.CLASS_NAME:
            return {"using": "css selector", "value": f".{escape_css_identifier(self.query)}"}
        if self.kind is LocatorKind.NAME:
            return {"using": "css selector", "value": f"[name={_css_string(self.query)}]"}
        if self.kind is LocatorKind.TAG:
            return {"using": "css selector", "value": self.query}
        if self.kind is LocatorKind.CSS:
            return {"using": "css selector", "value": self.query}
        # xpath / link text / partial link text are native W3C strategies
        return {"using": self.kind.value, "value": self.query}

    def __str__(self) -> str:
        return f"{_LABELS[self.kind]}({self.query})"

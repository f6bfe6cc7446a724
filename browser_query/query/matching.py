"""
Text matching for predicates (has_text / has_attribute / with_class ...).

A needle is anything `as_needle()` accepts:
- str: exact match
- re.Pattern: regex search
- StringMatch: exact / partial / case-insensitive / whole-word
- callable(str) -> bool
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Union


class MatchMode(str, Enum):
    EXACT = "exact"
    PARTIAL = "partial"
    CASE_INSENSITIVE = "case_insensitive"
    CASE_INSENSITIVE_PARTIAL = "case_insensitive_partial"
    WORD = "word"


@dataclass(frozen=True)
class StringMatch:
    """Matches text against `pattern` using the given mode."""

    pattern: str
    mode: MatchMode = MatchMode.EXACT

    @classmethod
    def exact(cls, pattern: str) -> "StringMatch":
        return cls(pattern, MatchMode.EXACT)

    @classmethod
    def partial(cls, pattern: str) -> "StringMatch":
        return cls(pattern, MatchMode.PARTIAL)

    @classmethod
    def case_insensitive(cls, pattern: str, *, partial: bool = False) -> "StringMatch":
        mode = MatchMode.CASE_INSENSITIVE_PARTIAL if partial else MatchMode.CASE_INSENSITIVE
        return cls(pattern, mode)

    @classmethod
    def word(cls, pattern: str) -> "StringMatch":
        """Whole-word match, e.g. a single class inside a `class` attribute."""
        return cls(pattern, MatchMode.WORD)

    def is_match(self, text: str) -> bool:
        if self.mode is MatchMode.EXACT:
            return text == self.pattern
        if self.mode is MatchMode.PARTIAL:
            return self.pattern in text
        if self.mode is MatchMode.CASE_INSENSITIVE:
            return text.casefold() == self.pattern.casefold()
        if self.mode is MatchMode.CASE_INSENSITIVE_PARTIAL:
            return self.pattern.casefold() in text.casefold()
        return self.pattern in text.split()

    def __call__(self, text: str) -> bool:
        return self.is_match(text)

    def __str__(self) -> str:
        return f"{self.mode.value}({self.pattern!r})"


NeedleLike = Union[str, "re.Pattern[str]", StringMatch, Callable[[str], bool]]
Needle = Callable[[str], bool]


def as_needle(needle: NeedleLike) -> Needle:
    """Normalize anything needle-like into a `str -> bool` callable."""
    if isinstance(needle, str):
        return StringMatch.exact(needle)
    if isinstance(needle, re.Pattern):
        return lambda text: needle.search(text) is not None
    if callable(needle):
        return needle
    raise TypeError(f"unsupported needle type: {type(needle).__name__}")

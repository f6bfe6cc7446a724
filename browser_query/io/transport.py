"""
Transport protocol (abstraction).

This Protocol is the only thing the session/element wrappers and the
polling engine need from the network: send one WebDriver command, get the
W3C `value` payload back or a typed error.

Notes:
- Implementations raise `WebDriverError` subclasses (see core/errors.py);
  `NoSuchElementError` / `StaleElementReferenceError` are the transient ones.
- Request ordering and connection limits are the implementation's business.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

HttpMethod = Literal["GET", "POST", "DELETE"]


@dataclass(frozen=True)
class WireRequest:
    """One WebDriver command: HTTP method + path relative to the server root + JSON body."""

    method: HttpMethod
    path: str
    body: dict[str, Any] | None = field(default=None)

    @classmethod
    def get(cls, path: str) -> "WireRequest":
        return cls("GET", path)

    @classmethod
    def post(cls, path: str, body: dict[str, Any] | None = None) -> "WireRequest":
        # W3C requires a JSON object body on every POST, even an empty one
        return cls("POST", path, body if body is not None else {})

    @classmethod
    def delete(cls, path: str) -> "WireRequest":
        return cls("DELETE", path)


class Transport(Protocol):
    async def send(self, request: WireRequest) -> Any: ...
    async def close(self) -> None: ...

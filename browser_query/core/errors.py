"""
Error taxonomy for browser-query.

- BrowserQueryError: base class for every custom error
- WebDriverError: a failure reported by the remote end (one subclass per W3C error code),
  plus ConnectionFailureError / UnknownResponseError for transport-level breakage
- QueryError: recoverable outcomes of the polling engine
  (ElementNotFoundError, AmbiguousElementError, ElementStillPresentError, WaitTimeoutError)
"""
# @file purpose: Define error taxonomy for browser-query.

from __future__ import annotations

import json
from typing import Any


class BrowserQueryError(Exception):
    """Base class for all custom errors in browser-query."""


# ------------------------------------------------------------------------------
# wire / protocol errors
# ------------------------------------------------------------------------------


class WebDriverError(BrowserQueryError):
    """
    Raised when the WebDriver server answers a command with an error.

    `transient` marks error kinds that may resolve on their own when the
    command is repeated later (the page was still rendering, the node was
    re-rendered). Everything else is treated as fatal by the polling engine.
    """

    code: str = ""
    transient: bool = False

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        error: str | None = None,
        stacktrace: str | None = None,
        data: Any = None,
    ) -> None:
        super().__init__(message)
        self.status: int | None = status
        self.error: str = error or self.code
        self.stacktrace: str | None = stacktrace
        self.data: Any = data

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.error:
            parts.append(f"error={self.error}")
        if self.status:
            parts.append(f"status={self.status}")
        return " | ".join(parts)


class NoSuchElementError(WebDriverError):
    code = "no such element"
    transient = True


class StaleElementReferenceError(WebDriverError):
    code = "stale element reference"
    transient = True


class NoSuchAlertError(WebDriverError):
    code = "no such alert"


class NoSuchCookieError(WebDriverError):
    code = "no such cookie"


class NoSuchFrameError(WebDriverError):
    code = "no such frame"


class NoSuchWindowError(WebDriverError):
    code = "no such window"


class WebDriverTimeoutError(WebDriverError):
    """The remote end itself timed out (distinct from WaitTimeoutError)."""

    code = "timeout"


class ScriptTimeoutError(WebDriverError):
    code = "script timeout"


class ElementClickInterceptedError(WebDriverError):
    code = "element click intercepted"


class ElementNotInteractableError(WebDriverError):
    code = "element not interactable"


class InsecureCertificateError(WebDriverError):
    code = "insecure certificate"


class InvalidArgumentError(WebDriverError):
    code = "invalid argument"


class InvalidCookieDomainError(WebDriverError):
    code = "invalid cookie domain"


class InvalidElementStateError(WebDriverError):
    code = "invalid element state"


class InvalidSelectorError(WebDriverError):
    code = "invalid selector"


class InvalidSessionIdError(WebDriverError):
    code = "invalid session id"


class JavascriptError(WebDriverError):
    code = "javascript error"


class MoveTargetOutOfBoundsError(WebDriverError):
    code = "move target out of bounds"


class SessionNotCreatedError(WebDriverError):
    code = "session not created"


class UnableToSetCookieError(WebDriverError):
    code = "unable to set cookie"


class UnableToCaptureScreenError(WebDriverError):
    code = "unable to capture screen"


class UnexpectedAlertOpenError(WebDriverError):
    code = "unexpected alert open"


class UnknownCommandError(WebDriverError):
    code = "unknown command"


class UnknownMethodError(WebDriverError):
    code = "unknown method"


class UnsupportedOperationError(WebDriverError):
    code = "unsupported operation"


class UnknownServerError(WebDriverError):
    """W3C `unknown error`, or an error code this library does not know."""

    code = "unknown error"


class ConnectionFailureError(WebDriverError):
    """The request never reached the server (DNS, refused, reset, read timeout)."""

    code = "connection failure"


class UnknownResponseError(WebDriverError):
    """The server answered with something that is not a W3C response."""

    code = "unknown response"

    def __init__(self, status: int, body: str) -> None:
        super().__init__(
            f"the WebDriver server returned an unrecognised response: {body[:200]}",
            status=status,
        )
        self.body: str = body


_ERRORS_BY_CODE: dict[str, type[WebDriverError]] = {
    cls.code: cls
    for cls in (
        NoSuchElementError,
        StaleElementReferenceError,
        NoSuchAlertError,
        NoSuchCookieError,
        NoSuchFrameError,
        NoSuchWindowError,
        WebDriverTimeoutError,
        ScriptTimeoutError,
        ElementClickInterceptedError,
        ElementNotInteractableError,
        InsecureCertificateError,
        InvalidArgumentError,
        InvalidCookieDomainError,
        InvalidElementStateError,
        InvalidSelectorError,
        InvalidSessionIdError,
        JavascriptError,
        MoveTargetOutOfBoundsError,
        SessionNotCreatedError,
        UnableToSetCookieError,
        UnableToCaptureScreenError,
        UnexpectedAlertOpenError,
        UnknownCommandError,
        UnknownMethodError,
        UnsupportedOperationError,
        UnknownServerError,
    )
}


def error_for_code(code: str, message: str, **kwargs: Any) -> WebDriverError:
    """Build the typed error for a W3C error code (unknown codes -> UnknownServerError)."""
    cls = _ERRORS_BY_CODE.get(code, UnknownServerError)
    return cls(message, error=code, **kwargs)


def parse_error(status: int, body: str) -> WebDriverError:
    """
    Map a failed wire response to a typed WebDriverError.

    W3C shape: {"value": {"error": "...", "message": "...", "stacktrace": "...", "data": ...}}
    Some legacy servers put the code in a top-level "state" field instead.
    """
    try:
        payload = json.loads(body)
    except ValueError:
        return UnknownResponseError(status, body)

    if not isinstance(payload, dict) or not isinstance(payload.get("value"), dict):
        return UnknownResponseError(status, body)

    value = payload["value"]
    code = payload.get("state") or value.get("error") or ""
    if not code:
        return UnknownResponseError(status, body)

    return error_for_code(
        code,
        value.get("message") or code,
        status=status,
        stacktrace=value.get("stacktrace"),
        data=value.get("data"),
    )


# ------------------------------------------------------------------------------
# query / wait outcomes
# ------------------------------------------------------------------------------


class QueryError(BrowserQueryError):
    """
    Raised when the polling engine gives up.
    Callers usually recover from these (retry with other parameters, or fail a test).
    """

    def __init__(
        self,
        message: str,
        *,
        description: str | None = None,
        selectors: list[str] | None = None,
        tries: int | None = None,
    ) -> None:
        super().__init__(message)
        self.description: str | None = description
        self.selectors: list[str] = selectors or []
        self.tries: int | None = tries

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.selectors:
            parts.append(f"selectors=[{','.join(self.selectors)}]")
        if self.tries is not None:
            parts.append(f"tries={self.tries}")
        return " | ".join(parts)


class ElementNotFoundError(QueryError):
    """The cardinality condition was never satisfied before the poller gave up."""


class AmbiguousElementError(ElementNotFoundError):
    """A single-element query matched more than one element."""

    def __init__(self, message: str, *, count: int, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.count: int = count

    def __str__(self) -> str:
        return f"{super().__str__()} | count={self.count}"


class ElementStillPresentError(QueryError):
    """A not_exists() query still matched elements when the poller gave up."""


class WaitTimeoutError(QueryError):
    """An ElementWaiter condition never became true."""

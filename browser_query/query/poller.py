"""
Polling strategies and the per-call Poller.

A strategy is an immutable, cheap-to-share description of *how* to retry.
A Poller is the mutable run state for one query / wait invocation: it is
created by `strategy.start()` at the beginning of the call and discarded
at the end. `Poller.tick()` is the only place the engine ever sleeps.

Spacing is computed from the poller's start instant rather than from the
end of the previous attempt, so slow attempts never make the schedule drift:
attempt N+1 starts no earlier than `interval * N` after the start.
"""
# @file purpose: Polling strategies (pydantic) and the Poller state machine.

from __future__ import annotations

import asyncio
import time
from typing import Annotated, Awaitable, Callable, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]

Seconds = Annotated[float, Field(ge=0)]


class _Strategy(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    def start(self, *, clock: Clock = time.monotonic, sleep: Sleep = asyncio.sleep) -> "Poller":
        """Create a fresh Poller for one invocation."""
        return Poller(self, clock=clock, sleep=sleep)

    # continuation predicate, evaluated with the already-incremented try count
    def should_continue(self, tries: int, elapsed: float) -> bool:
        raise NotImplementedError

    @property
    def interval_seconds(self) -> float | None:
        return None


class NoWait(_Strategy):
    """Exactly one attempt, no retry."""

    kind: Literal["no_wait"] = "no_wait"

    def should_continue(self, tries: int, elapsed: float) -> bool:
        return False


class FixedTimeout(_Strategy):
    """
    Retry until `timeout` seconds have elapsed since the start.
    `interval` is the minimum spacing between attempt starts; if an attempt
    took longer than that, the next one starts immediately.
    """

    kind: Literal["fixed_timeout"] = "fixed_timeout"
    timeout: Seconds
    interval: Seconds

    def should_continue(self, tries: int, elapsed: float) -> bool:
        return elapsed < self.timeout

    @property
    def interval_seconds(self) -> float | None:
        return self.interval


class FixedTries(_Strategy):
    """Make exactly `count` attempts regardless of how long they take."""

    kind: Literal["fixed_tries"] = "fixed_tries"
    count: Annotated[int, Field(ge=1)]
    interval: Seconds

    def should_continue(self, tries: int, elapsed: float) -> bool:
        return tries < self.count

    @property
    def interval_seconds(self) -> float | None:
        return self.interval


class TimeoutWithMinTries(_Strategy):
    """
    Retry until BOTH the timeout has elapsed AND `min_tries` attempts were made,
    whichever comes last. Guarantees a minimum number of attempts on a slow server
    and a minimum wall-clock window on a fast one.
    """

    kind: Literal["timeout_with_min_tries"] = "timeout_with_min_tries"
    timeout: Seconds
    interval: Seconds
    min_tries: Annotated[int, Field(ge=0)]

    def should_continue(self, tries: int, elapsed: float) -> bool:
        return tries < self.min_tries or elapsed < self.timeout

    @property
    def interval_seconds(self) -> float | None:
        return self.interval


PollingStrategy = Annotated[
    Union[NoWait, FixedTimeout, FixedTries, TimeoutWithMinTries],
    Field(discriminator="kind"),
]


def default_strategy() -> FixedTimeout:
    """Session-wide default: FixedTimeout from settings (20s / 500ms unless overridden)."""
    from ..core.settings import settings

    return FixedTimeout(
        timeout=settings.query_timeout_seconds,
        interval=settings.query_interval_seconds,
    )


class Poller:
    """
    Run state of one polling loop. Single use; never shared between calls.

    Usage:
        poller = strategy.start()
        while True:
            if attempt():
                return ...
            if not await poller.tick():
                raise ...
    """

    def __init__(
        self,
        strategy: _Strategy,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.strategy = strategy
        self._clock = clock
        self._sleep = sleep
        self._start = clock()
        self._tries = 0

    @property
    def tries(self) -> int:
        return self._tries

    @property
    def elapsed(self) -> float:
        return self._clock() - self._start

    async def tick(self) -> bool:
        """
        Record a failed attempt and decide whether another one should be made.
        Sleeps (cooperatively) until the next attempt is due before returning True.
        """
        self._tries += 1

        if not self.strategy.should_continue(self._tries, self.elapsed):
            return False

        interval = self.strategy.interval_seconds
        if interval:
            minimum_elapsed = interval * self._tries
            actual_elapsed = self.elapsed
            if actual_elapsed < minimum_elapsed:
                await self._sleep(minimum_elapsed - actual_elapsed)

        return True

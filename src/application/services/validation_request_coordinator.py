"""ValidationRequestCoordinator - last-request-wins + minimum display duration.

The editor shows a "validating" indicator for at least `min_display_duration_ms`
so that fast verdicts do not flicker. Each validation request gets a ticket;
only the latest ticket per key may deliver its result, earlier ones are
superseded and silently discarded.

Results are computed synchronously at `issue()` time (validators are pure and
fast); only *delivery* is delayed. Clock and sleeper are injectable so tests
never depend on real timers.
"""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

DEFAULT_MIN_DISPLAY_DURATION_MS = 800


@dataclass(frozen=True, slots=True)
class ValidationTicket:
    id: int
    key: str
    issued_at: float
    deliver_at: float


@dataclass(frozen=True, slots=True)
class _Entry:
    ticket: ValidationTicket
    result: Any


class ValidationRequestCoordinator:
    def __init__(
        self,
        *,
        min_display_duration_ms: int = DEFAULT_MIN_DISPLAY_DURATION_MS,
        clock: Callable[[], float] = time.monotonic,
        sleeper: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if min_display_duration_ms < 0:
            raise ValueError("min_display_duration_ms must be >= 0")
        self._min_display_seconds = min_display_duration_ms / 1000
        self._clock = clock
        self._sleeper = sleeper
        self._lock = threading.Lock()
        self._counter = 0
        self._latest: dict[str, _Entry] = {}

    def issue(self, compute: Callable[[], Any], *, key: str = "default") -> ValidationTicket:
        """Compute a result now and register it as the latest request for `key`."""
        result = compute()
        with self._lock:
            self._counter += 1
            issued_at = self._clock()
            ticket = ValidationTicket(
                id=self._counter,
                key=key,
                issued_at=issued_at,
                deliver_at=issued_at + self._min_display_seconds,
            )
            self._latest[key] = _Entry(ticket=ticket, result=result)
        return ticket

    @property
    def min_display_seconds(self) -> float:
        return self._min_display_seconds

    def is_latest(self, ticket: ValidationTicket) -> bool:
        with self._lock:
            entry = self._latest.get(ticket.key)
            return entry is not None and entry.ticket.id == ticket.id

    def remaining_seconds(self, ticket: ValidationTicket) -> float:
        return max(0.0, ticket.deliver_at - self._clock())

    def poll(self, ticket: ValidationTicket) -> Any | None:
        """Result when the ticket is still the latest and the display duration elapsed, else None."""
        with self._lock:
            entry = self._latest.get(ticket.key)
        if entry is None or entry.ticket.id != ticket.id:
            return None
        if self._clock() < ticket.deliver_at:
            return None
        return entry.result

    async def wait_for(self, ticket: ValidationTicket) -> Any | None:
        """Wait out the display duration; None when the ticket was superseded."""
        if not self.is_latest(ticket):
            return None

        remaining = self.remaining_seconds(ticket)
        if remaining > 0:
            await self._sleeper(remaining)

        with self._lock:
            entry = self._latest.get(ticket.key)
        if entry is None or entry.ticket.id != ticket.id:
            return None
        return entry.result

    def discard(self, key: str) -> None:
        with self._lock:
            self._latest.pop(key, None)

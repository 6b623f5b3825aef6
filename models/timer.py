"""Recurring tick timer for automatic stepping.

The timer does not run anything itself. It records whether automatic
stepping is active and when the next tick is due; the thread hosting the
session polls it and calls ``SimulationSession.tick()`` when it fires.
"""

import time
from typing import Callable, Optional


class TickTimer:
    """Deadline bookkeeping for a recurring tick.

    Attributes:
        interval_ms: Milliseconds between ticks.
        is_active: Whether ticks should currently fire.
        next_due: Monotonic time (seconds) of the next tick, or None if inactive.
    """

    def __init__(
        self,
        interval_ms: float = 50,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.interval_ms = interval_ms
        self.is_active = False
        self.next_due: Optional[float] = None
        self._clock = clock

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000.0

    def start(self, interval_ms: Optional[float] = None) -> None:
        """Arm the timer; the first tick is due one full interval from now."""
        if interval_ms is not None:
            self.interval_ms = interval_ms
        self.is_active = True
        self.next_due = self._clock() + self.interval_seconds

    def stop(self) -> None:
        self.is_active = False
        self.next_due = None

    def restart(self, interval_ms: float) -> None:
        """Change the interval, re-arming only if the timer is active."""
        self.interval_ms = interval_ms
        if self.is_active:
            self.start()

    def seconds_until_due(self) -> Optional[float]:
        """Seconds until the next tick (0 if overdue), or None if inactive."""
        if not self.is_active or self.next_due is None:
            return None
        return max(0.0, self.next_due - self._clock())

    def is_due(self) -> bool:
        remaining = self.seconds_until_due()
        return remaining is not None and remaining <= 0.0

    def mark_fired(self) -> None:
        """Schedule the following tick after one has fired.

        Missed ticks are not replayed: if the host fell behind, a single tick
        is due immediately rather than one per missed interval.
        """
        if not self.is_active or self.next_due is None:
            return
        now = self._clock()
        self.next_due = max(self.next_due + self.interval_seconds, now)

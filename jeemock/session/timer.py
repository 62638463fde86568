from __future__ import annotations

"""Exam countdown with per-question time credit.

One tick == one wall-clock second. Each tick takes a second off the
remaining time and credits it to the response passed in, which the session
always supplies as the question at its current position.
"""

from dataclasses import replace
from typing import TYPE_CHECKING, Tuple

if TYPE_CHECKING:  # pragma: no cover
    from ..models import Response


def format_clock(seconds: int) -> str:
    """Render seconds as zero-padded ``MM:SS`` (minutes are not wrapped)."""
    seconds = max(0, int(seconds))
    m, s = divmod(seconds, 60)
    return f"{m:02d}:{s:02d}"


class Countdown:
    def __init__(self, duration_minutes: int) -> None:
        self.total_seconds = int(duration_minutes) * 60
        self.remaining = self.total_seconds
        self.ticks = 0
        self._running = self.remaining > 0
        self._expired = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def expired(self) -> bool:
        return self._expired

    @property
    def elapsed(self) -> int:
        return self.total_seconds - self.remaining

    def stop(self) -> None:
        self._running = False

    def tick(self, current: "Response") -> Tuple["Response", bool]:
        """Advance one second.

        Returns the credited response and True exactly once, on the tick
        that brings the remaining time to zero. Stopped timers return the
        response untouched.
        """
        if not self._running:
            return current, False
        self.remaining = max(0, self.remaining - 1)
        self.ticks += 1
        credited = replace(current, time_spent_seconds=current.time_spent_seconds + 1)
        if self.remaining == 0:
            self._running = False
            self._expired = True
            return credited, True
        return credited, False

    def clock(self) -> str:
        return format_clock(self.remaining)

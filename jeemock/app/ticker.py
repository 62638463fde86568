from __future__ import annotations

"""Tick sources that drive the exam countdown.

A tick source calls its callback once per interval between ``start`` and
``stop``. The session owns exactly one subscription and releases it on
finish or teardown.
"""

import logging
import threading
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]


class TickSource(Protocol):
    def start(self, callback: TickCallback) -> None: ...

    def stop(self) -> None: ...


class ThreadTicker:
    """Wall-clock ticker re-arming a ``threading.Timer`` every interval."""

    def __init__(self, interval_s: float = 1.0) -> None:
        self.interval_s = float(interval_s)
        self._callback: Optional[TickCallback] = None
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def start(self, callback: TickCallback) -> None:
        with self._lock:
            if self._active:
                raise RuntimeError("ticker already started")
            self._callback = callback
            self._active = True
            self._arm()

    def _arm(self) -> None:
        self._timer = threading.Timer(self.interval_s, self._fire)
        self._timer.daemon = True
        self._timer.start()

    def _fire(self) -> None:
        with self._lock:
            if not self._active:
                return
            callback = self._callback
            # next tick is scheduled before the callback runs
            self._arm()
        if callback is not None:
            try:
                callback()
            except Exception:
                logger.exception("Tick callback failed")

    def stop(self) -> None:
        with self._lock:
            self._active = False
            self._callback = None
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None


class ManualTicker:
    """Synchronous tick source for tests and scripted sessions."""

    def __init__(self) -> None:
        self._callback: Optional[TickCallback] = None
        self.delivered = 0

    @property
    def active(self) -> bool:
        return self._callback is not None

    def start(self, callback: TickCallback) -> None:
        if self._callback is not None:
            raise RuntimeError("ticker already started")
        self._callback = callback

    def stop(self) -> None:
        self._callback = None

    def advance(self, n: int = 1) -> int:
        """Deliver up to ``n`` ticks; stops early once the subscription is released."""
        sent = 0
        for _ in range(int(n)):
            if self._callback is None:
                break
            self._callback()
            sent += 1
        self.delivered += sent
        return sent

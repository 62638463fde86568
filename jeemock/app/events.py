from __future__ import annotations

"""Tiny pub/sub event bus for session lifecycle events."""

import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

SESSION_STARTED = "session_started"
FINISH = "finish"


class EventBus:
    def __init__(self) -> None:
        self._subs: Dict[str, List[Callable[[Any], None]]] = {}

    def subscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        self._subs.setdefault(event, []).append(handler)

    def unsubscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        handlers = self._subs.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, payload: Any) -> None:
        # A failing handler must not stop the others from seeing the event
        for h in list(self._subs.get(event, [])):
            try:
                h(payload)
            except Exception:
                logger.exception("Handler %r failed for event %r", h, event)

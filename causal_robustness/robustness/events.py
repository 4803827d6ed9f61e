"""Fire-and-forget notifications for engine progress.

Delivery is at-most-once: handlers registered after an event was published
never see it, and a handler that raises is logged and skipped.
"""

import threading
from collections import defaultdict
from typing import Any, Callable

from causal_robustness.logging_config.structured import get_logger

logger = get_logger(__name__)

FILTER_APPLIED = "ewma-filter-applied"
DISCOVERY_COMPLETED = "causal-discovery-completed"

EventHandler = Callable[[dict[str, Any]], None]


class EventBus:
    """In-process publish/subscribe hub keyed by event name."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, event: str, handler: EventHandler) -> Callable[[], None]:
        """Register ``handler`` for ``event``.

        Returns:
            A callable that removes the subscription.
        """
        with self._lock:
            self._handlers[event].append(handler)
        return lambda: self.unsubscribe(event, handler)

    def unsubscribe(self, event: str, handler: EventHandler) -> bool:
        with self._lock:
            handlers = self._handlers.get(event, [])
            if handler in handlers:
                handlers.remove(handler)
                return True
            return False

    def clear(self) -> None:
        """Remove every subscription."""
        with self._lock:
            self._handlers.clear()

    def subscriber_count(self, event: str | None = None) -> int:
        with self._lock:
            if event is not None:
                return len(self._handlers.get(event, []))
            return sum(len(h) for h in self._handlers.values())

    def publish(self, event: str, payload: dict[str, Any]) -> int:
        """Deliver ``payload`` to the current subscribers of ``event``.

        Returns:
            Number of handlers that completed without raising.
        """
        with self._lock:
            handlers = list(self._handlers.get(event, []))

        delivered = 0
        for handler in handlers:
            try:
                handler(payload)
                delivered += 1
            except Exception as e:
                # Failing subscribers are logged and skipped
                logger.exception("event_handler_failed", event_name=event, error=str(e))
        return delivered

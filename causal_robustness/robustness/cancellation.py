"""Cooperative cancellation for long discovery runs."""

import threading

from .errors import DiscoveryCancelledError


class CancellationToken:
    """Flag checked between units of work (one variable, one pair)."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise DiscoveryCancelledError()

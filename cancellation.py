"""Cooperative cancellation for publish runs."""

from __future__ import annotations

import threading


class CancellationToken:
    """Flag shared between the caller, which cancels, and the publisher, which polls.

    Cancellation is one-way: once requested it stays requested. The publisher
    checks it before every remote call and never waits on it.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"

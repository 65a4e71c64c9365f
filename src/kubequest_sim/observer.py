"""Snapshot publication for debugging sessions."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime

from kubequest_sim.models import RunnerState, StateChange

logger = logging.getLogger(__name__)

Subscriber = Callable[[StateChange], None]


class SessionObserver:
    """Record every :class:`RunnerState` snapshot a session publishes.

    Each call to ``publish`` appends a :class:`StateChange` and then hands
    it to every subscriber in registration order.  A subscriber that raises
    is logged and skipped; it never propagates into the session.

    An explicit :class:`threading.Lock` guards the change log and the
    subscriber list so that UIs running callbacks on other threads can
    subscribe, unsubscribe and read concurrently.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(tz=UTC))
        self._changes: list[StateChange] = []
        self._subscribers: list[Subscriber] = []
        self._lock: threading.Lock = threading.Lock()

    def publish(self, event: str, snapshot: RunnerState) -> StateChange:
        """Record *snapshot* under *event* and notify subscribers.

        Args:
            event:    Short transition label (e.g. ``"scenario_started"``).
            snapshot: The session state after the transition.
        """
        change = StateChange(timestamp=self._clock(), event=event, snapshot=snapshot)
        with self._lock:
            self._changes.append(change)
            subscribers = list(self._subscribers)
        for subscriber in subscribers:
            try:
                subscriber(change)
            except Exception:
                logger.exception("Subscriber %r failed while handling %r", subscriber, event)
        return change

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register *callback*; return a function that unregisters it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def get_changes(self, event: str | None = None) -> list[StateChange]:
        """Return a copy of the recorded changes, optionally filtered by *event*."""
        with self._lock:
            changes = list(self._changes)
        if event is None:
            return changes
        return [change for change in changes if change.event == event]

    @property
    def latest(self) -> StateChange | None:
        with self._lock:
            return self._changes[-1] if self._changes else None

    def clear(self) -> None:
        """Discard all recorded changes.  Subscribers stay registered."""
        with self._lock:
            self._changes.clear()


__all__ = ["SessionObserver", "Subscriber"]

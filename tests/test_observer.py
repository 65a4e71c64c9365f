"""Tests for kubequest_sim.observer: SessionObserver."""

from __future__ import annotations

import logging
import threading
from datetime import datetime

import pytest

from kubequest_sim.models import ClusterState, RunnerState, SimulationStatus, StateChange
from kubequest_sim.observer import SessionObserver


def _snapshot(status: SimulationStatus = SimulationStatus.stopped) -> RunnerState:
    return RunnerState(cluster_state=ClusterState(), simulation_status=status)


# ---------------------------------------------------------------------------
# publish / get_changes / clear
# ---------------------------------------------------------------------------


class TestPublish:
    def test_publish_records_change(self, observer: SessionObserver, now: datetime) -> None:
        change = observer.publish("scenario_started", _snapshot(SimulationStatus.running))
        assert isinstance(change, StateChange)
        assert change.event == "scenario_started"
        assert change.timestamp == now
        assert change.snapshot.simulation_status is SimulationStatus.running
        assert observer.get_changes() == [change]

    def test_changes_kept_in_order(self, observer: SessionObserver) -> None:
        for index in range(5):
            observer.publish(f"event_{index}", _snapshot())
        assert [c.event for c in observer.get_changes()] == [f"event_{i}" for i in range(5)]

    def test_filter_by_event(self, observer: SessionObserver) -> None:
        observer.publish("hint_used", _snapshot())
        observer.publish("command_executed", _snapshot())
        observer.publish("hint_used", _snapshot())
        assert len(observer.get_changes("hint_used")) == 2
        assert observer.get_changes("scenario_reset") == []

    def test_get_changes_returns_copy(self, observer: SessionObserver) -> None:
        observer.publish("a", _snapshot())
        observer.get_changes().clear()
        assert len(observer.get_changes()) == 1

    def test_latest(self, observer: SessionObserver) -> None:
        assert observer.latest is None
        observer.publish("a", _snapshot())
        observer.publish("b", _snapshot())
        assert observer.latest is not None
        assert observer.latest.event == "b"

    def test_clear(self, observer: SessionObserver) -> None:
        observer.publish("a", _snapshot())
        observer.clear()
        assert observer.get_changes() == []
        assert observer.latest is None

    def test_default_clock_is_utc_aware(self) -> None:
        change = SessionObserver().publish("a", _snapshot())
        assert change.timestamp.tzinfo is not None


# ---------------------------------------------------------------------------
# Subscribers
# ---------------------------------------------------------------------------


class TestSubscribers:
    def test_subscriber_receives_change(self, observer: SessionObserver) -> None:
        received: list[StateChange] = []
        observer.subscribe(received.append)
        change = observer.publish("a", _snapshot())
        assert received == [change]

    def test_subscribers_called_in_registration_order(self, observer: SessionObserver) -> None:
        calls: list[str] = []
        observer.subscribe(lambda change: calls.append("first"))
        observer.subscribe(lambda change: calls.append("second"))
        observer.publish("a", _snapshot())
        assert calls == ["first", "second"]

    def test_unsubscribe(self, observer: SessionObserver) -> None:
        received: list[StateChange] = []
        unsubscribe = observer.subscribe(received.append)
        unsubscribe()
        unsubscribe()
        observer.publish("a", _snapshot())
        assert received == []

    def test_failing_subscriber_is_logged_and_skipped(
        self, observer: SessionObserver, caplog: pytest.LogCaptureFixture
    ) -> None:
        received: list[StateChange] = []

        def broken(change: StateChange) -> None:
            raise RuntimeError("boom")

        observer.subscribe(broken)
        observer.subscribe(received.append)
        with caplog.at_level(logging.ERROR, logger="kubequest_sim.observer"):
            observer.publish("a", _snapshot())
        assert len(received) == 1
        assert "failed while handling 'a'" in caplog.text

    def test_clear_keeps_subscribers(self, observer: SessionObserver) -> None:
        received: list[StateChange] = []
        observer.subscribe(received.append)
        observer.clear()
        observer.publish("a", _snapshot())
        assert len(received) == 1


# ---------------------------------------------------------------------------
# Thread safety
# ---------------------------------------------------------------------------


class TestThreadSafety:
    def test_concurrent_publish_keeps_every_change(self) -> None:
        observer = SessionObserver()
        n_threads = 20
        per_thread = 25

        def publish_many() -> None:
            for index in range(per_thread):
                observer.publish(f"event_{index}", _snapshot())

        threads = [threading.Thread(target=publish_many) for _ in range(n_threads)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(observer.get_changes()) == n_threads * per_thread

    def test_subscribe_during_publish(self) -> None:
        observer = SessionObserver()
        stop = threading.Event()
        received: list[StateChange] = []

        def writer() -> None:
            while not stop.is_set():
                observer.publish("tick", _snapshot())

        writer_thread = threading.Thread(target=writer, daemon=True)
        writer_thread.start()
        for _ in range(50):
            unsubscribe = observer.subscribe(received.append)
            unsubscribe()
        stop.set()
        writer_thread.join(timeout=5)
        assert not writer_thread.is_alive()

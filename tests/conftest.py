"""Shared pytest fixtures for kubequest-sim test suite."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from kubequest_sim.catalog import ScenarioCatalog
from kubequest_sim.cluster import build_default_cluster
from kubequest_sim.config import Settings
from kubequest_sim.core import FaultInjector
from kubequest_sim.interpreter import CommandInterpreter
from kubequest_sim.models import ClusterState
from kubequest_sim.observer import SessionObserver
from kubequest_sim.progress import ProgressTracker
from kubequest_sim.session import DebugSession

NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=UTC)


class FakeMonotonic:
    """Manually advanced stand-in for :func:`time.monotonic`."""

    def __init__(self, start: float = 100.0) -> None:
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


# ---------------------------------------------------------------------------
# Clock and settings fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def now() -> datetime:
    """The fixed reference time every deterministic fixture uses."""
    return NOW


@pytest.fixture()
def clock() -> Callable[[], datetime]:
    return lambda: NOW


@pytest.fixture()
def monotonic() -> FakeMonotonic:
    return FakeMonotonic()


@pytest.fixture()
def settings() -> Settings:
    """Settings with both simulated delays disabled."""
    return Settings(start_delay_seconds=0.0, completion_delay_seconds=0.0)


# ---------------------------------------------------------------------------
# Cluster fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def default_state() -> ClusterState:
    """The healthy baseline cluster at NOW."""
    return build_default_cluster(NOW)


@pytest.fixture()
def catalog(settings: Settings) -> ScenarioCatalog:
    return ScenarioCatalog(settings=settings)


@pytest.fixture()
def crashloop_state(catalog: ScenarioCatalog) -> ClusterState:
    """Baseline cluster with the crashloop-1 fault injected."""
    return catalog.initial_state("crashloop-1", NOW)


@pytest.fixture()
def imagepull_state(catalog: ScenarioCatalog) -> ClusterState:
    return catalog.initial_state("imagepull-1", NOW)


# ---------------------------------------------------------------------------
# Core object fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def injector() -> FaultInjector:
    """A fresh FaultInjector instance."""
    return FaultInjector()


@pytest.fixture()
def interpreter(clock: Callable[[], datetime]) -> CommandInterpreter:
    return CommandInterpreter(clock=clock)


@pytest.fixture()
def observer(clock: Callable[[], datetime]) -> SessionObserver:
    """A fresh SessionObserver instance."""
    return SessionObserver(clock=clock)


@pytest.fixture()
def tracker() -> ProgressTracker:
    return ProgressTracker()


@pytest.fixture()
def session(
    settings: Settings,
    catalog: ScenarioCatalog,
    clock: Callable[[], datetime],
    monotonic: FakeMonotonic,
) -> DebugSession:
    """A session with zero delays, a fixed clock and a manual monotonic clock."""
    return DebugSession(settings=settings, catalog=catalog, clock=clock, monotonic=monotonic)

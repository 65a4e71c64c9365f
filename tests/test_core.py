"""Tests for kubequest_sim.core and kubequest_sim.faults: fault injection."""

from __future__ import annotations

from datetime import datetime

import pytest

from kubequest_sim.catalog import SCENARIOS
from kubequest_sim.cluster import ClusterModel
from kubequest_sim.core import FaultInjector, ScenarioNotFoundError, SimulationStateError
from kubequest_sim.faults import get_generator, register_fault, registered_ids
from kubequest_sim.models import ClusterState, PodStatus, SimulationStatus

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class TestExceptions:
    def test_scenario_not_found_is_key_error(self) -> None:
        assert issubclass(ScenarioNotFoundError, KeyError)

    def test_simulation_state_error_carries_context(self) -> None:
        exc = SimulationStateError(SimulationStatus.paused, "execute a command")
        assert isinstance(exc, RuntimeError)
        assert exc.status is SimulationStatus.paused
        assert exc.operation == "execute a command"
        assert str(exc) == "Cannot execute a command while simulation is paused"


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_every_catalog_scenario_has_a_generator(self) -> None:
        ids = set(registered_ids())
        assert {scenario.id for scenario in SCENARIOS} <= ids

    def test_registered_ids_sorted(self) -> None:
        ids = registered_ids()
        assert ids == sorted(ids)

    def test_unknown_generator_is_none(self) -> None:
        assert get_generator("no-such-scenario") is None

    def test_duplicate_registration_raises(self) -> None:
        with pytest.raises(ValueError, match="already registered"):

            @register_fault("crashloop-1")
            def _again(ctx: object) -> None:
                pass


# ---------------------------------------------------------------------------
# FaultInjector
# ---------------------------------------------------------------------------


class TestFaultInjector:
    def test_unknown_scenario_raises(
        self, injector: FaultInjector, default_state: ClusterState, now: datetime
    ) -> None:
        with pytest.raises(ScenarioNotFoundError):
            injector.inject(default_state, "no-such-scenario", now=now)

    def test_base_state_untouched(
        self, injector: FaultInjector, default_state: ClusterState, now: datetime
    ) -> None:
        before = default_state.model_copy(deep=True)
        injector.inject(default_state, "crashloop-1", now=now)
        assert default_state == before

    def test_injection_is_deterministic(
        self, injector: FaultInjector, default_state: ClusterState, now: datetime
    ) -> None:
        first = injector.inject(default_state, "imagepull-1", now=now)
        second = injector.inject(default_state, "imagepull-1", now=now)
        assert first == second

    def test_supports(self, injector: FaultInjector) -> None:
        assert injector.supports("crashloop-1")
        assert not injector.supports("nope")


class TestCrashloopFault:
    def test_pod_in_crash_loop(self, crashloop_state: ClusterState) -> None:
        pod = ClusterModel(crashloop_state).find_pod("nginx-deployment-abc123")
        assert pod is not None
        assert pod.status == PodStatus.crash_loop_back_off
        assert pod.restart_count == 5

    def test_logs_mention_missing_variable(self, crashloop_state: ClusterState) -> None:
        pod = ClusterModel(crashloop_state).find_pod("nginx-deployment-abc123")
        assert pod is not None
        assert any("missing environment variable DATABASE_URL" in entry.message for entry in pod.logs)

    def test_events_attached_to_pod(self, crashloop_state: ClusterState) -> None:
        pod = ClusterModel(crashloop_state).find_pod("nginx-deployment-abc123")
        assert pod is not None
        assert {"Failed", "BackOff"} <= {event.reason for event in pod.events}
        assert all(e.involved_object.namespace == "default" for e in pod.events)

    def test_other_pods_unaffected(self, crashloop_state: ClusterState) -> None:
        others = [p for p in crashloop_state.pods if p.name != "nginx-deployment-abc123"]
        assert all(p.status == PodStatus.running for p in others)


class TestImagePullFault:
    def test_pod_in_image_pull_back_off(self, imagepull_state: ClusterState) -> None:
        pod = ClusterModel(imagepull_state).find_pod("frontend-deployment-ghi789")
        assert pod is not None
        assert pod.status == PodStatus.image_pull_back_off
        assert pod.containers[0].image == "private-registry.com/myapp:latest"

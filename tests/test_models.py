"""Tests for kubequest_sim.models: pydantic records and enumerations."""

from __future__ import annotations

from datetime import datetime

import pytest
from pydantic import ValidationError

from kubequest_sim.models import (
    ClusterState,
    CommandResult,
    ConditionType,
    DebugScenario,
    Difficulty,
    FaultInjection,
    NodeTaint,
    PodState,
    PodStatus,
    RunnerState,
    SimulationStatus,
    SuccessCondition,
    SuccessCriteria,
    TaintEffect,
)

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class TestEnums:
    def test_pod_status_compares_to_literal(self) -> None:
        assert PodStatus.crash_loop_back_off == "CrashLoopBackOff"
        assert PodStatus("ImagePullBackOff") is PodStatus.image_pull_back_off

    def test_simulation_status_values(self) -> None:
        assert {s.value for s in SimulationStatus} == {"stopped", "running", "paused", "error"}

    def test_condition_type_uses_hyphenated_tags(self) -> None:
        assert ConditionType("pod-status") is ConditionType.pod_status
        assert ConditionType.loadbalancer_provisioned.value == "loadbalancer-provisioned"

    def test_difficulty_invalid_value_raises(self) -> None:
        with pytest.raises(ValueError):
            Difficulty("Impossible")


# ---------------------------------------------------------------------------
# Cluster records
# ---------------------------------------------------------------------------


class TestPodState:
    def test_defaults(self, now: datetime) -> None:
        pod = PodState(id="p", name="p", namespace="default", created_at=now)
        assert pod.status == PodStatus.running
        assert pod.restart_count == 0
        assert pod.containers == []
        assert pod.node is None

    def test_negative_restart_count_rejected(self, now: datetime) -> None:
        with pytest.raises(ValidationError):
            PodState(id="p", name="p", namespace="default", created_at=now, restart_count=-1)

    def test_status_coerced_from_string(self, now: datetime) -> None:
        pod = PodState(id="p", name="p", namespace="default", created_at=now, status="Pending")
        assert pod.status is PodStatus.pending


class TestNodeTaint:
    def test_str_with_value(self) -> None:
        taint = NodeTaint(key="dedicated", value="gpu", effect=TaintEffect.no_schedule)
        assert str(taint) == "dedicated=gpu:NoSchedule"

    def test_str_without_value(self) -> None:
        taint = NodeTaint(key="node.kubernetes.io/unreachable", effect=TaintEffect.no_execute)
        assert str(taint) == "node.kubernetes.io/unreachable:NoExecute"


class TestClusterState:
    def test_empty_state_is_valid(self) -> None:
        state = ClusterState()
        assert state.pods == []
        assert state.namespaces == []


# ---------------------------------------------------------------------------
# Scenario definitions
# ---------------------------------------------------------------------------


def _scenario(**overrides: object) -> DebugScenario:
    data: dict[str, object] = {
        "id": "demo-1",
        "name": "Demo",
        "description": "Demo scenario",
        "category": "pod-issues",
        "difficulty": "Beginner",
        "estimated_time": "5 minutes",
        "fault_injection": {"type": "demo", "target": "demo"},
        "success_criteria": {"conditions": [{"type": "pod-status", "target": "x-*", "expected": "Running"}]},
    }
    data.update(overrides)
    return DebugScenario.model_validate(data)


class TestDebugScenario:
    def test_nested_models_parsed(self) -> None:
        scenario = _scenario()
        assert isinstance(scenario.fault_injection, FaultInjection)
        assert isinstance(scenario.success_criteria, SuccessCriteria)
        condition = scenario.success_criteria.conditions[0]
        assert isinstance(condition, SuccessCondition)
        assert condition.type is ConditionType.pod_status

    def test_is_frozen(self) -> None:
        scenario = _scenario()
        with pytest.raises(ValidationError):
            scenario.name = "Changed"  # type: ignore[misc]

    def test_unknown_condition_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _scenario(success_criteria={"conditions": [{"type": "telepathy", "target": "x"}]})


# ---------------------------------------------------------------------------
# Runner records
# ---------------------------------------------------------------------------


class TestCommandResult:
    def test_is_system(self, now: datetime) -> None:
        assert CommandResult(command="system", output="hi", exit_code=0, timestamp=now).is_system
        assert not CommandResult(command="kubectl get pods", output="", exit_code=0, timestamp=now).is_system


class TestRunnerState:
    def test_defaults(self) -> None:
        state = RunnerState(cluster_state=ClusterState())
        assert state.simulation_status is SimulationStatus.stopped
        assert state.current_scenario is None
        assert state.scenario_progress == 0

    def test_progress_bounded(self) -> None:
        with pytest.raises(ValidationError):
            RunnerState(cluster_state=ClusterState(), scenario_progress=101)

    def test_visible_history_after_screen_start(self, now: datetime) -> None:
        history = [
            CommandResult(command=f"cmd-{i}", output="", exit_code=0, timestamp=now) for i in range(3)
        ]
        state = RunnerState(cluster_state=ClusterState(), command_history=history, screen_start=2)
        assert [r.command for r in state.visible_history] == ["cmd-2"]

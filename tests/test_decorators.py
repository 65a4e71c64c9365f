"""Tests for kubequest_sim.decorators: requires_status."""

from __future__ import annotations

import asyncio

import pytest

from kubequest_sim.core import SimulationStateError
from kubequest_sim.decorators import requires_status
from kubequest_sim.models import SimulationStatus


class _Machine:
    def __init__(self, status: SimulationStatus) -> None:
        self.simulation_status = status
        self.calls: list[str] = []

    @requires_status(SimulationStatus.running)
    def step_forward(self) -> str:
        """Advance one step."""
        self.calls.append("step")
        return "stepped"

    @requires_status(SimulationStatus.running, SimulationStatus.paused, operation="save progress")
    async def save(self, label: str) -> str:
        await asyncio.sleep(0)
        self.calls.append(label)
        return f"saved {label}"


# ---------------------------------------------------------------------------
# Synchronous methods
# ---------------------------------------------------------------------------


class TestSyncMethods:
    def test_allowed_status_runs(self) -> None:
        machine = _Machine(SimulationStatus.running)
        assert machine.step_forward() == "stepped"
        assert machine.calls == ["step"]

    def test_rejected_status_raises(self) -> None:
        machine = _Machine(SimulationStatus.paused)
        with pytest.raises(SimulationStateError) as exc_info:
            machine.step_forward()
        assert exc_info.value.status is SimulationStatus.paused
        assert machine.calls == []

    def test_default_label_from_method_name(self) -> None:
        machine = _Machine(SimulationStatus.stopped)
        with pytest.raises(SimulationStateError, match="Cannot step forward while simulation is stopped"):
            machine.step_forward()

    def test_wraps_preserves_metadata(self) -> None:
        assert _Machine.step_forward.__name__ == "step_forward"
        assert _Machine.step_forward.__doc__ == "Advance one step."

    def test_status_given_as_string(self) -> None:
        machine = _Machine(SimulationStatus.running)
        machine.simulation_status = "running"  # type: ignore[assignment]
        assert machine.step_forward() == "stepped"


# ---------------------------------------------------------------------------
# Coroutine methods
# ---------------------------------------------------------------------------


class TestAsyncMethods:
    def test_allowed_status_awaits(self) -> None:
        machine = _Machine(SimulationStatus.paused)
        assert asyncio.run(machine.save("checkpoint")) == "saved checkpoint"
        assert machine.calls == ["checkpoint"]

    def test_rejected_status_raises_on_await(self) -> None:
        machine = _Machine(SimulationStatus.error)
        with pytest.raises(SimulationStateError, match="Cannot save progress while simulation is error"):
            asyncio.run(machine.save("checkpoint"))
        assert machine.calls == []

    def test_wrapper_stays_a_coroutine_function(self) -> None:
        import inspect

        assert inspect.iscoroutinefunction(_Machine.save)

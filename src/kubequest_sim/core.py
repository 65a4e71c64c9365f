"""Core fault injection engine for kubequest-sim."""

from __future__ import annotations

from datetime import UTC, datetime

from kubequest_sim.cluster import ClusterModel
from kubequest_sim.faults import FaultContext, get_generator, registered_ids
from kubequest_sim.models import ClusterState, DebugScenario, SimulationStatus

# ---------------------------------------------------------------------------
# Custom exceptions
# ---------------------------------------------------------------------------


class ScenarioNotFoundError(KeyError):
    """Raised when a scenario id is not present in the catalog or registry."""


class SimulationStateError(RuntimeError):
    """Raised when an operation is invalid in the current simulation status."""

    def __init__(self, status: SimulationStatus, operation: str) -> None:
        super().__init__(
            f"Cannot {operation} while simulation is {SimulationStatus(status).value}"
        )
        self.status = SimulationStatus(status)
        self.operation = operation


# ---------------------------------------------------------------------------
# FaultInjector
# ---------------------------------------------------------------------------


class FaultInjector:
    """Turn a baseline :class:`ClusterState` into a scenario's faulted state.

    Each scenario id maps to one generator registered with
    :func:`~kubequest_sim.faults.register_fault`.  Injection never touches
    the *base* argument; generators work on a deep copy.
    """

    def inject(
        self,
        base: ClusterState,
        scenario_id: str,
        descriptor: DebugScenario | None = None,
        now: datetime | None = None,
    ) -> ClusterState:
        """Return a copy of *base* with the fault for *scenario_id* applied.

        Args:
            base:        Baseline cluster to start from.
            scenario_id: Catalog id whose generator should run.
            descriptor:  Optional scenario descriptor passed to the generator.
            now:         Reference time for event and log timestamps.

        Raises:
            ScenarioNotFoundError: If no generator is registered for *scenario_id*.
        """
        generator = get_generator(scenario_id)
        if generator is None:
            raise ScenarioNotFoundError(scenario_id)

        model = ClusterModel(base.model_copy(deep=True))
        context = FaultContext(model, now or datetime.now(tz=UTC), descriptor)
        generator(context)
        return model.state

    def supports(self, scenario_id: str) -> bool:
        return get_generator(scenario_id) is not None

    def registered_ids(self) -> list[str]:
        return registered_ids()


__all__ = [
    "FaultInjector",
    "ScenarioNotFoundError",
    "SimulationStateError",
]

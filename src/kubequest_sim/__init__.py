"""kubequest-sim: Kubernetes debugging scenarios against a simulated cluster."""

from kubequest_sim.catalog import ScenarioCatalog
from kubequest_sim.config import Settings
from kubequest_sim.core import (
    FaultInjector,
    ScenarioNotFoundError,
    SimulationStateError,
)
from kubequest_sim.criteria import CriteriaReport, evaluate, remediate
from kubequest_sim.decorators import requires_status
from kubequest_sim.interpreter import CommandInterpreter
from kubequest_sim.models import (
    ClusterState,
    CommandResult,
    DebugScenario,
    Difficulty,
    PodStatus,
    RunnerState,
    SimulationStatus,
    StateChange,
)
from kubequest_sim.observer import SessionObserver
from kubequest_sim.progress import ProgressTracker
from kubequest_sim.session import DebugSession

__version__ = "0.1.0"

__all__ = [
    "ClusterState",
    "CommandInterpreter",
    "CommandResult",
    "CriteriaReport",
    "DebugScenario",
    "DebugSession",
    "Difficulty",
    "FaultInjector",
    "PodStatus",
    "ProgressTracker",
    "RunnerState",
    "ScenarioCatalog",
    "ScenarioNotFoundError",
    "SessionObserver",
    "Settings",
    "SimulationStateError",
    "SimulationStatus",
    "StateChange",
    "evaluate",
    "remediate",
    "requires_status",
]

"""Pydantic models for kubequest-sim."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class PodStatus(str, Enum):
    """Phase (or waiting reason) shown in the STATUS column of a pod."""

    pending = "Pending"
    running = "Running"
    succeeded = "Succeeded"
    failed = "Failed"
    unknown = "Unknown"
    crash_loop_back_off = "CrashLoopBackOff"
    image_pull_back_off = "ImagePullBackOff"


class ContainerStatus(str, Enum):
    running = "Running"
    waiting = "Waiting"
    terminated = "Terminated"


class NodeStatus(str, Enum):
    ready = "Ready"
    not_ready = "NotReady"
    unknown = "Unknown"


class TaintEffect(str, Enum):
    no_schedule = "NoSchedule"
    prefer_no_schedule = "PreferNoSchedule"
    no_execute = "NoExecute"


class EventType(str, Enum):
    normal = "Normal"
    warning = "Warning"


class LogLevel(str, Enum):
    info = "INFO"
    warn = "WARN"
    error = "ERROR"
    debug = "DEBUG"


class Difficulty(str, Enum):
    beginner = "Beginner"
    intermediate = "Intermediate"
    advanced = "Advanced"
    expert = "Expert"


class SimulationStatus(str, Enum):
    """Lifecycle state of a debugging session."""

    stopped = "stopped"
    running = "running"
    paused = "paused"
    error = "error"


class ConditionType(str, Enum):
    """Tagged variants of a scenario success condition."""

    pod_status = "pod-status"
    pod_ready = "pod-ready"
    pod_scheduled = "pod-scheduled"
    node_ready = "node-ready"
    node_condition = "node-condition"
    service_connectivity = "service-connectivity"
    loadbalancer_provisioned = "loadbalancer-provisioned"
    deployment_available = "deployment-available"
    resource_exists = "resource-exists"
    resource_absent = "resource-absent"


# ---------------------------------------------------------------------------
# Cluster records
# ---------------------------------------------------------------------------


class ResourceMetadata(BaseModel):
    name: str
    namespace: str | None = None
    creation_timestamp: datetime | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)


class K8sResource(BaseModel):
    """Generic manifest-shaped record used for services, deployments, etc."""

    api_version: str
    kind: str
    metadata: ResourceMetadata
    spec: dict[str, Any] = Field(default_factory=dict)
    status: dict[str, Any] = Field(default_factory=dict)


class InvolvedObject(BaseModel):
    kind: str
    name: str
    namespace: str | None = None


class K8sEvent(BaseModel):
    id: str
    type: EventType
    reason: str
    message: str
    source: str
    first_time: datetime
    last_time: datetime
    count: int = Field(default=1, ge=1)
    involved_object: InvolvedObject


class LogEntry(BaseModel):
    id: str
    timestamp: datetime
    level: LogLevel
    message: str
    source: str
    container: str | None = None


class LastState(BaseModel):
    reason: str
    exit_code: int


class ResourceRequirements(BaseModel):
    requests: dict[str, str] = Field(default_factory=dict)
    limits: dict[str, str] = Field(default_factory=dict)


class ContainerState(BaseModel):
    name: str
    image: str
    status: ContainerStatus = ContainerStatus.running
    ready: bool = True
    restart_count: int = Field(default=0, ge=0)
    state_reason: str | None = None
    last_state: LastState | None = None
    resources: ResourceRequirements = Field(default_factory=ResourceRequirements)
    env: dict[str, str] = Field(default_factory=dict)
    ports: list[int] = Field(default_factory=list)


class PodState(BaseModel):
    id: str
    name: str
    namespace: str
    status: PodStatus = PodStatus.running
    restart_count: int = Field(default=0, ge=0)
    containers: list[ContainerState] = Field(default_factory=list)
    init_containers: list[ContainerState] = Field(default_factory=list)
    events: list[K8sEvent] = Field(default_factory=list)
    logs: list[LogEntry] = Field(default_factory=list)
    node: str | None = None
    created_at: datetime
    last_restart: datetime | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    ip: str | None = None


class NodeCondition(BaseModel):
    type: str
    status: str
    reason: str | None = None
    message: str | None = None
    last_transition_time: datetime


class NodeTaint(BaseModel):
    key: str
    value: str | None = None
    effect: TaintEffect

    def __str__(self) -> str:
        value = f"={self.value}" if self.value else ""
        return f"{self.key}{value}:{self.effect.value}"


class UsageMetric(BaseModel):
    usage: int = Field(ge=0)
    capacity: int = Field(default=100, gt=0)


class NodeMetrics(BaseModel):
    cpu: UsageMetric
    memory: UsageMetric
    disk: UsageMetric


class NodeState(BaseModel):
    id: str
    name: str
    status: NodeStatus = NodeStatus.ready
    roles: list[str] = Field(default_factory=list)
    conditions: list[NodeCondition] = Field(default_factory=list)
    capacity: dict[str, str] = Field(default_factory=dict)
    allocatable: dict[str, str] = Field(default_factory=dict)
    taints: list[NodeTaint] = Field(default_factory=list)
    metrics: NodeMetrics
    created_at: datetime
    kubelet_version: str = "v1.28.2"


class ClusterState(BaseModel):
    """Full in-memory snapshot of the simulated cluster."""

    namespaces: list[str] = Field(default_factory=list)
    nodes: list[NodeState] = Field(default_factory=list)
    pods: list[PodState] = Field(default_factory=list)
    services: list[K8sResource] = Field(default_factory=list)
    deployments: list[K8sResource] = Field(default_factory=list)
    config_maps: list[K8sResource] = Field(default_factory=list)
    secrets: list[K8sResource] = Field(default_factory=list)
    events: list[K8sEvent] = Field(default_factory=list)
    logs: list[LogEntry] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Scenario definitions
# ---------------------------------------------------------------------------


class FaultInjection(BaseModel):
    """Declarative description of the fault a scenario materializes."""

    model_config = ConfigDict(frozen=True)

    type: str
    target: str
    parameters: dict[str, Any] = Field(default_factory=dict)


class SuccessCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: ConditionType
    target: str
    expected: Any = None


class SuccessCriteria(BaseModel):
    model_config = ConfigDict(frozen=True)

    conditions: list[SuccessCondition] = Field(default_factory=list)


class Hint(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    trigger: str
    message: str
    command: str | None = None
    priority: int = 1


class DebugScenario(BaseModel):
    """Immutable, pre-authored debugging exercise."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    category: str
    difficulty: Difficulty
    estimated_time: str
    objectives: list[str] = Field(default_factory=list)
    fault_injection: FaultInjection
    success_criteria: SuccessCriteria
    hints: list[Hint] = Field(default_factory=list)
    commands: list[str] = Field(default_factory=list)
    fix_commands: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Runner records
# ---------------------------------------------------------------------------


class CommandResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    command: str
    output: str
    exit_code: int
    timestamp: datetime

    @property
    def is_system(self) -> bool:
        return self.command == "system"


class RunnerState(BaseModel):
    """Published, read-only view of a :class:`~kubequest_sim.session.DebugSession`."""

    current_scenario: DebugScenario | None = None
    cluster_state: ClusterState
    simulation_status: SimulationStatus = SimulationStatus.stopped
    command_history: list[CommandResult] = Field(default_factory=list)
    hints_used: int = 0
    commands_executed: int = 0
    time_elapsed: float = 0.0
    scenario_progress: int = Field(default=0, ge=0, le=100)
    selected_resource: K8sResource | None = None
    screen_start: int = 0
    last_error: str | None = None

    @property
    def visible_history(self) -> list[CommandResult]:
        """History entries still on screen after the last ``clear``."""
        return self.command_history[self.screen_start :]


class StateChange(BaseModel):
    """A published :class:`RunnerState` snapshot tagged with the transition that produced it."""

    timestamp: datetime
    event: str
    snapshot: RunnerState


__all__ = [
    "ClusterState",
    "CommandResult",
    "ConditionType",
    "ContainerState",
    "ContainerStatus",
    "DebugScenario",
    "Difficulty",
    "EventType",
    "FaultInjection",
    "Hint",
    "InvolvedObject",
    "K8sEvent",
    "K8sResource",
    "LastState",
    "LogEntry",
    "LogLevel",
    "NodeCondition",
    "NodeMetrics",
    "NodeState",
    "NodeStatus",
    "NodeTaint",
    "PodState",
    "PodStatus",
    "ResourceMetadata",
    "ResourceRequirements",
    "RunnerState",
    "SimulationStatus",
    "StateChange",
    "SuccessCondition",
    "SuccessCriteria",
    "TaintEffect",
    "UsageMetric",
]

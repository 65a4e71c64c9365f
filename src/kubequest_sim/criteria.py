"""Success-criteria evaluation and simulated remediation.

Each :class:`~kubequest_sim.models.ConditionType` has a checker that
decides whether the condition holds against a cluster, and a resolver
that edits a cluster so that it does.  Resolvers back the "fix" commands a
learner types: the command interpreter only prints text, and the session
calls :func:`remediate` to make the fix take effect.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from pydantic import BaseModel, Field

from kubequest_sim.cluster import ClusterModel, make_data_resource, make_service
from kubequest_sim.models import (
    ClusterState,
    ConditionType,
    ContainerStatus,
    DebugScenario,
    EventType,
    InvolvedObject,
    K8sEvent,
    NodeStatus,
    PodState,
    PodStatus,
    SuccessCondition,
    SuccessCriteria,
)


class ConditionResult(BaseModel):
    condition: SuccessCondition
    satisfied: bool
    detail: str = ""


class CriteriaReport(BaseModel):
    """Outcome of checking every condition of a scenario."""

    satisfied: bool
    results: list[ConditionResult] = Field(default_factory=list)

    @property
    def failing(self) -> list[ConditionResult]:
        return [result for result in self.results if not result.satisfied]


Checker = Callable[[ClusterModel, SuccessCondition], tuple[bool, str]]
Resolver = Callable[[ClusterModel, SuccessCondition, datetime], str]

_CHECKERS: dict[ConditionType, Checker] = {}
_RESOLVERS: dict[ConditionType, Resolver] = {}


def _checks(condition_type: ConditionType) -> Callable[[Checker], Checker]:
    def decorator(func: Checker) -> Checker:
        _CHECKERS[condition_type] = func
        return func

    return decorator


def _resolves(condition_type: ConditionType) -> Callable[[Resolver], Resolver]:
    def decorator(func: Resolver) -> Resolver:
        _RESOLVERS[condition_type] = func
        return func

    return decorator


def _split_ref(target: str) -> tuple[str, str]:
    kind, _, name = target.partition("/")
    if not name:
        raise ValueError(f"Expected '<kind>/<name>', got {target!r}")
    return kind.lower(), name


def _pod_ready(pod: PodState) -> bool:
    return (
        pod.status == PodStatus.running
        and bool(pod.containers)
        and all(container.ready for container in pod.containers)
    )


def _first_ready_worker(model: ClusterModel) -> str | None:
    for node in model.state.nodes:
        if node.status == NodeStatus.ready and "control-plane" not in node.roles:
            return node.name
    return None


# ---------------------------------------------------------------------------
# Checkers
# ---------------------------------------------------------------------------


@_checks(ConditionType.pod_status)
def _check_pod_status(model: ClusterModel, condition: SuccessCondition) -> tuple[bool, str]:
    pods = model.pods_matching(condition.target)
    if not pods:
        return False, f"no pods match {condition.target}"
    wrong = [pod.name for pod in pods if pod.status != condition.expected]
    if wrong:
        return False, f"not {condition.expected}: {', '.join(wrong)}"
    return True, f"{len(pods)} pod(s) {condition.expected}"


@_checks(ConditionType.pod_ready)
def _check_pod_ready(model: ClusterModel, condition: SuccessCondition) -> tuple[bool, str]:
    pods = model.pods_matching(condition.target)
    if not pods:
        return False, f"no pods match {condition.target}"
    wrong = [pod.name for pod in pods if not _pod_ready(pod)]
    if wrong:
        return False, f"not ready: {', '.join(wrong)}"
    return True, f"{len(pods)} pod(s) ready"


@_checks(ConditionType.pod_scheduled)
def _check_pod_scheduled(model: ClusterModel, condition: SuccessCondition) -> tuple[bool, str]:
    pods = model.pods_matching(condition.target)
    if not pods:
        return False, f"no pods match {condition.target}"
    wrong = [pod.name for pod in pods if pod.node is None or pod.status == PodStatus.pending]
    if wrong:
        return False, f"unscheduled: {', '.join(wrong)}"
    return True, f"{len(pods)} pod(s) scheduled"


@_checks(ConditionType.node_ready)
def _check_node_ready(model: ClusterModel, condition: SuccessCondition) -> tuple[bool, str]:
    nodes = model.nodes_matching(condition.target)
    if not nodes:
        return False, f"no nodes match {condition.target}"
    wrong = [node.name for node in nodes if node.status != NodeStatus.ready]
    if wrong:
        return False, f"not Ready: {', '.join(wrong)}"
    return True, f"{len(nodes)} node(s) Ready"


@_checks(ConditionType.node_condition)
def _check_node_condition(model: ClusterModel, condition: SuccessCondition) -> tuple[bool, str]:
    affected = [
        node.name
        for node in model.nodes_matching(condition.target)
        for node_condition in node.conditions
        if node_condition.type == condition.expected and node_condition.status == "True"
    ]
    if affected:
        return False, f"{condition.expected} on {', '.join(affected)}"
    return True, f"no {condition.expected}"


def ready_endpoints(model: ClusterModel, service_name: str, namespace: str | None = None) -> list[PodState]:
    """Return the ready pods selected by a service."""
    service = model.find_resource("service", service_name, namespace)
    if service is None:
        return []
    selector = service.spec.get("selector") or {}
    return [
        pod
        for pod in model.pods_selected_by(selector, service.metadata.namespace)
        if _pod_ready(pod)
    ]


@_checks(ConditionType.service_connectivity)
def _check_service(model: ClusterModel, condition: SuccessCondition) -> tuple[bool, str]:
    if model.find_resource("service", condition.target) is None:
        return False, f"service {condition.target} not found"
    endpoints = ready_endpoints(model, condition.target)
    if not endpoints:
        return False, f"service {condition.target} has no ready endpoints"
    return True, f"{len(endpoints)} endpoint(s)"


@_checks(ConditionType.loadbalancer_provisioned)
def _check_loadbalancer(model: ClusterModel, condition: SuccessCondition) -> tuple[bool, str]:
    service = model.find_resource("service", condition.target)
    if service is None:
        return False, f"service {condition.target} not found"
    ingress = service.status.get("loadBalancer", {}).get("ingress") or []
    if not ingress:
        return False, "external IP pending"
    return True, f"external IP {ingress[0].get('ip')}"


@_checks(ConditionType.deployment_available)
def _check_deployment(model: ClusterModel, condition: SuccessCondition) -> tuple[bool, str]:
    deployment = model.find_resource("deployment", condition.target)
    if deployment is None:
        return False, f"deployment {condition.target} not found"
    desired = deployment.spec.get("replicas", 1)
    available = deployment.status.get("availableReplicas", 0)
    return available >= desired, f"{available}/{desired} available"


@_checks(ConditionType.resource_exists)
def _check_exists(model: ClusterModel, condition: SuccessCondition) -> tuple[bool, str]:
    kind, name = _split_ref(condition.target)
    found = model.find_resource(kind, name, condition.expected)
    return found is not None, f"{condition.target} {'exists' if found else 'missing'}"


@_checks(ConditionType.resource_absent)
def _check_absent(model: ClusterModel, condition: SuccessCondition) -> tuple[bool, str]:
    kind, name = _split_ref(condition.target)
    if kind == "pod":
        found = model.find_pod(name, condition.expected) is not None
    else:
        found = model.find_resource(kind, name, condition.expected) is not None
    return not found, f"{condition.target} {'still present' if found else 'gone'}"


def check(state: ClusterState, condition: SuccessCondition) -> ConditionResult:
    satisfied, detail = _CHECKERS[condition.type](ClusterModel(state), condition)
    return ConditionResult(condition=condition, satisfied=satisfied, detail=detail)


def evaluate(state: ClusterState, criteria: SuccessCriteria) -> CriteriaReport:
    """Check every condition in *criteria* against *state*.

    An empty condition list is never satisfied, so a scenario cannot
    complete without a declared goal.
    """
    results = [check(state, condition) for condition in criteria.conditions]
    return CriteriaReport(
        satisfied=bool(results) and all(result.satisfied for result in results),
        results=results,
    )


# ---------------------------------------------------------------------------
# Resolvers
# ---------------------------------------------------------------------------


def _start_pod(model: ClusterModel, pod: PodState, now: datetime) -> None:
    if pod.node is None:
        pod.node = _first_ready_worker(model)
    for init in pod.init_containers:
        init.status = ContainerStatus.terminated
        init.state_reason = "Completed"
        init.ready = True
    model.apply_pod_status(pod.id, PodStatus.running)
    pod.last_restart = now


@_resolves(ConditionType.pod_status)
def _resolve_pod_status(model: ClusterModel, condition: SuccessCondition, now: datetime) -> str:
    expected = PodStatus(condition.expected)
    for pod in model.pods_matching(condition.target):
        if expected == PodStatus.running:
            _start_pod(model, pod, now)
            continue
        pod.status = expected
        if expected == PodStatus.succeeded:
            for container in pod.containers:
                container.status = ContainerStatus.terminated
                container.state_reason = "Completed"
                container.ready = False
    return "Started"


@_resolves(ConditionType.pod_ready)
def _resolve_pod_ready(model: ClusterModel, condition: SuccessCondition, now: datetime) -> str:
    for pod in model.pods_matching(condition.target):
        _start_pod(model, pod, now)
    return "Ready"


@_resolves(ConditionType.pod_scheduled)
def _resolve_pod_scheduled(model: ClusterModel, condition: SuccessCondition, now: datetime) -> str:
    for pod in model.pods_matching(condition.target):
        if pod.node is None or pod.status == PodStatus.pending:
            _start_pod(model, pod, now)
    return "Scheduled"


@_resolves(ConditionType.node_ready)
def _resolve_node_ready(model: ClusterModel, condition: SuccessCondition, now: datetime) -> str:
    for node in model.nodes_matching(condition.target):
        model.apply_node_status(node.id, NodeStatus.ready)
        for node_condition in node.conditions:
            if node_condition.type == "Ready":
                node_condition.reason = "KubeletReady"
                node_condition.message = "kubelet is posting ready status"
                node_condition.last_transition_time = now
    return "NodeReady"


@_resolves(ConditionType.node_condition)
def _resolve_node_condition(model: ClusterModel, condition: SuccessCondition, now: datetime) -> str:
    for node in model.nodes_matching(condition.target):
        for node_condition in node.conditions:
            if node_condition.type == condition.expected and node_condition.status == "True":
                node_condition.status = "False"
                node_condition.reason = f"No{condition.expected}"
                node_condition.message = f"{condition.expected} cleared"
                node_condition.last_transition_time = now
    return f"NodeHasNo{condition.expected}"


@_resolves(ConditionType.service_connectivity)
def _resolve_service(model: ClusterModel, condition: SuccessCondition, now: datetime) -> str:
    service = model.find_resource("service", condition.target)
    if service is None:
        return "ServiceMissing"
    if isinstance(condition.expected, dict):
        service.spec["selector"] = dict(condition.expected)
    for pod in model.pods_selected_by(service.spec.get("selector") or {}, service.metadata.namespace):
        if not _pod_ready(pod):
            _start_pod(model, pod, now)
    return "EndpointsUpdated"


@_resolves(ConditionType.loadbalancer_provisioned)
def _resolve_loadbalancer(model: ClusterModel, condition: SuccessCondition, now: datetime) -> str:
    service = model.find_resource("service", condition.target)
    if service is not None:
        address = condition.expected or "203.0.113.10"
        service.status["loadBalancer"] = {"ingress": [{"ip": address}]}
    return "EnsuredLoadBalancer"


@_resolves(ConditionType.deployment_available)
def _resolve_deployment(model: ClusterModel, condition: SuccessCondition, now: datetime) -> str:
    deployment = model.find_resource("deployment", condition.target)
    if deployment is not None:
        desired = deployment.spec.get("replicas", 1)
        deployment.status.update(
            replicas=desired,
            updatedReplicas=desired,
            readyReplicas=desired,
            availableReplicas=desired,
        )
    return "ScalingReplicaSet"


@_resolves(ConditionType.resource_exists)
def _resolve_exists(model: ClusterModel, condition: SuccessCondition, now: datetime) -> str:
    kind, name = _split_ref(condition.target)
    namespace = condition.expected or "default"
    if model.find_resource(kind, name, namespace) is not None:
        return "Exists"
    if kind == "service":
        resource = make_service(
            name, namespace, "None", [{"port": 3306, "protocol": "TCP", "targetPort": 3306}],
            now, selector={"app": name}, age_seconds=0,
        )
    elif kind == "secret":
        resource = make_data_resource("Secret", name, namespace, {}, now, secret_type="Opaque",
                                      age_seconds=0)
    else:
        resource = make_data_resource("ConfigMap", name, namespace, {}, now, age_seconds=0)
    model.add_resource(resource)
    return "Created"


@_resolves(ConditionType.resource_absent)
def _resolve_absent(model: ClusterModel, condition: SuccessCondition, now: datetime) -> str:
    kind, name = _split_ref(condition.target)
    if kind == "pod":
        model.remove_pod(name, condition.expected)
    else:
        model.remove_resource(kind, name, condition.expected)
    return "Deleted"


def remediate(
    state: ClusterState,
    scenario: DebugScenario,
    now: datetime | None = None,
) -> ClusterState:
    """Return a copy of *state* with every condition of *scenario* resolved.

    One ``Normal`` event is appended per resolved condition.  Conditions
    that already hold are left alone.
    """
    now = now or datetime.now(tz=UTC)
    model = ClusterModel(state.model_copy(deep=True))
    for condition in scenario.success_criteria.conditions:
        if check(model.state, condition).satisfied:
            continue
        reason = _RESOLVERS[condition.type](model, condition, now)
        model.append_event(
            K8sEvent(
                id=model.next_event_id(),
                type=EventType.normal,
                reason=reason,
                message=f"{condition.type.value} {condition.target} resolved",
                source="kubequest-sim",
                first_time=now,
                last_time=now,
                involved_object=_involved(condition),
            )
        )
    return model.state


def _involved(condition: SuccessCondition) -> InvolvedObject:
    kinds = {
        ConditionType.pod_status: "Pod",
        ConditionType.pod_ready: "Pod",
        ConditionType.pod_scheduled: "Pod",
        ConditionType.node_ready: "Node",
        ConditionType.node_condition: "Node",
        ConditionType.service_connectivity: "Service",
        ConditionType.loadbalancer_provisioned: "Service",
        ConditionType.deployment_available: "Deployment",
    }
    if condition.type in kinds:
        return InvolvedObject(kind=kinds[condition.type], name=condition.target)
    kind, name = _split_ref(condition.target)
    return InvolvedObject(kind=kind.capitalize(), name=name, namespace=condition.expected)


__all__ = [
    "ConditionResult",
    "CriteriaReport",
    "check",
    "evaluate",
    "ready_endpoints",
    "remediate",
]

"""Scenario fault generators.

Every catalog scenario id has exactly one generator here, registered with
:func:`register_fault`.  A generator receives a :class:`FaultContext`
wrapping a private copy of the baseline cluster and mutates it in place:
it flips pod and node statuses, adds the pods a scenario needs, and emits
the events and logs the learner will find while investigating.

Events and logs are emitted oldest first; offsets are seconds before the
context's ``now``.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any, TypeVar

from kubequest_sim.cluster import ClusterModel, make_container, make_deployment, make_pod
from kubequest_sim.models import (
    ContainerStatus,
    DebugScenario,
    EventType,
    InvolvedObject,
    K8sEvent,
    LastState,
    LogEntry,
    LogLevel,
    NodeCondition,
    NodeState,
    NodeStatus,
    NodeTaint,
    PodState,
    PodStatus,
    TaintEffect,
)

FaultGenerator = Callable[["FaultContext"], None]
G = TypeVar("G", bound=FaultGenerator)

_GENERATORS: dict[str, FaultGenerator] = {}


def register_fault(*scenario_ids: str) -> Callable[[G], G]:
    """Register the decorated function as the generator for *scenario_ids*."""

    def decorator(func: G) -> G:
        for scenario_id in scenario_ids:
            if scenario_id in _GENERATORS:
                raise ValueError(f"Fault generator already registered for {scenario_id!r}")
            _GENERATORS[scenario_id] = func
        return func

    return decorator


def get_generator(scenario_id: str) -> FaultGenerator | None:
    return _GENERATORS.get(scenario_id)


def registered_ids() -> list[str]:
    return sorted(_GENERATORS)


# ---------------------------------------------------------------------------
# Generator toolkit
# ---------------------------------------------------------------------------


class FaultContext:
    """Mutation helpers shared by every generator."""

    def __init__(
        self,
        model: ClusterModel,
        now: datetime,
        descriptor: DebugScenario | None = None,
    ) -> None:
        self.model = model
        self.now = now
        self.descriptor = descriptor

    def ago(self, seconds: float) -> datetime:
        return self.now - timedelta(seconds=seconds)

    def pod(self, name: str) -> PodState:
        pod = self.model.find_pod(name)
        if pod is None:
            raise KeyError(f"Baseline cluster has no pod {name!r}")
        return pod

    def node(self, name: str) -> NodeState:
        node = self.model.find_node(name)
        if node is None:
            raise KeyError(f"Baseline cluster has no node {name!r}")
        return node

    # -- records ---------------------------------------------------------

    def event(
        self,
        name: str,
        reason: str,
        message: str,
        *,
        first: float,
        last: float | None = None,
        count: int = 1,
        type: EventType = EventType.warning,
        source: str = "kubelet",
        kind: str = "Pod",
        namespace: str | None = None,
    ) -> None:
        if namespace is None and kind != "Node":
            pod = self.model.find_pod(name) if kind == "Pod" else None
            namespace = pod.namespace if pod is not None else "default"
        self.model.append_event(
            K8sEvent(
                id=self.model.next_event_id(),
                type=type,
                reason=reason,
                message=message,
                source=source,
                first_time=self.ago(first),
                last_time=self.ago(first if last is None else last),
                count=count,
                involved_object=InvolvedObject(kind=kind, name=name, namespace=namespace),
            )
        )

    def log(
        self,
        source: str,
        level: LogLevel,
        message: str,
        *,
        ago: float,
        container: str | None = None,
    ) -> None:
        if container is None:
            pod = self.model.find_pod(source)
            if pod is not None and pod.containers:
                container = pod.containers[0].name
        self.model.append_log(
            LogEntry(
                id=self.model.next_log_id(),
                timestamp=self.ago(ago),
                level=level,
                message=message,
                source=source,
                container=container,
            )
        )

    # -- pod faults ------------------------------------------------------

    def crash_loop(
        self,
        name: str,
        restarts: int = 5,
        reason: str = "Error",
        exit_code: int = 1,
    ) -> PodState:
        pod = self.pod(name)
        pod.status = PodStatus.crash_loop_back_off
        pod.restart_count = max(pod.restart_count, restarts)
        pod.last_restart = self.ago(10)
        for container in pod.containers[:1]:
            container.status = ContainerStatus.waiting
            container.state_reason = PodStatus.crash_loop_back_off.value
            container.ready = False
            container.restart_count = max(container.restart_count, restarts)
            container.last_state = LastState(reason=reason, exit_code=exit_code)
        return pod

    def image_pull_failure(self, name: str, image: str) -> PodState:
        pod = self.pod(name)
        pod.status = PodStatus.image_pull_back_off
        container = pod.containers[0]
        container.image = image
        container.status = ContainerStatus.waiting
        container.state_reason = PodStatus.image_pull_back_off.value
        container.ready = False
        return pod

    def unschedulable(self, name: str) -> PodState:
        pod = self.pod(name)
        pod.status = PodStatus.pending
        pod.node = None
        pod.ip = None
        for container in pod.containers:
            container.status = ContainerStatus.waiting
            container.state_reason = None
            container.ready = False
        return pod

    def waiting(self, name: str, reason: str) -> PodState:
        """Scheduled pod whose containers cannot be created."""
        pod = self.pod(name)
        pod.status = PodStatus.pending
        for container in pod.containers:
            container.status = ContainerStatus.waiting
            container.state_reason = reason
            container.ready = False
        return pod

    def not_ready(self, name: str, container: str | None = None, restarts: int = 0) -> PodState:
        pod = self.pod(name)
        pod.restart_count = max(pod.restart_count, restarts)
        for state in pod.containers:
            if container is None or state.name == container:
                state.ready = False
                state.restart_count = max(state.restart_count, restarts)
        return pod

    def failed(self, name: str, reason: str, exit_code: int | None = None) -> PodState:
        pod = self.pod(name)
        pod.status = PodStatus.failed
        for container in pod.containers:
            container.status = ContainerStatus.terminated
            container.state_reason = reason
            container.ready = False
            if exit_code is not None:
                container.last_state = LastState(reason=reason, exit_code=exit_code)
        return pod

    def add_pod(
        self,
        name: str,
        namespace: str,
        container: str,
        image: str,
        *,
        node: str | None = "worker-node-1",
        age: int = 600,
        labels: dict[str, str] | None = None,
        ip: str | None = None,
        **resources: Any,
    ) -> PodState:
        self.model.ensure_namespace(namespace)
        pod = make_pod(
            name,
            namespace,
            [make_container(container, image, **resources)],
            self.now,
            node=node,
            age_seconds=age,
            labels=labels,
            ip=ip,
        )
        self.model.add_pod(pod)
        return pod

    # -- node faults -----------------------------------------------------

    def node_condition(
        self,
        node_name: str,
        condition_type: str,
        reason: str,
        message: str,
        status: str = "True",
    ) -> NodeState:
        node = self.node(node_name)
        for condition in node.conditions:
            if condition.type == condition_type:
                condition.status = status
                condition.reason = reason
                condition.message = message
                condition.last_transition_time = self.ago(120)
                return node
        node.conditions.append(
            NodeCondition(
                type=condition_type,
                status=status,
                reason=reason,
                message=message,
                last_transition_time=self.ago(120),
            )
        )
        return node


# ---------------------------------------------------------------------------
# Pod-level scenarios
# ---------------------------------------------------------------------------


@register_fault("crashloop-1")
def _crashloop(ctx: FaultContext) -> None:
    pod = "nginx-deployment-abc123"
    ctx.crash_loop(pod, restarts=5)
    ctx.event(pod, "Failed", "Error: missing environment variable DATABASE_URL",
              first=30, last=10, count=3)
    ctx.event(pod, "BackOff", f"Back-off restarting failed container nginx in pod {pod}",
              first=25, last=5, count=5)
    ctx.event(pod, "FailedMount",
              "Unable to attach or mount volumes: unmounted volumes=[config], "
              "unattached volumes=[config default-token]", first=20)
    ctx.event(pod, "Pulling", 'Pulling image "nginx:1.21"', first=15, type=EventType.normal)
    ctx.event(pod, "Unhealthy", "Liveness probe failed: container not responding",
              first=10, last=2, count=2)
    ctx.log(pod, LogLevel.info, "Starting nginx server...", ago=30)
    ctx.log(pod, LogLevel.error, "panic: missing environment variable DATABASE_URL", ago=25)
    ctx.log(pod, LogLevel.error, "Failed to initialize application", ago=20)
    ctx.log(pod, LogLevel.error, "Container exiting with code 1", ago=15)
    ctx.log(pod, LogLevel.warn, "Restarting container due to failure", ago=10)


@register_fault("imagepull-1")
def _imagepull(ctx: FaultContext) -> None:
    pod = "frontend-deployment-ghi789"
    image = "private-registry.com/myapp:latest"
    ctx.image_pull_failure(pod, image)
    ctx.event(pod, "Scheduled", f"Successfully assigned default/{pod} to worker-node-3",
              first=30, type=EventType.normal, source="default-scheduler")
    ctx.event(pod, "Pulling", f'Pulling image "{image}"', first=25, type=EventType.normal)
    ctx.event(pod, "Failed",
              f'Failed to pull image "{image}": rpc error: code = Unknown desc = '
              "Error response from daemon: pull access denied",
              first=20, last=5, count=4)
    ctx.event(pod, "Failed", "Error: ImagePullBackOff", first=15, last=3, count=3)
    ctx.event(pod, "BackOff", f'Back-off pulling image "{image}"', first=10, last=1, count=2)
    ctx.log(pod, LogLevel.info, f"Attempting to pull image: {image}", ago=30)
    ctx.log(pod, LogLevel.error,
            f'Failed to pull image "{image}": rpc error: code = Unknown desc = '
            "Error response from daemon: pull access denied", ago=25)
    ctx.log(pod, LogLevel.error, "Error: ImagePullBackOff", ago=20)
    ctx.log(pod, LogLevel.warn, f'Back-off pulling image "{image}"', ago=15)


@register_fault("pod-pending-1")
def _pod_pending(ctx: FaultContext) -> None:
    pod = "frontend-deployment-ghi789"
    ctx.unschedulable(pod)
    ctx.pod(pod).containers[0].resources.requests["cpu"] = "16"
    ctx.event(pod, "FailedScheduling", "0/4 nodes are available: 3 Insufficient cpu",
              first=30, last=10, count=8, source="default-scheduler")
    ctx.event(pod, "FailedScheduling",
              "0/4 nodes are available: 1 node(s) had untolerated taint "
              "{node-role.kubernetes.io/control-plane: }, 3 Insufficient cpu",
              first=25, last=15, count=5, source="default-scheduler")
    ctx.event(pod, "NotTriggerScaleUp",
              "pod didn't trigger scale-up: 1 max node group size reached",
              first=20, type=EventType.normal, source="cluster-autoscaler")
    ctx.log(pod, LogLevel.warn, "Insufficient CPU resources on node", ago=25)
    ctx.log(pod, LogLevel.error, "Failed to schedule pod: Insufficient cpu", ago=20)
    ctx.log(pod, LogLevel.info, "Waiting for node resources to become available", ago=15)


@register_fault("liveness-probe-failure-1")
def _liveness_probe(ctx: FaultContext) -> None:
    pod = "web-app-xyz123"
    ctx.not_ready(pod, restarts=8)
    ctx.pod(pod).containers[0].last_state = LastState(reason="Error", exit_code=137)
    ctx.event(pod, "Unhealthy",
              "Liveness probe failed: Get \"http://10.244.3.10:8080/healthz\": "
              "context deadline exceeded (Client.Timeout exceeded while awaiting headers)",
              first=40, last=4, count=24)
    ctx.event(pod, "Killing", "Container web failed liveness probe, will be restarted",
              first=35, last=5, count=8, type=EventType.normal)
    ctx.event(pod, "BackOff", f"Back-off restarting failed container web in pod {pod}",
              first=20, last=3, count=4)
    ctx.log(pod, LogLevel.info, "Warming caches, this can take up to 45s", ago=40)
    ctx.log(pod, LogLevel.warn, "GET /healthz took 3.2s", ago=30)
    ctx.log(pod, LogLevel.info, "Received SIGTERM, shutting down", ago=25)


@register_fault("oom-killer-1")
def _oom_killer(ctx: FaultContext) -> None:
    pod = "redis-cache-abc789"
    ctx.crash_loop(pod, restarts=6, reason="OOMKilled", exit_code=137)
    ctx.event(pod, "OOMKilling",
              "Memory cgroup out of memory: Killed process 4182 (redis-server) "
              "total-vm:1048576kB, anon-rss:524288kB",
              first=40, last=8, count=6, source="kernel-monitor")
    ctx.event(pod, "BackOff", f"Back-off restarting failed container redis in pod {pod}",
              first=30, last=4, count=6)
    ctx.log(pod, LogLevel.info, "Ready to accept connections tcp", ago=45)
    ctx.log(pod, LogLevel.warn, "used_memory_human:498.11M maxmemory not set", ago=35)
    ctx.log(pod, LogLevel.error, "Can't save in background: fork: Cannot allocate memory", ago=25)


# ---------------------------------------------------------------------------
# Networking
# ---------------------------------------------------------------------------


@register_fault("service-unreachable-1")
def _service_unreachable(ctx: FaultContext) -> None:
    service = ctx.model.find_resource("service", "backend-service", "default")
    service.spec["selector"] = {"app": "backend-v2"}
    pod = "backend-service-def456"
    ctx.event("backend-service", "NoEndpoints", "No endpoints available for service backend-service",
              first=20, last=3, count=6, kind="Service", source="endpoint-controller")
    ctx.event("backend-service", "FailedToUpdateEndpoint",
              "Failed to update endpoint default/backend-service: selector app=backend-v2 "
              "matches no pods", first=15, last=8, count=2, kind="Endpoints",
              source="endpoint-controller")
    ctx.log(pod, LogLevel.info, "Service backend-service started successfully", ago=30)
    ctx.log(pod, LogLevel.error, "Connection refused: No endpoints available for service", ago=25)
    ctx.log(pod, LogLevel.warn, "Service selector does not match any pods", ago=20)
    ctx.log(pod, LogLevel.error, "Health check failed: service unreachable", ago=15)


@register_fault("readiness-probe-1")
def _readiness_probe(ctx: FaultContext) -> None:
    pod = "web-app-xyz123"
    ctx.not_ready(pod)
    ctx.event(pod, "Scheduled", f"Successfully assigned default/{pod} to worker-node-3",
              first=30, type=EventType.normal, source="default-scheduler")
    ctx.event(pod, "Started", "Started container web", first=18, type=EventType.normal)
    ctx.event(pod, "Unhealthy", "Readiness probe failed: HTTP probe failed with statuscode: 404",
              first=15, last=2, count=7)
    ctx.log(pod, LogLevel.info, "Application started successfully", ago=30)
    ctx.log(pod, LogLevel.warn, "Readiness probe failed: HTTP probe failed with statuscode: 404", ago=25)
    ctx.log(pod, LogLevel.error, "GET /wrong-health returned 404 Not Found", ago=20)
    ctx.log(pod, LogLevel.info, "Correct health endpoint is /health, not /wrong-health", ago=15)


@register_fault("dns-failure-1")
def _dns_failure(ctx: FaultContext) -> None:
    for name in ("coredns-558bd4d5db-abc12", "coredns-558bd4d5db-def34"):
        ctx.crash_loop(name, restarts=4)
    app = "app-pod-abc123"
    ctx.event("coredns-558bd4d5db-abc12", "BackOff",
              "Back-off restarting failed container coredns", first=30, last=6, count=4)
    ctx.event(app, "DNSConfigForming",
              "Search Line limits were exceeded, some search paths have been omitted",
              first=20)
    ctx.event(app, "FailedDNSResolution",
              "DNS resolution failed for database-service.default.svc.cluster.local: no such host",
              first=15, last=3, count=5)
    ctx.log(app, LogLevel.info, "Attempting to connect to database service", ago=30)
    ctx.log(app, LogLevel.error,
            'DNS resolution failed: no such host "database-service.default.svc.cluster.local"', ago=25)
    ctx.log("coredns-558bd4d5db-abc12", LogLevel.error,
            "plugin/forward: no nameservers found", ago=20)
    ctx.log(app, LogLevel.warn, "Falling back to external DNS resolver", ago=15)


@register_fault("coredns-config-error-1")
def _coredns_config(ctx: FaultContext) -> None:
    for name in ("coredns-558bd4d5db-abc12", "coredns-558bd4d5db-def34"):
        ctx.crash_loop(name, restarts=3)
    corefile = ctx.model.find_resource("configmap", "coredns", "kube-system")
    corefile.spec["data"]["Corefile"] = ".:53 {\n    forwrd . /etc/resolv.conf\n    cache 30\n}"
    ctx.event("coredns-558bd4d5db-abc12", "BackOff",
              "Back-off restarting failed container coredns", first=30, last=5, count=3)
    ctx.log("coredns-558bd4d5db-abc12", LogLevel.error,
            "/etc/coredns/Corefile:2 - Error during parsing: Unknown directive 'forwrd'", ago=28)
    ctx.log("coredns-558bd4d5db-def34", LogLevel.error,
            "/etc/coredns/Corefile:2 - Error during parsing: Unknown directive 'forwrd'", ago=27)


@register_fault("ingress-404-1")
def _ingress_404(ctx: FaultContext) -> None:
    service = ctx.model.find_resource("service", "frontend-lb", "default")
    service.spec["selector"] = {"app": "frontend-web"}
    controller = "ingress-nginx-controller-abc123"
    ctx.event("frontend-lb", "NoEndpoints", "No endpoints available for service frontend-lb",
              first=25, last=4, count=9, kind="Service", source="endpoint-controller")
    ctx.log(controller, LogLevel.warn,
            'Service "default/frontend-lb" does not have any active Endpoint', ago=25)
    ctx.log(controller, LogLevel.error,
            '"GET / HTTP/1.1" 503 190 upstream: default-frontend-lb-80', ago=12)


@register_fault("network-policy-1")
def _network_policy(ctx: FaultContext) -> None:
    pod = "frontend-deployment-ghi789"
    ctx.not_ready(pod)
    ctx.event(pod, "Unhealthy",
              'Readiness probe failed: Get "http://backend-service:8080/ready": '
              "dial tcp 10.96.1.101:8080: i/o timeout", first=30, last=3, count=10)
    ctx.log(pod, LogLevel.error, "upstream backend-service:8080 timed out after 5000ms", ago=20)
    ctx.log(pod, LogLevel.warn, "NetworkPolicy default-deny-all applies to namespace default", ago=15)


@register_fault("multiple-ingress-conflict-1")
def _ingress_conflict(ctx: FaultContext) -> None:
    controller = "ingress-nginx-controller-abc123"
    ctx.not_ready(controller)
    ctx.add_pod("traefik-7d9f8c6b5-k2m4n", "traefik", "traefik", "traefik:v2.10",
                node="worker-node-2", age=1800, labels={"app": "traefik"}, ip="10.244.2.30",
                port=80)
    ctx.event(controller, "Sync", "Ingress default/web-ingress claimed by another controller",
              first=30, last=5, count=6, source="nginx-ingress-controller")
    ctx.log(controller, LogLevel.warn,
            "ignoring ingress web-ingress: ingress class annotation is not equal to nginx", ago=25)
    ctx.log("traefik-7d9f8c6b5-k2m4n", LogLevel.info,
            "Creating router default-web-ingress for Ingress without ingressClassName", ago=20)


@register_fault("sidecar-injection-1")
def _sidecar_injection(ctx: FaultContext) -> None:
    pod = ctx.add_pod("payments-api-6b7d9", "default", "payments", "myapp/payments:v3.0.1",
                      node="worker-node-2", age=900, labels={"app": "payments"},
                      ip="10.244.2.40", port=8443)
    proxy = make_container("istio-proxy", "docker.io/istio/proxyv2:1.19.3",
                           requests=("10m", "40Mi"), limits=("2000m", "1Gi"), port=15090)
    proxy.ready = False
    proxy.restart_count = 3
    pod.containers.append(proxy)
    ctx.event(pod.name, "Unhealthy",
              "Readiness probe failed: Get \"http://10.244.2.40:15021/healthz/ready\": "
              "connection refused", first=30, last=4, count=12)
    ctx.log(pod.name, LogLevel.error,
            "warning envoy config gRPC config stream closed: 14, connection error: "
            "desc = \"transport: Error while dialing dial tcp: lookup istiod.istio-system.svc\"",
            ago=25, container="istio-proxy")
    ctx.log(pod.name, LogLevel.warn, "Envoy proxy is NOT ready: config not received from XDS server",
            ago=15, container="istio-proxy")


# ---------------------------------------------------------------------------
# Scheduling and nodes
# ---------------------------------------------------------------------------


@register_fault("node-resources-1")
def _node_resources(ctx: FaultContext) -> None:
    node = ctx.node_condition("worker-node-2", "MemoryPressure", "KubeletHasInsufficientMemory",
                              "kubelet has insufficient memory available")
    node.metrics.memory.usage = 97
    pod = "redis-cache-abc789"
    ctx.failed(pod, "Evicted")
    ctx.event("worker-node-2", "EvictionThresholdMet",
              "Attempting to reclaim memory", first=40, last=10, count=3,
              kind="Node", source="kubelet")
    ctx.event(pod, "Evicted",
              "The node was low on resource: memory. Container redis was using 498Mi, "
              "which exceeds its request of 256Mi.", first=30, source="kubelet")


@register_fault("taints-tolerations-1")
def _taints(ctx: FaultContext) -> None:
    for name in ("worker-node-1", "worker-node-2", "worker-node-3"):
        ctx.node(name).taints.append(
            NodeTaint(key="special", value="true", effect=TaintEffect.no_schedule)
        )
    pod = ctx.add_pod("special-workload-7f9c2", "default", "special", "myapp/special:v1.0.0",
                      node=None, age=300, labels={"app": "special"})
    pod.status = PodStatus.pending
    pod.containers[0].status = ContainerStatus.waiting
    pod.containers[0].ready = False
    ctx.event(pod.name, "FailedScheduling",
              "0/4 nodes are available: 1 node(s) had untolerated taint "
              "{node-role.kubernetes.io/control-plane: }, 3 node(s) had untolerated taint "
              "{special: true}. preemption: 0/4 nodes are available",
              first=240, last=15, count=12, source="default-scheduler")


@register_fault("hostport-conflict-1")
def _hostport(ctx: FaultContext) -> None:
    pod = ctx.add_pod("monitoring-agent-5d8f9", "monitoring", "agent", "myapp/monitoring-agent:v0.9.2",
                      node=None, age=420, labels={"app": "monitoring-agent"}, port=9090)
    pod.status = PodStatus.pending
    pod.containers[0].status = ContainerStatus.waiting
    pod.containers[0].ready = False
    ctx.event(pod.name, "FailedScheduling",
              "0/4 nodes are available: 1 node(s) didn't have free ports for the requested "
              "pod ports, 3 node(s) didn't match pod anti-affinity rules",
              first=400, last=20, count=15, source="default-scheduler")


@register_fault("time-sync-1")
def _time_sync(ctx: FaultContext) -> None:
    ctx.node_condition("worker-node-3", "ClockSkewDetected", "NTPUnsynchronized",
                       "node clock is 5m12s ahead of the control plane")
    pod = "frontend-deployment-ghi789"
    ctx.event("worker-node-3", "ClockSkew", "chronyd: no selectable sources, clock drift 312s",
              first=60, last=10, count=5, kind="Node", source="node-problem-detector")
    ctx.log(pod, LogLevel.error, "JWT validation failed: token used before issued (iat in future)", ago=30)
    ctx.log(pod, LogLevel.warn, "Log timestamps out of order relative to backend-service", ago=20)


@register_fault("kubelet-resource-leak-1")
def _kubelet_leak(ctx: FaultContext) -> None:
    ctx.model.apply_node_status("worker-node-1", NodeStatus.not_ready)
    node = ctx.node("worker-node-1")
    node.metrics.memory.usage = 94
    for condition in node.conditions:
        if condition.type == "Ready":
            condition.reason = "KubeletNotReady"
            condition.message = "PLEG is not healthy: pleg was last seen active 3m52s ago"
    ctx.event("worker-node-1", "NodeNotReady", "Node worker-node-1 status is now: NodeNotReady",
              first=60, kind="Node", source="node-controller")
    ctx.event("worker-node-1", "SystemOOM", "System OOM encountered, victim process: kubelet",
              first=45, last=15, count=2, kind="Node")


@register_fault("node-disk-pressure-1")
def _disk_pressure(ctx: FaultContext) -> None:
    node = ctx.node_condition("worker-node-3", "DiskPressure", "KubeletHasDiskPressure",
                              "kubelet has disk pressure")
    node.metrics.disk.usage = 92
    pod = "grafana-dashboard-def456"
    ctx.failed(pod, "Evicted")
    ctx.event("worker-node-3", "FreeDiskSpaceFailed",
              "failed to garbage collect required amount of images. Wanted to free 9.8Gi, "
              "but freed 1.2Gi", first=50, last=12, count=4, kind="Node")
    ctx.event(pod, "Evicted", "The node was low on resource: ephemeral-storage.",
              first=30, namespace="monitoring")


@register_fault("daemonset-not-running-1")
def _daemonset(ctx: FaultContext) -> None:
    ctx.node("worker-node-3").taints.append(
        NodeTaint(key="dedicated", value="gpu", effect=TaintEffect.no_schedule)
    )
    pod = "node-exporter-worker-3"
    ctx.unschedulable(pod)
    ctx.event(pod, "FailedScheduling",
              "0/4 nodes are available: 1 node(s) had untolerated taint {dedicated: gpu}, "
              "3 node(s) didn't match Pod's node affinity/selector",
              first=90, last=10, count=7, source="default-scheduler")


# ---------------------------------------------------------------------------
# Storage, secrets and config
# ---------------------------------------------------------------------------


@register_fault("pvc-pending-1")
def _pvc_pending(ctx: FaultContext) -> None:
    pod = "database-postgres-xyz123"
    ctx.unschedulable(pod)
    ctx.event(pod, "FailedScheduling",
              "0/4 nodes are available: pod has unbound immediate PersistentVolumeClaims",
              first=60, last=8, count=9, source="default-scheduler")
    ctx.event("database-pvc", "ProvisioningFailed",
              'storageclass.storage.k8s.io "fast-ssd" not found', first=55, last=10, count=6,
              kind="PersistentVolumeClaim", source="persistentvolume-controller")


@register_fault("volume-permissions-1")
def _volume_permissions(ctx: FaultContext) -> None:
    pod = "app-pod-abc123"
    ctx.crash_loop(pod, restarts=4)
    ctx.event(pod, "BackOff", f"Back-off restarting failed container app in pod {pod}",
              first=30, last=5, count=4)
    ctx.log(pod, LogLevel.info, "Opening data directory /var/lib/app/data", ago=30)
    ctx.log(pod, LogLevel.error, "open /var/lib/app/data/state.db: permission denied", ago=28)
    ctx.log(pod, LogLevel.error, "Process running as uid 1000, volume owned by root:root 0755", ago=27)


@register_fault("secret-missing-1")
def _secret_missing(ctx: FaultContext) -> None:
    ctx.model.remove_resource("secret", "database-credentials", "default")
    pod = "backend-service-def456"
    ctx.waiting(pod, "CreateContainerConfigError")
    ctx.event(pod, "Failed", 'Error: secret "database-credentials" not found',
              first=40, last=5, count=7)


@register_fault("configmap-not-propagating-1")
def _configmap_stale(ctx: FaultContext) -> None:
    config = ctx.model.find_resource("configmap", "app-config", "default")
    config.spec["data"]["FEATURE_FLAGS"] = "checkout=off"
    pod = "app-pod-abc123"
    ctx.not_ready(pod)
    ctx.event(pod, "Unhealthy",
              "Readiness probe failed: config checksum mismatch (mounted with subPath)",
              first=30, last=3, count=8)
    ctx.log(pod, LogLevel.info, "Loaded /etc/app/config.yaml FEATURE_FLAGS=checkout=on", ago=40)
    ctx.log(pod, LogLevel.warn, "ConfigMap app-config changed but mounted file is unchanged", ago=20)


@register_fault("volume-stuck-detaching-1")
def _volume_stuck(ctx: FaultContext) -> None:
    pod = "database-postgres-xyz123"
    ctx.unschedulable(pod)
    ctx.event(pod, "FailedAttachVolume",
              'Multi-Attach error for volume "pvc-7f3c1e2a" Volume is already exclusively '
              "attached to one node and can't be attached to another",
              first=80, last=10, count=11, source="attachdetach-controller")
    ctx.log("kube-controller-manager-control-plane-1", LogLevel.error,
            'DetachVolume.Detach failed for volume "pvc-7f3c1e2a": timed out waiting for '
            "volume to detach from worker-node-1", ago=60)


@register_fault("statefulset-misconfigured-1")
def _statefulset(ctx: FaultContext) -> None:
    pod = ctx.add_pod("mysql-0", "default", "mysql", "mysql:8.0", node=None, age=600,
                      labels={"app": "mysql"}, requests=("500m", "1Gi"), limits=("1000m", "2Gi"),
                      port=3306)
    pod.status = PodStatus.pending
    pod.containers[0].status = ContainerStatus.waiting
    pod.containers[0].ready = False
    ctx.event("mysql", "FailedCreate",
              'create Pod mysql-1 in StatefulSet mysql failed: service "mysql" not found',
              first=500, last=30, count=10, kind="StatefulSet", source="statefulset-controller")
    ctx.event(pod.name, "FailedScheduling",
              'persistentvolumeclaim "data-mysql-0" not found', first=480, last=20, count=8,
              source="default-scheduler")


# ---------------------------------------------------------------------------
# Workloads and controllers
# ---------------------------------------------------------------------------


@register_fault("operator-reconcile-1")
def _operator(ctx: FaultContext) -> None:
    pod = ctx.add_pod("custom-operator-7c9d8", "operator-system", "manager",
                      "myorg/custom-operator:v0.4.0", node="worker-node-3", age=3600,
                      labels={"control-plane": "controller-manager"}, ip="10.244.3.50")
    ctx.crash_loop(pod.name, restarts=7)
    ctx.event(pod.name, "BackOff", "Back-off restarting failed container manager",
              first=30, last=6, count=7)
    ctx.log(pod.name, LogLevel.error,
            'no matches for kind "Database" in version "db.myorg.io/v1beta1"', ago=28)
    ctx.log(pod.name, LogLevel.error,
            'databases.db.myorg.io is forbidden: User "system:serviceaccount:operator-system:'
            'controller-manager" cannot list resource "databases"', ago=26)


@register_fault("job-cronjob-fail-1")
def _job_fail(ctx: FaultContext) -> None:
    pod = ctx.add_pod("backup-job-x7k2p", "default", "backup", "myapp/backup:v1.0.0",
                      node="worker-node-2", age=1200, labels={"job-name": "backup-job"},
                      ip="10.244.2.60")
    ctx.failed(pod.name, "Error", exit_code=127)
    ctx.event("backup-job", "BackoffLimitExceeded", "Job has reached the specified backoff limit",
              first=900, kind="Job", source="job-controller")
    ctx.log(pod.name, LogLevel.info, "Starting nightly backup", ago=1100)
    ctx.log(pod.name, LogLevel.error, "/bin/sh: pg_dumpall: not found", ago=1099)


@register_fault("resource-quota-1")
def _resource_quota(ctx: FaultContext) -> None:
    deployment = ctx.model.find_resource("deployment", "frontend-deployment", "default")
    deployment.spec["replicas"] = 3
    deployment.status.update(replicas=1, updatedReplicas=1, readyReplicas=1, availableReplicas=1)
    ctx.event("frontend-deployment-6b8f7c9d4", "FailedCreate",
              'Error creating: pods "frontend-deployment-6b8f7c9d4-x9z2k" is forbidden: '
              "exceeded quota: compute-quota, requested: limits.cpu=800m, used: limits.cpu=7600m, "
              "limited: limits.cpu=8", first=120, last=5, count=14, kind="ReplicaSet",
              source="replicaset-controller")


@register_fault("admission-webhook-1")
def _admission_webhook(ctx: FaultContext) -> None:
    deployment = ctx.model.find_resource("deployment", "nginx-deployment", "default")
    deployment.spec["replicas"] = 2
    deployment.status.update(replicas=1, updatedReplicas=1, readyReplicas=1, availableReplicas=1)
    ctx.event("nginx-deployment-7d5c8b9f6", "FailedCreate",
              'Error creating: admission webhook "validate.security.myorg.io" denied the request: '
              "container nginx must set runAsNonRoot=true", first=90, last=6, count=11,
              kind="ReplicaSet", source="replicaset-controller")


@register_fault("admission-webhook-fail-1")
def _admission_webhook_fail(ctx: FaultContext) -> None:
    deployment = ctx.model.find_resource("deployment", "backend-deployment", "default")
    deployment.status.update(readyReplicas=0, availableReplicas=0, updatedReplicas=0)
    ctx.event("backend-deployment-5f9c7d8b6", "FailedCreate",
              'Internal error occurred: failed calling webhook "policy.webhook.myorg.io": '
              'Post "https://policy-webhook.security.svc:443/validate?timeout=10s": '
              "x509: certificate signed by unknown authority", first=150, last=7, count=9,
              kind="ReplicaSet", source="replicaset-controller")


@register_fault("init-container-timeout-1")
def _init_timeout(ctx: FaultContext) -> None:
    pod = ctx.add_pod("orders-api-8d7f6", "default", "orders", "myapp/orders-api:v2.3.0",
                      node="worker-node-1", age=900, labels={"app": "orders"}, ip="10.244.1.70")
    init = make_container("wait-for-db", "busybox:1.36", requests=("10m", "16Mi"),
                          limits=("50m", "32Mi"))
    init.ready = False
    pod.init_containers.append(init)
    pod.status = PodStatus.pending
    pod.containers[0].status = ContainerStatus.waiting
    pod.containers[0].state_reason = "PodInitializing"
    pod.containers[0].ready = False
    ctx.event(pod.name, "Started", "Started container wait-for-db", first=880, type=EventType.normal)
    ctx.log(pod.name, LogLevel.info, "waiting for orders-db:5432", ago=870, container="wait-for-db")
    ctx.log(pod.name, LogLevel.warn, "nc: bad address 'orders-db'", ago=860, container="wait-for-db")


@register_fault("hpa-not-scaling-1")
def _hpa(ctx: FaultContext) -> None:
    pod = ctx.add_pod("metrics-server-6d94bc8694-x2k9p", "kube-system", "metrics-server",
                      "registry.k8s.io/metrics-server/metrics-server:v0.6.4",
                      node="worker-node-3", age=86400, labels={"k8s-app": "metrics-server"},
                      ip="10.244.3.60", port=4443)
    ctx.not_ready(pod.name)
    ctx.event("web-app", "FailedGetResourceMetric",
              "failed to get cpu utilization: unable to get metrics for resource cpu: "
              "no metrics returned from resource metrics API", first=300, last=15, count=20,
              kind="HorizontalPodAutoscaler", source="horizontal-pod-autoscaler")
    ctx.log(pod.name, LogLevel.error,
            'Failed to scrape node: Get "https://192.168.1.103:10250/metrics/resource": '
            "x509: cannot validate certificate because it doesn't contain any IP SANs", ago=60)


@register_fault("metrics-server-fails-1")
def _metrics_server(ctx: FaultContext) -> None:
    pod = ctx.add_pod("metrics-server-6d94bc8694-x2k9p", "kube-system", "metrics-server",
                      "registry.k8s.io/metrics-server/metrics-server:v0.6.4",
                      node="worker-node-3", age=3600, labels={"k8s-app": "metrics-server"},
                      ip="10.244.3.60", port=4443)
    ctx.crash_loop(pod.name, restarts=9)
    ctx.event(pod.name, "BackOff", "Back-off restarting failed container metrics-server",
              first=60, last=5, count=9)
    ctx.log(pod.name, LogLevel.error,
            "unable to load configmap based request-header-client-ca-file: "
            'configmaps "extension-apiserver-authentication" is forbidden', ago=50)


@register_fault("argocd-sync-fails-1")
def _argocd(ctx: FaultContext) -> None:
    ctx.model.ensure_namespace("argocd")
    ctx.model.add_resource(
        make_deployment("guestbook-ui", "argocd", "guestbook-ui", "guestbook-ui",
                        "gcr.io/heptio-images/ks-guestbook-demo:0.2", ctx.now,
                        available=0, age_seconds=1800)
    )
    controller = ctx.add_pod("argocd-application-controller-0", "argocd",
                             "argocd-application-controller", "quay.io/argoproj/argocd:v2.8.4",
                             node="worker-node-2", age=86400,
                             labels={"app.kubernetes.io/name": "argocd-application-controller"},
                             ip="10.244.2.80")
    ctx.event("guestbook", "OperationCompleted",
              "Sync operation to 4c2d1f9 failed: one or more objects failed to apply, reason: "
              'deployments.apps "guestbook-ui" is forbidden', first=120, last=10, count=3,
              kind="Application", namespace="argocd", source="argocd-application-controller")
    ctx.log(controller.name, LogLevel.error,
            'ComparisonError: the server could not find the requested resource '
            '(apiextensions.k8s.io/v1beta1 CustomResourceDefinition)', ago=100)


@register_fault("pod-security-policy-1")
def _pod_security(ctx: FaultContext) -> None:
    ctx.model.add_resource(
        make_deployment("restricted-app", "default", "restricted-app", "app",
                        "myapp/restricted:v1.0.0", ctx.now, available=0, age_seconds=600)
    )
    ctx.event("restricted-app-58f6d7c9b", "FailedCreate",
              'Error creating: pods "restricted-app-58f6d7c9b-" is forbidden: violates '
              'PodSecurity "restricted:latest": unrestricted capabilities (container "app" '
              'must set securityContext.capabilities.drop=["ALL"])',
              first=500, last=12, count=16, kind="ReplicaSet", source="replicaset-controller")


@register_fault("stuck-finalizers-1")
def _finalizers(ctx: FaultContext) -> None:
    pod = ctx.add_pod("legacy-cleanup-5c4b2", "default", "cleanup", "myapp/cleanup:v0.1.0",
                      node="worker-node-1", age=7200, labels={"app": "legacy-cleanup"})
    pod.status = PodStatus.unknown
    pod.containers[0].status = ContainerStatus.terminated
    pod.containers[0].ready = False
    ctx.event(pod.name, "Killing", "Stopping container cleanup", first=3600, type=EventType.normal)
    ctx.event(pod.name, "FailedDelete",
              "pod is terminating but finalizer example.com/cleanup-hook has not been removed",
              first=3000, last=30, count=40, source="garbage-collector")


# ---------------------------------------------------------------------------
# Control plane and platform
# ---------------------------------------------------------------------------


@register_fault("etcd-corruption-1")
def _etcd(ctx: FaultContext) -> None:
    pod = "etcd-control-plane-1"
    ctx.crash_loop(pod, restarts=3, exit_code=2)
    ctx.event(pod, "BackOff", "Back-off restarting failed container etcd", first=60, last=8, count=3)
    ctx.log(pod, LogLevel.error, "failed to find database snapshot file (snap: snapshot file doesn't exist)",
            ago=55)
    ctx.log(pod, LogLevel.error, "panic: failed to recover v3 backend from snapshot", ago=54)


@register_fault("api-server-down-1")
def _apiserver(ctx: FaultContext) -> None:
    pod = "kube-apiserver-control-plane-1"
    ctx.crash_loop(pod, restarts=6, exit_code=1)
    ctx.event(pod, "BackOff", "Back-off restarting failed container kube-apiserver",
              first=90, last=10, count=6)
    ctx.log(pod, LogLevel.error,
            'grpc: addrConn.createTransport failed to connect to {127.0.0.1:2379}: '
            "connection refused", ago=80)
    ctx.log(pod, LogLevel.error, "Error: context deadline exceeded", ago=70)


@register_fault("fluentd-errors-1")
def _fluentd(ctx: FaultContext) -> None:
    pod = "fluentd-worker-1"
    ctx.crash_loop(pod, restarts=5)
    ctx.event(pod, "BackOff", "Back-off restarting failed container fluentd", first=60, last=6, count=5)
    ctx.log(pod, LogLevel.warn,
            "failed to flush the buffer. error_class=Fluent::Plugin::ElasticsearchOutput::"
            "RecoverableRequestFailure", ago=50)
    ctx.log(pod, LogLevel.error,
            "Could not communicate to Elasticsearch, resetting connection and trying again. "
            "Connection refused - connect(2) for 10.96.3.20:9200", ago=40)


@register_fault("cloud-provider-issues-1")
def _cloud_provider(ctx: FaultContext) -> None:
    service = ctx.model.find_resource("service", "frontend-lb", "default")
    service.status["loadBalancer"] = {}
    ctx.event("frontend-lb", "EnsuringLoadBalancer", "Ensuring load balancer",
              first=300, type=EventType.normal, kind="Service", source="service-controller")
    ctx.event("frontend-lb", "SyncLoadBalancerFailed",
              "Error syncing load balancer: failed to ensure load balancer: googleapi: "
              "Error 403: Required 'compute.forwardingRules.create' permission",
              first=280, last=20, count=8, kind="Service", source="service-controller")


@register_fault("certificate-expired-1")
def _certificate(ctx: FaultContext) -> None:
    ctx.model.remove_resource("secret", "web-tls", "default")
    controller = "ingress-nginx-controller-abc123"
    ctx.event("web-cert", "Failed",
              "The certificate request has failed to complete and will be retried: "
              "ACME order is invalid", first=600, last=60, count=5,
              kind="Certificate", source="cert-manager-certificates-issuing")
    ctx.log(controller, LogLevel.error,
            'Error getting SSL certificate "default/web-tls": local SSL certificate '
            "default/web-tls was not found. Using default certificate", ago=120)
    ctx.log("cert-manager-controller-xyz789", LogLevel.error,
            'certificate "default/web-cert" expired 2 days ago; renewal failed', ago=90)


@register_fault("multi-component-1")
def _cascade(ctx: FaultContext) -> None:
    ctx.crash_loop("database-postgres-xyz123", restarts=3)
    ctx.crash_loop("redis-cache-abc789", restarts=4)
    ctx.crash_loop("backend-service-def456", restarts=7)
    ctx.event("database-postgres-xyz123", "BackOff", "Back-off restarting failed container postgres",
              first=120, last=10, count=3)
    ctx.event("redis-cache-abc789", "BackOff", "Back-off restarting failed container redis",
              first=90, last=9, count=4)
    ctx.event("backend-service-def456", "BackOff", "Back-off restarting failed container backend",
              first=60, last=5, count=7)
    ctx.log("database-postgres-xyz123", LogLevel.error,
            'FATAL: could not open file "global/pg_filenode.map": Permission denied', ago=110)
    ctx.log("redis-cache-abc789", LogLevel.error, "MASTER aborted replication: database-service down",
            ago=80)
    ctx.log("backend-service-def456", LogLevel.error,
            "dial tcp 10.96.1.103:5432: connect: connection refused", ago=55)


@register_fault("rbac-permissions-1")
def _rbac(ctx: FaultContext) -> None:
    pod = ctx.add_pod("reporting-agent-4f6d1", "default", "agent", "myapp/reporting-agent:v1.4.2",
                      node="worker-node-3", age=1800, labels={"app": "reporting-agent"},
                      ip="10.244.3.70")
    ctx.crash_loop(pod.name, restarts=5)
    ctx.log(pod.name, LogLevel.error,
            'pods is forbidden: User "system:serviceaccount:default:reporting-agent" cannot list '
            'resource "pods" in API group "" in the namespace "default"', ago=40)


@register_fault("prometheus-scraping-1")
def _prometheus(ctx: FaultContext) -> None:
    service = ctx.model.find_resource("service", "app-metrics", "default")
    service.spec["selector"] = {"app": "myapp", "metrics": "enabled"}
    ctx.log("prometheus-server-xyz789", LogLevel.warn,
            'Error on ingesting samples for target "default/app-metrics/0": '
            "no endpoints discovered for service", ago=60)
    ctx.event("app-metrics", "NoEndpoints", "No endpoints available for service app-metrics",
              first=50, last=5, count=10, kind="Service", source="endpoint-controller")


__all__ = ["FaultContext", "FaultGenerator", "get_generator", "register_fault", "registered_ids"]

"""In-memory cluster model and the healthy baseline cluster."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from fnmatch import fnmatchcase
from typing import Any

from kubequest_sim.models import (
    ClusterState,
    ContainerState,
    ContainerStatus,
    K8sEvent,
    K8sResource,
    LogEntry,
    NodeCondition,
    NodeMetrics,
    NodeState,
    NodeStatus,
    NodeTaint,
    PodState,
    PodStatus,
    ResourceMetadata,
    ResourceRequirements,
    TaintEffect,
    UsageMetric,
)

# Collection name on ClusterState for each resource kind understood by
# find_resource / remove_resource.
_RESOURCE_COLLECTIONS = {
    "service": "services",
    "deployment": "deployments",
    "configmap": "config_maps",
    "secret": "secrets",
}


class ClusterModel:
    """Read/patch helpers over a single :class:`ClusterState`.

    The model mutates the state it wraps.  Callers that need purity (the
    fault injector, remediation) hand it a deep copy.
    """

    def __init__(self, state: ClusterState) -> None:
        self.state = state

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_pod(self, name: str, namespace: str | None = None) -> PodState | None:
        for pod in self.state.pods:
            if pod.name == name and (namespace is None or pod.namespace == namespace):
                return pod
        return None

    def find_node(self, name: str) -> NodeState | None:
        for node in self.state.nodes:
            if node.name == name or node.id == name:
                return node
        return None

    def find_resource(
        self, kind: str, name: str, namespace: str | None = None
    ) -> K8sResource | None:
        collection = _RESOURCE_COLLECTIONS.get(kind.lower())
        if collection is None:
            return None
        for resource in getattr(self.state, collection):
            if resource.metadata.name != name:
                continue
            if namespace is None or resource.metadata.namespace == namespace:
                return resource
        return None

    def pods_matching(self, pattern: str, namespace: str | None = None) -> list[PodState]:
        """Return pods whose name matches the shell-style *pattern*."""
        return [
            pod
            for pod in self.state.pods
            if fnmatchcase(pod.name, pattern)
            and (namespace is None or pod.namespace == namespace)
        ]

    def nodes_matching(self, pattern: str) -> list[NodeState]:
        return [node for node in self.state.nodes if fnmatchcase(node.name, pattern)]

    def pods_selected_by(
        self, selector: dict[str, str], namespace: str | None
    ) -> list[PodState]:
        """Return pods in *namespace* carrying every label in *selector*."""
        if not selector:
            return []
        return [
            pod
            for pod in self.state.pods
            if (namespace is None or pod.namespace == namespace)
            and all(pod.labels.get(key) == value for key, value in selector.items())
        ]

    # ------------------------------------------------------------------
    # Structural mutation
    # ------------------------------------------------------------------

    def ensure_namespace(self, namespace: str) -> None:
        if namespace not in self.state.namespaces:
            self.state.namespaces.append(namespace)

    def add_pod(self, pod: PodState) -> None:
        """Add *pod*, enforcing namespace membership and id uniqueness."""
        if pod.namespace not in self.state.namespaces:
            raise ValueError(
                f"Pod {pod.name!r} references unknown namespace {pod.namespace!r}"
            )
        if any(existing.id == pod.id for existing in self.state.pods):
            raise ValueError(f"Duplicate pod id: {pod.id!r}")
        self.state.pods.append(pod)

    def remove_pod(self, name: str, namespace: str | None = None) -> bool:
        pod = self.find_pod(name, namespace)
        if pod is None:
            return False
        self.state.pods.remove(pod)
        return True

    def add_resource(self, resource: K8sResource) -> None:
        collection = _RESOURCE_COLLECTIONS.get(resource.kind.lower())
        if collection is None:
            raise ValueError(f"Unsupported resource kind: {resource.kind!r}")
        getattr(self.state, collection).append(resource)

    def remove_resource(self, kind: str, name: str, namespace: str | None = None) -> bool:
        resource = self.find_resource(kind, name, namespace)
        if resource is None:
            return False
        getattr(self.state, _RESOURCE_COLLECTIONS[kind.lower()]).remove(resource)
        return True

    def apply_pod_status(self, pod_id: str, status: PodStatus) -> None:
        """Set the status of pod *pod_id*; no-op when the pod is absent."""
        for pod in self.state.pods:
            if pod.id != pod_id:
                continue
            pod.status = status
            if status == PodStatus.running:
                for container in pod.containers:
                    container.status = ContainerStatus.running
                    container.state_reason = None
                    container.ready = True
            return

    def apply_node_status(self, node_id: str, status: NodeStatus) -> None:
        """Set the status of node *node_id*; no-op when the node is absent."""
        node = self.find_node(node_id)
        if node is None:
            return
        node.status = status
        for condition in node.conditions:
            if condition.type == "Ready":
                condition.status = "True" if status == NodeStatus.ready else "False"

    def append_event(self, event: K8sEvent) -> None:
        """Append *event*, also attaching it to the pod it involves."""
        if any(existing.id == event.id for existing in self.state.events):
            raise ValueError(f"Duplicate event id: {event.id!r}")
        self.state.events.append(event)
        involved = event.involved_object
        if involved.kind == "Pod":
            pod = self.find_pod(involved.name, involved.namespace)
            if pod is not None:
                pod.events.append(event)

    def append_log(self, entry: LogEntry) -> None:
        """Append *entry*, also attaching it to the pod named by its source."""
        if any(existing.id == entry.id for existing in self.state.logs):
            raise ValueError(f"Duplicate log id: {entry.id!r}")
        self.state.logs.append(entry)
        pod = self.find_pod(entry.source)
        if pod is not None:
            pod.logs.append(entry)

    def patch(self, **collections: Any) -> None:
        """Shallow-merge top-level collections into the state."""
        unknown = set(collections) - set(ClusterState.model_fields)
        if unknown:
            raise ValueError(f"Unknown ClusterState fields: {sorted(unknown)}")
        self.state = self.state.model_copy(update=collections)

    def next_event_id(self) -> str:
        return f"event-{len(self.state.events) + 1}"

    def next_log_id(self) -> str:
        return f"log-{len(self.state.logs) + 1}"


# ---------------------------------------------------------------------------
# Baseline cluster
# ---------------------------------------------------------------------------

_NAMESPACES = [
    "default",
    "kube-system",
    "kube-public",
    "ingress-nginx",
    "monitoring",
    "logging",
    "cert-manager",
    "istio-system",
]

_MINUTE = 60
_HOUR = 3600
_DAY = 86400

_NODE_SUBNETS = {
    "control-plane-1": 0,
    "worker-node-1": 1,
    "worker-node-2": 2,
    "worker-node-3": 3,
}

# name, namespace, container, image, node, age (s), requests, limits, labels, port
_POD_TABLE: list[tuple[str, str, str, str, str, int, tuple[str, str], tuple[str, str], dict[str, str], int | None]] = [
    ("nginx-deployment-abc123", "default", "nginx", "nginx:1.21", "worker-node-1",
     _HOUR, ("100m", "128Mi"), ("500m", "256Mi"), {"app": "nginx"}, 80),
    ("backend-service-def456", "default", "backend", "myapp/backend:v1.2.3", "worker-node-2",
     2 * _HOUR, ("200m", "256Mi"), ("1000m", "512Mi"), {"app": "backend"}, 8080),
    ("frontend-deployment-ghi789", "default", "frontend", "myapp/frontend:v2.1.0", "worker-node-3",
     30 * _MINUTE, ("150m", "200Mi"), ("800m", "400Mi"), {"app": "frontend"}, 80),
    ("database-postgres-xyz123", "default", "postgres", "postgres:14", "worker-node-1",
     _DAY, ("500m", "1Gi"), ("2000m", "2Gi"), {"app": "postgres", "tier": "database"}, 5432),
    ("redis-cache-abc789", "default", "redis", "redis:7-alpine", "worker-node-2",
     _DAY, ("100m", "256Mi"), ("500m", "512Mi"), {"app": "redis", "tier": "cache"}, 6379),
    ("web-app-xyz123", "default", "web", "myapp/webapp:v1.2.3", "worker-node-3",
     _HOUR, ("200m", "300Mi"), ("1000m", "600Mi"), {"app": "web"}, 8080),
    ("app-pod-abc123", "default", "app", "myapp/microservice:latest", "worker-node-1",
     90 * _MINUTE, ("150m", "200Mi"), ("750m", "400Mi"), {"app": "myapp"}, 9100),
    ("coredns-558bd4d5db-abc12", "kube-system", "coredns", "registry.k8s.io/coredns/coredns:v1.10.1",
     "worker-node-1", 5 * _DAY, ("100m", "70Mi"), ("100m", "170Mi"), {"k8s-app": "kube-dns"}, 53),
    ("coredns-558bd4d5db-def34", "kube-system", "coredns", "registry.k8s.io/coredns/coredns:v1.10.1",
     "worker-node-2", 5 * _DAY, ("100m", "70Mi"), ("100m", "170Mi"), {"k8s-app": "kube-dns"}, 53),
    ("kube-proxy-worker-1", "kube-system", "kube-proxy", "registry.k8s.io/kube-proxy:v1.28.2",
     "worker-node-1", 5 * _DAY, ("100m", "50Mi"), ("100m", "100Mi"), {"k8s-app": "kube-proxy"}, None),
    ("kube-proxy-worker-2", "kube-system", "kube-proxy", "registry.k8s.io/kube-proxy:v1.28.2",
     "worker-node-2", 5 * _DAY, ("100m", "50Mi"), ("100m", "100Mi"), {"k8s-app": "kube-proxy"}, None),
    ("kube-proxy-worker-3", "kube-system", "kube-proxy", "registry.k8s.io/kube-proxy:v1.28.2",
     "worker-node-3", 5 * _DAY, ("100m", "50Mi"), ("100m", "100Mi"), {"k8s-app": "kube-proxy"}, None),
    ("etcd-control-plane-1", "kube-system", "etcd", "registry.k8s.io/etcd:3.5.9-0",
     "control-plane-1", 5 * _DAY, ("100m", "100Mi"), ("100m", "100Mi"), {"component": "etcd"}, 2379),
    ("kube-apiserver-control-plane-1", "kube-system", "kube-apiserver",
     "registry.k8s.io/kube-apiserver:v1.28.2", "control-plane-1", 5 * _DAY,
     ("250m", "256Mi"), ("250m", "256Mi"), {"component": "kube-apiserver"}, 6443),
    ("kube-controller-manager-control-plane-1", "kube-system", "kube-controller-manager",
     "registry.k8s.io/kube-controller-manager:v1.28.2", "control-plane-1", 5 * _DAY,
     ("200m", "256Mi"), ("200m", "256Mi"), {"component": "kube-controller-manager"}, None),
    ("kube-scheduler-control-plane-1", "kube-system", "kube-scheduler",
     "registry.k8s.io/kube-scheduler:v1.28.2", "control-plane-1", 5 * _DAY,
     ("100m", "128Mi"), ("100m", "128Mi"), {"component": "kube-scheduler"}, None),
    ("ingress-nginx-controller-abc123", "ingress-nginx", "controller",
     "registry.k8s.io/ingress-nginx/controller:v1.8.1", "worker-node-1", 3 * _DAY,
     ("100m", "90Mi"), ("1000m", "500Mi"), {"app.kubernetes.io/name": "ingress-nginx"}, 80),
    ("prometheus-server-xyz789", "monitoring", "prometheus", "prom/prometheus:v2.45.0",
     "worker-node-2", 3 * _DAY, ("500m", "1Gi"), ("2000m", "4Gi"), {"app": "prometheus"}, 9090),
    ("grafana-dashboard-def456", "monitoring", "grafana", "grafana/grafana:10.0.3",
     "worker-node-3", 3 * _DAY, ("100m", "256Mi"), ("500m", "512Mi"), {"app": "grafana"}, 3000),
    ("node-exporter-worker-1", "monitoring", "node-exporter", "prom/node-exporter:v1.6.1",
     "worker-node-1", 3 * _DAY, ("50m", "64Mi"), ("200m", "128Mi"), {"app": "node-exporter"}, 9100),
    ("node-exporter-worker-2", "monitoring", "node-exporter", "prom/node-exporter:v1.6.1",
     "worker-node-2", 3 * _DAY, ("50m", "64Mi"), ("200m", "128Mi"), {"app": "node-exporter"}, 9100),
    ("node-exporter-worker-3", "monitoring", "node-exporter", "prom/node-exporter:v1.6.1",
     "worker-node-3", 3 * _DAY, ("50m", "64Mi"), ("200m", "128Mi"), {"app": "node-exporter"}, 9100),
    ("fluentd-worker-1", "logging", "fluentd",
     "fluent/fluentd-kubernetes-daemonset:v1.16-debian-elasticsearch7-1", "worker-node-1",
     3 * _DAY, ("100m", "200Mi"), ("500m", "500Mi"), {"app": "fluentd"}, 24224),
    ("elasticsearch-cluster-abc123", "logging", "elasticsearch",
     "docker.elastic.co/elasticsearch/elasticsearch:7.17.12", "worker-node-2", 3 * _DAY,
     ("1000m", "2Gi"), ("2000m", "4Gi"), {"app": "elasticsearch"}, 9200),
    ("cert-manager-controller-xyz789", "cert-manager", "cert-manager",
     "quay.io/jetstack/cert-manager-controller:v1.13.1", "worker-node-3", 2 * _DAY,
     ("10m", "32Mi"), ("100m", "128Mi"), {"app": "cert-manager"}, 9402),
]

# name, roles, cpu, memory, storage, allocatable cpu, allocatable memory, allocatable storage, usage (cpu, mem, disk)
_NODE_TABLE = [
    ("control-plane-1", ["control-plane"], "8", "16Gi", "200Gi", "7800m", "15.5Gi", "190Gi", (35, 45, 18)),
    ("worker-node-1", ["worker"], "16", "32Gi", "500Gi", "15800m", "31Gi", "480Gi", (65, 72, 34)),
    ("worker-node-2", ["worker"], "16", "32Gi", "500Gi", "15800m", "31Gi", "480Gi", (58, 68, 29)),
    ("worker-node-3", ["worker"], "16", "32Gi", "500Gi", "15800m", "31Gi", "480Gi", (42, 55, 25)),
]


def make_container(
    name: str,
    image: str,
    requests: tuple[str, str] = ("100m", "128Mi"),
    limits: tuple[str, str] = ("500m", "256Mi"),
    port: int | None = None,
) -> ContainerState:
    return ContainerState(
        name=name,
        image=image,
        resources=ResourceRequirements(
            requests={"cpu": requests[0], "memory": requests[1]},
            limits={"cpu": limits[0], "memory": limits[1]},
        ),
        ports=[port] if port else [],
    )


def make_pod(
    name: str,
    namespace: str,
    containers: list[ContainerState],
    now: datetime,
    node: str | None = "worker-node-1",
    age_seconds: int = _HOUR,
    labels: dict[str, str] | None = None,
    ip: str | None = None,
) -> PodState:
    created_at = now - timedelta(seconds=age_seconds)
    return PodState(
        id=name,
        name=name,
        namespace=namespace,
        containers=containers,
        node=node,
        created_at=created_at,
        last_restart=created_at,
        labels=labels or {},
        ip=ip,
    )


def _node_conditions(now: datetime) -> list[NodeCondition]:
    since = now - timedelta(days=5)
    return [
        NodeCondition(type="MemoryPressure", status="False", reason="KubeletHasSufficientMemory",
                      message="kubelet has sufficient memory available", last_transition_time=since),
        NodeCondition(type="DiskPressure", status="False", reason="KubeletHasNoDiskPressure",
                      message="kubelet has no disk pressure", last_transition_time=since),
        NodeCondition(type="PIDPressure", status="False", reason="KubeletHasSufficientPID",
                      message="kubelet has sufficient PID available", last_transition_time=since),
        NodeCondition(type="Ready", status="True", reason="KubeletReady",
                      message="kubelet is posting ready status", last_transition_time=since),
    ]


def _build_nodes(now: datetime) -> list[NodeState]:
    nodes = []
    for name, roles, cpu, memory, storage, a_cpu, a_memory, a_storage, usage in _NODE_TABLE:
        taints = []
        if "control-plane" in roles:
            taints.append(
                NodeTaint(key="node-role.kubernetes.io/control-plane", effect=TaintEffect.no_schedule)
            )
        nodes.append(
            NodeState(
                id=name,
                name=name,
                roles=roles,
                conditions=_node_conditions(now),
                capacity={"cpu": cpu, "memory": memory, "ephemeral-storage": storage, "pods": "110"},
                allocatable={"cpu": a_cpu, "memory": a_memory, "ephemeral-storage": a_storage, "pods": "110"},
                taints=taints,
                metrics=NodeMetrics(
                    cpu=UsageMetric(usage=usage[0]),
                    memory=UsageMetric(usage=usage[1]),
                    disk=UsageMetric(usage=usage[2]),
                ),
                created_at=now - timedelta(days=5),
            )
        )
    return nodes


def _build_pods(now: datetime) -> list[PodState]:
    pods = []
    host_counters: dict[str, int] = {}
    for name, namespace, container, image, node, age, requests, limits, labels, port in _POD_TABLE:
        host = host_counters.get(node, 4) + 1
        host_counters[node] = host
        pods.append(
            make_pod(
                name,
                namespace,
                [make_container(container, image, requests, limits, port)],
                now,
                node=node,
                age_seconds=age,
                labels=labels,
                ip=f"10.244.{_NODE_SUBNETS[node]}.{host}",
            )
        )
    return pods


def make_service(
    name: str,
    namespace: str,
    cluster_ip: str,
    ports: list[dict[str, Any]],
    now: datetime,
    selector: dict[str, str] | None = None,
    service_type: str = "ClusterIP",
    age_seconds: int = _HOUR,
    status: dict[str, Any] | None = None,
) -> K8sResource:
    spec: dict[str, Any] = {"type": service_type, "clusterIP": cluster_ip, "ports": ports}
    if selector is not None:
        spec["selector"] = selector
    return K8sResource(
        api_version="v1",
        kind="Service",
        metadata=ResourceMetadata(
            name=name,
            namespace=namespace,
            creation_timestamp=now - timedelta(seconds=age_seconds),
        ),
        spec=spec,
        status=status or {},
    )


def _build_services(now: datetime) -> list[K8sResource]:
    return [
        make_service("kubernetes", "default", "10.96.0.1",
                     [{"port": 443, "protocol": "TCP", "targetPort": 6443}], now,
                     age_seconds=5 * _DAY, status={"endpoints": ["192.168.1.100:6443"]}),
        make_service("nginx-service", "default", "10.96.1.100",
                     [{"port": 80, "protocol": "TCP", "targetPort": 80}], now,
                     selector={"app": "nginx"}, age_seconds=2 * _HOUR),
        make_service("backend-service", "default", "10.96.1.101",
                     [{"port": 8080, "protocol": "TCP", "targetPort": 8080}], now,
                     selector={"app": "backend"}, age_seconds=_HOUR),
        make_service("frontend-lb", "default", "10.96.1.102",
                     [{"port": 80, "protocol": "TCP", "targetPort": 80, "nodePort": 30080}], now,
                     selector={"app": "frontend"}, service_type="LoadBalancer",
                     age_seconds=30 * _MINUTE,
                     status={"loadBalancer": {"ingress": [{"ip": "34.118.226.10"}]}}),
        make_service("database-service", "default", "10.96.1.103",
                     [{"port": 5432, "protocol": "TCP", "targetPort": 5432}], now,
                     selector={"app": "postgres"}, age_seconds=_DAY),
        make_service("app-metrics", "default", "10.96.1.104",
                     [{"port": 9100, "protocol": "TCP", "targetPort": 9100}], now,
                     selector={"app": "myapp"}, age_seconds=90 * _MINUTE),
        make_service("kube-dns", "kube-system", "10.96.0.10",
                     [{"port": 53, "protocol": "UDP", "targetPort": 53},
                      {"port": 53, "protocol": "TCP", "targetPort": 53}], now,
                     selector={"k8s-app": "kube-dns"}, age_seconds=5 * _DAY),
        make_service("prometheus", "monitoring", "10.96.2.50",
                     [{"port": 9090, "protocol": "TCP", "targetPort": 9090}], now,
                     selector={"app": "prometheus"}, age_seconds=3 * _DAY),
    ]


def make_deployment(
    name: str,
    namespace: str,
    app: str,
    container: str,
    image: str,
    now: datetime,
    replicas: int = 1,
    available: int | None = None,
    age_seconds: int = _HOUR,
) -> K8sResource:
    available = replicas if available is None else available
    return K8sResource(
        api_version="apps/v1",
        kind="Deployment",
        metadata=ResourceMetadata(
            name=name,
            namespace=namespace,
            creation_timestamp=now - timedelta(seconds=age_seconds),
            labels={"app": app},
        ),
        spec={
            "replicas": replicas,
            "selector": {"matchLabels": {"app": app}},
            "template": {
                "metadata": {"labels": {"app": app}},
                "spec": {"containers": [{"name": container, "image": image}]},
            },
        },
        status={
            "replicas": replicas,
            "updatedReplicas": replicas,
            "readyReplicas": available,
            "availableReplicas": available,
        },
    )


def _build_deployments(now: datetime) -> list[K8sResource]:
    return [
        make_deployment("nginx-deployment", "default", "nginx", "nginx", "nginx:1.21", now,
                        age_seconds=2 * _HOUR),
        make_deployment("backend-deployment", "default", "backend", "backend",
                        "myapp/backend:v1.2.3", now, age_seconds=2 * _HOUR),
        make_deployment("frontend-deployment", "default", "frontend", "frontend",
                        "myapp/frontend:v2.1.0", now, age_seconds=30 * _MINUTE),
        make_deployment("web-app", "default", "web", "web", "myapp/webapp:v1.2.3", now),
    ]


def make_data_resource(
    kind: str,
    name: str,
    namespace: str,
    data: dict[str, str],
    now: datetime,
    secret_type: str | None = None,
    age_seconds: int = _DAY,
) -> K8sResource:
    spec: dict[str, Any] = {"data": data}
    if secret_type is not None:
        spec["type"] = secret_type
    return K8sResource(
        api_version="v1",
        kind=kind,
        metadata=ResourceMetadata(
            name=name,
            namespace=namespace,
            creation_timestamp=now - timedelta(seconds=age_seconds),
        ),
        spec=spec,
    )


def _build_config_maps(now: datetime) -> list[K8sResource]:
    return [
        make_data_resource("ConfigMap", "app-config", "default",
                           {"FEATURE_FLAGS": "checkout=on", "LOG_LEVEL": "info"}, now),
        make_data_resource("ConfigMap", "coredns", "kube-system",
                           {"Corefile": ".:53 {\n    forward . /etc/resolv.conf\n    cache 30\n}"},
                           now, age_seconds=5 * _DAY),
        make_data_resource("ConfigMap", "fluentd-config", "logging",
                           {"fluent.conf": "<match **>\n  @type elasticsearch\n</match>"},
                           now, age_seconds=3 * _DAY),
    ]


def _build_secrets(now: datetime) -> list[K8sResource]:
    return [
        make_data_resource("Secret", "database-credentials", "default",
                           {"username": "YXBw", "password": "czNjcjN0"}, now, secret_type="Opaque"),
        make_data_resource("Secret", "web-tls", "default",
                           {"tls.crt": "LS0t", "tls.key": "LS0t"}, now,
                           secret_type="kubernetes.io/tls", age_seconds=30 * _DAY),
        make_data_resource("Secret", "regcred", "default",
                           {".dockerconfigjson": "eyJ9"}, now,
                           secret_type="kubernetes.io/dockerconfigjson", age_seconds=30 * _DAY),
    ]


def build_default_cluster(now: datetime | None = None) -> ClusterState:
    """Return the healthy baseline cluster every scenario starts from."""
    now = now or datetime.now(tz=UTC)
    return ClusterState(
        namespaces=list(_NAMESPACES),
        nodes=_build_nodes(now),
        pods=_build_pods(now),
        services=_build_services(now),
        deployments=_build_deployments(now),
        config_maps=_build_config_maps(now),
        secrets=_build_secrets(now),
    )


__all__ = [
    "ClusterModel",
    "build_default_cluster",
    "make_container",
    "make_data_resource",
    "make_deployment",
    "make_pod",
    "make_service",
]

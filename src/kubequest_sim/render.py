"""Text layout for simulated ``kubectl`` output.

Every list view is built from a column-width table so the header and the
rows always line up.  Functions here are pure: they receive records and a
reference time and return a string.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import datetime

from kubequest_sim.models import (
    ContainerState,
    K8sEvent,
    K8sResource,
    LogEntry,
    NodeState,
    PodState,
    PodStatus,
)

NAMESPACE_WIDTH = 13

POD_COLUMNS = (("NAME", 30), ("READY", 7), ("STATUS", 18), ("RESTARTS", 10), ("AGE", 0))
POD_WIDE_COLUMNS = (*POD_COLUMNS[:-1], ("AGE", 7), ("IP", 15), ("NODE", 0))
NODE_COLUMNS = (("NAME", 15), ("STATUS", 8), ("ROLES", 13), ("AGE", 5), ("VERSION", 0))
EVENT_COLUMNS = (("LAST SEEN", 11), ("TYPE", 9), ("REASON", 11), ("OBJECT", 26), ("MESSAGE", 0))
SERVICE_COLUMNS = (
    ("NAME", 18),
    ("TYPE", 14),
    ("CLUSTER-IP", 15),
    ("EXTERNAL-IP", 13),
    ("PORT(S)", 14),
    ("AGE", 0),
)
DEPLOYMENT_COLUMNS = (("NAME", 21), ("READY", 7), ("UP-TO-DATE", 12), ("AVAILABLE", 11), ("AGE", 0))
NAMESPACE_COLUMNS = (("NAME", 17), ("STATUS", 8), ("AGE", 0))
ENDPOINT_COLUMNS = (("NAME", 18), ("ENDPOINTS", 29), ("AGE", 0))
CONFIGMAP_COLUMNS = (("NAME", 25), ("DATA", 6), ("AGE", 0))
SECRET_COLUMNS = (("NAME", 25), ("TYPE", 36), ("DATA", 6), ("AGE", 0))
JOB_COLUMNS = (("NAME", 20), ("COMPLETIONS", 13), ("AGE", 0))
TOP_NODE_COLUMNS = (
    ("NAME", 15),
    ("CPU(cores)", 12),
    ("CPU%", 6),
    ("MEMORY(bytes)", 15),
    ("MEMORY%", 0),
)
TOP_POD_COLUMNS = (("NAME", 30), ("CPU(cores)", 12), ("MEMORY(bytes)", 0))

HELP_TEXT = """Kubernetes Debugging Commands:

Resource Inspection:
  kubectl get pods [-n NS | -A]      - List pods
  kubectl get nodes                  - List cluster nodes
  kubectl get events                 - Show cluster events
  kubectl get services               - List services
  kubectl get deployments            - List deployments
  kubectl get endpoints              - List service endpoints
  kubectl get namespaces             - List namespaces
  kubectl get configmaps|secrets     - List configuration objects
  kubectl get jobs                   - List jobs and their completions

Detailed Information:
  kubectl describe pod <name>        - Show detailed pod information
  kubectl describe node <name>       - Show node details
  kubectl describe service <name>    - Show service details
  kubectl describe deployment <name> - Show deployment details
  kubectl describe configmap|secret|job <name>

Logs & Debugging:
  kubectl logs <pod-name>            - Show pod logs
  kubectl logs <pod-name> --previous - Show logs from previous container
  kubectl logs <pod-name> -c <name>  - Show logs of one container
  kubectl logs -l <selector>         - Show logs of the first matching pod

Configuration:
  kubectl apply -f <file>            - Apply YAML configuration
  kubectl set env|image|resources    - Update a deployment
  kubectl edit <resource> <name>     - Edit resource configuration
  kubectl patch <resource> <name>    - Patch resource configuration
  kubectl delete <resource> <name>   - Delete resource
  kubectl rollout restart <target>   - Restart a deployment
  kubectl scale <target> --replicas=N

Resource Usage:
  kubectl top pods                   - Show pod resource usage
  kubectl top nodes                  - Show node resource usage

Terminal Commands:
  clear                              - Clear terminal
  help                               - Show this help message

Tip: Start with 'kubectl get pods' to see the current pod status!"""


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------


def format_age(created: datetime | None, now: datetime) -> str:
    """Format the age of a record: ``Nm`` under an hour, ``NhMm`` under a day, else ``Nd``."""
    if created is None:
        return "<unknown>"
    minutes = max(0, int((now - created).total_seconds() // 60))
    if minutes < 60:
        return f"{minutes}m"
    if minutes < 1440:
        return f"{minutes // 60}h{minutes % 60}m"
    return f"{minutes // 1440}d"


def format_since(moment: datetime, now: datetime) -> str:
    """Short relative time used for event columns (``45s``, ``3m``, ``2h``, ``5d``)."""
    seconds = max(0, int((now - moment).total_seconds()))
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m"
    if seconds < 86400:
        return f"{seconds // 3600}h"
    return f"{seconds // 86400}d"


def format_timestamp(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def table(
    columns: Sequence[tuple[str, int]],
    rows: Sequence[Sequence[str]],
    namespaces: Sequence[str] | None = None,
) -> str:
    """Lay out *rows* using *columns* widths; prefix a NAMESPACE column when given.

    A column grows to its longest value so an oversized name never pushes
    the following columns out of line.
    """
    widths = [
        max([width, *(len(row[index]) for row in rows)])
        for index, (_, width) in enumerate(columns[:-1])
    ]

    def line(values: Sequence[str]) -> str:
        cells = [value.ljust(width) for value, width in zip(values[:-1], widths)]
        return " ".join([*cells, values[-1]])

    header = line([title for title, _ in columns])
    body = [line(row) for row in rows]
    if namespaces is not None:
        ns_width = max([NAMESPACE_WIDTH, *(len(ns) for ns in namespaces)])
        header = f"{'NAMESPACE'.ljust(ns_width)} {header}"
        body = [f"{ns.ljust(ns_width)} {row}" for ns, row in zip(namespaces, body)]
    return "\n".join([header, *body])


_CPU_RE = re.compile(r"^(\d+(?:\.\d+)?)(m?)$")
_MEMORY_UNITS = {"Ki": 1 / 1024, "Mi": 1, "Gi": 1024, "Ti": 1024 * 1024}


def parse_cpu(quantity: str) -> int:
    """Return *quantity* in millicores (``"500m"`` -> 500, ``"2"`` -> 2000)."""
    match = _CPU_RE.match(quantity.strip())
    if match is None:
        raise ValueError(f"Invalid CPU quantity: {quantity!r}")
    value = float(match.group(1))
    return int(value if match.group(2) else value * 1000)


def parse_memory(quantity: str) -> int:
    """Return *quantity* in MiB (``"1Gi"`` -> 1024)."""
    quantity = quantity.strip()
    for suffix, factor in _MEMORY_UNITS.items():
        if quantity.endswith(suffix):
            return int(float(quantity[: -len(suffix)]) * factor)
    return int(float(quantity) / (1024 * 1024))


# ---------------------------------------------------------------------------
# List views
# ---------------------------------------------------------------------------


def format_pods(
    pods: Sequence[PodState],
    now: datetime,
    all_namespaces: bool = False,
    wide: bool = False,
) -> str:
    rows = []
    for pod in pods:
        row = [
            pod.name,
            f"{sum(c.ready for c in pod.containers)}/{len(pod.containers)}",
            pod.status.value,
            str(pod.restart_count),
            format_age(pod.created_at, now),
        ]
        if wide:
            row.extend([pod.ip or "<none>", pod.node or "<none>"])
        rows.append(row)
    namespaces = [pod.namespace for pod in pods] if all_namespaces else None
    return table(POD_WIDE_COLUMNS if wide else POD_COLUMNS, rows, namespaces)


def format_nodes(nodes: Sequence[NodeState], now: datetime) -> str:
    rows = [
        [
            node.name,
            node.status.value,
            ",".join(node.roles) or "<none>",
            format_age(node.created_at, now),
            node.kubelet_version,
        ]
        for node in nodes
    ]
    return table(NODE_COLUMNS, rows)


def format_events(events: Sequence[K8sEvent], now: datetime, all_namespaces: bool = False) -> str:
    rows = [
        [
            format_since(event.last_time, now),
            event.type.value,
            event.reason,
            f"{event.involved_object.kind.lower()}/{event.involved_object.name}",
            event.message,
        ]
        for event in events
    ]
    namespaces = (
        [event.involved_object.namespace or "" for event in events] if all_namespaces else None
    )
    return table(EVENT_COLUMNS, rows, namespaces)


def service_ports(service: K8sResource) -> str:
    ports = []
    for port in service.spec.get("ports", []):
        node_port = f":{port['nodePort']}" if port.get("nodePort") else ""
        ports.append(f"{port['port']}{node_port}/{port.get('protocol', 'TCP')}")
    return ",".join(ports) or "<none>"


def external_ip(service: K8sResource) -> str:
    if service.spec.get("type") != "LoadBalancer":
        return "<none>"
    ingress = service.status.get("loadBalancer", {}).get("ingress") or []
    return ingress[0].get("ip", "<pending>") if ingress else "<pending>"


def format_services(services: Sequence[K8sResource], now: datetime, all_namespaces: bool = False) -> str:
    rows = [
        [
            service.metadata.name,
            service.spec.get("type", "ClusterIP"),
            service.spec.get("clusterIP", "<none>"),
            external_ip(service),
            service_ports(service),
            format_age(service.metadata.creation_timestamp, now),
        ]
        for service in services
    ]
    namespaces = [s.metadata.namespace or "" for s in services] if all_namespaces else None
    return table(SERVICE_COLUMNS, rows, namespaces)


def format_deployments(
    deployments: Sequence[K8sResource], now: datetime, all_namespaces: bool = False
) -> str:
    rows = []
    for deployment in deployments:
        desired = deployment.spec.get("replicas", 1)
        rows.append(
            [
                deployment.metadata.name,
                f"{deployment.status.get('readyReplicas', 0)}/{desired}",
                str(deployment.status.get("updatedReplicas", 0)),
                str(deployment.status.get("availableReplicas", 0)),
                format_age(deployment.metadata.creation_timestamp, now),
            ]
        )
    namespaces = [d.metadata.namespace or "" for d in deployments] if all_namespaces else None
    return table(DEPLOYMENT_COLUMNS, rows, namespaces)


def format_namespaces(namespaces: Sequence[str], age: str) -> str:
    return table(NAMESPACE_COLUMNS, [[name, "Active", age] for name in namespaces])


def format_endpoints(
    rows: Sequence[tuple[K8sResource, list[str]]], now: datetime, all_namespaces: bool = False
) -> str:
    lines = [
        [
            service.metadata.name,
            ",".join(addresses) or "<none>",
            format_age(service.metadata.creation_timestamp, now),
        ]
        for service, addresses in rows
    ]
    namespaces = [s.metadata.namespace or "" for s, _ in rows] if all_namespaces else None
    return table(ENDPOINT_COLUMNS, lines, namespaces)


def format_configmaps(
    config_maps: Sequence[K8sResource], now: datetime, all_namespaces: bool = False
) -> str:
    rows = [
        [
            cm.metadata.name,
            str(len(cm.spec.get("data", {}))),
            format_age(cm.metadata.creation_timestamp, now),
        ]
        for cm in config_maps
    ]
    namespaces = [cm.metadata.namespace or "" for cm in config_maps] if all_namespaces else None
    return table(CONFIGMAP_COLUMNS, rows, namespaces)


def format_secrets(secrets: Sequence[K8sResource], now: datetime, all_namespaces: bool = False) -> str:
    rows = [
        [
            secret.metadata.name,
            secret.spec.get("type", "Opaque"),
            str(len(secret.spec.get("data", {}))),
            format_age(secret.metadata.creation_timestamp, now),
        ]
        for secret in secrets
    ]
    namespaces = [s.metadata.namespace or "" for s in secrets] if all_namespaces else None
    return table(SECRET_COLUMNS, rows, namespaces)


def format_jobs(jobs: Sequence[tuple[str, Sequence[PodState]]], now: datetime) -> str:
    """List jobs given as ``(name, pods)`` pairs; each job wants one completion."""
    rows = [
        [
            name,
            f"{min(1, sum(p.status == PodStatus.succeeded for p in pods))}/1",
            format_age(min((p.created_at for p in pods), default=None), now),
        ]
        for name, pods in jobs
    ]
    return table(JOB_COLUMNS, rows)


def format_logs(entries: Sequence[LogEntry]) -> str:
    return "\n".join(
        f"{format_timestamp(entry.timestamp)} [{entry.level.value}] {entry.message}"
        for entry in entries
    )


def format_top_nodes(nodes: Sequence[NodeState]) -> str:
    rows = []
    for node in nodes:
        cpu = parse_cpu(node.allocatable.get("cpu", node.capacity.get("cpu", "0")))
        memory = parse_memory(node.allocatable.get("memory", node.capacity.get("memory", "0")))
        rows.append(
            [
                node.name,
                f"{cpu * node.metrics.cpu.usage // node.metrics.cpu.capacity}m",
                f"{node.metrics.cpu.usage}%",
                f"{memory * node.metrics.memory.usage // node.metrics.memory.capacity}Mi",
                f"{node.metrics.memory.usage}%",
            ]
        )
    return table(TOP_NODE_COLUMNS, rows)


def pod_usage(pod: PodState) -> tuple[int, int]:
    """Derive (millicores, MiB) usage from a pod's container requests."""
    cpu = sum(parse_cpu(c.resources.requests.get("cpu", "0")) for c in pod.containers)
    memory = sum(parse_memory(c.resources.requests.get("memory", "0")) for c in pod.containers)
    return max(1, cpu * 3 // 5), max(1, memory * 4 // 5)


def format_top_pods(pods: Sequence[PodState], all_namespaces: bool = False) -> str:
    rows = []
    for pod in pods:
        cpu, memory = pod_usage(pod)
        rows.append([pod.name, f"{cpu}m", f"{memory}Mi"])
    namespaces = [pod.namespace for pod in pods] if all_namespaces else None
    return table(TOP_POD_COLUMNS, rows, namespaces)


# ---------------------------------------------------------------------------
# Describe views
# ---------------------------------------------------------------------------


def _field(name: str, value: object, indent: int = 0, width: int = 14) -> str:
    return f"{' ' * indent}{(name + ':').ljust(width)}{value}"


def _mapping_lines(name: str, mapping: dict[str, str], indent: int = 0, width: int = 14) -> list[str]:
    if not mapping:
        return [_field(name, "<none>", indent, width)]
    items = [f"{key}={value}" for key, value in mapping.items()]
    lines = [_field(name, items[0], indent, width)]
    lines.extend(" " * (indent + width) + item for item in items[1:])
    return lines


def _event_block(events: Sequence[K8sEvent], now: datetime) -> list[str]:
    if not events:
        return ["Events:  <none>"]
    lines = [
        "Events:",
        "  Type     Reason              Age   From               Message",
        "  ----     ------              ----  ----               -------",
    ]
    for event in events:
        age = format_since(event.last_time, now)
        if event.count > 1:
            age = f"{age} (x{event.count} over {format_since(event.first_time, now)})"
        lines.append(
            f"  {event.type.value.ljust(8)} {event.reason.ljust(19)} {age.ljust(5)} "
            f"{event.source.ljust(18)} {event.message}"
        )
    return lines


def _container_block(container: ContainerState, indent: int = 2) -> list[str]:
    pad = indent + 2
    lines = [f"{' ' * indent}{container.name}:", _field("Image", container.image, pad, 16)]
    if container.ports:
        lines.append(_field("Port", ", ".join(f"{p}/TCP" for p in container.ports), pad, 16))
    lines.append(_field("State", container.status.value, pad, 16))
    if container.state_reason:
        lines.append(_field("Reason", container.state_reason, pad + 2, 14))
    if container.last_state is not None:
        lines.append(_field("Last State", "Terminated", pad, 16))
        lines.append(_field("Reason", container.last_state.reason, pad + 2, 14))
        lines.append(_field("Exit Code", container.last_state.exit_code, pad + 2, 14))
    lines.append(_field("Ready", str(container.ready), pad, 16))
    lines.append(_field("Restart Count", container.restart_count, pad, 16))
    for title, values in (("Limits", container.resources.limits), ("Requests", container.resources.requests)):
        if values:
            lines.append(f"{' ' * pad}{title}:")
            lines.extend(_field(key, value, pad + 2, 10) for key, value in values.items())
    if container.env:
        lines.append(f"{' ' * pad}Environment:")
        lines.extend(f"{' ' * (pad + 2)}{key}:  {value}" for key, value in container.env.items())
    else:
        lines.append(_field("Environment", "<none>", pad, 16))
    return lines


def describe_pod(pod: PodState, now: datetime) -> str:
    ready = bool(pod.containers) and all(c.ready for c in pod.containers)
    lines = [
        _field("Name", pod.name),
        _field("Namespace", pod.namespace),
        _field("Priority", 0),
        _field("Node", pod.node or "<none>"),
        _field("Start Time", format_timestamp(pod.created_at)),
        *_mapping_lines("Labels", pod.labels),
        _field("Status", pod.status.value),
        _field("IP", pod.ip or "<none>"),
    ]
    if pod.init_containers:
        lines.append("Init Containers:")
        for container in pod.init_containers:
            lines.extend(_container_block(container))
    lines.append("Containers:")
    for container in pod.containers:
        lines.extend(_container_block(container))
    lines.extend(
        [
            "Conditions:",
            "  Type              Status",
            f"  Initialized       {all(c.ready for c in pod.init_containers)}",
            f"  Ready             {ready}",
            f"  ContainersReady   {ready}",
            f"  PodScheduled      {pod.node is not None}",
        ]
    )
    lines.extend(_event_block(pod.events, now))
    return "\n".join(lines)


def describe_node(
    node: NodeState,
    pods: Sequence[PodState],
    events: Sequence[K8sEvent],
    now: datetime,
) -> str:
    lines = [
        _field("Name", node.name, width=20),
        _field("Roles", ",".join(node.roles) or "<none>", width=20),
        _field("CreationTimestamp", format_timestamp(node.created_at), width=20),
        _field("Taints", str(node.taints[0]) if node.taints else "<none>", width=20),
    ]
    lines.extend(" " * 20 + str(taint) for taint in node.taints[1:])
    lines.append(_field("Unschedulable", "false", width=20))
    lines.append("Conditions:")
    lines.append("  Type                 Status  Reason                       Message")
    lines.append("  ----                 ------  ------                       -------")
    for condition in node.conditions:
        lines.append(
            f"  {condition.type.ljust(20)} {condition.status.ljust(7)} "
            f"{(condition.reason or '').ljust(28)} {condition.message or ''}"
        )
    for title, values in (("Capacity", node.capacity), ("Allocatable", node.allocatable)):
        lines.append(f"{title}:")
        lines.extend(_field(key, value, 2, 20) for key, value in values.items())
    lines.append("System Info:")
    lines.append(_field("Kubelet Version", node.kubelet_version, 2, 20))
    lines.append(f"Non-terminated Pods:          ({len(pods)} in total)")
    lines.append("  Namespace                  Name")
    lines.append("  ---------                  ----")
    lines.extend(f"  {pod.namespace.ljust(26)} {pod.name}" for pod in pods)
    lines.append("Resource usage:")
    lines.append(_field("cpu", f"{node.metrics.cpu.usage}%", 2, 10))
    lines.append(_field("memory", f"{node.metrics.memory.usage}%", 2, 10))
    lines.append(_field("disk", f"{node.metrics.disk.usage}%", 2, 10))
    lines.extend(_event_block(events, now))
    return "\n".join(lines)


def describe_service(
    service: K8sResource,
    endpoints: Sequence[str],
    events: Sequence[K8sEvent],
    now: datetime,
) -> str:
    spec = service.spec
    lines = [
        _field("Name", service.metadata.name, width=26),
        _field("Namespace", service.metadata.namespace, width=26),
        *_mapping_lines("Labels", service.metadata.labels, width=26),
        *_mapping_lines("Selector", spec.get("selector") or {}, width=26),
        _field("Type", spec.get("type", "ClusterIP"), width=26),
        _field("IP", spec.get("clusterIP", "<none>"), width=26),
    ]
    if spec.get("type") == "LoadBalancer":
        lines.append(_field("LoadBalancer Ingress", external_ip(service), width=26))
    for port in spec.get("ports", []):
        protocol = port.get("protocol", "TCP")
        lines.append(_field("Port", f"<unset>  {port['port']}/{protocol}", width=26))
        lines.append(_field("TargetPort", f"{port.get('targetPort', port['port'])}/{protocol}", width=26))
        if port.get("nodePort"):
            lines.append(_field("NodePort", f"<unset>  {port['nodePort']}/{protocol}", width=26))
    lines.append(_field("Endpoints", ",".join(endpoints) or "<none>", width=26))
    lines.extend(_event_block(events, now))
    return "\n".join(lines)


def describe_deployment(deployment: K8sResource, events: Sequence[K8sEvent], now: datetime) -> str:
    spec, status = deployment.spec, deployment.status
    desired = spec.get("replicas", 1)
    total = status.get("replicas", 0)
    available = status.get("availableReplicas", 0)
    selector = spec.get("selector", {}).get("matchLabels", {})
    lines = [
        _field("Name", deployment.metadata.name, width=24),
        _field("Namespace", deployment.metadata.namespace, width=24),
        _field("CreationTimestamp", format_timestamp(deployment.metadata.creation_timestamp or now), width=24),
        *_mapping_lines("Labels", deployment.metadata.labels, width=24),
        _field("Selector", ",".join(f"{k}={v}" for k, v in selector.items()) or "<none>", width=24),
        _field(
            "Replicas",
            f"{desired} desired | {status.get('updatedReplicas', 0)} updated | {total} total | "
            f"{available} available | {max(0, desired - available)} unavailable",
            width=24,
        ),
        _field("StrategyType", "RollingUpdate", width=24),
        "Pod Template:",
        "  Containers:",
    ]
    for container in spec.get("template", {}).get("spec", {}).get("containers", []):
        lines.append(f"   {container['name']}:")
        lines.append(_field("Image", container["image"], 4, 12))
    lines.append("Conditions:")
    lines.append("  Type           Status")
    lines.append("  ----           ------")
    lines.append(f"  Available      {available >= desired}")
    lines.append("  Progressing    True")
    lines.extend(_event_block(events, now))
    return "\n".join(lines)


def describe_job(
    name: str,
    namespace: str,
    pods: Sequence[PodState],
    events: Sequence[K8sEvent],
    now: datetime,
) -> str:
    counts = {
        status: sum(p.status == status for p in pods)
        for status in (PodStatus.running, PodStatus.succeeded, PodStatus.failed)
    }
    lines = [
        _field("Name", name),
        _field("Namespace", namespace),
        _field("Selector", f"job-name={name}"),
        _field("Completions", "1"),
        _field(
            "Pods Statuses",
            f"{counts[PodStatus.running]} Active / {counts[PodStatus.succeeded]} Succeeded / "
            f"{counts[PodStatus.failed]} Failed",
        ),
    ]
    lines.extend(_event_block(events, now))
    return "\n".join(lines)


def describe_config(resource: K8sResource) -> str:
    """``kubectl describe`` for a ConfigMap or Secret; secret values show as byte counts."""
    data = resource.spec.get("data", {})
    lines = [
        _field("Name", resource.metadata.name),
        _field("Namespace", resource.metadata.namespace),
        *_mapping_lines("Labels", resource.metadata.labels),
        _field("Annotations", "<none>"),
        "",
    ]
    if resource.kind == "Secret":
        lines.extend([_field("Type", resource.spec.get("type", "Opaque"), width=7), "", "Data", "===="])
        lines.extend(f"{key}:  {len(str(value))} bytes" for key, value in data.items())
        return "\n".join(lines)
    lines.extend(["Data", "===="])
    for key, value in data.items():
        lines.extend([f"{key}:", "----", str(value), ""])
    lines.extend(["BinaryData", "====", "", "Events:  <none>"])
    return "\n".join(lines)


__all__ = [
    "HELP_TEXT",
    "describe_config",
    "describe_deployment",
    "describe_job",
    "describe_node",
    "describe_pod",
    "describe_service",
    "format_age",
    "format_configmaps",
    "format_deployments",
    "format_endpoints",
    "format_events",
    "format_jobs",
    "format_logs",
    "format_namespaces",
    "format_nodes",
    "format_pods",
    "format_secrets",
    "format_services",
    "format_since",
    "format_timestamp",
    "format_top_nodes",
    "format_top_pods",
    "parse_cpu",
    "parse_memory",
    "pod_usage",
    "table",
]

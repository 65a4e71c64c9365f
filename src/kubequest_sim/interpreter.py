"""Interpreter for the restricted ``kubectl`` grammar understood by the simulator."""

from __future__ import annotations

import json
import logging
import shlex
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import PurePath
from typing import Any

import yaml
from pydantic import BaseModel, Field

from kubequest_sim import render
from kubequest_sim.cluster import ClusterModel
from kubequest_sim.criteria import ready_endpoints
from kubequest_sim.models import (
    ClusterState,
    CommandResult,
    K8sEvent,
    K8sResource,
    PodState,
    PodStatus,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
Outcome = tuple[str, int]

MISSING_RESOURCE_TYPE = (
    'error: You must specify the type of resource to get. Use "kubectl api-resources" '
    "for a complete list of supported resources."
)

RESOURCE_ALIASES = {
    "pod": "pods", "pods": "pods", "po": "pods",
    "node": "nodes", "nodes": "nodes", "no": "nodes",
    "event": "events", "events": "events", "ev": "events",
    "service": "services", "services": "services", "svc": "services",
    "deployment": "deployments", "deployments": "deployments", "deploy": "deployments",
    "namespace": "namespaces", "namespaces": "namespaces", "ns": "namespaces",
    "endpoints": "endpoints", "ep": "endpoints",
    "configmap": "configmaps", "configmaps": "configmaps", "cm": "configmaps",
    "secret": "secrets", "secrets": "secrets",
    "job": "jobs", "jobs": "jobs",
}

# Kinds the simulated cluster holds no objects of: listing succeeds empty,
# naming one is NotFound.  Values say whether the kind is namespaced.
_EMPTY_KINDS = {
    "networkpolicies": True,
    "ingresses": True,
    "resourcequotas": True,
    "persistentvolumeclaims": True,
    "statefulsets": True,
    "daemonsets": True,
    "cronjobs": True,
    "horizontalpodautoscalers": True,
    "serviceaccounts": True,
    "roles": True,
    "rolebindings": True,
    "servicemonitors": True,
    "applications": True,
    "ingressclasses": False,
    "validatingwebhookconfigurations": False,
    "mutatingwebhookconfigurations": False,
    "persistentvolumes": False,
    "storageclasses": False,
    "clusterroles": False,
    "clusterrolebindings": False,
    "customresourcedefinitions": False,
    "podsecuritypolicies": False,
}
_EMPTY_KIND_ALIASES = {
    "networkpolicy": "networkpolicies", "netpol": "networkpolicies",
    "ingress": "ingresses", "ing": "ingresses",
    "quota": "resourcequotas", "resourcequota": "resourcequotas",
    "persistentvolumeclaim": "persistentvolumeclaims", "pvc": "persistentvolumeclaims",
    "statefulset": "statefulsets", "sts": "statefulsets",
    "daemonset": "daemonsets", "ds": "daemonsets",
    "cronjob": "cronjobs", "cj": "cronjobs",
    "horizontalpodautoscaler": "horizontalpodautoscalers", "hpa": "horizontalpodautoscalers",
    "serviceaccount": "serviceaccounts", "sa": "serviceaccounts",
    "role": "roles",
    "rolebinding": "rolebindings",
    "servicemonitor": "servicemonitors",
    "application": "applications",
    "ingressclass": "ingressclasses",
    "validatingwebhookconfiguration": "validatingwebhookconfigurations",
    "mutatingwebhookconfiguration": "mutatingwebhookconfigurations",
    "persistentvolume": "persistentvolumes", "pv": "persistentvolumes",
    "storageclass": "storageclasses", "sc": "storageclasses",
    "clusterrole": "clusterroles",
    "clusterrolebinding": "clusterrolebindings",
    "customresourcedefinition": "customresourcedefinitions", "crd": "customresourcedefinitions",
    "crds": "customresourcedefinitions",
    "podsecuritypolicy": "podsecuritypolicies", "psp": "podsecuritypolicies",
}
RESOURCE_ALIASES.update({kind: kind for kind in _EMPTY_KINDS})
RESOURCE_ALIASES.update(_EMPTY_KIND_ALIASES)

# kubectl's display name for NotFound errors, and ClusterModel's kind key.
_NOT_FOUND_NAMES = {
    "pods": "pods",
    "nodes": "nodes",
    "services": "services",
    "deployments": "deployments.apps",
    "configmaps": "configmaps",
    "secrets": "secrets",
    "jobs": "jobs.batch",
}
_MODEL_KINDS = {
    "services": "service",
    "deployments": "deployment",
    "configmaps": "configmap",
    "secrets": "secret",
}
_MANIFEST_KINDS = {
    "pods": "pod",
    "nodes": "node",
    "services": "service",
    "deployments": "deployment.apps",
    "configmaps": "configmap",
    "secrets": "secret",
}

_VALUE_FLAGS = {
    "-n": "namespace", "--namespace": "namespace",
    "-c": "container", "--container": "container",
    "-o": "output", "--output": "output",
    "-f": "filename", "--filename": "filename",
    "-l": "selector", "--selector": "selector",
    "--field-selector": "field_selector",
    "--sort-by": "sort_by",
    "--replicas": "replicas",
    "--grace-period": "grace_period",
}
_BOOL_FLAGS = {
    "-A": "all_namespaces", "--all-namespaces": "all_namespaces",
    "-p": "previous", "--previous": "previous",
    "--force": "force",
}
_LOGS_BOOL_FLAGS = {"-f": "follow", "--follow": "follow"}


class CommandFailure(Exception):
    """Raised inside handlers to short-circuit with a kubectl error line."""

    def __init__(self, output: str, exit_code: int = 1) -> None:
        super().__init__(output)
        self.output = output
        self.exit_code = exit_code


class ParsedCommand(BaseModel):
    """Tokenized ``kubectl`` invocation."""

    raw: str
    positionals: list[str] = Field(default_factory=list)
    namespace: str | None = None
    all_namespaces: bool = False
    previous: bool = False
    follow: bool = False
    container: str | None = None
    output: str | None = None
    filename: str | None = None
    selector: str | None = None
    field_selector: str | None = None
    sort_by: str | None = None
    replicas: str | None = None
    grace_period: str | None = None
    force: bool = False
    extra_flags: list[str] = Field(default_factory=list)
    trailing: list[str] = Field(default_factory=list)

    @property
    def verb(self) -> str | None:
        return self.positionals[0] if self.positionals else None

    @property
    def args(self) -> list[str]:
        return self.positionals[1:]


def tokenize(command: str) -> list[str]:
    """Split *command* shell-style, falling back to whitespace on bad quoting."""
    try:
        return shlex.split(command)
    except ValueError:
        return command.split()


def parse_kubectl(command: str, tokens: list[str] | None = None) -> ParsedCommand:
    """Parse a ``kubectl ...`` command line into a :class:`ParsedCommand`."""
    tokens = tokenize(command) if tokens is None else tokens
    values: dict[str, Any] = {"raw": command}
    positionals: list[str] = []
    extra: list[str] = []
    index = 1
    while index < len(tokens):
        token = tokens[index]
        index += 1
        if token == "--":
            values["trailing"] = tokens[index:]
            break
        name, _, inline = token.partition("=")
        # logs reads -f as --follow; every other verb as --filename.
        if token in _LOGS_BOOL_FLAGS and positionals[:1] == ["logs"]:
            values[_LOGS_BOOL_FLAGS[token]] = True
            continue
        if name in _VALUE_FLAGS:
            if inline:
                values[_VALUE_FLAGS[name]] = inline
            elif index < len(tokens):
                values[_VALUE_FLAGS[name]] = tokens[index]
                index += 1
            continue
        if token in _BOOL_FLAGS:
            values[_BOOL_FLAGS[token]] = True
            continue
        if token.startswith("-") and len(token) > 1:
            extra.append(token)
            continue
        positionals.append(token)
    values["positionals"] = positionals
    values["extra_flags"] = extra
    return ParsedCommand.model_validate(values)


def _parse_pairs(expression: str | None) -> dict[str, str]:
    pairs: dict[str, str] = {}
    for item in (expression or "").split(","):
        key, sep, value = item.partition("=")
        if sep:
            pairs[key.strip().rstrip("!")] = value.strip()
    return pairs


def _split_target(args: list[str]) -> tuple[str | None, str | None]:
    """Return (resource, name) from ``TYPE NAME`` or ``TYPE/NAME`` arguments."""
    if not args:
        return None, None
    first = args[0]
    if "/" in first:
        resource, _, name = first.partition("/")
        return resource, name or None
    return first, args[1] if len(args) > 1 else None


class CommandInterpreter:
    """Execute simulated ``kubectl`` commands against a :class:`ClusterState`.

    The interpreter never mutates the state it is given.  Mutation verbs
    (``apply``, ``set``, ``patch`` ...) return the confirmation text kubectl
    would print; the session decides whether they change the cluster.
    """

    def __init__(self, clock: Clock | None = None, default_namespace: str = "default") -> None:
        self._clock = clock or (lambda: datetime.now(tz=UTC))
        self._default_namespace = default_namespace
        self._queries: dict[tuple[str, str], Callable[[ParsedCommand, ClusterState], Outcome]] = {
            ("get", "pods"): self._get_pods,
            ("get", "nodes"): self._get_nodes,
            ("get", "events"): self._get_events,
            ("get", "services"): self._get_services,
            ("get", "deployments"): self._get_deployments,
            ("get", "namespaces"): self._get_namespaces,
            ("get", "endpoints"): self._get_endpoints,
            ("get", "configmaps"): self._get_configmaps,
            ("get", "secrets"): self._get_secrets,
            ("get", "jobs"): self._get_jobs,
            ("describe", "pods"): self._describe_pod,
            ("describe", "nodes"): self._describe_node,
            ("describe", "services"): self._describe_service,
            ("describe", "deployments"): self._describe_deployment,
            ("describe", "configmaps"): self._describe_configmap,
            ("describe", "secrets"): self._describe_secret,
            ("describe", "jobs"): self._describe_job,
            ("top", "nodes"): self._top_nodes,
            ("top", "pods"): self._top_pods,
        }
        for kind in _EMPTY_KINDS:
            self._queries[("get", kind)] = self._empty_kind
            self._queries[("describe", kind)] = self._empty_kind
        self._mutations: dict[str, Callable[[ParsedCommand, ClusterState], Outcome]] = {
            "apply": self._apply,
            "set": self._set,
            "rollout": self._rollout,
            "edit": self._edit_or_patch,
            "patch": self._edit_or_patch,
            "delete": self._delete,
            "scale": self._scale,
            "create": self._create,
            "label": self._label,
            "annotate": self._label,
            "taint": self._taint,
            "cordon": self._node_action,
            "uncordon": self._node_action,
            "drain": self._node_action,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def execute(self, command: str, state: ClusterState) -> CommandResult:
        """Interpret *command* and return its :class:`CommandResult`."""
        try:
            output, exit_code = self._dispatch(command.strip(), state)
        except CommandFailure as exc:
            output, exit_code = exc.output, exc.exit_code
        logger.debug("Command %r exited with %d", command, exit_code)
        return CommandResult(command=command, output=output, exit_code=exit_code, timestamp=self._clock())

    def supports(self, verb: str, resource: str) -> bool:
        return (verb, RESOURCE_ALIASES.get(resource, resource)) in self._queries

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _dispatch(self, command: str, state: ClusterState) -> Outcome:
        if command == "help":
            return render.HELP_TEXT, 0
        if command == "clear":
            return "", 0
        tokens = tokenize(command)
        if not tokens or tokens[0] != "kubectl":
            word = tokens[0] if tokens else ""
            return f"bash: {word}: command not found", 127

        cmd = parse_kubectl(command, tokens)
        if cmd.verb is None:
            return MISSING_RESOURCE_TYPE, 1
        if cmd.verb in self._mutations:
            return self._mutations[cmd.verb](cmd, state)
        if cmd.verb == "logs":
            return self._logs(cmd, state)

        resource, _ = _split_target(cmd.args)
        if resource is None:
            if cmd.verb == "get":
                return MISSING_RESOURCE_TYPE, 1
            return 'error: the server doesn\'t have a resource type ""', 1
        handler = self._queries.get((cmd.verb, RESOURCE_ALIASES.get(resource, resource)))
        if handler is None:
            return f'error: the server doesn\'t have a resource type "{resource}"', 1
        return handler(cmd, state)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _namespace(self, cmd: ParsedCommand) -> str:
        return cmd.namespace or self._default_namespace

    def _no_resources(self, cmd: ParsedCommand) -> Outcome:
        return f"No resources found in {self._namespace(cmd)} namespace.", 0

    @staticmethod
    def _not_found(resource: str, name: str) -> Outcome:
        return f'Error from server (NotFound): {_NOT_FOUND_NAMES.get(resource, resource)} "{name}" not found', 1

    def _scoped(self, cmd: ParsedCommand, items: list[Any], namespace_of: Callable[[Any], str | None]) -> list[Any]:
        if cmd.all_namespaces:
            return items
        namespace = self._namespace(cmd)
        return [item for item in items if namespace_of(item) == namespace]

    def _filter_pods(self, cmd: ParsedCommand, pods: list[PodState]) -> list[PodState]:
        labels = _parse_pairs(cmd.selector)
        if labels:
            pods = [p for p in pods if all(p.labels.get(k) == v for k, v in labels.items())]
        fields = _parse_pairs(cmd.field_selector)
        if "status.phase" in fields:
            pods = [p for p in pods if p.status == fields["status.phase"]]
        if "spec.nodeName" in fields:
            pods = [p for p in pods if p.node == fields["spec.nodeName"]]
        return pods

    def _structured(self, cmd: ParsedCommand, documents: list[dict[str, Any]]) -> Outcome | None:
        """Render ``-o yaml`` / ``-o json``; ``None`` when another format was requested."""
        if cmd.output not in ("yaml", "json"):
            return None
        payload: dict[str, Any] = documents[0] if len(documents) == 1 else {
            "apiVersion": "v1",
            "kind": "List",
            "items": documents,
        }
        if cmd.output == "json":
            return json.dumps(payload, indent=4, default=str), 0
        return yaml.safe_dump(payload, sort_keys=False, default_flow_style=False).rstrip(), 0

    @staticmethod
    def _manifest(resource: K8sResource) -> dict[str, Any]:
        metadata = resource.metadata.model_dump(exclude_none=True, exclude_defaults=True)
        if resource.metadata.creation_timestamp is not None:
            metadata["creationTimestamp"] = render.format_timestamp(resource.metadata.creation_timestamp)
            metadata.pop("creation_timestamp", None)
        document: dict[str, Any] = {"apiVersion": resource.api_version, "kind": resource.kind, "metadata": metadata}
        if resource.kind in ("ConfigMap", "Secret"):
            document["data"] = resource.spec.get("data", {})
            if "type" in resource.spec:
                document["type"] = resource.spec["type"]
        else:
            document["spec"] = resource.spec
            document["status"] = resource.status
        return document

    @staticmethod
    def _pod_manifest(pod: PodState) -> dict[str, Any]:
        return {
            "apiVersion": "v1",
            "kind": "Pod",
            "metadata": {"name": pod.name, "namespace": pod.namespace, "labels": pod.labels},
            "spec": {
                "nodeName": pod.node,
                "containers": [
                    {
                        "name": c.name,
                        "image": c.image,
                        "resources": c.resources.model_dump(),
                        "env": [{"name": k, "value": v} for k, v in c.env.items()],
                    }
                    for c in pod.containers
                ],
            },
            "status": {
                "phase": pod.status.value,
                "podIP": pod.ip,
                "containerStatuses": [
                    {"name": c.name, "ready": c.ready, "restartCount": c.restart_count}
                    for c in pod.containers
                ],
            },
        }

    def _events_for(self, state: ClusterState, kind: str, name: str) -> list[K8sEvent]:
        return [
            event
            for event in state.events
            if event.involved_object.kind == kind and event.involved_object.name == name
        ]

    def _endpoint_addresses(self, model: ClusterModel, service: K8sResource) -> list[str]:
        if not service.spec.get("selector"):
            return list(service.status.get("endpoints", []))
        ports = service.spec.get("ports") or [{}]
        target = ports[0].get("targetPort", ports[0].get("port", 80))
        return [
            f"{pod.ip}:{target}"
            for pod in ready_endpoints(model, service.metadata.name, service.metadata.namespace)
            if pod.ip
        ]

    # ------------------------------------------------------------------
    # get
    # ------------------------------------------------------------------

    def _get_pods(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        _, name = _split_target(cmd.args)
        pods = self._filter_pods(cmd, self._scoped(cmd, list(state.pods), lambda p: p.namespace))
        if name is not None:
            pods = [pod for pod in pods if pod.name == name]
            if not pods:
                return self._not_found("pods", name)
        if not pods:
            return self._no_resources(cmd)
        structured = self._structured(cmd, [self._pod_manifest(p) for p in pods])
        if structured is not None:
            return structured
        now = self._clock()
        return render.format_pods(pods, now, cmd.all_namespaces, wide=cmd.output == "wide"), 0

    def _get_nodes(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        _, name = _split_target(cmd.args)
        nodes = list(state.nodes)
        if name is not None:
            nodes = [node for node in nodes if node.name == name]
            if not nodes:
                return self._not_found("nodes", name)
        if not nodes:
            return "No resources found", 0
        structured = self._structured(cmd, [n.model_dump(mode="json") for n in nodes])
        if structured is not None:
            return structured
        return render.format_nodes(nodes, self._clock()), 0

    def _get_events(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        events = list(state.events)
        if cmd.namespace is not None and not cmd.all_namespaces:
            events = [e for e in events if e.involved_object.namespace == cmd.namespace]
        if not events:
            return self._no_resources(cmd)
        return render.format_events(events, self._clock(), cmd.all_namespaces), 0

    def _get_resources(
        self,
        cmd: ParsedCommand,
        resource: str,
        items: list[K8sResource],
        formatter: Callable[..., str],
    ) -> Outcome:
        _, name = _split_target(cmd.args)
        items = self._scoped(cmd, items, lambda r: r.metadata.namespace)
        if name is not None:
            items = [item for item in items if item.metadata.name == name]
            if not items:
                return self._not_found(resource, name)
        if not items:
            return self._no_resources(cmd)
        structured = self._structured(cmd, [self._manifest(item) for item in items])
        if structured is not None:
            return structured
        return formatter(items, self._clock(), cmd.all_namespaces), 0

    def _get_services(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        return self._get_resources(cmd, "services", list(state.services), render.format_services)

    def _get_deployments(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        return self._get_resources(cmd, "deployments", list(state.deployments), render.format_deployments)

    def _get_configmaps(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        return self._get_resources(cmd, "configmaps", list(state.config_maps), render.format_configmaps)

    def _get_secrets(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        return self._get_resources(cmd, "secrets", list(state.secrets), render.format_secrets)

    def _get_namespaces(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        now = self._clock()
        oldest = min((node.created_at for node in state.nodes), default=now)
        return render.format_namespaces(state.namespaces, render.format_age(oldest, now)), 0

    def _get_endpoints(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        model = ClusterModel(state)
        services = self._scoped(cmd, list(state.services), lambda s: s.metadata.namespace)
        _, name = _split_target(cmd.args)
        if name is not None:
            services = [s for s in services if s.metadata.name == name]
            if not services:
                return f'Error from server (NotFound): endpoints "{name}" not found', 1
        if not services:
            return self._no_resources(cmd)
        rows = [(service, self._endpoint_addresses(model, service)) for service in services]
        return render.format_endpoints(rows, self._clock(), cmd.all_namespaces), 0

    def _job_pods(self, cmd: ParsedCommand, state: ClusterState) -> dict[str, list[PodState]]:
        jobs: dict[str, list[PodState]] = {}
        for pod in self._scoped(cmd, list(state.pods), lambda p: p.namespace):
            if "job-name" in pod.labels:
                jobs.setdefault(pod.labels["job-name"], []).append(pod)
        return jobs

    def _get_jobs(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        _, name = _split_target(cmd.args)
        jobs = self._job_pods(cmd, state)
        if name is not None:
            if name not in jobs:
                return self._not_found("jobs", name)
            jobs = {name: jobs[name]}
        if not jobs:
            return self._no_resources(cmd)
        return render.format_jobs(list(jobs.items()), self._clock()), 0

    def _empty_kind(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        resource, name = _split_target(cmd.args)
        kind = RESOURCE_ALIASES[resource or ""]
        if name is not None:
            return self._not_found(kind, name)
        if _EMPTY_KINDS[kind] and not cmd.all_namespaces:
            return self._no_resources(cmd)
        return "No resources found", 0

    # ------------------------------------------------------------------
    # describe
    # ------------------------------------------------------------------

    def _describe_pod(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        _, name = _split_target(cmd.args)
        namespace = self._namespace(cmd)
        now = self._clock()
        if name is None:
            pods = self._scoped(cmd, list(state.pods), lambda p: p.namespace)
            if not pods:
                return self._no_resources(cmd)
            return "\n\n\n".join(render.describe_pod(pod, now) for pod in pods), 0
        pod = ClusterModel(state).find_pod(name, None if cmd.all_namespaces else namespace)
        if pod is None:
            return self._not_found("pods", name)
        return render.describe_pod(pod, now), 0

    def _describe_node(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        _, name = _split_target(cmd.args)
        nodes = list(state.nodes) if name is None else [n for n in state.nodes if n.name == name]
        if not nodes:
            return self._not_found("nodes", name or "")
        now = self._clock()
        blocks = [
            render.describe_node(
                node,
                [pod for pod in state.pods if pod.node == node.name],
                self._events_for(state, "Node", node.name),
                now,
            )
            for node in nodes
        ]
        return "\n\n\n".join(blocks), 0

    def _describe_service(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        _, name = _split_target(cmd.args)
        model = ClusterModel(state)
        services = self._scoped(cmd, list(state.services), lambda s: s.metadata.namespace)
        if name is not None:
            services = [s for s in services if s.metadata.name == name]
            if not services:
                return self._not_found("services", name)
        if not services:
            return self._no_resources(cmd)
        now = self._clock()
        blocks = [
            render.describe_service(
                service,
                self._endpoint_addresses(model, service),
                self._events_for(state, "Service", service.metadata.name),
                now,
            )
            for service in services
        ]
        return "\n\n\n".join(blocks), 0

    def _describe_deployment(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        _, name = _split_target(cmd.args)
        deployments = self._scoped(cmd, list(state.deployments), lambda d: d.metadata.namespace)
        if name is not None:
            deployments = [d for d in deployments if d.metadata.name == name]
            if not deployments:
                return self._not_found("deployments", name)
        if not deployments:
            return self._no_resources(cmd)
        now = self._clock()
        blocks = [
            render.describe_deployment(
                deployment,
                [
                    event
                    for event in state.events
                    if event.involved_object.name.startswith(deployment.metadata.name)
                    and event.involved_object.kind in ("Deployment", "ReplicaSet")
                ],
                now,
            )
            for deployment in deployments
        ]
        return "\n\n\n".join(blocks), 0

    def _describe_data(self, cmd: ParsedCommand, resource: str, items: list[K8sResource]) -> Outcome:
        _, name = _split_target(cmd.args)
        items = self._scoped(cmd, items, lambda r: r.metadata.namespace)
        if name is not None:
            items = [item for item in items if item.metadata.name == name]
            if not items:
                return self._not_found(resource, name)
        if not items:
            return self._no_resources(cmd)
        return "\n\n\n".join(render.describe_config(item) for item in items), 0

    def _describe_configmap(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        return self._describe_data(cmd, "configmaps", list(state.config_maps))

    def _describe_secret(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        return self._describe_data(cmd, "secrets", list(state.secrets))

    def _describe_job(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        _, name = _split_target(cmd.args)
        jobs = self._job_pods(cmd, state)
        if name is not None:
            if name not in jobs:
                return self._not_found("jobs", name)
            jobs = {name: jobs[name]}
        if not jobs:
            return self._no_resources(cmd)
        now = self._clock()
        blocks = [
            render.describe_job(
                job, pods[0].namespace, pods, self._events_for(state, "Job", job), now
            )
            for job, pods in jobs.items()
        ]
        return "\n\n\n".join(blocks), 0

    # ------------------------------------------------------------------
    # logs and top
    # ------------------------------------------------------------------

    def _resolve_log_pod(self, cmd: ParsedCommand, state: ClusterState) -> PodState:
        namespace = self._namespace(cmd)
        model = ClusterModel(state)
        if not cmd.args and cmd.selector:
            pods = model.pods_selected_by(_parse_pairs(cmd.selector), namespace)
            if not pods:
                raise CommandFailure(f"No resources found in {namespace} namespace.", 0)
            return pods[0]
        if not cmd.args:
            raise CommandFailure("error: expected 'logs [-f] [-p] (POD | TYPE/NAME) [-c CONTAINER]'.")
        target = cmd.args[0]
        kind, _, name = target.partition("/") if "/" in target else ("pod", "", target)
        kind = RESOURCE_ALIASES.get(kind, kind)
        if kind == "pods":
            pod = model.find_pod(name, namespace)
            if pod is None:
                raise CommandFailure(*self._not_found("pods", name))
            return pod
        if kind == "deployments":
            deployment = model.find_resource("deployment", name, namespace)
            if deployment is None:
                raise CommandFailure(*self._not_found("deployments", name))
            selector = deployment.spec.get("selector", {}).get("matchLabels", {})
            pods = model.pods_selected_by(selector, namespace)
        elif kind in ("job", "jobs"):
            pods = model.pods_selected_by({"job-name": name}, namespace)
        else:
            raise CommandFailure(f'error: the server doesn\'t have a resource type "{kind}"')
        if not pods:
            raise CommandFailure(f"error: timed out waiting for the condition: no pods found for {target}")
        return pods[0]

    def _logs(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        pod = self._resolve_log_pod(cmd, state)
        names = [c.name for c in [*pod.containers, *pod.init_containers]]
        container = cmd.container or (pod.containers[0].name if pod.containers else None)
        if cmd.container is not None and cmd.container not in names:
            return f"error: container {cmd.container} is not valid for pod {pod.name}", 1
        if cmd.previous and pod.restart_count == 0:
            return (
                "Error from server (BadRequest): previous terminated container "
                f'"{container}" in pod "{pod.name}" not found'
            ), 1
        entries = [
            entry
            for entry in pod.logs
            if entry.container is None or entry.container == container
        ]
        return render.format_logs(entries), 0

    def _top_nodes(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        return render.format_top_nodes(state.nodes), 0

    def _top_pods(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        pods = self._scoped(cmd, list(state.pods), lambda p: p.namespace)
        pods = [pod for pod in self._filter_pods(cmd, pods) if pod.status == PodStatus.running]
        if not pods:
            return self._no_resources(cmd)
        return render.format_top_pods(pods, cmd.all_namespaces), 0

    # ------------------------------------------------------------------
    # Mutation verbs (text only)
    # ------------------------------------------------------------------

    def _exists(self, state: ClusterState, resource: str, name: str, namespace: str) -> bool | None:
        """Return whether the object exists, or ``None`` when the kind is not modelled."""
        model = ClusterModel(state)
        if resource == "pods":
            return model.find_pod(name, namespace) is not None
        if resource == "nodes":
            return model.find_node(name) is not None
        if resource in _MODEL_KINDS:
            return model.find_resource(_MODEL_KINDS[resource], name, namespace) is not None
        return None

    def _target(self, cmd: ParsedCommand, state: ClusterState, args: list[str]) -> tuple[str, str]:
        resource, name = _split_target(args)
        if resource is None:
            raise CommandFailure(MISSING_RESOURCE_TYPE)
        if name is None:
            raise CommandFailure("error: resource(s) were provided, but no name was specified")
        canonical = RESOURCE_ALIASES.get(resource, resource)
        if self._exists(state, canonical, name, self._namespace(cmd)) is False:
            raise CommandFailure(*self._not_found(canonical, name))
        return _MANIFEST_KINDS.get(canonical, resource), name

    def _apply(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        if not cmd.filename:
            return "error: must specify one of -f and -k", 1
        stem = PurePath(cmd.filename).stem or "manifest"
        return f"deployment.apps/{stem} configured", 0

    def _set(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        messages = {"env": "env updated", "image": "image updated", "resources": "resource requirements updated"}
        if not cmd.args or cmd.args[0] not in messages:
            return 'error: unknown command "set" for "kubectl", expected env, image or resources', 1
        kind, name = self._target(cmd, state, cmd.args[1:])
        return f"{kind}/{name} {messages[cmd.args[0]]}", 0

    def _rollout(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        if not cmd.args or cmd.args[0] not in ("restart", "status", "undo"):
            return "error: rollout requires one of restart, status, undo", 1
        kind, name = self._target(cmd, state, cmd.args[1:])
        if cmd.args[0] == "status":
            return f'{kind.split(".")[0]} "{name}" successfully rolled out', 0
        return f"{kind}/{name} {'restarted' if cmd.args[0] == 'restart' else 'rolled back'}", 0

    def _edit_or_patch(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        kind, name = self._target(cmd, state, cmd.args)
        return f"{kind}/{name} {'edited' if cmd.verb == 'edit' else 'patched'}", 0

    def _delete(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        kind, name = self._target(cmd, state, cmd.args)
        return f'{kind.split(".")[0]} "{name}" deleted', 0

    def _scale(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        if cmd.replicas is None:
            return 'error: required flag(s) "replicas" not set', 1
        if not cmd.replicas.isdigit():
            return f'error: invalid argument "{cmd.replicas}" for "--replicas" flag', 1
        kind, name = self._target(cmd, state, cmd.args)
        return f"{kind}/{name} scaled", 0

    def _create(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        if not cmd.args:
            return "error: must specify one of -f and -k", 1
        kind = cmd.args[0]
        names = cmd.args[1:]
        if kind == "secret" and names and names[0] in ("generic", "tls", "docker-registry"):
            names = names[1:]
        if not names:
            return "error: exactly one NAME is required, got 0", 1
        canonical = RESOURCE_ALIASES.get(kind, kind)
        if self._exists(state, canonical, names[0], self._namespace(cmd)):
            return (
                f'Error from server (AlreadyExists): {_NOT_FOUND_NAMES.get(canonical, kind)} '
                f'"{names[0]}" already exists'
            ), 1
        return f"{_MANIFEST_KINDS.get(canonical, kind)}/{names[0]} created", 0

    def _label(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        kind, name = self._target(cmd, state, cmd.args)
        return f"{kind}/{name} {'labeled' if cmd.verb == 'label' else 'annotated'}", 0

    def _taint(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        kind, name = self._target(cmd, state, cmd.args)
        spec = cmd.args[-1] if len(cmd.args) > 2 or "/" in cmd.args[0] else ""
        return f"{kind}/{name} {'untainted' if spec.endswith('-') else 'tainted'}", 0

    def _node_action(self, cmd: ParsedCommand, state: ClusterState) -> Outcome:
        if not cmd.args:
            return f"error: USAGE: {cmd.verb} NODE [flags]", 1
        name = cmd.args[0].removeprefix("node/").removeprefix("nodes/")
        if ClusterModel(state).find_node(name) is None:
            return self._not_found("nodes", name)
        past = {"cordon": "cordoned", "uncordon": "uncordoned", "drain": "drained"}[cmd.verb or ""]
        return f"node/{name} {past}", 0


__all__ = [
    "CommandFailure",
    "CommandInterpreter",
    "ParsedCommand",
    "RESOURCE_ALIASES",
    "parse_kubectl",
    "tokenize",
]

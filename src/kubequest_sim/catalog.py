"""Static catalog of debugging scenarios."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from datetime import UTC, datetime
from typing import Any

from kubequest_sim.cluster import build_default_cluster
from kubequest_sim.config import Settings
from kubequest_sim.core import FaultInjector, ScenarioNotFoundError
from kubequest_sim.models import (
    ClusterState,
    ConditionType,
    DebugScenario,
    Difficulty,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Descriptor helpers
# ---------------------------------------------------------------------------


def _cond(type: ConditionType, target: str, expected: Any = None) -> dict[str, Any]:
    return {"type": type, "target": target, "expected": expected}


def _hint(trigger: str, message: str, command: str | None = None, priority: int = 1) -> dict[str, Any]:
    return {"trigger": trigger, "message": message, "command": command, "priority": priority}


def _scenario(
    id: str,
    name: str,
    description: str,
    category: str,
    difficulty: Difficulty,
    estimated_time: str,
    objectives: list[str],
    fault: tuple[str, str, dict[str, Any]],
    conditions: list[dict[str, Any]],
    hints: list[dict[str, Any]],
    commands: list[str],
    fixes: list[str],
) -> DebugScenario:
    fault_type, target, parameters = fault
    fix_commands = list(fixes)
    if "kubectl apply" not in fix_commands:
        fix_commands.append("kubectl apply")
    return DebugScenario.model_validate(
        {
            "id": id,
            "name": name,
            "description": description,
            "category": category,
            "difficulty": difficulty,
            "estimated_time": estimated_time,
            "objectives": objectives,
            "fault_injection": {"type": fault_type, "target": target, "parameters": parameters},
            "success_criteria": {"conditions": conditions},
            "hints": [{"id": str(index), **hint} for index, hint in enumerate(hints, start=1)],
            "commands": commands,
            "fix_commands": fix_commands,
        }
    )


B = Difficulty.beginner
I = Difficulty.intermediate  # noqa: E741
A = Difficulty.advanced
E = Difficulty.expert
C = ConditionType

# ---------------------------------------------------------------------------
# Scenario table
# ---------------------------------------------------------------------------

SCENARIOS: list[DebugScenario] = [
    # Pod-level debugging
    _scenario(
        "crashloop-1", "CrashLoopBackOff Mystery",
        "Pod starts, crashes repeatedly due to missing environment variable",
        "pod-issues", B, "10-15 minutes",
        ["Check container logs for stack trace or segfault",
         "Use kubectl describe pod to examine events",
         "Fix entrypoint or missing environment variable",
         "Verify pod reaches Running state"],
        ("missing-env-var", "nginx-deployment", {"envVar": "DATABASE_URL"}),
        [_cond(C.pod_status, "nginx-*", "Running")],
        [_hint("pod-crashloop", "Check the pod logs to see what error is causing the crash",
               "kubectl logs nginx-deployment-abc123"),
         _hint("missing-env", "The application panics on a missing DATABASE_URL; set it on the deployment",
               "kubectl set env deployment/nginx-deployment DATABASE_URL=postgres://database-service:5432/app",
               priority=2)],
        ["kubectl get pods", "kubectl describe pod", "kubectl logs"],
        ["kubectl set env", "kubectl edit deployment", "kubectl patch deployment"],
    ),
    _scenario(
        "imagepull-1", "ImagePullBackOff Challenge",
        "Kubernetes cannot pull container image from private registry",
        "pod-issues", B, "8-12 minutes",
        ["Identify ImagePullBackOff error in pod status",
         "Check image name and registry access",
         "Validate or create image pull secrets",
         "Verify pod can pull image successfully"],
        ("image-pull-error", "private-registry", {"missingSecret": True}),
        [_cond(C.pod_status, "frontend-*", "Running")],
        [_hint("image-pull-fail", "Check if the image exists and credentials are correct",
               "kubectl describe pod frontend-deployment-ghi789"),
         _hint("wrong-image", "Point the deployment back at a reachable image",
               "kubectl set image deployment/frontend-deployment frontend=myapp/frontend:v2.1.0",
               priority=2)],
        ["kubectl get pods", "kubectl describe pod", "kubectl get secrets"],
        ["kubectl set image", "kubectl create secret", "kubectl patch deployment", "kubectl edit deployment"],
    ),
    _scenario(
        "pod-pending-1", "Pod Stuck Pending",
        "Pod scheduled but not running due to resource constraints",
        "pod-issues", B, "12-18 minutes",
        ["Check why pod is in Pending state",
         "Examine node availability and taints",
         "Verify resource requests vs available resources",
         "Fix scheduling constraints"],
        ("insufficient-resources", "worker-nodes", {"cpuShortage": True}),
        [_cond(C.pod_scheduled, "frontend-*", True)],
        [_hint("pod-pending", "Check node conditions and available resources", "kubectl describe nodes"),
         _hint("cpu-request", "The pod requests 16 CPUs; lower the request",
               "kubectl set resources deployment/frontend-deployment --requests=cpu=150m", priority=2)],
        ["kubectl get pods", "kubectl describe pod", "kubectl get nodes", "kubectl describe nodes"],
        ["kubectl set resources", "kubectl edit deployment", "kubectl patch deployment"],
    ),
    _scenario(
        "liveness-probe-failure-1", "Liveness Probe Failure",
        "Pod restarted repeatedly despite app working intermittently",
        "pod-issues", I, "12-18 minutes",
        ["Check liveness probe configuration",
         "Analyze probe timing and thresholds",
         "Confirm endpoint behavior",
         "Adjust probe settings"],
        ("liveness-probe-fail", "web-app", {"probeTimeout": True}),
        [_cond(C.pod_ready, "web-*", True)],
        [_hint("restart-loop", "Check liveness probe timing and endpoint response",
               "kubectl describe pod web-app-xyz123")],
        ["kubectl describe pod", "kubectl logs", "kubectl exec -- curl"],
        ["kubectl edit deployment", "kubectl patch deployment"],
    ),
    # Networking
    _scenario(
        "service-unreachable-1", "Service Not Reachable",
        "Application cannot reach other service due to wrong selector",
        "networking", I, "15-20 minutes",
        ["Test service connectivity between pods",
         "Validate service name and selectors",
         "Check service ports and endpoints",
         "Fix service configuration"],
        ("service-selector-mismatch", "backend-service", {"wrongSelector": True}),
        [_cond(C.service_connectivity, "backend-service", {"app": "backend"})],
        [_hint("connection-refused", "Check if service has endpoints", "kubectl get endpoints"),
         _hint("selector", "Compare the service selector with the pod labels",
               "kubectl describe service backend-service", priority=2)],
        ["kubectl get services", "kubectl get endpoints", "kubectl describe service"],
        ["kubectl patch service", "kubectl edit service"],
    ),
    _scenario(
        "readiness-probe-1", "Readiness Probe Failing",
        "Service marked as not ready due to incorrect probe configuration",
        "networking", I, "10-15 minutes",
        ["Check readiness probe configuration",
         "Verify probe path and port are correct",
         "Adjust probe timing if needed",
         "Ensure service receives traffic"],
        ("readiness-probe-fail", "web-app", {"wrongPath": "/wrong-health"}),
        [_cond(C.pod_ready, "web-*", True)],
        [_hint("probe-fail", "Check the readiness probe path and port", "kubectl describe pod web-app-xyz123")],
        ["kubectl get pods", "kubectl describe pod", "kubectl logs"],
        ["kubectl edit deployment", "kubectl patch deployment"],
    ),
    _scenario(
        "dns-failure-1", "DNS Resolution Fails",
        "Pod cannot resolve internal service names due to CoreDNS issues",
        "networking", A, "20-25 minutes",
        ["Test DNS resolution from within pods",
         "Check CoreDNS pod status and logs",
         "Verify DNS configuration",
         "Fix DNS resolution issues"],
        ("dns-failure", "coredns", {"configError": True}),
        [_cond(C.pod_status, "coredns-*", "Running")],
        [_hint("dns-fail", "Check CoreDNS pods in kube-system namespace", "kubectl get pods -n kube-system")],
        ["kubectl get pods -n kube-system", "kubectl logs -n kube-system", "kubectl exec -- nslookup"],
        ["kubectl rollout restart", "kubectl edit configmap", "kubectl delete pod"],
    ),
    _scenario(
        "coredns-config-error-1", "CoreDNS Configuration Error",
        "DNS resolution fails due to incorrect Corefile configuration",
        "networking", A, "18-25 minutes",
        ["Check CoreDNS configuration",
         "Validate Corefile syntax",
         "Verify zone and upstream settings",
         "Fix DNS configuration"],
        ("coredns-config-error", "coredns", {"corefileError": True}),
        [_cond(C.pod_status, "coredns-*", "Running")],
        [_hint("dns-fail", "Check CoreDNS ConfigMap and pod logs",
               "kubectl get configmap coredns -n kube-system -o yaml")],
        ["kubectl get configmap -n kube-system", "kubectl logs -n kube-system -l k8s-app=kube-dns",
         "kubectl exec -- nslookup"],
        ["kubectl edit configmap", "kubectl rollout restart"],
    ),
    _scenario(
        "network-policy-1", "Network Policy Blocking Traffic",
        "Microservices cannot communicate due to restrictive policies",
        "advanced", A, "25-30 minutes",
        ["Test connectivity between services",
         "Check network policy rules",
         "Identify blocked traffic patterns",
         "Update policies to allow required traffic"],
        ("network-policy-block", "microservices", {"denyAll": True}),
        [_cond(C.pod_ready, "frontend-*", True)],
        [_hint("connection-timeout",
               "Check network policies affecting pod communication; the frontend logs name the policy",
               "kubectl logs frontend-deployment-ghi789")],
        ["kubectl get networkpolicy", "kubectl describe networkpolicy", "kubectl exec -- curl"],
        ["kubectl delete networkpolicy", "kubectl edit networkpolicy"],
    ),
    # Scheduling
    _scenario(
        "node-resources-1", "Node Out of Resources",
        "Pods evicted due to memory pressure on nodes",
        "scheduling", I, "12-18 minutes",
        ["Identify resource pressure on nodes",
         "Check node conditions and capacity",
         "Analyze resource requests vs limits",
         "Implement proper resource management"],
        ("memory-pressure", "worker-nodes", {"memoryExhausted": True}),
        [_cond(C.node_condition, "worker-node-2", "MemoryPressure"),
         _cond(C.pod_status, "redis-*", "Running")],
        [_hint("evicted-pods", "Check node conditions for memory pressure", "kubectl describe nodes")],
        ["kubectl get nodes", "kubectl describe nodes", "kubectl top nodes",
         "kubectl get pods --field-selector=status.phase=Failed"],
        ["kubectl set resources", "kubectl delete pod", "kubectl drain"],
    ),
    _scenario(
        "taints-tolerations-1", "Taints and Tolerations Mismatch",
        "Pod not scheduled due to node taints without matching tolerations",
        "scheduling", I, "15-20 minutes",
        ["Check why pod is not being scheduled",
         "Examine node taints and pod tolerations",
         "Add appropriate tolerations to pod spec",
         "Verify pod gets scheduled successfully"],
        ("taint-mismatch", "worker-nodes", {"taint": "special=true:NoSchedule"}),
        [_cond(C.pod_scheduled, "special-*", True)],
        [_hint("not-scheduled", "Check node taints and pod tolerations", "kubectl describe nodes")],
        ["kubectl get nodes", "kubectl describe nodes", "kubectl describe pod"],
        ["kubectl taint", "kubectl edit deployment", "kubectl patch deployment"],
    ),
    _scenario(
        "hostport-conflict-1", "Host Port Conflict",
        "Pod fails to start due to host port already in use",
        "scheduling", I, "10-15 minutes",
        ["Identify host port binding error",
         "Check which process is using the port",
         "Modify pod to use different port or DaemonSet",
         "Ensure pod starts successfully"],
        ("hostport-conflict", "monitoring-pod", {"conflictingPort": 9090}),
        [_cond(C.pod_status, "monitoring-*", "Running")],
        [_hint("port-conflict", "Check if hostPort is already in use on the node",
               "kubectl describe pod monitoring-agent-5d8f9 -n monitoring")],
        ["kubectl get pods", "kubectl describe pod", "kubectl get daemonsets"],
        ["kubectl edit", "kubectl patch"],
    ),
    _scenario(
        "node-disk-pressure-1", "Node Disk Pressure",
        "Pods evicted unexpectedly due to disk space issues",
        "scheduling", I, "15-20 minutes",
        ["Check node disk usage",
         "Identify disk pressure conditions",
         "Clean up unnecessary files",
         "Prevent future disk issues"],
        ("disk-pressure", "worker-nodes", {"diskFull": True}),
        [_cond(C.node_condition, "worker-node-3", "DiskPressure"),
         _cond(C.pod_status, "grafana-*", "Running")],
        [_hint("pod-evicted", "Check node conditions and disk usage", "kubectl describe nodes")],
        ["kubectl describe nodes", "kubectl get events", "kubectl exec -- df -h"],
        ["kubectl drain", "kubectl delete pod", "kubectl uncordon"],
    ),
    _scenario(
        "daemonset-not-running-1", "DaemonSet Not Running on All Nodes",
        "DaemonSet skipped on some nodes due to tolerations or selectors",
        "workloads", I, "12-18 minutes",
        ["Check DaemonSet pod distribution",
         "Verify node selectors and tolerations",
         "Fix scheduling constraints",
         "Ensure DaemonSet runs on all nodes"],
        ("daemonset-skip", "monitoring-daemonset", {"tolerationMissing": True}),
        [_cond(C.pod_scheduled, "node-exporter-*", True)],
        [_hint("missing-pods", "Check DaemonSet tolerations and node taints", "kubectl describe nodes")],
        ["kubectl get daemonset", "kubectl describe daemonset", "kubectl describe nodes"],
        ["kubectl taint", "kubectl edit daemonset", "kubectl patch daemonset"],
    ),
    _scenario(
        "kubelet-resource-leak-1", "Kubelet Resource Leak",
        "Node slowly becomes unstable due to kubelet memory issues",
        "advanced", E, "30-40 minutes",
        ["Identify kubelet memory leaks",
         "Check garbage collection settings",
         "Tune cadvisor configuration",
         "Implement cleanup strategies"],
        ("kubelet-leak", "kubelet", {"memoryLeak": True}),
        [_cond(C.node_ready, "worker-node-1", "Ready")],
        [_hint("node-unstable", "Check kubelet logs and memory usage patterns", "kubectl top nodes")],
        ["kubectl logs -n kube-system", "kubectl top nodes", "kubectl describe nodes"],
        ["kubectl drain", "kubectl uncordon", "kubectl cordon"],
    ),
    # Storage
    _scenario(
        "pvc-pending-1", "PVC Stuck in Pending",
        "Persistent Volume Claim cannot be bound due to storage issues",
        "storage", I, "15-20 minutes",
        ["Check PVC status and events",
         "Verify storage class configuration",
         "Check persistent volume availability",
         "Fix volume provisioning issues"],
        ("pvc-binding-fail", "database-pvc", {"noStorageClass": True}),
        [_cond(C.pod_status, "database-*", "Running")],
        [_hint("pvc-pending", "Check storage class and available persistent volumes", "kubectl get events")],
        ["kubectl get pvc", "kubectl describe pvc", "kubectl get pv", "kubectl get storageclass"],
        ["kubectl patch pvc", "kubectl edit pvc", "kubectl create"],
    ),
    _scenario(
        "volume-permissions-1", "Volume Mount Permission Denied",
        "Pod starts but fails to read/write to mounted volume",
        "storage", I, "12-18 minutes",
        ["Identify permission denied errors in logs",
         "Check volume mount permissions",
         "Configure fsGroup or runAsUser",
         "Verify application can access volume"],
        ("volume-permissions", "data-volume", {"wrongPermissions": True}),
        [_cond(C.pod_status, "app-*", "Running")],
        [_hint("permission-denied", "Check fsGroup and volume permissions", "kubectl logs app-pod-abc123")],
        ["kubectl logs", "kubectl describe pod", "kubectl exec -- ls -la"],
        ["kubectl edit deployment", "kubectl patch deployment"],
    ),
    _scenario(
        "secret-missing-1", "Secret or ConfigMap Not Found",
        "Pod fails due to missing secret or configmap reference",
        "storage", B, "8-12 minutes",
        ["Identify missing secret/configmap error",
         "Check if referenced resources exist",
         "Create missing secret or configmap",
         "Verify pod starts successfully"],
        ("missing-secret", "app-secrets", {"secretName": "database-credentials"}),
        [_cond(C.resource_exists, "secret/database-credentials", "default"),
         _cond(C.pod_status, "backend-*", "Running")],
        [_hint("secret-not-found", "Check if the referenced secret exists", "kubectl get secrets")],
        ["kubectl get secrets", "kubectl get configmaps", "kubectl describe pod"],
        ["kubectl create secret"],
    ),
    _scenario(
        "configmap-not-propagating-1", "ConfigMap Changes Not Propagating",
        "App uses outdated config after ConfigMap changes",
        "storage", I, "10-15 minutes",
        ["Check ConfigMap mount configuration",
         "Verify subPath settings",
         "Restart pods if needed",
         "Ensure config propagation"],
        ("configmap-stale", "app-config", {"subPathIssue": True}),
        [_cond(C.pod_ready, "app-pod-*", True)],
        [_hint("stale-config", "ConfigMaps with subPath do not auto-update, restart pod",
               "kubectl delete pod app-pod-abc123")],
        ["kubectl get configmap", "kubectl describe pod", "kubectl rollout restart"],
        ["kubectl rollout restart", "kubectl delete pod"],
    ),
    _scenario(
        "volume-stuck-detaching-1", "Volume Stuck Detaching or Attaching",
        "Volume won't detach from node, blocking pod scheduling",
        "storage", A, "20-25 minutes",
        ["Identify stuck volume operations",
         "Check controller-manager logs",
         "Force detach if necessary",
         "Restore volume functionality"],
        ("volume-stuck", "persistent-volume", {"detachFailed": True}),
        [_cond(C.pod_scheduled, "database-postgres-*", True)],
        [_hint("volume-stuck", "Check controller-manager logs and force detach",
               "kubectl logs -n kube-system kube-controller-manager-control-plane-1")],
        ["kubectl get pv", "kubectl describe pv", "kubectl logs -n kube-system"],
        ["kubectl patch", "kubectl delete volumeattachment"],
    ),
    # Ingress, controllers and mesh
    _scenario(
        "ingress-404-1", "Ingress Returns 404 or 502",
        "Frontend unreachable due to ingress configuration issues",
        "ingress", A, "20-25 minutes",
        ["Check ingress controller logs",
         "Validate backend service configuration",
         "Verify TLS secrets and annotations",
         "Fix ingress routing rules"],
        ("ingress-misconfiguration", "web-ingress", {"wrongBackend": True}),
        [_cond(C.service_connectivity, "frontend-lb", {"app": "frontend"})],
        [_hint("ingress-404", "Check ingress controller logs for routing errors",
               "kubectl logs -n ingress-nginx ingress-nginx-controller-abc123")],
        ["kubectl get ingress", "kubectl describe ingress", "kubectl logs -n ingress-nginx"],
        ["kubectl patch service", "kubectl edit service", "kubectl edit ingress"],
    ),
    _scenario(
        "sidecar-injection-1", "Sidecar Injection Breaks Pod",
        "App fails due to missing or misconfigured service mesh sidecar",
        "ingress", A, "25-30 minutes",
        ["Check sidecar injection status",
         "Examine init container logs",
         "Verify mesh labels and annotations",
         "Fix sidecar configuration"],
        ("sidecar-injection-fail", "istio-proxy", {"injectionFailed": True}),
        [_cond(C.pod_ready, "payments-*", True)],
        [_hint("sidecar-fail", "Check istio-proxy container logs and injection labels",
               "kubectl logs payments-api-6b7d9 -c istio-proxy")],
        ["kubectl get pods", "kubectl logs -c istio-proxy", "kubectl describe pod"],
        ["kubectl label", "kubectl rollout restart", "kubectl edit deployment"],
    ),
    _scenario(
        "operator-reconcile-1", "Operator Does Not Reconcile",
        "Custom resource ignored due to operator issues",
        "ingress", A, "20-25 minutes",
        ["Check custom resource status",
         "Examine operator logs for errors",
         "Verify CRD version compatibility",
         "Fix operator permissions or configuration"],
        ("operator-fail", "custom-operator", {"crdVersionMismatch": True}),
        [_cond(C.pod_status, "custom-operator-*", "Running")],
        [_hint("operator-ignore", "Check operator logs and CRD versions",
               "kubectl logs -n operator-system custom-operator-7c9d8")],
        ["kubectl get crd", "kubectl logs -n operator-system", "kubectl describe <custom-resource>"],
        ["kubectl create rolebinding", "kubectl create clusterrolebinding", "kubectl edit"],
    ),
    _scenario(
        "multiple-ingress-conflict-1", "Multiple Ingress Controllers Conflict",
        "Only one ingress works or routing fails due to controller conflicts",
        "ingress", A, "20-25 minutes",
        ["Identify conflicting ingress controllers",
         "Check ingress class annotations",
         "Define proper ingress classes",
         "Isolate ingress controllers"],
        ("ingress-conflict", "ingress-controllers", {"multipleControllers": True}),
        [_cond(C.pod_ready, "ingress-nginx-controller-*", True)],
        [_hint("routing-conflict",
               "Define ingressClass to isolate controllers; the nginx controller logs show the conflict",
               "kubectl logs -n ingress-nginx ingress-nginx-controller-abc123")],
        ["kubectl get ingress", "kubectl get ingressclass", "kubectl describe ingress"],
        ["kubectl edit ingress", "kubectl patch ingress", "kubectl annotate"],
    ),
    _scenario(
        "argocd-sync-fails-1", "ArgoCD Sync Fails (GitOps)",
        "ArgoCD fails to apply manifest due to validation or RBAC issues",
        "ingress", A, "25-30 minutes",
        ["Check ArgoCD application status",
         "Validate manifest syntax",
         "Verify RBAC permissions",
         "Fix CRD version compatibility"],
        ("argocd-sync-fail", "argocd-app", {"rbacDenied": True}),
        [_cond(C.deployment_available, "guestbook-ui")],
        [_hint("sync-failed", "Check ArgoCD logs and application events",
               "kubectl logs -n argocd argocd-application-controller-0")],
        ["kubectl get applications -n argocd", "kubectl describe application", "kubectl logs -n argocd"],
        ["kubectl create rolebinding", "kubectl create clusterrolebinding", "kubectl patch"],
    ),
    # Workloads
    _scenario(
        "job-cronjob-fail-1", "Job or CronJob Fails",
        "One-time job crashes with no clear error message",
        "workloads", I, "15-20 minutes",
        ["Check job status and pod logs",
         "Verify job command and image",
         "Check job completion conditions",
         "Fix job configuration"],
        ("job-failure", "backup-job", {"wrongCommand": True}),
        [_cond(C.pod_status, "backup-job-*", "Succeeded")],
        [_hint("job-fail", "Check job pod logs for the actual error", "kubectl logs backup-job-x7k2p")],
        ["kubectl get jobs", "kubectl describe job", "kubectl logs job/<job-name>"],
        ["kubectl delete job", "kubectl create job"],
    ),
    _scenario(
        "init-container-timeout-1", "Init Container Timeout",
        "Init container never finishes, blocking main container startup",
        "workloads", I, "15-20 minutes",
        ["Examine init container logs",
         "Check network access and dependencies",
         "Identify hanging processes",
         "Fix init container configuration"],
        ("init-timeout", "init-container", {"networkBlocked": True}),
        [_cond(C.pod_status, "orders-api-*", "Running")],
        [_hint("init-hang", "Check init container logs for network or dependency issues",
               "kubectl logs orders-api-8d7f6 -c wait-for-db")],
        ["kubectl logs -c <init-container>", "kubectl describe pod", "kubectl exec -- netstat"],
        ["kubectl edit deployment", "kubectl patch deployment"],
    ),
    _scenario(
        "hpa-not-scaling-1", "HPA Not Scaling",
        "App under load but no pods added due to metrics issues",
        "workloads", I, "18-25 minutes",
        ["Check metrics-server status",
         "Verify HPA configuration",
         "Confirm metrics are exposed",
         "Fix autoscaling issues"],
        ("hpa-metrics-fail", "metrics-server", {"metricsUnavailable": True}),
        [_cond(C.pod_ready, "metrics-server-*", True)],
        [_hint("no-scaling", "Check if metrics-server is running and HPA can fetch metrics",
               "kubectl get pods -n kube-system")],
        ["kubectl get hpa", "kubectl describe hpa", "kubectl top pods", "kubectl get pods -n kube-system"],
        ["kubectl edit deployment", "kubectl patch deployment", "kubectl rollout restart"],
    ),
    _scenario(
        "statefulset-misconfigured-1", "Misconfigured StatefulSet",
        "StatefulSet fails due to improper headless service or volume templates",
        "workloads", A, "25-30 minutes",
        ["Check StatefulSet configuration",
         "Verify headless service setup",
         "Validate volumeClaimTemplate",
         "Fix StatefulSet issues"],
        ("statefulset-error", "database-statefulset", {"headlessServiceMissing": True}),
        [_cond(C.resource_exists, "service/mysql", "default"),
         _cond(C.pod_status, "mysql-*", "Running")],
        [_hint("statefulset-stuck", "Check headless service and volumeClaimTemplate configuration",
               "kubectl get events")],
        ["kubectl get statefulset", "kubectl describe statefulset", "kubectl get service", "kubectl get pvc"],
        ["kubectl create service", "kubectl edit statefulset"],
    ),
    # Monitoring
    _scenario(
        "prometheus-scraping-1", "Prometheus Not Scraping",
        "Metrics missing due to scrape configuration issues",
        "monitoring", A, "18-25 minutes",
        ["Check Prometheus targets status",
         "Verify service monitor configuration",
         "Check metrics endpoint accessibility",
         "Fix scrape configuration"],
        ("prometheus-scrape-fail", "app-metrics", {"wrongLabels": True}),
        [_cond(C.service_connectivity, "app-metrics", {"app": "myapp"})],
        [_hint("metrics-missing", "Check Prometheus targets page for scrape errors",
               "kubectl logs -n monitoring prometheus-server-xyz789")],
        ["kubectl get servicemonitor", "kubectl describe servicemonitor", "kubectl port-forward"],
        ["kubectl patch service", "kubectl edit service", "kubectl label"],
    ),
    _scenario(
        "time-sync-1", "Time Sync Issues",
        "Logs out of order and JWT token errors due to clock skew",
        "monitoring", A, "20-25 minutes",
        ["Check node time synchronization",
         "Verify NTP configuration",
         "Check JWT token validation errors",
         "Fix time drift issues"],
        ("time-skew", "worker-nodes", {"clockDrift": "5m"}),
        [_cond(C.node_condition, "*", "ClockSkewDetected")],
        [_hint("jwt-invalid", "Check node time and NTP synchronization", "kubectl describe node worker-node-3")],
        ["kubectl exec -- date", "kubectl describe nodes", "kubectl logs"],
        ["kubectl drain", "kubectl uncordon"],
    ),
    _scenario(
        "fluentd-errors-1", "Fluentd/Log Forwarder Errors",
        "Logs missing from central system due to forwarder issues",
        "monitoring", A, "20-25 minutes",
        ["Check fluentd configuration",
         "Validate output sink connectivity",
         "Verify file access permissions",
         "Fix log forwarding pipeline"],
        ("log-forwarder-fail", "fluentd", {"sinkUnreachable": True}),
        [_cond(C.pod_status, "fluentd-*", "Running")],
        [_hint("logs-missing", "Check fluentd logs for connection or parsing errors",
               "kubectl logs -n logging fluentd-worker-1")],
        ["kubectl logs -n logging", "kubectl describe configmap", "kubectl exec -- curl"],
        ["kubectl edit configmap", "kubectl rollout restart"],
    ),
    _scenario(
        "metrics-server-fails-1", "Metrics Server Fails to Start",
        "Metrics server needed for HPA fails due to CA cert or API issues",
        "monitoring", A, "20-25 minutes",
        ["Check metrics-server pod status",
         "Verify CA certificate configuration",
         "Fix API connectivity issues",
         "Ensure metrics collection works"],
        ("metrics-server-fail", "metrics-server", {"caCertIssue": True}),
        [_cond(C.pod_status, "metrics-server-*", "Running")],
        [_hint("metrics-unavailable", "Check metrics-server logs for CA cert or API issues",
               "kubectl logs -n kube-system metrics-server-6d94bc8694-x2k9p")],
        ["kubectl get pods -n kube-system", "kubectl logs -n kube-system", "kubectl top nodes"],
        ["kubectl edit deployment", "kubectl patch deployment", "kubectl create rolebinding"],
    ),
    # Advanced
    _scenario(
        "multi-component-1", "Multi-Component Failure",
        "Database, cache, and app all failing in cascade",
        "advanced", A, "30-40 minutes",
        ["Identify the root cause of cascade failure",
         "Check dependencies between components",
         "Fix issues in correct order",
         "Verify entire stack is healthy"],
        ("cascade-failure", "full-stack", {"rootCause": "database-connection"}),
        [_cond(C.pod_status, "database-*", "Running"),
         _cond(C.pod_status, "redis-*", "Running"),
         _cond(C.pod_status, "backend-*", "Running")],
        [_hint("cascade-fail", "Start with the database layer and work up the stack",
               "kubectl get pods -l tier=database")],
        ["kubectl get pods --all-namespaces", "kubectl logs", "kubectl describe"],
        ["kubectl rollout restart", "kubectl edit", "kubectl patch"],
    ),
    _scenario(
        "rbac-permissions-1", "RBAC Permission Denied",
        "Service account lacks permissions for required operations",
        "advanced", A, "20-25 minutes",
        ["Identify permission denied errors",
         "Check service account and role bindings",
         "Verify required permissions",
         "Fix RBAC configuration"],
        ("rbac-denied", "service-account", {"missingPermissions": ["get", "list"]}),
        [_cond(C.pod_status, "reporting-agent-*", "Running")],
        [_hint("forbidden-403", "Check service account permissions and role bindings",
               "kubectl logs reporting-agent-4f6d1")],
        ["kubectl get serviceaccounts", "kubectl get rolebindings", "kubectl auth can-i"],
        ["kubectl create rolebinding", "kubectl create role"],
    ),
    _scenario(
        "resource-quota-1", "Resource Quota Exceeded",
        "New pods cannot be created due to namespace quotas",
        "advanced", I, "15-20 minutes",
        ["Check resource quota status",
         "Identify which resources are exhausted",
         "Adjust quotas or reduce resource usage",
         "Verify new pods can be created"],
        ("quota-exceeded", "namespace-quota", {"cpuLimit": "exceeded"}),
        [_cond(C.deployment_available, "frontend-deployment")],
        [_hint("quota-exceeded", "Check resource quota usage in the namespace; the ReplicaSet events report it",
               "kubectl get events")],
        ["kubectl get quota", "kubectl describe quota", "kubectl top pods"],
        ["kubectl edit quota", "kubectl patch quota", "kubectl set resources", "kubectl scale"],
    ),
    _scenario(
        "admission-webhook-1", "Admission Webhook Blocking",
        "Pods rejected by validating admission webhook",
        "advanced", A, "25-30 minutes",
        ["Identify webhook rejection errors",
         "Check webhook configuration",
         "Validate webhook endpoint health",
         "Fix webhook rules or pod spec"],
        ("admission-webhook-reject", "security-webhook", {"strictPolicy": True}),
        [_cond(C.deployment_available, "nginx-deployment")],
        [_hint("admission-denied", "Check the ReplicaSet events for the admission webhook denial",
               "kubectl get events")],
        ["kubectl get validatingwebhookconfigurations", "kubectl describe pod", "kubectl logs"],
        ["kubectl edit deployment", "kubectl patch deployment", "kubectl edit validatingwebhookconfiguration"],
    ),
    _scenario(
        "admission-webhook-fail-1", "Admission Webhook Failing",
        "Resource validation blocked by webhook timeout or TLS errors",
        "advanced", A, "25-30 minutes",
        ["Identify webhook rejection errors",
         "Check webhook URL and service",
         "Validate TLS certificates",
         "Fix webhook configuration"],
        ("webhook-timeout", "admission-webhook", {"tlsError": True}),
        [_cond(C.deployment_available, "backend-deployment")],
        [_hint("webhook-timeout", "Check webhook service and TLS certificates",
               "kubectl get events")],
        ["kubectl get validatingwebhookconfigurations", "kubectl describe service", "kubectl logs"],
        ["kubectl edit validatingwebhookconfiguration", "kubectl patch validatingwebhookconfiguration"],
    ),
    _scenario(
        "etcd-corruption-1", "ETCD Data Corruption",
        "Cluster state inconsistent due to etcd issues",
        "advanced", E, "40-50 minutes",
        ["Identify etcd health issues",
         "Check cluster state consistency",
         "Perform etcd backup and restore",
         "Verify cluster functionality"],
        ("etcd-corruption", "etcd-cluster", {"dataCorruption": True}),
        [_cond(C.pod_status, "etcd-*", "Running")],
        [_hint("etcd-error", "Check etcd pod logs and cluster health",
               "kubectl get pods -n kube-system -l component=etcd")],
        ["kubectl get pods -n kube-system", "kubectl logs -n kube-system", "etcdctl endpoint health"],
        ["kubectl delete pod"],
    ),
    _scenario(
        "oom-killer-1", "OOM Killer Strikes",
        "Pods killed by OOM killer due to memory limits",
        "advanced", I, "15-20 minutes",
        ["Identify OOM killed containers",
         "Check memory usage patterns",
         "Adjust memory limits appropriately",
         "Prevent future OOM kills"],
        ("oom-kill", "memory-hungry-app", {"memoryLeak": True}),
        [_cond(C.pod_status, "redis-*", "Running")],
        [_hint("oom-killed", "Check container exit codes and memory usage",
               "kubectl describe pod redis-cache-abc789")],
        ["kubectl describe pod", "kubectl top pods", "kubectl logs --previous"],
        ["kubectl set resources", "kubectl edit deployment", "kubectl patch deployment"],
    ),
    _scenario(
        "cloud-provider-issues-1", "Cloud Provider Integration Issues",
        "LoadBalancer stuck or volumes not attaching due to cloud API errors",
        "advanced", A, "25-30 minutes",
        ["Check cloud controller logs",
         "Verify IAM permissions",
         "Validate cloud region settings",
         "Fix cloud provider integration"],
        ("cloud-api-error", "cloud-controller", {"iamError": True}),
        [_cond(C.loadbalancer_provisioned, "frontend-lb", "34.118.226.10")],
        [_hint("lb-stuck", "Check the service events for cloud API errors",
               "kubectl describe service frontend-lb")],
        ["kubectl logs -n kube-system", "kubectl get services", "kubectl describe service"],
        ["kubectl annotate service", "kubectl patch service", "kubectl edit service"],
    ),
    _scenario(
        "api-server-down-1", "API Server Down or Unreachable",
        "kubectl not responding, cluster components stuck",
        "advanced", E, "35-45 minutes",
        ["Diagnose API server connectivity",
         "Check kube-apiserver logs",
         "Verify etcd connectivity",
         "Restore API server functionality"],
        ("apiserver-down", "kube-apiserver", {"etcdUnreachable": True}),
        [_cond(C.pod_status, "kube-apiserver-*", "Running")],
        [_hint("kubectl-timeout", "SSH to master node and check kube-apiserver logs",
               "kubectl logs -n kube-system kube-apiserver-control-plane-1")],
        ["kubectl cluster-info", "journalctl -u kubelet", "docker logs kube-apiserver"],
        ["kubectl delete pod"],
    ),
    _scenario(
        "stuck-finalizers-1", "Stuck Finalizers Prevent Deletion",
        "Resource stuck in Terminating state due to finalizers",
        "advanced", A, "15-20 minutes",
        ["Identify stuck finalizers",
         "Check finalizer dependencies",
         "Remove blocking finalizers",
         "Complete resource deletion"],
        ("stuck-finalizer", "custom-resource", {"finalizerBlocked": True}),
        [_cond(C.resource_absent, "pod/legacy-cleanup-5c4b2", "default")],
        [_hint("terminating-stuck", "Remove finalizer using kubectl patch",
               "kubectl patch pod legacy-cleanup-5c4b2 -p '{\"metadata\":{\"finalizers\":null}}'")],
        ["kubectl get <resource> -o yaml", "kubectl patch", "kubectl delete"],
        ["kubectl patch", "kubectl delete"],
    ),
    _scenario(
        "certificate-expired-1", "Certificate Expired (K8s API or Ingress TLS)",
        "TLS certificates expired causing authentication failures",
        "advanced", E, "30-40 minutes",
        ["Identify expired certificates",
         "Check certificate validity dates",
         "Renew or replace certificates",
         "Verify TLS functionality"],
        ("cert-expired", "tls-certificates", {"apiCertExpired": True}),
        [_cond(C.resource_exists, "secret/web-tls", "default")],
        [_hint("tls-error", "Check certificate expiration dates", "kubectl get secrets")],
        ["kubectl get secrets", "openssl x509 -text", "kubectl describe secret"],
        ["kubectl create secret"],
    ),
    _scenario(
        "pod-security-policy-1", "Pod Security Policy (PSP) Denies Pod",
        "Pod won't schedule due to missing capabilities or PSP restrictions",
        "advanced", A, "22-28 minutes",
        ["Identify PSP denial reasons",
         "Check required capabilities",
         "Modify pod security context",
         "Ensure pod meets PSP requirements"],
        ("psp-denied", "pod-security-policy", {"capabilityMissing": True}),
        [_cond(C.deployment_available, "restricted-app")],
        [_hint("psp-forbidden", "Check Pod Security admission and required capabilities", "kubectl get events")],
        ["kubectl get psp", "kubectl describe psp", "kubectl auth can-i use psp"],
        ["kubectl edit deployment", "kubectl patch deployment", "kubectl label namespace"],
    ),
]

# Issue line and first command shown in the welcome message.
WELCOME_NOTES: dict[str, tuple[str | None, str]] = {
    "crashloop-1": ("A pod is stuck in CrashLoopBackOff state", "kubectl get pods"),
    "imagepull-1": ("Pod cannot pull container image", "kubectl get pods"),
    "pod-pending-1": ("Pod is stuck in Pending state", "kubectl get pods"),
    "service-unreachable-1": ("Service connectivity problems", "kubectl get services"),
}


def welcome_message(scenario: DebugScenario) -> str:
    """Return the system message posted when *scenario* finishes loading."""
    objectives = "\n".join(
        f"  {index}. {objective}" for index, objective in enumerate(scenario.objectives, start=1)
    )
    lines = [f'Scenario "{scenario.name}" loaded successfully!', "", "Objectives:", objectives, ""]
    issue, first_command = WELCOME_NOTES.get(scenario.id, (None, "kubectl get pods"))
    if issue:
        lines.append(f"Current Issue: {issue}")
    lines.append(f"Start by running: {first_command}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# ScenarioCatalog
# ---------------------------------------------------------------------------


class ScenarioCatalog:
    """Read-only lookup over the scenario table."""

    def __init__(
        self,
        scenarios: Iterable[DebugScenario] | None = None,
        settings: Settings | None = None,
        injector: FaultInjector | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._injector = injector or FaultInjector()
        self._scenarios: dict[str, DebugScenario] = {}
        for scenario in SCENARIOS if scenarios is None else scenarios:
            if scenario.id in self._scenarios:
                raise ValueError(f"Duplicate scenario id: {scenario.id!r}")
            self._scenarios[scenario.id] = scenario

    def get(self, scenario_id: str) -> DebugScenario:
        """Return the scenario registered under *scenario_id*.

        Raises:
            ScenarioNotFoundError: if the id is unknown and lookups are strict
                (or the configured default is unknown as well).
        """
        scenario = self._scenarios.get(scenario_id)
        if scenario is not None:
            return scenario
        fallback_id = self._settings.default_scenario_id
        if self._settings.strict_scenario_lookup or fallback_id not in self._scenarios:
            raise ScenarioNotFoundError(scenario_id)
        logger.warning("Unknown scenario %r, falling back to %r", scenario_id, fallback_id)
        return self._scenarios[fallback_id]

    def list(
        self,
        category: str | None = None,
        difficulty: Difficulty | str | None = None,
    ) -> list[DebugScenario]:
        scenarios = list(self._scenarios.values())
        if category is not None:
            scenarios = [s for s in scenarios if s.category == category]
        if difficulty is not None:
            wanted = Difficulty(difficulty) if not isinstance(difficulty, Difficulty) else difficulty
            scenarios = [s for s in scenarios if s.difficulty == wanted]
        return scenarios

    def ids(self) -> list[str]:
        return list(self._scenarios)

    def categories(self) -> list[str]:
        return sorted({scenario.category for scenario in self._scenarios.values()})

    def initial_state(self, scenario_id: str, now: datetime | None = None) -> ClusterState:
        """Return the baseline cluster with *scenario_id*'s fault injected."""
        scenario = self.get(scenario_id)
        now = now or datetime.now(tz=UTC)
        return self._injector.inject(build_default_cluster(now), scenario.id, scenario, now)

    def default_state(self, now: datetime | None = None) -> ClusterState:
        return build_default_cluster(now)

    def __contains__(self, scenario_id: object) -> bool:
        return scenario_id in self._scenarios

    def __len__(self) -> int:
        return len(self._scenarios)

    def __iter__(self) -> Iterator[DebugScenario]:
        return iter(self._scenarios.values())


__all__ = ["SCENARIOS", "WELCOME_NOTES", "ScenarioCatalog", "welcome_message"]

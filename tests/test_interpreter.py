"""Tests for kubequest_sim.interpreter: the simulated kubectl command set."""

from __future__ import annotations

import json
from datetime import datetime

import pytest
import yaml

from kubequest_sim.catalog import SCENARIOS, ScenarioCatalog
from kubequest_sim.interpreter import CommandInterpreter, parse_kubectl, tokenize
from kubequest_sim.models import ClusterState
from kubequest_sim.render import HELP_TEXT

# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParsing:
    def test_tokenize_respects_quotes(self) -> None:
        assert tokenize('kubectl logs "my pod"') == ["kubectl", "logs", "my pod"]

    def test_tokenize_falls_back_on_bad_quoting(self) -> None:
        assert tokenize('kubectl logs "unterminated') == ["kubectl", "logs", '"unterminated']

    def test_value_flags_both_forms(self) -> None:
        cmd = parse_kubectl("kubectl get pods -n kube-system --output=wide")
        assert cmd.verb == "get"
        assert cmd.args == ["pods"]
        assert cmd.namespace == "kube-system"
        assert cmd.output == "wide"

    def test_bool_flags_and_extras(self) -> None:
        cmd = parse_kubectl("kubectl logs web -p --tail=5 -A")
        assert cmd.previous
        assert cmd.all_namespaces
        assert cmd.extra_flags == ["--tail=5"]

    def test_trailing_after_double_dash(self) -> None:
        cmd = parse_kubectl("kubectl exec web -- ls -la")
        assert cmd.positionals == ["exec", "web"]
        assert cmd.trailing == ["ls", "-la"]

    def test_logs_reads_dash_f_as_follow(self) -> None:
        cmd = parse_kubectl("kubectl logs -f nginx-deployment-abc123")
        assert cmd.follow
        assert cmd.filename is None
        assert cmd.args == ["nginx-deployment-abc123"]

    def test_dash_f_is_filename_outside_logs(self) -> None:
        cmd = parse_kubectl("kubectl apply -f fixed.yaml")
        assert cmd.filename == "fixed.yaml"
        assert not cmd.follow

    def test_bare_kubectl_has_no_verb(self) -> None:
        assert parse_kubectl("kubectl").verb is None


# ---------------------------------------------------------------------------
# Dispatch and shell-level errors
# ---------------------------------------------------------------------------


class TestDispatch:
    def test_help(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        result = interpreter.execute("help", default_state)
        assert result.output == HELP_TEXT
        assert result.exit_code == 0

    def test_clear_is_silent(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        assert interpreter.execute("clear", default_state).output == ""

    def test_non_kubectl_command(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        result = interpreter.execute("ls -la", default_state)
        assert result.output == "bash: ls: command not found"
        assert result.exit_code == 127

    def test_empty_command(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        result = interpreter.execute("   ", default_state)
        assert result.output == "bash: : command not found"
        assert result.exit_code == 127

    def test_bare_kubectl(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        result = interpreter.execute("kubectl", default_state)
        assert result.exit_code == 1
        assert result.output.startswith("error: You must specify the type of resource")

    def test_unknown_resource(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        result = interpreter.execute("kubectl get widgets", default_state)
        assert result.output == 'error: the server doesn\'t have a resource type "widgets"'
        assert result.exit_code == 1

    def test_result_timestamp_from_clock(
        self, interpreter: CommandInterpreter, default_state: ClusterState, now: datetime
    ) -> None:
        result = interpreter.execute("kubectl get pods", default_state)
        assert result.timestamp == now
        assert result.command == "kubectl get pods"

    def test_supports(self, interpreter: CommandInterpreter) -> None:
        assert interpreter.supports("get", "po")
        assert interpreter.supports("describe", "svc")
        assert not interpreter.supports("describe", "events")

    def test_state_never_mutated(
        self, interpreter: CommandInterpreter, crashloop_state: ClusterState
    ) -> None:
        before = crashloop_state.model_copy(deep=True)
        for command in (
            "kubectl delete pod nginx-deployment-abc123",
            "kubectl set env deployment/nginx-deployment DATABASE_URL=postgres://db:5432/app",
            "kubectl scale deployment nginx-deployment --replicas=3",
            "kubectl cordon worker-node-1",
        ):
            assert interpreter.execute(command, crashloop_state).exit_code == 0
        assert crashloop_state == before


# ---------------------------------------------------------------------------
# get
# ---------------------------------------------------------------------------


class TestGet:
    def test_pods_default_namespace(
        self, interpreter: CommandInterpreter, default_state: ClusterState
    ) -> None:
        output = interpreter.execute("kubectl get pods", default_state).output
        assert "nginx-deployment-abc123" in output
        assert "coredns" not in output
        assert not output.startswith("NAMESPACE")

    def test_pods_all_namespaces(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        output = interpreter.execute("kubectl get pods -A", default_state).output
        assert output.startswith("NAMESPACE")
        assert "kube-system" in output
        assert "nginx-deployment-abc123" in output

    def test_all_namespaces_row_count(
        self, interpreter: CommandInterpreter, crashloop_state: ClusterState
    ) -> None:
        output = interpreter.execute("kubectl get pods -A", crashloop_state).output
        assert len(output.splitlines()) == 1 + len(crashloop_state.pods)

    def test_default_namespace_closure(
        self, interpreter: CommandInterpreter, crashloop_state: ClusterState
    ) -> None:
        output = interpreter.execute("kubectl get pods -n default", crashloop_state).output
        names = {line.split()[0] for line in output.splitlines()[1:]}
        assert names == {pod.name for pod in crashloop_state.pods if pod.namespace == "default"}

    def test_pods_other_namespace(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        output = interpreter.execute("kubectl get po -n kube-system", default_state).output
        assert "coredns-558bd4d5db-abc12" in output
        assert "nginx-deployment-abc123" not in output

    def test_pods_empty_namespace(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        result = interpreter.execute("kubectl get pods -n empty", default_state)
        assert result.output == "No resources found in empty namespace."
        assert result.exit_code == 0

    def test_pod_by_name_not_found(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        result = interpreter.execute("kubectl get pod ghost", default_state)
        assert result.output == 'Error from server (NotFound): pods "ghost" not found'
        assert result.exit_code == 1

    def test_crashloop_status_visible(
        self, interpreter: CommandInterpreter, crashloop_state: ClusterState
    ) -> None:
        output = interpreter.execute("kubectl get pods", crashloop_state).output
        row = next(line for line in output.splitlines() if line.startswith("nginx-deployment-abc123"))
        assert "CrashLoopBackOff" in row
        assert "0/1" in row

    def test_label_selector(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        output = interpreter.execute("kubectl get pods -l app=nginx", default_state).output
        assert len(output.splitlines()) == 2
        assert "nginx-deployment-abc123" in output

    def test_field_selector(self, interpreter: CommandInterpreter, crashloop_state: ClusterState) -> None:
        output = interpreter.execute(
            "kubectl get pods --field-selector status.phase=CrashLoopBackOff", crashloop_state
        ).output
        assert output.splitlines()[1].startswith("nginx-deployment-abc123")
        assert len(output.splitlines()) == 2

    def test_pod_yaml(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        output = interpreter.execute("kubectl get pod nginx-deployment-abc123 -o yaml", default_state).output
        document = yaml.safe_load(output)
        assert document["kind"] == "Pod"
        assert document["metadata"]["name"] == "nginx-deployment-abc123"
        assert document["status"]["phase"] == "Running"

    def test_services_json_list(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        output = interpreter.execute("kubectl get svc -o json", default_state).output
        document = json.loads(output)
        assert document["kind"] == "List"
        assert "backend-service" in {item["metadata"]["name"] for item in document["items"]}

    def test_deployment_not_found_uses_group(
        self, interpreter: CommandInterpreter, default_state: ClusterState
    ) -> None:
        result = interpreter.execute("kubectl get deploy ghost", default_state)
        assert result.output == 'Error from server (NotFound): deployments.apps "ghost" not found'

    def test_nodes(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        output = interpreter.execute("kubectl get nodes", default_state).output
        assert output.splitlines()[0].split() == ["NAME", "STATUS", "ROLES", "AGE", "VERSION"]
        assert "worker-node-3" in output

    def test_no_events_in_healthy_cluster(
        self, interpreter: CommandInterpreter, default_state: ClusterState
    ) -> None:
        assert interpreter.execute("kubectl get events", default_state).output == (
            "No resources found in default namespace."
        )

    def test_events_after_fault(self, interpreter: CommandInterpreter, crashloop_state: ClusterState) -> None:
        output = interpreter.execute("kubectl get events", crashloop_state).output
        assert "BackOff" in output
        assert "pod/nginx-deployment-abc123" in output

    def test_endpoints_list_ready_pods(
        self, interpreter: CommandInterpreter, default_state: ClusterState
    ) -> None:
        output = interpreter.execute("kubectl get endpoints backend-service", default_state).output
        assert "10.244.2.5:8080" in output

    @pytest.mark.parametrize("command", ["kubectl get networkpolicy", "kubectl get pvc", "kubectl get quota"])
    def test_namespaced_kind_without_objects(
        self, interpreter: CommandInterpreter, default_state: ClusterState, command: str
    ) -> None:
        result = interpreter.execute(command, default_state)
        assert result.output == "No resources found in default namespace."
        assert result.exit_code == 0

    def test_cluster_scoped_kind_without_objects(
        self, interpreter: CommandInterpreter, default_state: ClusterState
    ) -> None:
        result = interpreter.execute("kubectl get validatingwebhookconfigurations", default_state)
        assert result.output == "No resources found"
        assert result.exit_code == 0

    def test_named_object_of_empty_kind(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        result = interpreter.execute("kubectl get ingress web-ingress", default_state)
        assert result.output == 'Error from server (NotFound): ingresses "web-ingress" not found'
        assert result.exit_code == 1

    def test_jobs_from_labelled_pods(
        self, interpreter: CommandInterpreter, catalog: ScenarioCatalog, now: datetime
    ) -> None:
        state = catalog.initial_state("job-cronjob-fail-1", now)
        lines = interpreter.execute("kubectl get jobs", state).output.splitlines()
        assert lines[0].split() == ["NAME", "COMPLETIONS", "AGE"]
        assert lines[1].split()[:2] == ["backup-job", "0/1"]

    def test_no_jobs_in_healthy_cluster(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        assert interpreter.execute("kubectl get jobs", default_state).output == (
            "No resources found in default namespace."
        )

    def test_namespaces(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        output = interpreter.execute("kubectl get ns", default_state).output
        assert "kube-system" in output
        assert "Active" in output


# ---------------------------------------------------------------------------
# describe, logs and top
# ---------------------------------------------------------------------------


class TestDescribe:
    def test_pod_shows_waiting_reason(
        self, interpreter: CommandInterpreter, crashloop_state: ClusterState
    ) -> None:
        output = interpreter.execute("kubectl describe pod nginx-deployment-abc123", crashloop_state).output
        assert "CrashLoopBackOff" in output
        assert "Events:" in output
        assert "BackOff" in output

    def test_pod_not_found(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        result = interpreter.execute("kubectl describe pod ghost", default_state)
        assert result.exit_code == 1

    def test_node(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        output = interpreter.execute("kubectl describe node worker-node-2", default_state).output
        assert output.startswith("Name:")
        assert "backend-service-def456" in output

    def test_service_endpoints(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        output = interpreter.execute("kubectl describe svc backend-service", default_state).output
        assert "10.244.2.5:8080" in output

    def test_service_without_endpoints(
        self, interpreter: CommandInterpreter, catalog: ScenarioCatalog, now: datetime
    ) -> None:
        state = catalog.initial_state("service-unreachable-1", now)
        output = interpreter.execute("kubectl describe service backend-service", state).output
        assert "app=backend-v2" in output
        assert "<none>" in output

    def test_configmap_data(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        result = interpreter.execute("kubectl describe configmap app-config", default_state)
        lines = result.output.splitlines()
        assert result.exit_code == 0
        assert lines[0] == "Name:         app-config"
        assert lines[lines.index("FEATURE_FLAGS:") + 2] == "checkout=on"

    def test_secret_hides_values(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        output = interpreter.execute("kubectl describe secret web-tls", default_state).output
        assert "Type:  kubernetes.io/tls" in output
        assert "tls.crt:  4 bytes" in output
        assert "LS0t" not in output

    def test_secret_not_found(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        result = interpreter.execute("kubectl describe secret ghost", default_state)
        assert result.output == 'Error from server (NotFound): secrets "ghost" not found'

    def test_job_events(self, interpreter: CommandInterpreter, catalog: ScenarioCatalog, now: datetime) -> None:
        state = catalog.initial_state("job-cronjob-fail-1", now)
        output = interpreter.execute("kubectl describe job backup-job", state).output
        assert "0 Active / 0 Succeeded / 1 Failed" in output
        assert "BackoffLimitExceeded" in output

    def test_empty_kind_without_name(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        result = interpreter.execute("kubectl describe quota", default_state)
        assert result.output == "No resources found in default namespace."
        assert result.exit_code == 0


class TestLogs:
    def test_crashloop_logs(self, interpreter: CommandInterpreter, crashloop_state: ClusterState) -> None:
        result = interpreter.execute("kubectl logs nginx-deployment-abc123", crashloop_state)
        assert result.exit_code == 0
        assert "DATABASE_URL" in result.output

    def test_pod_not_found(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        result = interpreter.execute("kubectl logs ghost", default_state)
        assert result.output == 'Error from server (NotFound): pods "ghost" not found'
        assert result.exit_code == 1

    def test_previous_without_restarts(
        self, interpreter: CommandInterpreter, default_state: ClusterState
    ) -> None:
        result = interpreter.execute("kubectl logs web-app-xyz123 --previous", default_state)
        assert result.output.startswith("Error from server (BadRequest)")
        assert result.exit_code == 1

    def test_previous_after_restarts(
        self, interpreter: CommandInterpreter, crashloop_state: ClusterState
    ) -> None:
        result = interpreter.execute("kubectl logs nginx-deployment-abc123 -p", crashloop_state)
        assert result.exit_code == 0

    def test_invalid_container(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        result = interpreter.execute("kubectl logs nginx-deployment-abc123 -c sidecar", default_state)
        assert result.output == "error: container sidecar is not valid for pod nginx-deployment-abc123"

    def test_deployment_target(self, interpreter: CommandInterpreter, crashloop_state: ClusterState) -> None:
        result = interpreter.execute("kubectl logs deployment/nginx-deployment", crashloop_state)
        assert result.exit_code == 0
        assert "DATABASE_URL" in result.output

    def test_follow_flag_before_pod(self, interpreter: CommandInterpreter, crashloop_state: ClusterState) -> None:
        result = interpreter.execute("kubectl logs -f nginx-deployment-abc123", crashloop_state)
        assert result.exit_code == 0
        assert "DATABASE_URL" in result.output

    def test_long_follow_flag(self, interpreter: CommandInterpreter, crashloop_state: ClusterState) -> None:
        result = interpreter.execute("kubectl logs nginx-deployment-abc123 --follow", crashloop_state)
        assert result.exit_code == 0

    def test_label_selector_picks_first_match(
        self, interpreter: CommandInterpreter, catalog: ScenarioCatalog, now: datetime
    ) -> None:
        state = catalog.initial_state("coredns-config-error-1", now)
        selected = interpreter.execute("kubectl logs -n kube-system -l k8s-app=kube-dns", state)
        direct = interpreter.execute("kubectl logs -n kube-system coredns-558bd4d5db-abc12", state)
        assert selected.exit_code == 0
        assert selected.output == direct.output

    def test_label_selector_without_matches(
        self, interpreter: CommandInterpreter, default_state: ClusterState
    ) -> None:
        result = interpreter.execute("kubectl logs -l app=ghost", default_state)
        assert result.output == "No resources found in default namespace."
        assert result.exit_code == 0

    def test_job_target(self, interpreter: CommandInterpreter, catalog: ScenarioCatalog, now: datetime) -> None:
        state = catalog.initial_state("job-cronjob-fail-1", now)
        result = interpreter.execute("kubectl logs job/backup-job", state)
        assert result.exit_code == 0
        assert "pg_dumpall: not found" in result.output

    def test_missing_target(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        result = interpreter.execute("kubectl logs", default_state)
        assert result.output.startswith("error: expected 'logs")


class TestTop:
    def test_top_pods(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        output = interpreter.execute("kubectl top pods", default_state).output
        row = next(line for line in output.splitlines() if line.startswith("nginx-deployment-abc123"))
        assert row.split()[1] == "60m"

    def test_top_pods_skips_broken(self, interpreter: CommandInterpreter, crashloop_state: ClusterState) -> None:
        output = interpreter.execute("kubectl top pods", crashloop_state).output
        assert "nginx-deployment-abc123" not in output

    def test_top_nodes(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        output = interpreter.execute("kubectl top nodes", default_state).output
        assert output.splitlines()[0].split()[:2] == ["NAME", "CPU(cores)"]
        assert len(output.splitlines()) == 1 + len(default_state.nodes)


# ---------------------------------------------------------------------------
# Mutation verbs
# ---------------------------------------------------------------------------


class TestMutations:
    @pytest.mark.parametrize(
        ("command", "expected"),
        [
            (
                "kubectl set env deployment/nginx-deployment DATABASE_URL=postgres://db:5432/app",
                "deployment.apps/nginx-deployment env updated",
            ),
            (
                "kubectl set image deployment/frontend-deployment frontend=myapp/frontend:v2.1.0",
                "deployment.apps/frontend-deployment image updated",
            ),
            ("kubectl delete pod web-app-xyz123", 'pod "web-app-xyz123" deleted'),
            ("kubectl scale deploy nginx-deployment --replicas=2", "deployment.apps/nginx-deployment scaled"),
            ("kubectl rollout restart deployment/nginx-deployment", "deployment.apps/nginx-deployment restarted"),
            ("kubectl edit svc backend-service", "service/backend-service edited"),
            ("kubectl cordon worker-node-1", "node/worker-node-1 cordoned"),
            ("kubectl uncordon node/worker-node-1", "node/worker-node-1 uncordoned"),
            ("kubectl create secret generic api-keys", "secret/api-keys created"),
            ("kubectl apply -f fixed-deployment.yaml", "deployment.apps/fixed-deployment configured"),
        ],
    )
    def test_confirmation_text(
        self,
        interpreter: CommandInterpreter,
        default_state: ClusterState,
        command: str,
        expected: str,
    ) -> None:
        result = interpreter.execute(command, default_state)
        assert result.output == expected
        assert result.exit_code == 0

    def test_apply_without_file(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        result = interpreter.execute("kubectl apply", default_state)
        assert result.output == "error: must specify one of -f and -k"
        assert result.exit_code == 1

    def test_delete_missing_pod(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        result = interpreter.execute("kubectl delete pod ghost", default_state)
        assert result.output == 'Error from server (NotFound): pods "ghost" not found'

    def test_delete_without_name(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        result = interpreter.execute("kubectl delete pod", default_state)
        assert result.output == "error: resource(s) were provided, but no name was specified"

    def test_scale_requires_replicas(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        result = interpreter.execute("kubectl scale deployment nginx-deployment", default_state)
        assert result.output == 'error: required flag(s) "replicas" not set'

    def test_create_existing_secret(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        result = interpreter.execute("kubectl create secret generic regcred", default_state)
        assert result.output == 'Error from server (AlreadyExists): secrets "regcred" already exists'
        assert result.exit_code == 1

    def test_cordon_unknown_node(self, interpreter: CommandInterpreter, default_state: ClusterState) -> None:
        result = interpreter.execute("kubectl cordon ghost-node", default_state)
        assert result.output == 'Error from server (NotFound): nodes "ghost-node" not found'


# ---------------------------------------------------------------------------
# Catalog hint commands
# ---------------------------------------------------------------------------


class TestHintCommands:
    @pytest.mark.parametrize("scenario_id", [scenario.id for scenario in SCENARIOS])
    def test_every_hint_command_runs(
        self, interpreter: CommandInterpreter, catalog: ScenarioCatalog, now: datetime, scenario_id: str
    ) -> None:
        state = catalog.initial_state(scenario_id, now)
        for hint in catalog.get(scenario_id).hints:
            if hint.command is None:
                continue
            result = interpreter.execute(hint.command, state)
            assert result.exit_code == 0, f"{scenario_id}: {hint.command!r} -> {result.output}"

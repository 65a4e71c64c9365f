"""Tests for kubequest_sim.render: kubectl-style text layout."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from kubequest_sim.cluster import ClusterModel
from kubequest_sim.models import ClusterState
from kubequest_sim.render import (
    describe_pod,
    format_age,
    format_pods,
    format_since,
    format_timestamp,
    format_top_pods,
    parse_cpu,
    parse_memory,
    table,
)


class TestPrimitives:
    @pytest.mark.parametrize(
        ("delta", "expected"),
        [
            (timedelta(seconds=30), "0m"),
            (timedelta(minutes=45), "45m"),
            (timedelta(hours=2, minutes=5), "2h5m"),
            (timedelta(days=3, hours=4), "3d"),
        ],
    )
    def test_format_age(self, now: datetime, delta: timedelta, expected: str) -> None:
        assert format_age(now - delta, now) == expected

    def test_format_age_unknown(self, now: datetime) -> None:
        assert format_age(None, now) == "<unknown>"

    def test_format_age_future_clamped(self, now: datetime) -> None:
        assert format_age(now + timedelta(minutes=5), now) == "0m"

    def test_format_since(self, now: datetime) -> None:
        assert format_since(now - timedelta(seconds=45), now) == "45s"
        assert format_since(now - timedelta(hours=2), now) == "2h"

    def test_format_timestamp(self, now: datetime) -> None:
        assert format_timestamp(now) == "2024-01-15T12:00:00.000Z"

    def test_parse_cpu(self) -> None:
        assert parse_cpu("500m") == 500
        assert parse_cpu("2") == 2000
        assert parse_cpu("0.5") == 500

    def test_parse_cpu_invalid(self) -> None:
        with pytest.raises(ValueError, match="Invalid CPU quantity"):
            parse_cpu("lots")

    def test_parse_memory(self) -> None:
        assert parse_memory("1Gi") == 1024
        assert parse_memory("256Mi") == 256
        assert parse_memory("2048Ki") == 2


class TestTable:
    def test_columns_aligned(self) -> None:
        text = table((("NAME", 6), ("AGE", 0)), [["a", "1m"], ["bb", "2m"]])
        assert text.splitlines() == ["NAME   AGE", "a      1m", "bb     2m"]

    def test_long_value_widens_column(self) -> None:
        columns = (("NAME", 6), ("READY", 7), ("AGE", 0))
        text = table(columns, [["a", "1/1", "1m"], ["much-longer", "0/1", "2m"]])
        lines = text.splitlines()
        assert lines == ["NAME        READY   AGE", "a           1/1     1m", "much-longer 0/1     2m"]
        assert len({line.index(line.split()[1]) for line in lines}) == 1

    def test_long_namespace_widens_prefix(self) -> None:
        text = table((("NAME", 4), ("AGE", 0)), [["a", "1m"]], namespaces=["a-very-long-namespace"])
        lines = text.splitlines()
        assert lines[0].index("NAME") == lines[1].index("a ")

    def test_namespace_prefix(self) -> None:
        text = table((("NAME", 4), ("AGE", 0)), [["a", "1m"]], namespaces=["default"])
        lines = text.splitlines()
        assert lines[0].startswith("NAMESPACE     NAME")
        assert lines[1].startswith("default       a")


class TestViews:
    def test_pods_header(self, default_state: ClusterState, now: datetime) -> None:
        text = format_pods(default_state.pods[:1], now)
        assert text.splitlines()[0].split() == ["NAME", "READY", "STATUS", "RESTARTS", "AGE"]
        assert "nginx-deployment-abc123" in text

    def test_pods_wide_adds_ip_and_node(self, default_state: ClusterState, now: datetime) -> None:
        pod = ClusterModel(default_state).find_pod("backend-service-def456")
        assert pod is not None
        row = format_pods([pod], now, wide=True).splitlines()[1]
        assert row.split()[-2:] == ["10.244.2.5", "worker-node-2"]

    def test_top_pods_derived_from_requests(self, default_state: ClusterState) -> None:
        pod = ClusterModel(default_state).find_pod("nginx-deployment-abc123")
        assert pod is not None
        row = format_top_pods([pod]).splitlines()[1]
        assert row.split() == ["nginx-deployment-abc123", "60m", "102Mi"]

    def test_describe_pod_without_events(self, default_state: ClusterState, now: datetime) -> None:
        pod = ClusterModel(default_state).find_pod("nginx-deployment-abc123")
        assert pod is not None
        text = describe_pod(pod, now)
        assert text.startswith("Name:         nginx-deployment-abc123")
        assert text.endswith("Events:  <none>")

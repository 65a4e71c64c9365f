"""Tests for kubequest_sim.progress: steps, points and achievements."""

from __future__ import annotations

import asyncio
from datetime import datetime

import pytest

from kubequest_sim.models import ClusterState, CommandResult, RunnerState
from kubequest_sim.progress import (
    ACHIEVEMENTS,
    BASE_STEPS,
    ProgressTracker,
    rank_for,
    steps_for,
)
from kubequest_sim.session import DebugSession

FULL_CRASHLOOP_PATH = (
    "kubectl get pods",
    "kubectl get events",
    "kubectl get nodes",
    "kubectl logs nginx-deployment-abc123",
    "kubectl describe pod nginx-deployment-abc123",
    "kubectl set env deployment/nginx-deployment DATABASE_URL=postgres://db:5432/app",
    "kubectl get pods",
)


def _play(session: DebugSession, scenario_id: str, commands: tuple[str, ...]) -> None:
    async def scenario() -> None:
        await session.start_scenario(scenario_id)
        for command in commands:
            await session.execute_command(command)
        await session.wait_for_pending()

    asyncio.run(scenario())


def _history(now: datetime, *commands: str) -> RunnerState:
    results = [CommandResult(command=c, output="", exit_code=0, timestamp=now) for c in commands]
    return RunnerState(cluster_state=ClusterState(), command_history=results)


class TestTables:
    def test_steps_for_unknown_scenario_is_base(self) -> None:
        assert steps_for("no-such-scenario") == BASE_STEPS
        assert steps_for(None) == BASE_STEPS

    def test_crashloop_steps_follow_base(self) -> None:
        ids = [step.id for step in steps_for("crashloop-1")]
        assert ids[:3] == ["initial-assessment", "examine-events", "check-node-health"]
        assert ids[-1] == "verify-fix"

    def test_achievement_ids_unique(self) -> None:
        ids = [achievement.id for achievement in ACHIEVEMENTS]
        assert len(ids) == len(set(ids))

    @pytest.mark.parametrize(
        ("points", "rank"),
        [
            (0, "Beginner"),
            (49, "Beginner"),
            (50, "Junior Developer"),
            (150, "DevOps Specialist"),
            (467, "Senior Engineer"),
            (500, "Kubernetes Master"),
        ],
    )
    def test_rank_for(self, points: int, rank: str) -> None:
        assert rank_for(points) == rank


class TestStepCompletion:
    def test_fresh_tracker(self, tracker: ProgressTracker) -> None:
        stats = tracker.stats()
        assert stats.total_points == 0
        assert stats.level == 1
        assert stats.rank == "Beginner"
        assert stats.total_steps == len(BASE_STEPS)

    def test_system_messages_ignored(self, tracker: ProgressTracker, now: datetime) -> None:
        stats = tracker.update(_history(now, "system"))
        assert stats.completed_steps == 0
        assert stats.unlocked_achievements == []

    def test_prefix_match_completes_step(self, tracker: ProgressTracker, now: datetime) -> None:
        tracker.update(_history(now, "kubectl  get   pods -A"))
        assert tracker.completed_steps == {"initial-assessment"}
        assert tracker.unlocked_achievements == {"first-command"}

    def test_short_alias_needs_exact_word(self, tracker: ProgressTracker, now: datetime) -> None:
        tracker.update(_history(now, "kubectl get ev", "kubectl top nodes"))
        assert tracker.completed_steps == {"examine-events", "check-node-health"}

    def test_dependency_gates_step(self, session: DebugSession, tracker: ProgressTracker) -> None:
        _play(session, "crashloop-1", ("kubectl get pods", "kubectl get pods"))
        tracker.update(session.snapshot())
        assert "verify-fix" not in tracker.completed_steps
        assert "initial-assessment" in tracker.completed_steps

    def test_analysis_step_waits_for_solution(self, session: DebugSession, tracker: ProgressTracker) -> None:
        _play(session, "crashloop-1", ("kubectl describe pod nginx-deployment-abc123",))
        tracker.update(session.snapshot())
        assert "describe-pod" in tracker.completed_steps
        assert "identify-root-cause" not in tracker.completed_steps


class TestFullPath:
    def test_full_crashloop_path(self, session: DebugSession, tracker: ProgressTracker) -> None:
        _play(session, "crashloop-1", FULL_CRASHLOOP_PATH)
        stats = tracker.update(session.snapshot())
        assert stats.completed_steps == stats.total_steps == 8
        assert stats.completion_rate == 100.0
        assert set(stats.unlocked_achievements) == {
            "first-command",
            "log-detective",
            "problem-solver",
            "speed-demon",
            "perfectionist",
            "crash-loop-master",
        }
        assert stats.total_points == 467
        assert stats.level == 5
        assert stats.experience_points == 67
        assert stats.experience_to_next_level == 33
        assert stats.rank == "Senior Engineer"

    def test_handle_change_as_subscriber(self, session: DebugSession, tracker: ProgressTracker) -> None:
        session.observer.subscribe(tracker.handle_change)
        _play(session, "crashloop-1", FULL_CRASHLOOP_PATH)
        assert "crash-loop-master" in tracker.unlocked_achievements
        assert tracker.total_points == 467

    def test_achievements_survive_reset(self, session: DebugSession, tracker: ProgressTracker) -> None:
        session.observer.subscribe(tracker.handle_change)
        _play(session, "crashloop-1", FULL_CRASHLOOP_PATH)
        session.reset_scenario()
        assert "crash-loop-master" in tracker.unlocked_achievements
        assert tracker.completed_steps == set()
        assert tracker.total_points == 320


class TestSkip:
    def test_skip_unknown_step_raises(self, tracker: ProgressTracker) -> None:
        with pytest.raises(KeyError):
            tracker.skip_step("fix-environment")

    def test_skipped_step_counts_without_points(self, tracker: ProgressTracker) -> None:
        tracker.skip_step("examine-events")
        stats = tracker.stats()
        assert stats.completed_steps == 1
        assert stats.total_points == 0
        assert tracker.skipped_steps == {"examine-events"}

    def test_skip_blocks_perfectionist(self, session: DebugSession, tracker: ProgressTracker) -> None:
        _play(session, "crashloop-1", FULL_CRASHLOOP_PATH[:1])
        tracker.update(session.snapshot())
        tracker.skip_step("examine-events")
        session_commands = FULL_CRASHLOOP_PATH[2:]

        async def finish() -> None:
            for command in session_commands:
                await session.execute_command(command)
            await session.wait_for_pending()

        asyncio.run(finish())
        stats = tracker.update(session.snapshot())
        assert stats.completed_steps == stats.total_steps
        assert "problem-solver" in stats.unlocked_achievements
        assert "perfectionist" not in stats.unlocked_achievements
        assert stats.total_points == 467 - 15 - 100

    def test_skips_cleared_on_scenario_change(self, session: DebugSession, tracker: ProgressTracker) -> None:
        _play(session, "crashloop-1", ())
        tracker.update(session.snapshot())
        tracker.skip_step("identify-root-cause")
        _play(session, "imagepull-1", ())
        tracker.update(session.snapshot())
        assert tracker.skipped_steps == set()
        assert [step.id for step in tracker.steps][-1] == "fix-image-reference"

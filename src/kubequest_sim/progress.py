"""Progress steps, points and achievements derived from a session's history."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from kubequest_sim.models import RunnerState, StateChange

# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


class ProgressStep(BaseModel):
    """One checklist item.  ``prefixes`` empty means the step is an analysis
    step, completed when the scenario is solved or when skipped."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    points: int = Field(ge=0)
    prefixes: tuple[str, ...] = ()
    dependencies: tuple[str, ...] = ()


class Achievement(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    points: int = Field(ge=0)


class GameStats(BaseModel):
    total_points: int
    level: int
    experience_points: int
    experience_to_next_level: int
    rank: str
    completed_steps: int
    total_steps: int
    completion_rate: float
    unlocked_achievements: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Step and achievement tables
# ---------------------------------------------------------------------------

BASE_STEPS: tuple[ProgressStep, ...] = (
    ProgressStep(
        id="initial-assessment",
        title="Initial Assessment",
        description="Get an overview of all pods across namespaces",
        points=10,
        prefixes=("kubectl get pods", "kubectl get po "),
    ),
    ProgressStep(
        id="examine-events",
        title="Examine Cluster Events",
        description="Review recent cluster events for warnings and errors",
        points=15,
        prefixes=("kubectl get events", "kubectl get ev "),
    ),
    ProgressStep(
        id="check-node-health",
        title="Check Node Health",
        description="Verify node status and resource usage",
        points=12,
        prefixes=("kubectl get nodes", "kubectl top nodes"),
    ),
)

SCENARIO_STEPS: dict[str, tuple[ProgressStep, ...]] = {
    "crashloop-1": (
        ProgressStep(
            id="check-pod-logs",
            title="Analyze Pod Logs",
            description="Read the logs of the crashing container",
            points=20,
            prefixes=("kubectl logs",),
        ),
        ProgressStep(
            id="describe-pod",
            title="Deep Dive Pod Analysis",
            description="Describe the pod to see restart counts and events",
            points=15,
            prefixes=("kubectl describe pod", "kubectl describe po "),
        ),
        ProgressStep(
            id="identify-root-cause",
            title="Identify Root Cause",
            description="Identify the missing DATABASE_URL environment variable",
            points=25,
            dependencies=("describe-pod",),
        ),
        ProgressStep(
            id="fix-environment",
            title="Apply Configuration Fix",
            description="Set the missing environment variable on the deployment",
            points=30,
            prefixes=("kubectl set env",),
        ),
        ProgressStep(
            id="verify-fix",
            title="Verify the Fix",
            description="Confirm the pod is now running",
            points=20,
            prefixes=("kubectl get pods", "kubectl get po "),
            dependencies=("fix-environment",),
        ),
    ),
    "imagepull-1": (
        ProgressStep(
            id="check-image-status",
            title="Check Image Pull Status",
            description="Describe the pod to see the image pull error",
            points=20,
            prefixes=("kubectl describe pod", "kubectl describe po "),
        ),
        ProgressStep(
            id="verify-image-name",
            title="Verify Image Name and Tag",
            description="Check if the image name and tag are correct",
            points=25,
            dependencies=("check-image-status",),
        ),
        ProgressStep(
            id="fix-image-reference",
            title="Fix Image Reference",
            description="Update the deployment with the correct image reference",
            points=30,
            prefixes=("kubectl set image",),
        ),
    ),
}

ACHIEVEMENTS: tuple[Achievement, ...] = (
    Achievement(id="first-command", title="First Steps", description="Execute your first kubectl command", points=10),
    Achievement(
        id="log-detective",
        title="Log Detective",
        description="Successfully analyze pod logs to find issues",
        points=25,
    ),
    Achievement(
        id="problem-solver",
        title="Problem Solver",
        description="Complete your first debugging scenario",
        points=50,
    ),
    Achievement(
        id="speed-demon",
        title="Speed Demon",
        description="Complete a scenario in under 10 minutes",
        points=75,
    ),
    Achievement(
        id="perfectionist",
        title="Perfectionist",
        description="Complete all steps without skipping any",
        points=100,
    ),
    Achievement(
        id="crash-loop-master",
        title="CrashLoop Master",
        description="Successfully resolve a CrashLoopBackOff issue",
        points=60,
    ),
    Achievement(
        id="network-ninja",
        title="Network Ninja",
        description="Diagnose and fix network connectivity issues",
        points=80,
    ),
    Achievement(
        id="resource-guru",
        title="Resource Guru",
        description="Resolve resource-related scheduling problems",
        points=65,
    ),
    Achievement(
        id="kubernetes-legend",
        title="Kubernetes Legend",
        description="Achieve 500+ total points across all scenarios",
        points=200,
    ),
)

RANKS: tuple[tuple[int, str], ...] = (
    (500, "Kubernetes Master"),
    (300, "Senior Engineer"),
    (150, "DevOps Specialist"),
    (50, "Junior Developer"),
    (0, "Beginner"),
)

SPEED_DEMON_SECONDS = 600


def steps_for(scenario_id: str | None) -> tuple[ProgressStep, ...]:
    """Return the base steps followed by any steps specific to *scenario_id*."""
    return BASE_STEPS + SCENARIO_STEPS.get(scenario_id or "", ())


def rank_for(points: int) -> str:
    for threshold, rank in RANKS:
        if points >= threshold:
            return rank
    return RANKS[-1][1]


# ---------------------------------------------------------------------------
# ProgressTracker
# ---------------------------------------------------------------------------


class ProgressTracker:
    """Read-model over :class:`RunnerState` snapshots.

    Step completion is recomputed from the command history on every
    :meth:`update`.  Achievements are sticky: once unlocked they stay
    unlocked, even across scenario switches and session resets.
    """

    def __init__(self) -> None:
        self._scenario_id: str | None = None
        self._steps: tuple[ProgressStep, ...] = steps_for(None)
        self._completed: set[str] = set()
        self._skipped: set[str] = set()
        self._unlocked: set[str] = set()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def steps(self) -> list[ProgressStep]:
        return list(self._steps)

    @property
    def completed_steps(self) -> set[str]:
        return set(self._completed)

    @property
    def skipped_steps(self) -> set[str]:
        return set(self._skipped)

    @property
    def unlocked_achievements(self) -> set[str]:
        return set(self._unlocked)

    @property
    def achievements(self) -> list[tuple[Achievement, bool]]:
        return [(achievement, achievement.id in self._unlocked) for achievement in ACHIEVEMENTS]

    def update(self, state: RunnerState) -> GameStats:
        """Fold *state* into the tracker and return the resulting stats."""
        scenario = state.current_scenario
        scenario_id = scenario.id if scenario is not None else None
        if scenario_id != self._scenario_id:
            self._scenario_id = scenario_id
            self._steps = steps_for(scenario_id)
            self._skipped.clear()

        self._completed = self._completed_from(state) | self._skipped
        solved = scenario is not None and state.scenario_progress >= 100
        all_done = all(step.id in self._completed for step in self._steps)

        checks = {
            "first-command": any(not r.is_system for r in state.command_history),
            "log-detective": any(
                "logs" in r.command for r in state.command_history if not r.is_system
            ),
            "problem-solver": all_done,
            "speed-demon": all_done and state.time_elapsed < SPEED_DEMON_SECONDS,
            "perfectionist": all_done and not self._skipped,
            "crash-loop-master": solved and (scenario_id or "").startswith("crashloop-"),
            "network-ninja": solved and scenario is not None and scenario.category == "networking",
            "resource-guru": solved and scenario is not None and scenario.category == "scheduling",
        }
        self._unlocked |= {achievement_id for achievement_id, held in checks.items() if held}
        if self.total_points >= 500:
            self._unlocked.add("kubernetes-legend")
        return self.stats()

    def handle_change(self, change: StateChange) -> None:
        """Subscriber adapter for :meth:`SessionObserver.subscribe`."""
        self.update(change.snapshot)

    def skip_step(self, step_id: str) -> None:
        """Mark *step_id* complete without awarding its points.

        Raises:
            KeyError: if *step_id* is not one of the current steps.
        """
        if step_id not in {step.id for step in self._steps}:
            raise KeyError(step_id)
        self._skipped.add(step_id)
        self._completed.add(step_id)

    @property
    def total_points(self) -> int:
        step_points = sum(
            step.points
            for step in self._steps
            if step.id in self._completed and step.id not in self._skipped
        )
        achievement_points = sum(a.points for a in ACHIEVEMENTS if a.id in self._unlocked)
        return step_points + achievement_points

    def stats(self) -> GameStats:
        points = self.total_points
        total = len(self._steps)
        done = sum(1 for step in self._steps if step.id in self._completed)
        return GameStats(
            total_points=points,
            level=points // 100 + 1,
            experience_points=points % 100,
            experience_to_next_level=100 - points % 100,
            rank=rank_for(points),
            completed_steps=done,
            total_steps=total,
            completion_rate=done * 100 / total if total else 0.0,
            unlocked_achievements=[a.id for a in ACHIEVEMENTS if a.id in self._unlocked],
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _completed_from(self, state: RunnerState) -> set[str]:
        completed: set[str] = set()
        for result in state.command_history:
            if result.is_system:
                continue
            command = " ".join(result.command.split())
            for step in self._steps:
                if step.id in completed or not step.prefixes:
                    continue
                if not all(dep in completed for dep in step.dependencies):
                    continue
                if any(command == p.strip() or command.startswith(p) for p in step.prefixes):
                    completed.add(step.id)
                    break
        if state.current_scenario is not None and state.scenario_progress >= 100:
            completed |= {step.id for step in self._steps if not step.prefixes}
        return completed


__all__ = [
    "ACHIEVEMENTS",
    "Achievement",
    "BASE_STEPS",
    "GameStats",
    "ProgressStep",
    "ProgressTracker",
    "SCENARIO_STEPS",
    "rank_for",
    "steps_for",
]

"""Scenario runner: the per-learner debugging session state machine."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Coroutine
from datetime import UTC, datetime
from typing import Any

from kubequest_sim.catalog import ScenarioCatalog, welcome_message
from kubequest_sim.config import Settings
from kubequest_sim.criteria import evaluate, remediate
from kubequest_sim.decorators import requires_status
from kubequest_sim.interpreter import CommandInterpreter, tokenize
from kubequest_sim.models import (
    ClusterState,
    CommandResult,
    DebugScenario,
    Hint,
    K8sResource,
    RunnerState,
    SimulationStatus,
)
from kubequest_sim.observer import SessionObserver

logger = logging.getLogger(__name__)

SYSTEM_COMMAND = "system"


def completion_message(scenario: DebugScenario, state: RunnerState, elapsed: float) -> str:
    """Return the summary posted when *scenario*'s success criteria all hold."""
    minutes, seconds = divmod(int(elapsed), 60)
    if state.hints_used == 0:
        efficiency = "Perfect!"
    elif state.hints_used <= 2:
        efficiency = "Excellent!"
    else:
        efficiency = "Good!"
    return "\n".join(
        [
            "SCENARIO COMPLETED!",
            "",
            "All objectives completed successfully!",
            "",
            "Performance summary:",
            f"  Scenario:   {scenario.name}",
            f"  Time:       {minutes}:{seconds:02d}",
            f"  Commands:   {state.commands_executed}",
            f"  Hints:      {state.hints_used}",
            f"  Efficiency: {efficiency}",
            "",
            f"Skill level: {scenario.difficulty.value} Debugger",
        ]
    )


class DebugSession:
    """One learner's debugging session against a simulated cluster.

    Status transitions::

        stopped -> running <-> paused
        running -> error          (scenario failed to load)
        any     -> stopped        (reset, or scenario completed)

    The start delay and the completion delay run as :mod:`asyncio` tasks
    owned by the session.  ``reset_scenario`` and a re-entrant
    ``start_scenario`` cancel them, so a stale completion never lands after
    a reset.  Every transition publishes a snapshot through :attr:`observer`.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        catalog: ScenarioCatalog | None = None,
        clock: Callable[[], datetime] | None = None,
        monotonic: Callable[[], float] | None = None,
        observer: SessionObserver | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._catalog = catalog or ScenarioCatalog(settings=self._settings)
        self._clock = clock or (lambda: datetime.now(tz=UTC))
        self._monotonic = monotonic or time.monotonic
        self.observer = observer or SessionObserver(clock=self._clock)
        self._interpreter = CommandInterpreter(
            clock=self._clock,
            default_namespace=self._settings.default_namespace,
        )
        self._state = RunnerState(cluster_state=self._catalog.default_state(self._clock()))
        self._pending: set[asyncio.Task[Any]] = set()
        self._given_hints: set[str] = set()
        self._started_at: float | None = None
        self._finished_at: float | None = None
        self._paused_at: float | None = None
        self._paused_total = 0.0

    # ------------------------------------------------------------------
    # Read properties
    # ------------------------------------------------------------------

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def catalog(self) -> ScenarioCatalog:
        return self._catalog

    @property
    def current_scenario(self) -> DebugScenario | None:
        return self._state.current_scenario

    @property
    def cluster_state(self) -> ClusterState:
        return self._state.cluster_state

    @property
    def simulation_status(self) -> SimulationStatus:
        return self._state.simulation_status

    @property
    def command_history(self) -> list[CommandResult]:
        return list(self._state.command_history)

    @property
    def hints_used(self) -> int:
        return self._state.hints_used

    @property
    def commands_executed(self) -> int:
        return self._state.commands_executed

    @property
    def scenario_progress(self) -> int:
        return self._state.scenario_progress

    @property
    def selected_resource(self) -> K8sResource | None:
        return self._state.selected_resource

    @property
    def last_error(self) -> str | None:
        return self._state.last_error

    @property
    def time_elapsed(self) -> float:
        """Seconds spent in the current scenario, excluding paused intervals."""
        if self._started_at is None:
            return 0.0
        if self._finished_at is not None:
            end = self._finished_at
        elif self._paused_at is not None:
            end = self._paused_at
        else:
            end = self._monotonic()
        return max(0.0, end - self._started_at - self._paused_total)

    def snapshot(self) -> RunnerState:
        """Return an independent copy of the session state."""
        return self._state.model_copy(update={"time_elapsed": self.time_elapsed}, deep=True)

    # ------------------------------------------------------------------
    # Scenario lifecycle
    # ------------------------------------------------------------------

    @requires_status(
        SimulationStatus.stopped,
        SimulationStatus.running,
        SimulationStatus.paused,
        SimulationStatus.error,
        operation="start a scenario",
    )
    async def start_scenario(self, scenario_id: str) -> None:
        """Load *scenario_id* after the configured start delay.

        A failed lookup never raises: the session moves to ``error`` and
        records the message in :attr:`last_error`.  If the load is cancelled
        by a reset or a newer ``start_scenario``, this call returns quietly.
        """
        self._cancel_pending()
        task = self._spawn(self._load(scenario_id))
        await asyncio.wait({task})

    async def _load(self, scenario_id: str) -> None:
        await asyncio.sleep(self._settings.start_delay_seconds)
        now = self._clock()
        try:
            scenario = self._catalog.get(scenario_id)
            cluster = self._catalog.initial_state(scenario.id, now)
        except (KeyError, ValueError) as exc:
            logger.exception("Failed to load scenario %r", scenario_id)
            self._state = self._state.model_copy(
                update={
                    "simulation_status": SimulationStatus.error,
                    "last_error": f"{type(exc).__name__}: {exc}",
                }
            )
            self._publish("scenario_failed")
            return

        welcome = CommandResult(
            command=SYSTEM_COMMAND,
            output=welcome_message(scenario),
            exit_code=0,
            timestamp=now,
        )
        self._given_hints.clear()
        self._reset_clock()
        self._started_at = self._monotonic()
        self._state = RunnerState(
            current_scenario=scenario,
            cluster_state=cluster,
            simulation_status=SimulationStatus.running,
            command_history=[welcome],
            selected_resource=self._state.selected_resource,
        )
        logger.info("Started scenario %s (%s)", scenario.id, scenario.name)
        self._publish("scenario_started")

    def reset_scenario(self) -> None:
        """Return to ``stopped`` on the default cluster.  Safe to call repeatedly."""
        self._cancel_pending()
        self._given_hints.clear()
        self._reset_clock()
        self._state = RunnerState(cluster_state=self._catalog.default_state(self._clock()))
        logger.info("Session reset")
        self._publish("scenario_reset")

    @requires_status(SimulationStatus.running, operation="pause")
    def pause_simulation(self) -> None:
        self._paused_at = self._monotonic()
        self._set(simulation_status=SimulationStatus.paused)
        self._publish("simulation_paused")

    @requires_status(SimulationStatus.paused, operation="resume")
    def resume_simulation(self) -> None:
        if self._paused_at is not None:
            self._paused_total += self._monotonic() - self._paused_at
            self._paused_at = None
        self._set(simulation_status=SimulationStatus.running)
        self._publish("simulation_resumed")

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @requires_status(
        SimulationStatus.running,
        SimulationStatus.stopped,
        operation="execute a command",
    )
    async def execute_command(self, text: str) -> CommandResult:
        """Interpret *text* against the live cluster and record the result.

        During a running scenario a successful fix command applies the
        simulated remediation, and the success criteria are re-evaluated
        after every command.
        """
        result = self._interpreter.execute(text, self._state.cluster_state)
        history = [*self._state.command_history, result]
        updates: dict[str, Any] = {
            "command_history": history,
            "commands_executed": self._state.commands_executed + 1,
        }
        if text.strip() == "clear":
            updates["screen_start"] = len(history)
        self._set(**updates)
        logger.debug("Executed %r (exit %d)", text, result.exit_code)

        scenario = self._state.current_scenario
        if scenario is not None and self.simulation_status == SimulationStatus.running:
            if result.exit_code == 0 and self._is_fix(scenario, text):
                cluster = remediate(self._state.cluster_state, scenario, self._clock())
                self._set(cluster_state=cluster)
                logger.info("Applied remediation for %s", scenario.id)
            self._check_progress(scenario)

        self._publish("command_executed")
        return result

    @staticmethod
    def _is_fix(scenario: DebugScenario, text: str) -> bool:
        """True when *text*'s leading tokens equal one of the scenario's fix commands."""
        tokens = tokenize(text)
        for fix in scenario.fix_commands:
            expected = tokenize(fix)
            if expected and tokens[: len(expected)] == expected:
                return True
        return False

    def _check_progress(self, scenario: DebugScenario) -> None:
        if self._state.scenario_progress >= 100:
            return
        report = evaluate(self._state.cluster_state, scenario.success_criteria)
        if not report.satisfied:
            total = len(report.results)
            passed = sum(1 for result in report.results if result.satisfied)
            self._set(scenario_progress=min(99, passed * 100 // total) if total else 0)
            return
        self._set(scenario_progress=100)
        logger.info("Success criteria met for %s", scenario.id)
        self._spawn(self._complete(scenario))

    async def _complete(self, scenario: DebugScenario) -> None:
        await asyncio.sleep(self._settings.completion_delay_seconds)
        if self._state.current_scenario is None or self._state.current_scenario.id != scenario.id:
            return
        elapsed = self.time_elapsed
        self._finished_at = self._paused_at if self._paused_at is not None else self._monotonic()
        message = CommandResult(
            command=SYSTEM_COMMAND,
            output=completion_message(scenario, self._state, elapsed),
            exit_code=0,
            timestamp=self._clock(),
        )
        self._set(
            command_history=[*self._state.command_history, message],
            simulation_status=SimulationStatus.stopped,
        )
        logger.info("Completed scenario %s in %.1fs", scenario.id, elapsed)
        self._publish("scenario_completed")

    # ------------------------------------------------------------------
    # Hints and selection
    # ------------------------------------------------------------------

    def use_hint(self) -> Hint | None:
        """Return the next unused hint by priority, or ``None`` when exhausted."""
        scenario = self._state.current_scenario
        if scenario is None:
            return None
        remaining = [hint for hint in scenario.hints if hint.id not in self._given_hints]
        if not remaining:
            return None
        hint = min(remaining, key=lambda h: (h.priority, scenario.hints.index(h)))
        self._given_hints.add(hint.id)
        self._set(hints_used=self._state.hints_used + 1)
        self._publish("hint_used")
        return hint

    def select_resource(self, resource: K8sResource | None) -> None:
        self._set(selected_resource=resource)
        self._publish("resource_selected")

    # ------------------------------------------------------------------
    # Task management
    # ------------------------------------------------------------------

    async def wait_for_pending(self) -> None:
        """Wait until every scheduled delay (start or completion) has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def _cancel_pending(self) -> None:
        for task in list(self._pending):
            task.cancel()
        self._pending.clear()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _reset_clock(self) -> None:
        self._started_at = None
        self._finished_at = None
        self._paused_at = None
        self._paused_total = 0.0

    def _set(self, **updates: Any) -> None:
        self._state = self._state.model_copy(update=updates)

    def _publish(self, event: str) -> None:
        self.observer.publish(event, self.snapshot())


__all__ = ["DebugSession", "completion_message"]

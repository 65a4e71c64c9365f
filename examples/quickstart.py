"""kubequest-sim quickstart: working demonstrations of the main features.

Run this file directly to verify your installation:

    python examples/quickstart.py

Each demo is self-contained.  Simulated delays are switched off so the
file finishes in well under a second.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

from kubequest_sim import (
    CommandInterpreter,
    DebugSession,
    FaultInjector,
    PodStatus,
    ProgressTracker,
    ScenarioCatalog,
    ScenarioNotFoundError,
    SessionObserver,
    Settings,
    SimulationStateError,
    SimulationStatus,
    evaluate,
    remediate,
)

SETTINGS = Settings(start_delay_seconds=0.0, completion_delay_seconds=0.0)
FIX_COMMAND = "kubectl set env deployment/nginx-deployment DATABASE_URL=postgres://db:5432/app"


# ---------------------------------------------------------------------------
# Demo 1: browsing the scenario catalog
# ---------------------------------------------------------------------------

def demo_catalog() -> None:
    """List categories and look up a scenario by id."""

    print("\n=== Demo 1: Scenario Catalog ===")

    catalog = ScenarioCatalog(settings=SETTINGS)
    print(f"  {len(catalog)} scenarios in {len(catalog.categories())} categories")
    for category in catalog.categories():
        print(f"    {category}: {len(catalog.list(category=category))}")

    scenario = catalog.get("crashloop-1")
    print(f"  crashloop-1 -> {scenario.name} ({scenario.difficulty.value})")

    try:
        catalog.get("no-such-scenario")
    except ScenarioNotFoundError as exc:
        print(f"  unknown id raises ScenarioNotFoundError: {exc}")

    print("  Demo 1 passed.")


# ---------------------------------------------------------------------------
# Demo 2: injecting a fault and checking success criteria
# ---------------------------------------------------------------------------

def demo_fault_injection() -> None:
    """Break the baseline cluster, then resolve it with ``remediate``."""

    print("\n=== Demo 2: Fault Injection and Criteria ===")

    now = datetime.now(tz=UTC)
    catalog = ScenarioCatalog(settings=SETTINGS)
    scenario = catalog.get("crashloop-1")
    broken = FaultInjector().inject(catalog.default_state(now), scenario.id, scenario, now)

    pod = next(p for p in broken.pods if p.name == "nginx-deployment-abc123")
    print(f"  nginx pod status after injection: {pod.status.value}")
    assert pod.status == PodStatus.crash_loop_back_off

    report = evaluate(broken, scenario.success_criteria)
    for result in report.results:
        print(f"  {result.condition.type.value} {result.condition.target}: {result.detail}")
    assert not report.satisfied

    fixed = remediate(broken, scenario, now)
    assert evaluate(fixed, scenario.success_criteria).satisfied
    print("  remediate() satisfies every condition")

    print("  Demo 2 passed.")


# ---------------------------------------------------------------------------
# Demo 3: the kubectl interpreter
# ---------------------------------------------------------------------------

def demo_interpreter() -> None:
    """Run a few read-only commands against a faulted cluster."""

    print("\n=== Demo 3: kubectl Interpreter ===")

    catalog = ScenarioCatalog(settings=SETTINGS)
    state = catalog.initial_state("crashloop-1")
    interpreter = CommandInterpreter()

    for command in ("kubectl get pods", "kubectl logs nginx-deployment-abc123", "kubectl get widgets"):
        result = interpreter.execute(command, state)
        print(f"  $ {command}  (exit {result.exit_code})")
        for line in result.output.splitlines()[:4]:
            print(f"    {line}")

    print("  Demo 3 passed.")


# ---------------------------------------------------------------------------
# Demo 4: a full session with observer and progress tracking
# ---------------------------------------------------------------------------

def demo_session() -> None:
    """Solve crashloop-1 end to end and print the resulting stats."""

    print("\n=== Demo 4: Debugging Session ===")

    observer = SessionObserver()
    session = DebugSession(settings=SETTINGS, observer=observer)
    tracker = ProgressTracker()
    observer.subscribe(tracker.handle_change)

    async def solve() -> None:
        await session.start_scenario("crashloop-1")
        for command in (
            "kubectl get pods",
            "kubectl logs nginx-deployment-abc123",
            "kubectl describe pod nginx-deployment-abc123",
            FIX_COMMAND,
        ):
            await session.execute_command(command)
        await session.wait_for_pending()

    asyncio.run(solve())

    assert session.simulation_status == SimulationStatus.stopped
    print(session.command_history[-1].output)

    try:
        session.pause_simulation()
    except SimulationStateError as exc:
        print(f"  pause after completion: {exc}")

    stats = tracker.stats()
    print(f"  Events published: {len(observer.get_changes())}")
    print(f"  Level {stats.level} ({stats.rank}), {stats.total_points} points")
    print(f"  Achievements: {', '.join(stats.unlocked_achievements)}")

    print("  Demo 4 passed.")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main() -> None:
    """Run all quickstart demos in sequence."""
    print("kubequest-sim quickstart demos")
    print("=" * 45)

    demo_catalog()
    demo_fault_injection()
    demo_interpreter()
    demo_session()

    print("\n" + "=" * 45)
    print("All demos completed successfully.")


if __name__ == "__main__":
    main()

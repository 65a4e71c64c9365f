"""CLI entry point for kubequest-sim."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import click
import yaml

from kubequest_sim import __version__
from kubequest_sim.catalog import ScenarioCatalog
from kubequest_sim.config import Settings
from kubequest_sim.core import SimulationStateError
from kubequest_sim.logging_config import setup_logging
from kubequest_sim.models import CommandResult, Difficulty, SimulationStatus
from kubequest_sim.progress import ProgressTracker
from kubequest_sim.session import DebugSession

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_script(path: str) -> list[str]:
    """Load a list of commands from a YAML, JSON or plain-text file.

    YAML and JSON files hold either a list of strings or a mapping with a
    ``commands`` list.  Text files hold one command per line; blank lines
    and ``#`` comments are skipped.
    """
    file_path = Path(path)
    raw = file_path.read_text(encoding="utf-8")
    if file_path.suffix in (".yaml", ".yml"):
        data: Any = yaml.safe_load(raw)
    elif file_path.suffix == ".json":
        data = json.loads(raw)
    else:
        return [
            line.strip()
            for line in raw.splitlines()
            if line.strip() and not line.strip().startswith("#")
        ]
    if isinstance(data, dict):
        data = data.get("commands", [])
    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        raise ValueError(f"{path}: expected a list of command strings")
    return data


def _catalog(ctx: click.Context) -> ScenarioCatalog:
    return ScenarioCatalog(settings=ctx.obj["settings"])


def _require_scenario(catalog: ScenarioCatalog, scenario_id: str) -> None:
    if scenario_id not in catalog:
        click.echo(f"Error: unknown scenario '{scenario_id}'", err=True)
        sys.exit(1)


def _echo_result(result: CommandResult) -> None:
    if not result.is_system:
        click.echo(f"$ {result.command}")
    if result.output:
        click.echo(result.output)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="kubequest-sim")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Override KUBEQUEST_LOG_LEVEL.",
)
@click.pass_context
def main(ctx: click.Context, log_level: str | None) -> None:
    """KubeQuest simulator: practice Kubernetes debugging against a fake cluster."""
    settings = Settings()
    if log_level is not None:
        settings = settings.model_copy(update={"log_level": log_level.upper()})
    setup_logging(settings.log_level)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@main.command("scenarios")
@click.option("--category", default=None, help="Only list scenarios in this category.")
@click.option(
    "--difficulty",
    default=None,
    type=click.Choice([d.value for d in Difficulty], case_sensitive=False),
    help="Only list scenarios of this difficulty.",
)
@click.option("--json-output", is_flag=True, help="Emit results as JSON.")
@click.pass_context
def scenarios_command(
    ctx: click.Context,
    category: str | None,
    difficulty: str | None,
    json_output: bool,
) -> None:
    """List the available debugging scenarios."""
    wanted = None
    if difficulty is not None:
        wanted = next(d for d in Difficulty if d.value.lower() == difficulty.lower())
    scenarios = _catalog(ctx).list(category=category, difficulty=wanted)

    if json_output:
        click.echo(json.dumps([s.model_dump(mode="json") for s in scenarios], indent=2))
        return

    if not scenarios:
        click.echo("No scenarios found.")
        return
    click.echo(f"{'ID':<34}{'DIFFICULTY':<14}{'CATEGORY':<16}NAME")
    for scenario in scenarios:
        click.echo(
            f"{scenario.id:<34}{scenario.difficulty.value:<14}{scenario.category:<16}{scenario.name}"
        )


@main.command("show")
@click.argument("scenario_id")
@click.option("--json-output", is_flag=True, help="Emit the scenario as JSON.")
@click.pass_context
def show_command(ctx: click.Context, scenario_id: str, json_output: bool) -> None:
    """Show the details of a single scenario."""
    catalog = _catalog(ctx)
    _require_scenario(catalog, scenario_id)
    scenario = catalog.get(scenario_id)

    if json_output:
        click.echo(scenario.model_dump_json(indent=2))
        return

    click.echo(f"Name       : {scenario.name}")
    click.echo(f"ID         : {scenario.id}")
    click.echo(f"Category   : {scenario.category}")
    click.echo(f"Difficulty : {scenario.difficulty.value}")
    click.echo(f"Time       : {scenario.estimated_time}")
    click.echo(f"\n{scenario.description}\n")
    click.echo("Objectives:")
    for index, objective in enumerate(scenario.objectives, start=1):
        click.echo(f"  {index}. {objective}")
    if scenario.commands:
        click.echo("Useful commands:")
        for command in scenario.commands:
            click.echo(f"  {command}")
    click.echo(f"Hints available: {len(scenario.hints)}")


@main.command("run")
@click.argument("scenario_id")
@click.option("-c", "--command", "commands", multiple=True, help="Command to execute (repeatable).")
@click.option(
    "--script",
    "script_path",
    default=None,
    metavar="PATH",
    help="File with commands (YAML, JSON or one per line).",
)
@click.option(
    "--delays/--no-delays",
    default=False,
    show_default=True,
    help="Honour the configured start and completion delays.",
)
@click.option("--json-output", is_flag=True, help="Emit results as JSON.")
@click.pass_context
def run_command(
    ctx: click.Context,
    scenario_id: str,
    commands: tuple[str, ...],
    script_path: str | None,
    delays: bool,
    json_output: bool,
) -> None:
    """Run SCENARIO_ID non-interactively with the given commands."""
    settings: Settings = ctx.obj["settings"]
    if not delays:
        settings = settings.model_copy(update={"start_delay_seconds": 0.0, "completion_delay_seconds": 0.0})
    catalog = ScenarioCatalog(settings=settings)
    _require_scenario(catalog, scenario_id)

    script = list(commands)
    if script_path is not None:
        try:
            script.extend(_load_script(script_path))
        except Exception as exc:
            click.echo(f"Error loading script: {exc}", err=True)
            sys.exit(1)
    if not script:
        raise click.UsageError("Provide at least one -c/--command or a --script file.")

    session = DebugSession(settings=settings, catalog=catalog)

    async def drive() -> None:
        await session.start_scenario(scenario_id)
        for command in script:
            if session.simulation_status not in (SimulationStatus.running, SimulationStatus.stopped):
                break
            await session.execute_command(command)
        await session.wait_for_pending()

    asyncio.run(drive())
    state = session.snapshot()

    if json_output:
        payload = {
            "scenario": scenario_id,
            "status": state.simulation_status.value,
            "progress": state.scenario_progress,
            "commands_executed": state.commands_executed,
            "results": [r.model_dump(mode="json") for r in state.command_history],
        }
        click.echo(json.dumps(payload, indent=2))
        return

    for result in state.command_history:
        _echo_result(result)
        click.echo("")
    click.echo(f"Status   : {state.simulation_status.value}")
    click.echo(f"Progress : {state.scenario_progress}%")


_META_HELP = """Meta commands:
  :hint     show the next hint
  :pause    pause the scenario timer
  :resume   resume the scenario timer
  :status   show session status
  :progress show points, level and achievements
  :reset    reset to the default cluster
  :quit     leave the simulator"""


async def _play(session: DebugSession, tracker: ProgressTracker, scenario_id: str) -> None:
    await session.start_scenario(scenario_id)
    for result in session.command_history:
        _echo_result(result)
    seen = len(session.command_history)

    while True:
        try:
            line = await asyncio.to_thread(
                click.prompt, "kubequest", prompt_suffix="$ ", default="", show_default=False
            )
        except (click.Abort, EOFError):
            click.echo("")
            break
        line = line.strip()
        if not line:
            continue
        if line in (":quit", ":q", "exit"):
            break
        try:
            if line == ":hint":
                hint = session.use_hint()
                if hint is None:
                    click.echo("No more hints available.")
                else:
                    click.echo(f"Hint: {hint.message}")
                    if hint.command:
                        click.echo(f"Try: {hint.command}")
            elif line == ":pause":
                session.pause_simulation()
                click.echo("Simulation paused.")
            elif line == ":resume":
                session.resume_simulation()
                click.echo("Simulation resumed.")
            elif line == ":status":
                click.echo(f"Scenario : {session.current_scenario.id if session.current_scenario else '-'}")
                click.echo(f"Status   : {session.simulation_status.value}")
                click.echo(f"Progress : {session.scenario_progress}%")
                click.echo(f"Commands : {session.commands_executed}")
                click.echo(f"Hints    : {session.hints_used}")
                click.echo(f"Elapsed  : {int(session.time_elapsed)}s")
            elif line == ":progress":
                stats = tracker.stats()
                click.echo(f"Level {stats.level} ({stats.rank}), {stats.total_points} points")
                click.echo(f"Steps    : {stats.completed_steps}/{stats.total_steps}")
                click.echo(f"Unlocked : {', '.join(stats.unlocked_achievements) or '-'}")
            elif line == ":reset":
                session.reset_scenario()
                click.echo("Session reset to the default cluster.")
            elif line.startswith(":"):
                click.echo(_META_HELP)
            else:
                result = await session.execute_command(line)
                if line == "clear":
                    click.clear()
                elif result.output:
                    click.echo(result.output)
                if session.scenario_progress >= 100:
                    await session.wait_for_pending()
        except SimulationStateError as exc:
            click.echo(f"Error: {exc}", err=True)
        # Completion messages land asynchronously; echo any new system entries.
        history = session.command_history
        if len(history) < seen:
            seen = 0
        for result in history[seen:]:
            if result.is_system:
                click.echo(result.output)
        seen = len(history)


@main.command("play")
@click.argument("scenario_id")
@click.pass_context
def play_command(ctx: click.Context, scenario_id: str) -> None:
    """Play SCENARIO_ID in an interactive terminal."""
    settings: Settings = ctx.obj["settings"]
    catalog = ScenarioCatalog(settings=settings)
    _require_scenario(catalog, scenario_id)

    session = DebugSession(settings=settings, catalog=catalog)
    tracker = ProgressTracker()
    session.observer.subscribe(tracker.handle_change)
    click.echo("Type 'help' for kubectl commands, ':help' for simulator commands.")
    asyncio.run(_play(session, tracker, scenario_id))


if __name__ == "__main__":
    main()

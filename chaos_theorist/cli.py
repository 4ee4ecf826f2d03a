import asyncio
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

import typer
from rich import print as rprint

from .bootstrap import build_orchestrator
from .config.schema import DEFAULT_CONFIG_PATH, ChaosConfig, load_config
from .domain import lifecycle
from .domain.queries import key_parameters, metric_alert_level, within_target
from .domain.simulation import ApplicationStatus, RunResults
from .domain.systems import DataType, SystemParameter, parse_flag
from .errors import ChaosTheoristError, ValidationError
from .orchestration.flows import Orchestrator
from .store.state import AnalysisStatus

app = typer.Typer(help="Chaos Theorist: monitor chaotic systems and their leverage points")


def _setup(config_path: str) -> tuple[ChaosConfig, Orchestrator]:
    cfg = load_config(config_path)
    logging.basicConfig(level=getattr(logging, cfg.log_level), format="%(levelname)s %(name)s: %(message)s")
    return cfg, build_orchestrator(cfg)


def _coerce(parameter: SystemParameter, raw: str):
    if parameter.data_type is DataType.NUMBER:
        try:
            return int(raw)
        except ValueError:
            pass
        try:
            return float(raw)
        except ValueError:
            raise ValidationError(f"{raw!r} is not a number", parameter_id=parameter.id) from None
    if parameter.data_type is DataType.BOOLEAN:
        flag = parse_flag(raw)
        if flag is not None:
            return flag
        raise ValidationError(f"{raw!r} is not a boolean", parameter_id=parameter.id)
    return raw


@contextmanager
def _domain_errors() -> Iterator[None]:
    try:
        yield
    except ChaosTheoristError as exc:
        rprint(f"[red]{exc}[/red]")
        raise typer.Exit(1)


def _exit_on_global_error(orch: Orchestrator) -> None:
    error = orch.store.state.global_error
    if error:
        rprint(f"[red]{error}[/red]")
        raise typer.Exit(1)


async def _load(orch: Orchestrator, system_id: Optional[str]) -> None:
    await orch.load_systems(preferred_id=system_id)
    _exit_on_global_error(orch)
    if system_id and orch.store.state.selected_system_id != system_id:
        rprint(f"[red]System {system_id} is not available.[/red]")
        raise typer.Exit(1)


@app.command()
def systems(config_path: str = typer.Option(DEFAULT_CONFIG_PATH, "--config-path")):
    """List the systems visible to the configured user."""
    _, orch = _setup(config_path)
    asyncio.run(_load(orch, None))
    state = orch.store.state
    if not state.systems:
        rprint("[yellow]No systems available.[/yellow]")
        return
    for system in state.systems:
        marker = "*" if system.id == state.selected_system_id else " "
        colour = "green" if system.status.value == "Active" else "yellow"
        rprint(f"{marker} [bold]{system.id}[/bold] [{colour}]{system.status.value}[/{colour}] {system.name}")


@app.command()
def show(
    system_id: str,
    config_path: str = typer.Option(DEFAULT_CONFIG_PATH, "--config-path"),
):
    """Show parameters and metrics for one system."""
    _, orch = _setup(config_path)
    asyncio.run(_load(orch, system_id))
    system = orch.store.state.selected_system
    rprint(f"[bold]{system.name}[/bold] (v{system.model_version}, hash {system.content_hash[:12]})")
    if system.description:
        rprint(f"  {system.description}")
    key_ids = {param.id for param in key_parameters(system)}
    rprint("[bold]Parameters[/bold]")
    for param in system.parameters:
        star = "*" if param.id in key_ids else " "
        rprint(f" {star} {param.id} = {param.current_value!r} {param.unit} ({param.data_type.value})")
    rprint("[bold]Metrics[/bold]")
    for metric in system.metrics:
        level = metric_alert_level(metric)
        badge = {"critical": "[red]CRITICAL[/red]", "warning": "[yellow]warning[/yellow]"}.get(level or "", "")
        target = within_target(metric)
        band = "" if target is None else (" on target" if target else " off target")
        rprint(f"   {metric.id} = {metric.current_value!r} {metric.unit}{band} {badge}")


@app.command()
def analyze(
    system_id: str,
    propose: Optional[str] = typer.Option(None, "--propose", help="Leverage point id to propose as an intervention."),
    config_path: str = typer.Option(DEFAULT_CONFIG_PATH, "--config-path"),
):
    """Request leverage-point analysis for a system."""
    _, orch = _setup(config_path)

    async def _run() -> None:
        await _load(orch, system_id)
        await orch.fetch_leverage_points(system_id)

    asyncio.run(_run())
    analysis = orch.store.state.leverage_for(system_id)
    if analysis.status is AnalysisStatus.UNAVAILABLE:
        rprint(f"[red]{analysis.error}[/red]")
        raise typer.Exit(1)
    if not analysis.points:
        rprint("[yellow]No leverage points identified.[/yellow]")
    for point in analysis.points:
        rprint(
            f"[bold]{point.id}[/bold] {point.action} "
            f"(prob {point.outcome_probability:.0%}, effort {point.implementation_effort.value})"
        )
    if propose:
        if propose not in {point.id for point in analysis.points}:
            rprint(f"[red]Unknown leverage point {propose}.[/red]")
            raise typer.Exit(1)
        orch.propose_intervention(propose, system_id)
        rprint(f"[green]Proposed intervention {propose}.[/green]")


@app.command("set-param")
def set_param(
    system_id: str,
    parameter_id: str,
    value: str,
    config_path: str = typer.Option(DEFAULT_CONFIG_PATH, "--config-path"),
):
    """Change one parameter and print the refreshed value."""
    _, orch = _setup(config_path)

    async def _run() -> bool:
        await _load(orch, system_id)
        parameter = orch.store.state.selected_system.parameter(parameter_id)
        if parameter is None:
            rprint(f"[red]Parameter {parameter_id} not found in {system_id}.[/red]")
            raise typer.Exit(1)
        with _domain_errors():
            coerced = _coerce(parameter, value)
        return await orch.update_parameter(system_id, parameter_id, coerced)

    ok = asyncio.run(_run())
    state = orch.store.state
    if not ok:
        rprint(f"[red]{state.parameter_edit(system_id, parameter_id).error}[/red]")
        raise typer.Exit(1)
    updated = state.selected_system.parameter(parameter_id)
    rprint(f"[green]{parameter_id} = {updated.current_value!r}[/green] (hash {state.selected_system.content_hash[:12]})")


@app.command()
def chat(
    text: str,
    config_path: str = typer.Option(DEFAULT_CONFIG_PATH, "--config-path"),
):
    """Ask the AI analyst a question."""
    _, orch = _setup(config_path)
    reply = asyncio.run(orch.send_chat_message(text))
    if reply is None:
        rprint("[red]The analyst did not respond.[/red]")
        raise typer.Exit(1)
    rprint(f"[bold]{reply.ai_model.value}[/bold]: {reply.text}")


@app.command()
def simulate(
    system_id: str,
    scenario: Optional[str] = typer.Option(None, "--scenario"),
    apply: Optional[str] = typer.Option(None, "--apply", help="Leverage point id to apply during the run."),
    config_path: str = typer.Option(DEFAULT_CONFIG_PATH, "--config-path"),
):
    """Start a simulation run, optionally apply an intervention, and complete it."""
    _, orch = _setup(config_path)

    async def _run():
        await _load(orch, system_id)
        return await orch.start_simulation(system_id, scenario_id=scenario)

    run = asyncio.run(_run())
    _exit_on_global_error(orch)
    achieved = (f"Applied {apply}",) if apply else ()
    with _domain_errors():
        if apply:
            orch.advance_simulation(run.id, lifecycle.plan_leverage_point, apply)
            orch.advance_simulation(run.id, lifecycle.mark_leverage_point, apply, ApplicationStatus.EXECUTED)
        run = orch.advance_simulation(
            run.id, lifecycle.complete, RunResults(overall_impact="Run finished", achieved_goals=achieved)
        )
    rprint(f"[bold]{run.id}[/bold] {run.status.value} in {run.duration_ms} ms; {len(run.events)} events")


if __name__ == "__main__":
    app()

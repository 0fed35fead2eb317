"""Command line interface for inspecting and running stepflow workflows."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from stepflow import SimulatedStepExecutor, WorkflowConfig, run_workflow
from stepflow.config import load_config, load_workflow
from stepflow.models import ExecutionStatus
from stepflow.presets import PRESETS
from stepflow.utils.timefmt import format_duration

app = typer.Typer(help="CLI for stepflow workflows")


@app.callback()
def main() -> None:
    """stepflow CLI entry point."""
    pass


def _resolve_workflow(target: str) -> WorkflowConfig:
    if target in PRESETS:
        return PRESETS[target]
    path = Path(target).expanduser()
    if not path.exists():
        typer.secho(f"Unknown workflow: {target}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    try:
        return load_workflow(path)
    except ValidationError as exc:
        typer.secho(f"Invalid workflow file {path}:\n{exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)


@app.command("presets")
def presets() -> None:
    """List the built-in workflow templates."""
    for preset in PRESETS.values():
        typer.echo(f"{preset.id}\t{preset.name} ({len(preset.steps)} steps)")


@app.command("show")
def show(target: str) -> None:
    """
    Show the steps and policy of a workflow.

    Args:
        target: Preset id (see 'stepflow presets') or path to a YAML template

    Example:
        stepflow show project-creation
        # Output: Project Creation Workflow (project-creation)
        #         Parallel: no  Retry: yes  Skip: no  Timeout: 30s
        #         Est. time: 15s
        #         1. validate-input - Validate Input (1s)
    """
    workflow = _resolve_workflow(target)
    typer.echo(f"{workflow.name} ({workflow.id})")
    if workflow.description:
        typer.echo(workflow.description)

    def flag(value: bool) -> str:
        return "yes" if value else "no"

    timeout = format_duration(workflow.timeout) if workflow.timeout else "none"
    typer.echo(
        f"Parallel: {flag(workflow.allow_parallel)}  Retry: {flag(workflow.allow_retry)}"
        f"  Skip: {flag(workflow.allow_skip)}  Timeout: {timeout}"
    )
    typer.echo(f"Est. time: {format_duration(workflow.estimated_total_time)}")
    for index, step in enumerate(workflow.steps, start=1):
        line = f"{index}. {step.id} - {step.name}"
        if step.estimated_duration:
            line += f" ({format_duration(step.estimated_duration)})"
        if step.optional:
            line += " [optional]"
        typer.echo(line)
        if step.dependencies:
            typer.echo(f"   after: {', '.join(step.dependencies)}")


@app.command("run")
def run(
    target: str,
    failure_rate: float = typer.Option(
        0.1, min=0.0, max=1.0, help="Probability that a simulated attempt fails"
    ),
    speed: float = typer.Option(
        1.0, min=0.0, help="Multiplier applied to estimated step durations"
    ),
    seed: Optional[int] = typer.Option(None, help="Seed for reproducible failures"),
    config: Optional[Path] = typer.Option(None, help="Engine config YAML"),
) -> None:
    """
    Run a workflow with simulated steps and print its audit log.

    Exits with code 1 unless the workflow completes.

    Example:
        stepflow run project-creation --speed 0.1 --seed 7
        stepflow run ./my_workflow.yaml --failure-rate 0
    """
    settings = load_config(str(config) if config else None)
    logging.basicConfig(level=settings.log_level)
    workflow = _resolve_workflow(target)
    executor = SimulatedStepExecutor(failure_rate=failure_rate, speed=speed, seed=seed)

    snapshot = asyncio.run(run_workflow(workflow, executor, settings=settings))

    for entry in snapshot.logs:
        typer.echo(
            f"{entry.timestamp:%H:%M:%S} {entry.level.value.upper():<5} {entry.message}"
        )
    typer.echo(
        f"Workflow {snapshot.id}: {snapshot.status.value} "
        f"({snapshot.percent_complete}%, {format_duration(snapshot.elapsed)})"
    )
    if snapshot.status is not ExecutionStatus.COMPLETED:
        raise typer.Exit(code=1)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()

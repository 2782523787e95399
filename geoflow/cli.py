"""Command line interface for geoflow workflows and the scheduler."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from geoflow import (
    TaskScheduler,
    WorkflowBuilder,
    default_registry,
    get_repository,
    get_workflow_results,
    get_workflow_status,
)
from geoflow.config import load_config
from geoflow.errors import GeoflowError

app = typer.Typer(help="CLI for geoflow workflows")

# Command groups
workflow_app = typer.Typer(help="Commands for managing workflows")
scheduler_app = typer.Typer(help="Commands for running the task scheduler")

app.add_typer(workflow_app, name="workflow")
app.add_typer(scheduler_app, name="scheduler")


def _load_config_or_exit():
    try:
        return load_config()
    except ValidationError as exc:
        typer.secho(f"Invalid configuration: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None, help="Logging level (default: log_level from configuration)"
    ),
) -> None:
    """geoflow CLI entry point."""
    config = _load_config_or_exit()
    logging.basicConfig(
        level=(log_level or config.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@workflow_app.command("create")
def workflow_create(
    definition: Path,
    client_id: str = typer.Option(..., help="Client that owns the workflow"),
    payload: Optional[str] = typer.Option(
        None, help="Initial payload shared by all tasks, e.g. a GeoJSON geometry"
    ),
    payload_file: Optional[Path] = typer.Option(
        None, help="Read the initial payload from this file"
    ),
) -> None:
    """
    Create a workflow and its tasks from a YAML definition.

    Every step becomes a queued task. Tasks run once a scheduler is started
    against the same database.

    Example:
        geoflow workflow create ./workflows/example_workflow.yml \\
            --client-id client42 --payload-file ./polygon.json
    """
    if payload is not None and payload_file is not None:
        typer.secho("Use either --payload or --payload-file", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    if payload_file is not None:
        payload = payload_file.read_text()

    builder = WorkflowBuilder(get_repository(), default_registry())
    try:
        workflow = asyncio.run(
            builder.create_workflow_from_yaml(definition, client_id, payload)
        )
    except GeoflowError as exc:
        typer.secho(f"Failed to create workflow: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.echo(f"Workflow created: {workflow.workflow_id}")
    for task in workflow.tasks:
        typer.echo(f"- step {task.step_number}: {task.task_type} ({task.task_id})")


@workflow_app.command("list")
def workflow_list() -> None:
    """
    List all workflows with their current status.

    Example:
        geoflow workflow list
        # Output: 3f1c...    completed
    """
    repo = get_repository()
    workflows = asyncio.run(repo.list_workflows())
    if not workflows:
        typer.echo("No workflows found")
        return
    for wf in workflows:
        typer.echo(f"{wf.workflow_id}\t{wf.status.value}")


@workflow_app.command("show")
def workflow_show(workflow_id: str) -> None:
    """Show a workflow and every task in step order."""
    repo = get_repository()
    wf = asyncio.run(repo.find_workflow(workflow_id))
    if wf is None:
        typer.echo("Workflow not found")
        raise typer.Exit(code=1)
    typer.echo(f"Workflow {wf.workflow_id} ({wf.name}): {wf.status.value}")
    for task in wf.tasks:
        line = f"- [{task.step_number}] {task.task_type}: {task.status.value}"
        if task.depends_on_id:
            line += f" (depends on {task.depends_on_id})"
        typer.echo(line)
        if task.output:
            typer.echo(f"    output: {task.output}")


@workflow_app.command("status")
def workflow_status(workflow_id: str) -> None:
    """Print ``{workflowId, status, completedTasks, totalTasks}`` as JSON."""
    try:
        view = asyncio.run(get_workflow_status(get_repository(), workflow_id))
    except GeoflowError as exc:
        typer.echo(str(exc))
        raise typer.Exit(code=1)
    typer.echo(view.model_dump_json(by_alias=True))


@workflow_app.command("results")
def workflow_results(workflow_id: str) -> None:
    """Print the final result of a completed workflow as JSON."""
    try:
        view = asyncio.run(get_workflow_results(get_repository(), workflow_id))
    except GeoflowError as exc:
        typer.echo(str(exc))
        raise typer.Exit(code=1)
    typer.echo(view.model_dump_json(by_alias=True))


@scheduler_app.command("run")
def scheduler_run(
    poll_interval: Optional[float] = typer.Option(
        None, help="Seconds between polls (default: from configuration)"
    ),
    lifespan: Optional[float] = typer.Option(
        None, help="Stop after this many seconds (default: run indefinitely)"
    ),
    once: bool = typer.Option(False, help="Run a single scheduling cycle and exit"),
) -> None:
    """
    Poll for queued tasks and execute the ready ones.

    Example:
        geoflow scheduler run
        geoflow scheduler run --poll-interval 1 --lifespan 300
    """
    config = _load_config_or_exit()
    if poll_interval is not None:
        try:
            config.scheduler.poll_interval = poll_interval
        except ValidationError:
            typer.secho("--poll-interval must be greater than 0", fg=typer.colors.RED)
            raise typer.Exit(code=1)
    scheduler = TaskScheduler.from_config(
        get_repository(), default_registry(), config.scheduler
    )
    if once:
        report = asyncio.run(scheduler.run_once())
        typer.echo(
            f"Executed {len(report.executed)}, skipped {len(report.skipped)}, "
            f"errored {len(report.errored)}"
        )
        return
    typer.echo("Starting scheduler")
    try:
        asyncio.run(scheduler.start(lifespan=lifespan))
    except KeyboardInterrupt:
        typer.echo("Scheduler interrupted")


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()

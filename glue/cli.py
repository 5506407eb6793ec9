"""Command line interface for running glue workflows."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer

from glue import WorkflowEngine, get_credential_store, get_history_recorder
from glue.adapters import build_default_registry
from glue.config import GlueConfig, load_config
from glue.contracts import LocalStep
from glue.credentials import CredentialStore
from glue.exceptions import GlueError, WorkflowConfigError
from glue.log import configure_logging
from glue.parser import get_workflow, parse_file

app = typer.Typer(help="Run the workflows defined in glue.yaml")

EXAMPLE_CONFIG = """\
# Example Glue workflow configuration

# Workflow triggered on deployment
deploy:
  when: deploy
  steps:
    - name: "Run tests"
      run: "pytest"

    - name: "Build package"
      run: "python -m build"

    # Example adapter usage (uncomment and configure)
    # - name: "Notify team"
    #   adapter: slack
    #   action: notify
    #   options:
    #     channel: "#deployments"
    #     message: "Deployment completed successfully"

# Workflow for CI failures
ci-fail:
  when: ci-fail
  steps:
    - name: "Get error logs"
      run: "tail -n 50 error.log"

    # - name: "Open an issue"
    #   adapter: github
    #   action: create_issue
    #   options:
    #     repo: "owner/repo"
    #     title: "CI Build Failure"
    #     labels: ["ci"]
"""


def _config(ctx: typer.Context) -> GlueConfig:
    if isinstance(ctx.obj, GlueConfig):
        return ctx.obj
    return load_config()


def _workflow_path(config: GlueConfig, file: Optional[Path]) -> Path:
    return file or Path.cwd() / config.workflow_file


def _credential_store() -> CredentialStore:
    try:
        return get_credential_store()
    except GlueError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
) -> None:
    """Glue CLI entry point."""
    config = load_config()
    configure_logging(config, verbose=verbose)
    ctx.obj = config


@app.command("run")
def run_workflow(
    ctx: typer.Context,
    workflow: str = typer.Argument(..., help="Name of the workflow to run"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Workflow file"),
) -> None:
    """
    Run a workflow.

    Executes the workflow's steps in order and stops at the first failure.
    Exits with code 1 when a step fails or the workflow file is invalid.

    Example:
        glue run deploy
        glue run ci-fail --file ./ci/glue.yaml
    """
    config = _config(ctx)
    try:
        workflows = parse_file(_workflow_path(config, file))
        selected = get_workflow(workflows, workflow)
    except WorkflowConfigError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    registry = build_default_registry(_credential_store())
    engine = WorkflowEngine(registry, recorder=get_history_recorder(config))
    result = asyncio.run(engine.execute(selected))
    if not result.success:
        raise typer.Exit(code=1)


@app.command("list")
def list_workflows(
    ctx: typer.Context,
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Workflow file"),
) -> None:
    """List all workflows defined in the workflow file with their steps."""
    config = _config(ctx)
    path = _workflow_path(config, file)
    try:
        workflows = parse_file(path)
    except WorkflowConfigError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if not workflows:
        typer.secho(f"No workflows found in {path.name}", fg=typer.colors.YELLOW)
        return

    typer.secho("Available workflows:\n", bold=True)
    for name, workflow in workflows.items():
        typer.secho(f"  {name}", fg=typer.colors.CYAN)
        typer.echo(f"    Steps: {len(workflow.steps)}")
        for step in workflow.steps:
            kind = "local" if isinstance(step, LocalStep) else f"{step.adapter}:{step.action}"
            typer.echo(f"      - {step.name} ({kind})")
        typer.echo("")


@app.command("history")
def history(
    ctx: typer.Context,
    limit: int = typer.Option(20, "--limit", "-l", help="Number of entries to show"),
    clear: bool = typer.Option(False, "--clear", help="Clear all history"),
) -> None:
    """Show workflow execution history, most recent first."""
    recorder = get_history_recorder(_config(ctx))

    if clear:
        recorder.clear()
        typer.secho("✓ History cleared", fg=typer.colors.GREEN)
        return

    entries = recorder.list(limit)
    if not entries:
        typer.secho("No workflow executions found", fg=typer.colors.YELLOW)
        return

    typer.secho("Workflow Execution History:\n", bold=True)
    for entry in entries:
        status = typer.style("✓", fg=typer.colors.GREEN) if entry.success else typer.style("✗", fg=typer.colors.RED)
        when = entry.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S")
        typer.echo(f"{status} {typer.style(entry.workflow, fg=typer.colors.CYAN)} - {when}")
        typer.echo(f"  Duration: {entry.duration_ms / 1000:.2f}s")
        failed = entry.failed_step()
        if failed is not None:
            typer.secho(f"  Failed at: {failed.step_name}", fg=typer.colors.RED)
            if failed.error:
                typer.secho(f"  Error: {failed.error}", fg=typer.colors.RED)
        typer.echo("")


@app.command("auth")
def auth(
    adapter: str = typer.Argument(..., help="Name of the adapter to authenticate"),
    show: bool = typer.Option(False, "--list", help="Show stored credential keys"),
    logout: bool = typer.Option(False, "--logout", help="Delete stored credentials"),
) -> None:
    """
    Authenticate with an adapter.

    Prompts for the adapter's credentials and stores them in the system
    keychain, or in ~/.glue-auth when no keychain is available.

    Example:
        glue auth slack
        glue auth github --list
    """
    store = _credential_store()
    registry = build_default_registry(store)
    if registry.get(adapter) is None:
        typer.secho(f'Adapter "{adapter}" not found', fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    try:
        if show:
            keys = asyncio.run(store.list(adapter))
            if not keys:
                typer.echo(f"No credentials stored for {adapter}")
            for key in sorted(keys):
                typer.echo(key)
            return
        if logout:
            keys = asyncio.run(store.list(adapter))
            for key in sorted(keys):
                asyncio.run(store.delete(adapter, key))
            typer.secho(f"✓ Removed {len(keys)} credential(s) for {adapter}", fg=typer.colors.GREEN)
            return

        typer.secho(f"Authenticating with {adapter}...", fg=typer.colors.CYAN)
        asyncio.run(registry.authenticate(adapter))
    except GlueError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    typer.secho(f"✓ Successfully authenticated with {adapter}", fg=typer.colors.GREEN)


@app.command("init")
def init(ctx: typer.Context) -> None:
    """Create an example workflow file in the current directory."""
    config = _config(ctx)
    path = Path.cwd() / config.workflow_file
    if path.exists():
        typer.secho(f"{path.name} already exists in this directory", fg=typer.colors.YELLOW)
        raise typer.Exit(code=1)

    path.write_text(EXAMPLE_CONFIG, encoding="utf-8")
    typer.secho(f"✓ Created {path.name}", fg=typer.colors.GREEN)
    typer.echo("")
    typer.echo("Next steps:")
    typer.echo(f"  1. Edit {path.name} to define your workflows")
    typer.echo("  2. Run a workflow with: glue run <workflow-name>")
    typer.echo("")
    typer.echo("Example: glue run deploy")


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()

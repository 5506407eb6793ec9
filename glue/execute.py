"""Sequential workflow execution engine."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional

import typer

from .adapters import AdapterRegistry
from .contracts import (
    AdapterStep,
    ExecutionResult,
    LocalStep,
    Step,
    StepResult,
    Workflow,
)
from .exceptions import (
    ActionNotFoundError,
    AdapterNotFoundError,
    GlueError,
    StepFailed,
)
from .history import HistoryRecorder

logger = logging.getLogger(__name__)


class WorkflowEngine:
    """Runs the steps of a workflow one after another.

    The first failing step ends the run; later steps are never started. Step
    failures are reported in the returned :class:`ExecutionResult` rather
    than raised, leaving the exit status decision to the caller.
    """

    def __init__(
        self,
        registry: AdapterRegistry,
        recorder: Optional[HistoryRecorder] = None,
        echo: bool = True,
    ) -> None:
        self._registry = registry
        self._recorder = recorder
        self._echo = echo

    def _say(self, message: str, **style) -> None:
        if self._echo:
            typer.secho(message, **style)

    async def execute(self, workflow: Workflow) -> ExecutionResult:
        step_results: list[StepResult] = []
        failure: Optional[str] = None

        self._say(f"\n🚀 Starting workflow: {workflow.when}\n", bold=True)
        logger.info("Starting workflow %s (%d steps)", workflow.when, len(workflow.steps))

        for step in workflow.steps:
            started = time.monotonic()
            error: Optional[str] = None
            try:
                await self._run_step(step)
            except StepFailed as exc:
                error = str(exc)
            except Exception as exc:
                error = str(exc) or exc.__class__.__name__
            duration_ms = int((time.monotonic() - started) * 1000)

            step_results.append(
                StepResult(
                    step_name=step.name,
                    success=error is None,
                    error=error,
                    duration_ms=duration_ms,
                )
            )

            if error is None:
                self._say(f"✓ {step.name}", fg=typer.colors.GREEN)
                logger.info("Step %s succeeded in %d ms", step.name, duration_ms)
                continue

            self._say(f"✗ {step.name}", fg=typer.colors.RED)
            self._say(f"  Error: {error}", fg=typer.colors.RED, err=True)
            logger.error("Step %s failed: %s", step.name, error)
            failure = error
            break

        self._record(workflow.when, step_results)

        if failure is None:
            self._say("\n✅ Workflow completed successfully!\n", fg=typer.colors.GREEN, bold=True)
        return ExecutionResult(
            success=failure is None, step_results=step_results, error=failure
        )

    async def _run_step(self, step: Step) -> None:
        if isinstance(step, LocalStep):
            await self._run_local(step)
        elif isinstance(step, AdapterStep):
            await self._run_adapter(step)
        else:  # pragma: no cover - guarded by the Step union
            raise StepFailed(f"Unsupported step type: {type(step).__name__}")

    async def _run_local(self, step: LocalStep) -> None:
        # stdio is inherited so interactive commands behave normally
        try:
            proc = await asyncio.create_subprocess_shell(step.run)
        except OSError as exc:
            raise StepFailed(f"Failed to start command: {exc.strerror or exc}") from exc
        code = await proc.wait()
        if code != 0:
            raise StepFailed(f"Command exited with code {code}")

    async def _run_adapter(self, step: AdapterStep) -> None:
        adapter = self._registry.get(step.adapter)
        if adapter is None:
            raise StepFailed(str(AdapterNotFoundError(step.adapter)))
        action = adapter.actions.get(step.action)
        if action is None:
            raise StepFailed(str(ActionNotFoundError(step.adapter, step.action)))
        await action.execute(dict(step.options or {}))

    def _record(self, workflow_name: str, step_results: list[StepResult]) -> None:
        if self._recorder is None:
            return
        try:
            self._recorder.record(workflow_name, step_results)
        except (OSError, GlueError) as exc:
            logger.warning("Failed to record execution history: %s", exc)
            self._say(
                f"Warning: failed to record execution history: {exc}",
                fg=typer.colors.YELLOW,
                err=True,
            )

"""Core data contracts for glue workflows and their results."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class LocalStep(BaseModel):
    """A step that runs a shell command on the local machine."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    run: str


class AdapterStep(BaseModel):
    """A step that invokes an action on a registered adapter."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    adapter: str
    action: str
    options: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _null_options(cls, data: Any) -> Any:
        # ``options:`` with no body parses as None in YAML
        if isinstance(data, dict) and data.get("options", {}) is None:
            data = {k: v for k, v in data.items() if k != "options"}
        return data


Step = Union[LocalStep, AdapterStep]


class Workflow(BaseModel):
    """A trigger name and the ordered steps it runs."""

    model_config = ConfigDict(frozen=True)

    when: str
    steps: List[Step] = Field(default_factory=list)


class StepResult(BaseModel):
    """Outcome of a single executed step."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    step_name: str = Field(alias="stepName")
    success: bool
    error: Optional[str] = None
    duration_ms: int = 0


class ExecutionResult(BaseModel):
    """Aggregate outcome of one workflow run."""

    success: bool
    step_results: List[StepResult] = Field(default_factory=list)
    error: Optional[str] = None


class ExecutionLog(BaseModel):
    """Durable record of a completed or aborted run."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    workflow: str
    success: bool
    duration_ms: int = 0
    steps: List[StepResult] = Field(default_factory=list)

    @classmethod
    def from_results(
        cls, workflow: str, step_results: List[StepResult]
    ) -> "ExecutionLog":
        """Build a log entry, deriving success and total duration from ``step_results``."""
        return cls(
            workflow=workflow,
            success=all(result.success for result in step_results),
            duration_ms=sum(result.duration_ms for result in step_results),
            steps=list(step_results),
        )

    def to_json(self) -> str:
        """Serialize the record the way it is stored on disk."""
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)

    @classmethod
    def from_json(cls, data: str) -> "ExecutionLog":
        return cls.model_validate_json(data)

    def failed_step(self) -> Optional[StepResult]:
        return next((step for step in self.steps if not step.success), None)

"""Load and validate ``glue.yaml`` workflow files."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import TypeAdapter, ValidationError

from .contracts import Workflow
from .exceptions import WorkflowConfigError

_WORKFLOWS = TypeAdapter(Dict[str, Workflow])


def _format_validation_error(exc: ValidationError) -> str:
    return ", ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )


def parse_workflows(data: Any) -> Dict[str, Workflow]:
    """Validate already-loaded YAML data into a mapping of workflows."""
    if data is None:
        data = {}
    try:
        return _WORKFLOWS.validate_python(data)
    except ValidationError as exc:
        raise WorkflowConfigError(
            f"Invalid workflow configuration: {_format_validation_error(exc)}"
        ) from exc


def parse_file(path: str | Path) -> Dict[str, Workflow]:
    """Read ``path`` and return its workflows keyed by name."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise WorkflowConfigError(
            f"Failed to parse workflow file: cannot read {path}: {exc.strerror or exc}"
        ) from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise WorkflowConfigError(f"Failed to parse workflow file: {exc}") from exc
    return parse_workflows(data)


def get_workflow(workflows: Dict[str, Workflow], name: str) -> Workflow:
    """Return the named workflow or raise listing the available ones."""
    workflow = workflows.get(name)
    if workflow is None:
        available = ", ".join(workflows) or "(none)"
        raise WorkflowConfigError(
            f'Workflow "{name}" not found. Available workflows: {available}'
        )
    return workflow

"""Glue: run declarative workflows of shell commands and service actions."""

from .adapters import AdapterRegistry, build_default_registry
from .contracts import (
    AdapterStep,
    ExecutionLog,
    ExecutionResult,
    LocalStep,
    StepResult,
    Workflow,
)
from .credentials import CredentialStore, get_credential_store
from .execute import WorkflowEngine
from .history import HistoryRecorder, get_history_recorder

__version__ = "0.1.0"
__all__ = [
    "AdapterRegistry",
    "AdapterStep",
    "CredentialStore",
    "ExecutionLog",
    "ExecutionResult",
    "HistoryRecorder",
    "LocalStep",
    "StepResult",
    "Workflow",
    "WorkflowEngine",
    "build_default_registry",
    "get_credential_store",
    "get_history_recorder",
]

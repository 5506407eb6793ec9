"""Exception hierarchy for glue."""

from __future__ import annotations


class GlueError(Exception):
    """Base class for all errors raised by glue."""


class WorkflowConfigError(GlueError):
    """Workflow file is missing, malformed or does not define the workflow."""


class AdapterNotFoundError(GlueError):
    """No adapter is registered under the requested name."""

    def __init__(self, adapter: str) -> None:
        super().__init__(f'Adapter "{adapter}" not found')
        self.adapter = adapter


class ActionNotFoundError(GlueError):
    """The adapter exists but does not expose the requested action."""

    def __init__(self, adapter: str, action: str) -> None:
        super().__init__(f'Action "{action}" not found in adapter "{adapter}"')
        self.adapter = adapter
        self.action = action


class NotAuthenticatedError(GlueError):
    """An adapter action needs credentials that have not been stored."""

    def __init__(self, label: str, adapter: str) -> None:
        super().__init__(f"{label} not authenticated. Run: glue auth {adapter}")
        self.adapter = adapter


class AdapterActionError(GlueError):
    """A remote call or external tool invoked by an adapter failed."""


class CredentialStoreError(GlueError):
    """The credential store is misconfigured or its file backend failed."""


class StepFailed(GlueError):
    """A workflow step did not complete successfully."""


__all__ = [
    "GlueError",
    "WorkflowConfigError",
    "AdapterNotFoundError",
    "ActionNotFoundError",
    "NotAuthenticatedError",
    "AdapterActionError",
    "CredentialStoreError",
    "StepFailed",
]

"""Built-in service adapters and the registry that dispatches to them."""

from __future__ import annotations

from ..credentials import CredentialStore
from .base import Adapter, AdapterAction, AdapterOptions, action_table
from .gcp import GCPAdapter
from .github import GitHubAdapter
from .linear import LinearAdapter
from .notion import NotionAdapter
from .registry import AdapterRegistry
from .slack import SlackAdapter


def build_default_registry(credentials: CredentialStore) -> AdapterRegistry:
    """Return a registry holding every built-in adapter.

    Each adapter receives ``credentials`` as its own handle; the registry
    itself is read-only once returned.
    """

    return AdapterRegistry(
        [
            SlackAdapter(credentials),
            GitHubAdapter(credentials),
            GCPAdapter(credentials),
            LinearAdapter(credentials),
            NotionAdapter(credentials),
        ]
    )


__all__ = [
    "Adapter",
    "AdapterAction",
    "AdapterOptions",
    "AdapterRegistry",
    "GCPAdapter",
    "GitHubAdapter",
    "LinearAdapter",
    "NotionAdapter",
    "SlackAdapter",
    "action_table",
    "build_default_registry",
]

"""Secret backend abstraction used by the credential store."""

from __future__ import annotations

from typing import Optional, Protocol


class SecretBackend(Protocol):
    """Protocol for OS-level secret managers.

    Any object exposing these four operations can serve as the secure tier of
    :class:`~glue.credentials.store.CredentialStore`. Implementations may raise
    any exception when the platform store is unavailable; the credential store
    treats that as a signal to fall back to the file backend.
    """

    def set(self, service: str, account: str, value: str) -> None:
        """Store ``value`` under ``service``/``account``."""

    def get(self, service: str, account: str) -> Optional[str]:
        """Return the stored value or ``None``."""

    def delete(self, service: str, account: str) -> None:
        """Remove the entry; a missing entry is not an error."""

    def find_all(self, service: str) -> list[tuple[str, str]]:
        """Return every ``(account, value)`` pair stored for ``service``."""

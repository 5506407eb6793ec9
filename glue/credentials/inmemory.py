"""In-memory implementation of the secret backend."""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from .backend import SecretBackend


class InMemorySecretBackend(SecretBackend):
    """Keep secrets in a dictionary.

    Useful for tests or when no OS keychain should be touched. Data is not
    persisted across process restarts.
    """

    def __init__(self) -> None:
        self._secrets: Dict[Tuple[str, str], str] = {}

    def set(self, service: str, account: str, value: str) -> None:
        self._secrets[(service, account)] = value

    def get(self, service: str, account: str) -> Optional[str]:
        return self._secrets.get((service, account))

    def delete(self, service: str, account: str) -> None:
        self._secrets.pop((service, account), None)

    def find_all(self, service: str) -> list[tuple[str, str]]:
        return [
            (account, value)
            for (svc, account), value in self._secrets.items()
            if svc == service
        ]

"""Secure secret backend built on the system keyring."""

from __future__ import annotations

import json
import logging
from typing import Optional

import keyring
from keyring.errors import PasswordDeleteError

from .backend import SecretBackend

logger = logging.getLogger(__name__)

INDEX_ACCOUNT = "__glue_index__"


class KeyringSecretBackend(SecretBackend):
    """Store secrets in the OS keychain via :mod:`keyring`.

    ``keyring`` cannot enumerate the accounts of a service, so the backend
    keeps a JSON list of the accounts it wrote under :data:`INDEX_ACCOUNT`.
    """

    def __init__(self, keyring_module=keyring) -> None:
        self._keyring = keyring_module

    def _load_index(self, service: str) -> list[str]:
        raw = self._keyring.get_password(service, INDEX_ACCOUNT)
        if not raw:
            return []
        try:
            accounts = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt keyring index for service %s", service)
            return []
        return [a for a in accounts if isinstance(a, str)]

    def _save_index(self, service: str, accounts: list[str]) -> None:
        self._keyring.set_password(service, INDEX_ACCOUNT, json.dumps(sorted(accounts)))

    def set(self, service: str, account: str, value: str) -> None:
        self._keyring.set_password(service, account, value)
        accounts = self._load_index(service)
        if account not in accounts:
            accounts.append(account)
            self._save_index(service, accounts)

    def get(self, service: str, account: str) -> Optional[str]:
        return self._keyring.get_password(service, account)

    def delete(self, service: str, account: str) -> None:
        try:
            self._keyring.delete_password(service, account)
        except PasswordDeleteError:
            pass
        accounts = self._load_index(service)
        if account in accounts:
            accounts.remove(account)
            self._save_index(service, accounts)

    def find_all(self, service: str) -> list[tuple[str, str]]:
        found: list[tuple[str, str]] = []
        for account in self._load_index(service):
            value = self._keyring.get_password(service, account)
            if value is not None:
                found.append((account, value))
        return found

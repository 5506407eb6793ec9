"""Credential storage for adapters."""

from __future__ import annotations

import os
from typing import Optional

from ..config import GlueConfig, load_config
from ..exceptions import CredentialStoreError
from .backend import SecretBackend
from .file import FileCredentialBackend
from .inmemory import InMemorySecretBackend
from .store import CredentialStore

_store_instance: CredentialStore | None = None


def get_credential_store(
    backend: Optional[str] = None, config: Optional[GlueConfig] = None
) -> CredentialStore:
    """Factory function to obtain the credential store.

    The secure tier is selected from ``backend``, the
    ``GLUE_CREDENTIALS_BACKEND`` environment variable or configuration:
    ``keyring`` uses the OS keychain, ``inmemory`` a process-local dict and
    ``file`` disables the secure tier. The file tier is always present.
    """

    global _store_instance
    if _store_instance is not None and backend is None and config is None:
        return _store_instance

    config = config or load_config()
    backend = (
        backend
        or os.getenv("GLUE_CREDENTIALS_BACKEND")
        or config.credentials.backend
    ).lower()

    file_backend = FileCredentialBackend(config.credentials.directory)
    secure: SecretBackend | None
    if backend == "keyring":
        from .keyring_backend import KeyringSecretBackend

        secure = KeyringSecretBackend()
    elif backend == "inmemory":
        secure = InMemorySecretBackend()
    elif backend == "file":
        secure = None
    else:
        raise CredentialStoreError(f"Unsupported credential backend: {backend}")

    _store_instance = CredentialStore(
        file_backend, secure, service_name=config.credentials.service_name
    )
    return _store_instance


__all__ = [
    "CredentialStore",
    "FileCredentialBackend",
    "InMemorySecretBackend",
    "SecretBackend",
    "get_credential_store",
]

"""Layered credential store: OS secret manager first, file storage second."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ..exceptions import CredentialStoreError
from .backend import SecretBackend
from .file import FileCredentialBackend
from .naming import derived_name, key_from_name

logger = logging.getLogger(__name__)


class CredentialStore:
    """Resolve ``(namespace, key)`` pairs to secrets.

    Reads consult the secure backend first and fall through to the file
    backend. Writes go to the secure backend when it works and to the file
    backend otherwise. Errors from the secure backend are logged and never
    fail an operation; errors from the file backend on the write path are
    raised as :class:`CredentialStoreError`.
    """

    def __init__(
        self,
        file_backend: FileCredentialBackend,
        secure_backend: Optional[SecretBackend] = None,
        service_name: str = "glue-cli",
    ) -> None:
        self._file = file_backend
        self._secure = secure_backend
        self.service_name = service_name

    @staticmethod
    def _account(namespace: str, key: str) -> str:
        return derived_name(namespace, key)

    async def save(self, namespace: str, key: str, value: str) -> None:
        """Store ``value``, preferring the secure backend."""
        if self._secure is not None:
            try:
                await asyncio.to_thread(
                    self._secure.set,
                    self.service_name,
                    self._account(namespace, key),
                    value,
                )
                return
            except Exception as exc:
                # Policy: an unusable secret manager downgrades to file storage.
                logger.warning(
                    "Secure credential backend failed (%s); storing %s/%s in %s",
                    exc,
                    namespace,
                    key,
                    self._file.directory,
                )

        try:
            await asyncio.to_thread(self._file.save, namespace, key, value)
        except OSError as exc:
            raise CredentialStoreError(
                f"Failed to store credential {namespace}/{key}: {exc}"
            ) from exc

    async def get(self, namespace: str, key: str) -> Optional[str]:
        """Return the stored secret or ``None`` when it is absent."""
        if self._secure is not None:
            try:
                value = await asyncio.to_thread(
                    self._secure.get, self.service_name, self._account(namespace, key)
                )
            except Exception as exc:
                logger.debug("Secure credential lookup failed: %s", exc)
            else:
                if value:
                    return value

        try:
            return await asyncio.to_thread(self._file.get, namespace, key)
        except OSError as exc:
            logger.warning("Could not read credential %s/%s: %s", namespace, key, exc)
            return None

    async def delete(self, namespace: str, key: str) -> None:
        """Remove the secret from both backends; absence is not an error."""
        if self._secure is not None:
            try:
                await asyncio.to_thread(
                    self._secure.delete,
                    self.service_name,
                    self._account(namespace, key),
                )
            except Exception as exc:
                logger.debug("Secure credential delete failed: %s", exc)

        try:
            await asyncio.to_thread(self._file.delete, namespace, key)
        except OSError as exc:
            raise CredentialStoreError(
                f"Failed to delete credential {namespace}/{key}: {exc}"
            ) from exc

    async def list(self, namespace: str) -> set[str]:
        """Return the key names stored for ``namespace`` in either backend."""
        keys: set[str] = set()

        if self._secure is not None:
            try:
                entries = await asyncio.to_thread(
                    self._secure.find_all, self.service_name
                )
            except Exception as exc:
                logger.debug("Secure credential listing failed: %s", exc)
            else:
                for account, _value in entries:
                    key = key_from_name(namespace, account)
                    if key is not None:
                        keys.add(key)

        try:
            keys.update(await asyncio.to_thread(self._file.list_keys, namespace))
        except OSError as exc:
            logger.warning("Could not list credentials in %s: %s", self._file.directory, exc)
        return keys

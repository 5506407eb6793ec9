"""Obfuscated on-disk credential storage.

Values are base64 encoded, which only keeps them from being read at a
glance. Protection comes from the file permissions (``0600`` files in a
``0700`` directory).
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
from pathlib import Path
from typing import Optional

from .naming import derived_name, key_from_name

logger = logging.getLogger(__name__)


class FileCredentialBackend:
    """One file per ``(namespace, key)`` pair inside ``directory``."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    @staticmethod
    def file_name(namespace: str, key: str) -> str:
        return derived_name(namespace, key)

    def _path(self, namespace: str, key: str) -> Path:
        return self.directory / self.file_name(namespace, key)

    def save(self, namespace: str, key: str, value: str) -> None:
        self.directory.mkdir(mode=0o700, parents=True, exist_ok=True)
        path = self._path(namespace, key)
        encoded = base64.b64encode(value.encode("utf-8")).decode("ascii")
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="ascii") as f:
            f.write(encoded)
        # O_CREAT mode only applies to new files
        os.chmod(path, 0o600)

    def get(self, namespace: str, key: str) -> Optional[str]:
        path = self._path(namespace, key)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None
        try:
            return base64.b64decode(raw, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            logger.warning("Ignoring unreadable credential file %s", path)
            return None

    def delete(self, namespace: str, key: str) -> None:
        try:
            self._path(namespace, key).unlink()
        except FileNotFoundError:
            pass

    def list_keys(self, namespace: str) -> set[str]:
        """Return the logical key names stored for ``namespace``."""
        if not self.directory.is_dir():
            return set()
        keys: set[str] = set()
        for entry in self.directory.iterdir():
            key = key_from_name(namespace, entry.name)
            if key is not None:
                keys.add(key)
        return keys

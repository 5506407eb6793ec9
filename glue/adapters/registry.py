"""Lookup table from adapter name to adapter instance."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from ..exceptions import AdapterNotFoundError, GlueError
from .base import Adapter

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Holds the adapters available to a workflow run.

    Populated once at startup and read-only afterwards, so a single instance
    can be shared by every execution in the process.
    """

    def __init__(self, adapters: Iterable[Adapter] = ()) -> None:
        self._adapters: Dict[str, Adapter] = {}
        for adapter in adapters:
            self.register(adapter)

    def register(self, adapter: Adapter) -> None:
        if adapter.name in self._adapters:
            logger.debug("Replacing adapter %s", adapter.name)
        self._adapters[adapter.name] = adapter

    def get(self, name: str) -> Optional[Adapter]:
        return self._adapters.get(name)

    def list(self) -> List[Adapter]:
        return list(self._adapters.values())

    def _require(self, name: str) -> Adapter:
        adapter = self.get(name)
        if adapter is None:
            raise AdapterNotFoundError(name)
        return adapter

    async def initialize(self, name: str) -> None:
        """Run the adapter's ``initialize`` hook when it has one."""
        adapter = self._require(name)
        hook = getattr(adapter, "initialize", None)
        if hook is not None:
            await hook()

    async def authenticate(self, name: str) -> None:
        """Run the adapter's interactive ``authenticate`` hook."""
        adapter = self._require(name)
        hook = getattr(adapter, "authenticate", None)
        if hook is None:
            raise GlueError(f'Adapter "{name}" does not support authentication')
        await hook()

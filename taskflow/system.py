"""
taskflow.system -- TaskflowSystem: the public API for the memory server.

    from taskflow import TaskflowSystem

    async with TaskflowSystem(memory_dir="./memory-bank") as system:
        await system.cache.update("activeContext.md", "# Focus\n")
        op_id = system.operations.submit(system.cache.get_all)

Everything is wired up here: store, context cache, operation tracker,
mode manager and planner.  Components are built from one ``Config``
and injected into each other explicitly; tools only touch this object.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional

from taskflow.context.manager import ContextCache
from taskflow.core.config import Config
from taskflow.core.fs import AsyncFileSystem
from taskflow.core.types import Clock
from taskflow.planning import Planner
from taskflow.runtime.modes import ModeManager
from taskflow.runtime.operations import OperationTracker
from taskflow.store.documents import DocumentStore

log = logging.getLogger("taskflow.system")


class TaskflowSystem:
    """Top-level API: wire the memory bank components together.

    Parameters
    ----------
    config:
        Full ``Config`` object.  If not given, ``memory_dir`` and
        ``**kwargs`` are forwarded to ``Config``.
    memory_dir:
        Shortcut -- point at a memory bank directory and go.
    clock:
        Time source shared by the cache and the tracker.
    fs:
        Filesystem capability for the store.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        memory_dir: Optional[str | Path] = None,
        clock: Clock = time.time,
        fs: Optional[AsyncFileSystem] = None,
        **kwargs: Any,
    ) -> None:
        if config is not None:
            self.config = config
        elif memory_dir is not None:
            self.config = Config.from_memory_dir(memory_dir, **kwargs)
        else:
            self.config = Config(**kwargs)
        self.config.validate()

        self.started_at = time.time()

        self.store = DocumentStore(
            self.config.memory_bank_dir,
            extension=self.config.document_extension,
            fs=fs,
        )
        self.cache = ContextCache(
            self.store,
            max_entries=self.config.cache_max_entries,
            ttl=self.config.cache_ttl_seconds,
            clock=clock,
        )
        self.operations = OperationTracker(
            retention=self.config.operation_retention_seconds,
            clock=clock,
        )
        self.modes = ModeManager(default_mode=self.config.default_mode)
        self.planner = Planner()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def init(self) -> "TaskflowSystem":
        """Initialise the memory bank (idempotent)."""
        await self.store.init()
        return self

    async def close(self) -> None:
        """Let in-flight operations finish."""
        await self.operations.drain()

    async def __aenter__(self) -> "TaskflowSystem":
        return await self.init()

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    async def status(self) -> Dict[str, Any]:
        """Health snapshot of every component.  Never raises."""
        store_stats = await self.store.stats()
        return {
            "server": {
                "name": "TaskFlow Memory Server",
                "uptime_seconds": round(time.time() - self.started_at, 3),
            },
            "memory": store_stats.to_dict(),
            "cache": self.cache.stats(),
            "async": self.operations.stats(),
            "ai": self.planner.stats(),
            "mode": self.modes.status(),
        }

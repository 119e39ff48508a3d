"""
Document store -- the memory bank.

A flat directory of named Markdown documents.  The directory listing
is the source of truth: there is no index or manifest.  Enumeration
only returns regular files carrying the store's extension.  Documents are
created by ``write`` or seeded by ``init``; nothing here deletes them.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from taskflow.core.errors import (
    DocumentNotFoundError,
    InvalidDocumentNameError,
    StoreIOError,
)
from taskflow.core.fs import AsyncFileSystem
from taskflow.core.types import StoreStats

log = logging.getLogger("taskflow.store")


#: Documents seeded on first ``init``: (name, content).
DEFAULT_DOCUMENTS: Tuple[Tuple[str, str], ...] = (
    (
        "projectbrief.md",
        "# Project Brief\n\nDefine your project requirements and goals here.\n",
    ),
    (
        "activeContext.md",
        "# Active Context\n\nTrack your current focus and recent changes here.\n",
    ),
    (
        "progress.md",
        "# Progress\n\nDocument your project progress and next steps here.\n",
    ),
)


class DocumentStore:
    """File-backed store of named text documents.

    Parameters
    ----------
    root : Path
        The memory bank directory.  Created by ``init`` if absent.
    extension : str
        Suffix that marks a file as a document for ``list``.
    fs : AsyncFileSystem | None
        Filesystem capability; defaults to the aiofiles-backed one.
    """

    def __init__(
        self,
        root: Path,
        extension: str = ".md",
        fs: Optional[AsyncFileSystem] = None,
    ) -> None:
        self.root = Path(root)
        self.extension = extension
        self.fs = fs or AsyncFileSystem()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    # ── Lifecycle ─────────────────────────────────────────────

    async def init(self) -> None:
        """Create the directory and seed missing default documents.

        Idempotent.  Existing documents are never overwritten.  On
        failure the store stays uninitialized and ``init`` may be retried.
        """
        if self._initialized:
            return

        try:
            await self.fs.ensure_directory(self.root)
            log.info("Memory Bank initialized at: %s", self.root)

            for name, content in DEFAULT_DOCUMENTS:
                path = self.root / name
                if not await self.fs.path_exists(path):
                    await self.fs.write_text(path, content)
                    log.info("Created default Memory Bank file: %s", name)
        except OSError as exc:
            log.error("Failed to initialize Memory Bank: %s", exc)
            raise StoreIOError(
                f"Failed to initialize Memory Bank at {self.root}: {exc}",
                path=self.root,
            ) from exc

        self._initialized = True

    # ── Documents ─────────────────────────────────────────────

    async def read(self, name: str) -> str:
        """Return the full text of document *name*."""
        path = self._resolve(name)
        try:
            return await self.fs.read_text(path)
        except FileNotFoundError as exc:
            log.error(
                "Failed to read Memory Bank file %s: not found",
                name,
                extra={"file_name": name},
            )
            raise DocumentNotFoundError(name, path=path) from exc
        except OSError as exc:
            log.error(
                "Failed to read Memory Bank file %s: %s",
                name,
                exc,
                extra={"file_name": name},
            )
            raise StoreIOError(
                f"Failed to read Memory Bank file {name}: {exc}",
                name=name,
                path=path,
            ) from exc

    async def write(self, name: str, content: str) -> None:
        """Create or atomically replace document *name*.

        Any cached copy of the document is stale after this returns.
        """
        path = self._resolve(name)
        try:
            await self.fs.ensure_directory(path.parent)
            await self.fs.write_text(path, content)
        except OSError as exc:
            log.error(
                "Failed to write Memory Bank file %s: %s",
                name,
                exc,
                extra={"file_name": name},
            )
            raise StoreIOError(
                f"Failed to write Memory Bank file {name}: {exc}",
                name=name,
                path=path,
            ) from exc
        log.info("Updated Memory Bank file: %s", name, extra={"file_name": name})

    async def exists(self, name: str) -> bool:
        return await self.fs.path_exists(self._resolve(name))

    async def list(self) -> List[str]:
        """Names of regular files carrying the extension.  Order is unspecified."""
        try:
            entries = await self.fs.list_directory(self.root)
        except OSError as exc:
            log.error("Failed to list Memory Bank files: %s", exc)
            raise StoreIOError(
                f"Failed to list Memory Bank files in {self.root}: {exc}",
                path=self.root,
            ) from exc
        return [
            e
            for e in entries
            if e.endswith(self.extension) and await self.fs.is_file(self.root / e)
        ]

    # ── Stats ─────────────────────────────────────────────────

    async def stats(self) -> StoreStats:
        """Size report for the status endpoint.  Never raises."""
        try:
            names = await self.list()
            total = 0
            for name in names:
                total += await self.fs.stat_size(self.root / name)
        except Exception as exc:
            log.error("Failed to get Memory Bank stats: %s", exc)
            return StoreStats(initialized=self._initialized, error=str(exc))

        return StoreStats(
            initialized=self._initialized,
            path=str(self.root),
            file_count=len(names),
            total_size_bytes=total,
        )

    # ── Internal ──────────────────────────────────────────────

    def _resolve(self, name: str) -> Path:
        """Map a document name to its path, refusing escapes from the root."""
        if not name or not name.strip():
            raise InvalidDocumentNameError(name)
        candidate = Path(name)
        if candidate.is_absolute() or ".." in candidate.parts:
            log.warning("Path traversal blocked: %s", name)
            raise InvalidDocumentNameError(name)
        return self.root / candidate

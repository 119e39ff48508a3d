"""
taskflow.core.fs -- Async filesystem capability used by the document store.

Thin wrapper over ``aiofiles`` so the store never blocks the event
loop on disk I/O, and so tests can substitute a counting or failing
double.  Every method may raise ``OSError``.
"""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import List

import aiofiles
import aiofiles.os


class AsyncFileSystem:
    """Async file operations on the local disk."""

    encoding = "utf-8"

    async def ensure_directory(self, path: Path) -> None:
        await aiofiles.os.makedirs(path, exist_ok=True)

    async def path_exists(self, path: Path) -> bool:
        return await aiofiles.os.path.exists(path)

    async def read_text(self, path: Path) -> str:
        async with aiofiles.open(path, "r", encoding=self.encoding) as f:
            return await f.read()

    async def write_text(self, path: Path, content: str) -> None:
        """Write *content* to *path* via a per-call sibling temp file and ``os.replace``."""
        path = Path(path)
        tmp = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            async with aiofiles.open(tmp, "w", encoding=self.encoding) as f:
                await f.write(content)
            await aiofiles.os.replace(tmp, path)
        except OSError:
            if await aiofiles.os.path.exists(tmp):
                await aiofiles.os.remove(tmp)
            raise

    async def list_directory(self, path: Path) -> List[str]:
        return await aiofiles.os.listdir(path)

    async def stat_size(self, path: Path) -> int:
        st = await aiofiles.os.stat(path)
        return st.st_size

    async def is_file(self, path: Path) -> bool:
        return await aiofiles.os.path.isfile(path)

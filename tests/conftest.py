"""Shared fixtures for TaskFlow tests."""

import pytest
from pathlib import Path

from taskflow.core.config import Config
from taskflow.core.fs import AsyncFileSystem
from taskflow.store.documents import DocumentStore


class FakeClock:
    """Manually advanced clock for TTL and retention tests."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingFileSystem(AsyncFileSystem):
    """AsyncFileSystem that records reads and writes and can be made to fail."""

    def __init__(self):
        self.reads = []
        self.writes = []
        self.fail_writes = False
        self.fail_reads = False

    async def read_text(self, path):
        if self.fail_reads:
            raise PermissionError(f"unreadable: {path}")
        self.reads.append(Path(path).name)
        return await super().read_text(path)

    async def write_text(self, path, content):
        if self.fail_writes:
            raise PermissionError(f"read-only: {path}")
        self.writes.append(Path(path).name)
        await super().write_text(path, content)

    def read_count(self, name: str) -> int:
        return self.reads.count(name)


@pytest.fixture
def tmp_dir(tmp_path):
    """Provide a temporary directory that persists for the test."""
    return tmp_path


@pytest.fixture
def memory_dir(tmp_dir):
    """Path of a memory bank that does not exist yet."""
    return tmp_dir / "memory-bank"


@pytest.fixture
def config(memory_dir):
    """Provide a Config pointing at a temp memory bank."""
    return Config.from_memory_dir(memory_dir)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def counting_fs():
    return CountingFileSystem()


@pytest.fixture
def store(memory_dir, counting_fs):
    """Provide an uninitialised DocumentStore over a counting filesystem."""
    return DocumentStore(memory_dir, fs=counting_fs)

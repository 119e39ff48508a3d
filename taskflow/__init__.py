"""
TaskFlow -- Memory bank server with a context cache and async operations.

    from taskflow import TaskflowSystem

    async with TaskflowSystem(memory_dir="./memory-bank") as system:
        content = await system.cache.get("activeContext.md")
"""

from taskflow.core.config import Config
from taskflow.core.errors import (
    DocumentNotFoundError,
    StoreIOError,
    TaskflowError,
)
from taskflow.system import TaskflowSystem

__version__ = "1.0.0"

__all__ = [
    "TaskflowSystem",
    "Config",
    "TaskflowError",
    "StoreIOError",
    "DocumentNotFoundError",
]

"""taskflow.core -- Configuration, errors, types, and the filesystem capability."""

from taskflow.core.config import Config
from taskflow.core.errors import (
    DocumentNotFoundError,
    InvalidDocumentNameError,
    InvalidModeError,
    StoreIOError,
    TaskflowError,
)
from taskflow.core.fs import AsyncFileSystem
from taskflow.core.types import (
    Clock,
    IdFactory,
    OperationRecord,
    OperationStatus,
    StoreStats,
    generate_id,
    now_iso,
)

__all__ = [
    "Config",
    "AsyncFileSystem",
    "TaskflowError",
    "StoreIOError",
    "DocumentNotFoundError",
    "InvalidDocumentNameError",
    "InvalidModeError",
    "Clock",
    "IdFactory",
    "OperationRecord",
    "OperationStatus",
    "StoreStats",
    "generate_id",
    "now_iso",
]

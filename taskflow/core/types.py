"""
taskflow.core.types -- Shared data types and small helpers.

Every structure here is a plain dataclass, serialisable to a dict in
one call.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional

# ---------------------------------------------------------------------------
# Type aliases
# ---------------------------------------------------------------------------

#: Zero-argument callable returning epoch seconds.
Clock = Callable[[], float]

#: Zero-argument callable returning a fresh opaque identifier.
IdFactory = Callable[[], str]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def generate_id() -> str:
    """Random UUID4 string."""
    return str(uuid.uuid4())


def now_iso() -> str:
    """Current UTC timestamp in ISO-8601 with Z suffix."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


# ---------------------------------------------------------------------------
# OperationRecord -- one tracked unit of asynchronous work
# ---------------------------------------------------------------------------


class OperationStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class OperationRecord:
    """
    State of one asynchronous operation.

    ``end_time`` and ``duration`` stay ``None`` while pending.  ``result``
    is only meaningful once completed, ``error`` once failed.
    """

    id: str
    start_time: float
    status: OperationStatus = OperationStatus.PENDING
    end_time: Optional[float] = None
    duration: Optional[float] = None
    result: Any = None
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status is not OperationStatus.PENDING

    def to_dict(self, include_payload: bool = True) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "id": self.id,
            "status": self.status.value,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration": self.duration,
        }
        if include_payload:
            d["result"] = self.result
            d["error"] = self.error
        return d


# ---------------------------------------------------------------------------
# StoreStats -- memory bank size report
# ---------------------------------------------------------------------------


@dataclass
class StoreStats:
    """Aggregate size of the memory bank, or a degraded error report."""

    initialized: bool
    path: Optional[str] = None
    file_count: int = 0
    total_size_bytes: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        if self.error is not None:
            return {"error": self.error, "initialized": self.initialized}
        return {
            "path": self.path,
            "file_count": self.file_count,
            "total_size_bytes": self.total_size_bytes,
            "initialized": self.initialized,
        }

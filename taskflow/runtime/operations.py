"""
taskflow.runtime.operations -- Tracker for long-running tool operations.

A tool that would otherwise block starts an operation, hands back its
id at once, and lets the caller poll ``status`` / ``result`` later.

Lifecycle of a record::

    pending ──complete──▶ completed
       │
       └─────fail──────▶ failed

Both terminal states are final: a second terminal transition is
rejected and logged.  Terminal records are kept for a fixed retention
window and then dropped.  Expiry times sit in a min-heap that is
swept lazily on every call, so there are no timers to cancel and the
window can be tested with a fake clock.

Unknown ids are never an error.  A late ``complete`` for a record that
has already been collected is logged and ignored, and lookups return
``None``.
"""

from __future__ import annotations

import asyncio
import heapq
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Tuple

from taskflow.core.types import (
    Clock,
    IdFactory,
    OperationRecord,
    OperationStatus,
    generate_id,
)

log = logging.getLogger("taskflow.operations")

#: Default retention of terminal records (1 hour).
DEFAULT_RETENTION_SECONDS = 3600.0


def _error_message(error: Any) -> str:
    """Reduce an exception or arbitrary value to a message string."""
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    return str(error)


class OperationTracker:
    """
    Registry of asynchronous operation records.

    Parameters
    ----------
    retention : float
        Seconds a completed/failed record stays queryable.
    clock : callable
        ``() -> float`` seconds.
    id_factory : callable
        ``() -> str`` unique ids.
    """

    def __init__(
        self,
        retention: float = DEFAULT_RETENTION_SECONDS,
        clock: Clock = time.time,
        id_factory: IdFactory = generate_id,
    ) -> None:
        self.retention = retention
        self.clock = clock
        self.id_factory = id_factory
        self._records: Dict[str, OperationRecord] = {}
        self._expiry: List[Tuple[float, str]] = []
        self._tasks: Set["asyncio.Task[None]"] = set()

    # -- transitions --------------------------------------------------------

    def start(self) -> str:
        """Register a new pending operation and return its id."""
        self.purge_expired()
        op_id = self.id_factory()
        while op_id in self._records:
            op_id = self.id_factory()
        self._records[op_id] = OperationRecord(id=op_id, start_time=self.clock())
        log.debug("Started operation %s", op_id, extra={"operation_id": op_id})
        return op_id

    def complete(self, op_id: str, result: Any = None) -> bool:
        """Mark *op_id* completed with *result*.

        Returns False (and logs) for unknown ids or already-terminal
        records.
        """
        record = self._pending_record(op_id, "complete")
        if record is None:
            return False
        self._finish(record, OperationStatus.COMPLETED)
        record.result = result
        log.debug("Completed operation %s in %.3fs", op_id, record.duration)
        return True

    def fail(self, op_id: str, error: Any) -> bool:
        """Mark *op_id* failed with *error*'s message.

        Same unknown-id and terminal-state handling as ``complete``.
        """
        record = self._pending_record(op_id, "fail")
        if record is None:
            return False
        self._finish(record, OperationStatus.FAILED)
        record.error = _error_message(error)
        log.debug("Failed operation %s: %s", op_id, record.error)
        return True

    # -- queries ------------------------------------------------------------

    def status(self, op_id: str) -> Optional[Dict[str, Any]]:
        """Status and timing for *op_id*, without result/error; None if unknown."""
        self.purge_expired()
        record = self._records.get(op_id)
        return record.to_dict(include_payload=False) if record else None

    def result(self, op_id: str) -> Optional[Dict[str, Any]]:
        """Full record for *op_id* including result/error; None if unknown."""
        self.purge_expired()
        record = self._records.get(op_id)
        return record.to_dict() if record else None

    def stats(self) -> Dict[str, Any]:
        self.purge_expired()
        counts = {s: 0 for s in OperationStatus}
        durations: List[float] = []
        for record in self._records.values():
            counts[record.status] += 1
            if record.is_terminal and record.duration is not None:
                durations.append(record.duration)
        return {
            "total": len(self._records),
            "pending": counts[OperationStatus.PENDING],
            "completed": counts[OperationStatus.COMPLETED],
            "failed": counts[OperationStatus.FAILED],
            "average_duration": sum(durations) / len(durations) if durations else 0,
            "in_flight_tasks": len(self._tasks),
        }

    def __len__(self) -> int:
        self.purge_expired()
        return len(self._records)

    def __contains__(self, op_id: object) -> bool:
        self.purge_expired()
        return op_id in self._records

    # -- background work ----------------------------------------------------

    def submit(self, work: Callable[[], Awaitable[Any]]) -> str:
        """Start an operation and run ``work()`` as a background task.

        The record is completed with the coroutine's return value, or
        failed with the exception it raises.  Must be called from
        inside a running event loop.
        """
        loop = asyncio.get_running_loop()
        op_id = self.start()
        task = loop.create_task(self._run(op_id, work))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return op_id

    async def drain(self) -> None:
        """Wait for every submitted task to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _run(self, op_id: str, work: Callable[[], Awaitable[Any]]) -> None:
        try:
            result = await work()
        except asyncio.CancelledError:
            self.fail(op_id, "Operation cancelled")
            raise
        except Exception as exc:
            log.error(
                "Operation %s failed: %s", op_id, exc, extra={"operation_id": op_id}
            )
            self.fail(op_id, exc)
        else:
            self.complete(op_id, result)

    # -- retention ----------------------------------------------------------

    def purge_expired(self) -> int:
        """Drop terminal records whose retention window has elapsed."""
        now = self.clock()
        removed = 0
        while self._expiry and self._expiry[0][0] <= now:
            _, op_id = heapq.heappop(self._expiry)
            if self._records.pop(op_id, None) is not None:
                removed += 1
        if removed:
            log.debug("Collected %d expired operation(s)", removed)
        return removed

    # -- internal -----------------------------------------------------------

    def _pending_record(self, op_id: str, action: str) -> Optional[OperationRecord]:
        self.purge_expired()
        record = self._records.get(op_id)
        if record is None:
            log.warning(
                "Attempted to %s unknown operation: %s",
                action,
                op_id,
                extra={"operation_id": op_id},
            )
            return None
        if record.is_terminal:
            log.warning(
                "Attempted to %s operation %s which is already %s",
                action,
                op_id,
                record.status.value,
                extra={"operation_id": op_id},
            )
            return None
        return record

    def _finish(self, record: OperationRecord, status: OperationStatus) -> None:
        end = self.clock()
        record.status = status
        record.end_time = end
        record.duration = end - record.start_time
        heapq.heappush(self._expiry, (end + self.retention, record.id))

"""
taskflow.core.errors -- Exception hierarchy for the memory bank.

Store and cache failures propagate to callers as these types.  The
operation tracker never raises; failed work is recorded as data.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional


class TaskflowError(Exception):
    """Base exception for taskflow."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class StoreIOError(TaskflowError):
    """A memory bank file or directory could not be created, read or written."""

    def __init__(
        self,
        message: str,
        name: Optional[str] = None,
        path: Optional[Path] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)
        self.name = name
        self.path = path


class DocumentNotFoundError(StoreIOError):
    """Read of a document that does not exist in the memory bank."""

    def __init__(self, name: str, path: Optional[Path] = None):
        super().__init__(
            f"Memory Bank file not found: {name}", name=name, path=path
        )


class InvalidDocumentNameError(TaskflowError, ValueError):
    """Document name that would resolve outside the memory bank."""

    def __init__(self, name: str):
        super().__init__(f"Invalid Memory Bank file name: {name!r}")
        self.name = name


class InvalidModeError(TaskflowError, ValueError):
    """Mode value outside the plan/act enumeration."""

    def __init__(self, mode: str, allowed: Optional[list] = None):
        allowed = allowed or []
        super().__init__(
            f"Invalid mode: {mode!r}. Must be one of {allowed}",
            context={"allowed": allowed},
        )
        self.mode = mode

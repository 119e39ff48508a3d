"""
taskflow.runtime -- Workflow state shared by the tools.

Provides:
  - modes: plan/act mode flag
  - operations: tracker for long-running tool operations
"""

from __future__ import annotations

from taskflow.runtime.modes import Mode, ModeManager
from taskflow.runtime.operations import OperationTracker

__all__ = ["Mode", "ModeManager", "OperationTracker"]

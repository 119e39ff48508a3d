"""
taskflow.runtime.modes -- Plan/Act workflow mode.

Planning tools run in ``plan`` mode, execution tools in ``act`` mode.
The manager holds the current mode and a short transition history.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List

from taskflow.core.errors import InvalidModeError

log = logging.getLogger("taskflow.modes")


class Mode(str, Enum):
    PLAN = "plan"
    ACT = "act"


MODE_DESCRIPTIONS: Dict[Mode, str] = {
    Mode.PLAN: "Gather context and break work into steps",
    Mode.ACT: "Carry out planned tasks",
}


def _iso(dt: datetime) -> str:
    return dt.isoformat().replace("+00:00", "Z")


class ModeManager:
    """
    Holds the current workflow mode.

    Parameters
    ----------
    default_mode : str
        ``plan`` (default) or ``act``.
    """

    def __init__(self, default_mode: str = "plan") -> None:
        self.current = self._parse(default_mode)
        self.since: datetime = datetime.now(timezone.utc)
        self.history: List[Dict[str, Any]] = []

    # -- transitions --------------------------------------------------------

    def set_mode(self, mode_name: str, reason: str = "") -> Dict[str, Any]:
        """
        Switch to *mode_name*.

        Returns a dict summarising the transition.  Raises
        ``InvalidModeError`` for anything but ``plan`` / ``act``.
        """
        new = self._parse(mode_name)
        if new == self.current:
            return {"changed": False, "mode": self.current.value}

        old = self.current
        now = datetime.now(timezone.utc)
        self.history.append(
            {
                "mode": old.value,
                "started": _iso(self.since),
                "ended": _iso(now),
                "duration_seconds": round((now - self.since).total_seconds(), 1),
                "exit_reason": reason,
            }
        )
        self.current = new
        self.since = now
        log.info("Mode changed from %s to %s", old.value, new.value)
        return {"changed": True, "old": old.value, "new": new.value, "reason": reason}

    # -- queries ------------------------------------------------------------

    def is_plan_mode(self) -> bool:
        return self.current is Mode.PLAN

    def is_act_mode(self) -> bool:
        return self.current is Mode.ACT

    def status(self) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        return {
            "current_mode": self.current.value,
            "description": MODE_DESCRIPTIONS[self.current],
            "since": _iso(self.since),
            "duration_seconds": round((now - self.since).total_seconds(), 1),
            "transitions": len(self.history),
        }

    # -- internal -----------------------------------------------------------

    @staticmethod
    def _parse(mode_name: str) -> Mode:
        try:
            return Mode(str(mode_name).strip().lower())
        except ValueError:
            log.error("Invalid mode: %s. Must be 'plan' or 'act'.", mode_name)
            raise InvalidModeError(mode_name, [m.value for m in Mode]) from None

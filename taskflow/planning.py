"""
taskflow.planning -- Deterministic stand-in for AI task planning and execution.

``Planner`` returns fixed-shape plans and execution records built from
the task description and the names of any memory bank documents passed
as context.  Responses are memoised per request, the same way a real
model client would cache identical prompts.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional

from taskflow.context.lru import MISSING, BoundedTTLCache
from taskflow.core.types import now_iso

log = logging.getLogger("taskflow.planning")

PLAN_STEP_TEMPLATES = (
    "Analyze requirements for: {task}",
    "Break down into implementable subtasks",
    "Prioritize subtasks and assign complexity",
    "Create implementation plan",
    "Define success criteria and validation approach",
)

#: Memoised responses kept per planner.
RESPONSE_CACHE_SIZE = 256
RESPONSE_CACHE_TTL = 24 * 3600.0


def _estimate_effort(task: str) -> str:
    words = len(task.split())
    if words <= 5:
        return "low"
    if words > 40:
        return "high"
    return "medium"


class Planner:
    """Stand-in planning/execution backend with a response cache."""

    def __init__(self) -> None:
        self._responses: BoundedTTLCache[str, Dict[str, Any]] = BoundedTTLCache(
            max_entries=RESPONSE_CACHE_SIZE, ttl=RESPONSE_CACHE_TTL
        )

    async def generate_plan(
        self,
        task_description: str,
        context: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Five-step plan for *task_description*."""
        context_files = sorted(context) if context else []
        key = self._key("plan", task_description, context_files)
        cached = self._responses.get(key)
        if cached is not MISSING:
            log.debug("Using cached plan for: %s", task_description[:50])
            return cached

        steps = [
            {"id": i, "description": tpl.format(task=task_description)}
            for i, tpl in enumerate(PLAN_STEP_TEMPLATES, start=1)
        ]
        plan = {
            "task": task_description,
            "steps": steps,
            "estimated_effort": _estimate_effort(task_description),
            "context_files": context_files,
            "generated_at": now_iso(),
        }
        self._responses.set(key, plan)
        return plan

    async def execute_task(
        self,
        task_id: str,
        task_description: str,
        context: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Simulated execution record for *task_id*."""
        context_files = sorted(context) if context else []
        key = self._key("execute", f"{task_id}:{task_description}", context_files)
        cached = self._responses.get(key)
        if cached is not MISSING:
            log.debug("Using cached execution for task %s", task_id)
            return cached

        started = now_iso()
        record = {
            "task_id": task_id,
            "description": task_description,
            "status": "completed",
            "start_time": started,
            "end_time": now_iso(),
            "outcome": f"Successfully executed task: {task_description}",
            "context_files": context_files,
            "notes": "This is a simulated task execution.",
        }
        self._responses.set(key, record)
        return record

    def stats(self) -> Dict[str, Any]:
        previews = []
        for key in self._responses.keys():
            data = json.loads(key)
            previews.append(
                {"kind": data["kind"], "prompt_preview": data["prompt"][:30] + "..."}
            )
        return {"size": len(previews), "keys": previews}

    @staticmethod
    def _key(kind: str, prompt: str, context_files: List[str]) -> str:
        return json.dumps(
            {"kind": kind, "prompt": prompt, "context": context_files},
            sort_keys=True,
        )

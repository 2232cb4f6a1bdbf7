"""Plan store shared by tool calls within one agent session."""

from __future__ import annotations

import time
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from deckhand.logging import get_logger

log = get_logger(__name__)

PlanTaskStatus = Literal["pending", "in_progress", "completed", "skipped"]


class PlanTask(BaseModel):
    """A single step of a plan."""

    id: str
    description: str
    status: PlanTaskStatus = "pending"
    notes: str | None = None


class Plan(BaseModel):
    """Ordered list of tasks with a title."""

    title: str
    tasks: list[PlanTask] = Field(default_factory=list)
    created_at: float = Field(default_factory=time.time)
    updated_at: float = Field(default_factory=time.time)


class PlanSnapshot(BaseModel):
    """Immutable copy of a plan attached to tool results."""

    model_config = ConfigDict(frozen=True)

    title: str
    tasks: tuple[PlanTask, ...] = ()
    updated_at: float = 0.0

    @property
    def completed(self) -> int:
        return sum(1 for task in self.tasks if task.status == "completed")

    def summary(self) -> str:
        """One line per task, prefixed by a status marker."""
        markers = {
            "pending": "[ ]",
            "in_progress": "[~]",
            "completed": "[x]",
            "skipped": "[-]",
        }
        lines = [f"{self.title} ({self.completed}/{len(self.tasks)} completed)"]
        for task in self.tasks:
            line = f"{markers[task.status]} {task.id}. {task.description}"
            if task.notes:
                line += f" - {task.notes}"
            lines.append(line)
        return "\n".join(lines)


class PlanStore:
    """Holds the current plan for one session.

    Instances are passed explicitly to the tools that need them.
    """

    def __init__(self) -> None:
        self._plan: Plan | None = None

    @property
    def plan(self) -> Plan | None:
        return self._plan

    def set_plan(self, title: str, descriptions: list[str]) -> PlanSnapshot:
        """Replace the current plan with fresh pending tasks."""
        tasks = [
            PlanTask(id=str(idx), description=text.strip())
            for idx, text in enumerate(descriptions, 1)
            if text and text.strip()
        ]
        self._plan = Plan(title=title.strip() or "Plan", tasks=tasks)
        log.debug("Plan set", title=self._plan.title, tasks=len(tasks))
        return self.snapshot()

    def update_task(
        self,
        task_id: str,
        status: PlanTaskStatus,
        notes: str | None = None,
    ) -> PlanSnapshot:
        """Update a task's status (and optional notes).

        Raises:
            KeyError: if there is no plan or no task with ``task_id``
        """
        if self._plan is None:
            raise KeyError("No active plan")
        for task in self._plan.tasks:
            if task.id == str(task_id).strip():
                task.status = status
                if notes is not None:
                    task.notes = notes
                self._plan.updated_at = time.time()
                return self.snapshot()
        raise KeyError(f"Unknown plan task: {task_id}")

    def snapshot(self) -> PlanSnapshot | None:
        """Return an immutable copy of the current plan, if any."""
        if self._plan is None:
            return None
        return PlanSnapshot(
            title=self._plan.title,
            tasks=tuple(task.model_copy() for task in self._plan.tasks),
            updated_at=self._plan.updated_at,
        )

    def clear(self) -> None:
        self._plan = None

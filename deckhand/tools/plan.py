"""Plan tool: keep a visible task list for the current session."""

from deckhand.exceptions import ToolExecutionError
from deckhand.protocol import ToolInvocation
from deckhand.results import ToolResult
from deckhand.tools.registry import Tool, ToolContext

_STATUSES = ("pending", "in_progress", "completed", "skipped")


class UpdatePlanTool(Tool):
    """Create or update the session plan."""

    name = "update_plan"
    description = (
        "Manage the task plan. action='set' replaces the plan with one task per "
        "body line; action='update' changes a task status."
    )
    parameters = {
        "properties": {
            "action": "set | update",
            "title": "Plan title (for set)",
            "task": "Task id (for update)",
            "status": "pending | in_progress | completed | skipped",
            "notes": "Optional notes (for update)",
        },
        "aliases": {"task": ["id", "task_id"]},
        "required": ["action"],
    }
    body = "one task per line (for set)"

    async def execute(self, invocation: ToolInvocation, context: ToolContext) -> ToolResult:
        action = invocation.get("action").strip().lower()
        plans = context.plans

        if action == "set":
            descriptions = [
                line.strip().lstrip("-*").strip()
                for line in invocation.body.splitlines()
            ]
            snapshot = plans.set_plan(invocation.get("title", default="Plan"), descriptions)
            return ToolResult(tool=self.name, result=snapshot.summary(), plan=snapshot)

        if action == "update":
            status = invocation.get("status").strip().lower()
            if status not in _STATUSES:
                raise ToolExecutionError(
                    self.name,
                    f"Invalid status {status!r}; expected one of {', '.join(_STATUSES)}",
                )
            task_id = invocation.get("task", "id", "task_id")
            notes = invocation.parameters.get("notes")
            try:
                snapshot = plans.update_task(task_id, status, notes)
            except KeyError as e:
                return ToolResult(tool=self.name, error=str(e.args[0]), plan=plans.snapshot())
            return ToolResult(tool=self.name, result=snapshot.summary(), plan=snapshot)

        raise ToolExecutionError(self.name, f"Unknown action: {action!r} (use set or update)")

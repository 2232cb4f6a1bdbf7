"""Result contract returned by every tool."""

from pydantic import BaseModel

from deckhand.plan import PlanSnapshot


class ToolResult(BaseModel):
    """Result from tool execution.

    ``error`` set means a reportable failure. ``result`` may still carry
    partial output (e.g. stdout of a failed command).
    """

    tool: str
    result: str = ""
    error: str | None = None
    plan: PlanSnapshot | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    def to_prompt_text(self) -> str:
        """Render result/error for the next model prompt."""
        if self.error is None:
            return self.result
        if self.result.strip():
            return f"{self.result.rstrip()}\nError: {self.error}"
        return f"Error: {self.error}"

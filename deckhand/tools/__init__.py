"""Tools package for Deckhand."""

from deckhand.tools.dispatcher import ToolDispatcher
from deckhand.tools.edit import EditLineTool, EditSectionTool, ProposeEditTool
from deckhand.tools.files import ListFilesTool, ReadFileTool
from deckhand.tools.plan import UpdatePlanTool
from deckhand.tools.registry import Tool, ToolContext, ToolRegistry
from deckhand.tools.run_command import RunCommandTool


def create_default_registry() -> ToolRegistry:
    """Build a registry holding every built-in tool."""
    registry = ToolRegistry()
    for tool in (
        ReadFileTool(),
        ListFilesTool(),
        ProposeEditTool(),
        EditSectionTool(),
        EditLineTool(),
        RunCommandTool(),
        UpdatePlanTool(),
    ):
        registry.register(tool)
    return registry


__all__ = [
    "Tool",
    "ToolContext",
    "ToolDispatcher",
    "ToolRegistry",
    "create_default_registry",
    "ReadFileTool",
    "ListFilesTool",
    "ProposeEditTool",
    "EditSectionTool",
    "EditLineTool",
    "RunCommandTool",
    "UpdatePlanTool",
]

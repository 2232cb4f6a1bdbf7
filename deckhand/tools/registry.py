"""Tool registry, base tool class and per-session tool context."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from deckhand.approval import AutoApprover, EditApprover
from deckhand.config import Config, get_config
from deckhand.context import NullProjectContext, ProjectContext
from deckhand.exceptions import ToolExecutionError, ToolNotFoundError
from deckhand.logging import get_logger
from deckhand.plan import PlanStore
from deckhand.process import CommandRunner, ProcessSupervisor
from deckhand.protocol import ToolInvocation
from deckhand.results import ToolResult

log = get_logger(__name__)


@dataclass
class ToolContext:
    """Capabilities handed to tools for one agent session.

    Tools only see what is listed here; the agent loop owns ``cwd``.
    """

    cwd: str
    project: ProjectContext = field(default_factory=NullProjectContext)
    plans: PlanStore = field(default_factory=PlanStore)
    approver: EditApprover = field(default_factory=AutoApprover)
    runner: CommandRunner | None = None
    config: Config = field(default_factory=get_config)

    def __post_init__(self) -> None:
        if self.runner is None:
            self.runner = ProcessSupervisor(context=self.project)


class Tool(ABC):
    """Base class for all tools."""

    name: str = ""
    description: str = ""
    # Attribute names (and aliases) accepted from the tag, plus body usage.
    parameters: dict[str, Any] = {}
    body: str = ""

    @abstractmethod
    async def execute(self, invocation: ToolInvocation, context: ToolContext) -> ToolResult:
        """Execute the tool.

        Args:
            invocation: Parsed tool call
            context: Session capabilities

        Returns:
            ToolResult with ``result`` or ``error``
        """
        pass

    def get_definition(self) -> dict[str, Any]:
        """Get the tool definition used to document the tag syntax."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
            "body": self.body,
        }

    def usage(self) -> str:
        """Return an example tag for prompt documentation."""
        attrs = "".join(f' {key}="..."' for key in self.parameters.get("properties", {}))
        if self.body:
            return f'<tool name="{self.name}"{attrs}>{self.body}</tool>'
        return f'<tool name="{self.name}"{attrs}/>'

    def validate_arguments(self, invocation: ToolInvocation) -> None:
        """Check required attributes (any listed alias satisfies a field).

        Raises:
            ToolExecutionError: if a required attribute is missing
        """
        aliases: dict[str, list[str]] = self.parameters.get("aliases", {})
        for name in self.parameters.get("required", []):
            candidates = [name, *aliases.get(name, [])]
            if not any(invocation.parameters.get(key, "").strip() for key in candidates):
                raise ToolExecutionError(
                    self.name,
                    f"Missing required attribute: {name}. Usage: {self.usage()}",
                )


class ToolRegistry:
    """Registry for managing available tools."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        """Register a tool.

        Args:
            tool: Tool instance to register
        """
        if not tool.name:
            raise ValueError("Tool must have a name")

        log.debug("Registering tool", tool=tool.name)
        self._tools[tool.name] = tool

    def unregister(self, name: str) -> None:
        """Unregister a tool.

        Args:
            name: Tool name to unregister
        """
        self._tools.pop(name, None)

    def has_tool(self, name: str) -> bool:
        """Return whether a tool name is currently registered."""
        return name in self._tools

    def get(self, name: str) -> Tool:
        """Get a tool by name.

        Raises:
            ToolNotFoundError if not found
        """
        if name not in self._tools:
            raise ToolNotFoundError(name)
        return self._tools[name]

    def list_tools(self) -> list[str]:
        """List all registered tool names."""
        return list(self._tools)

    def get_definitions(self) -> list[dict[str, Any]]:
        """Get all tool definitions."""
        return [tool.get_definition() for tool in self._tools.values()]

    def describe(self) -> str:
        """Render tool usage lines for inclusion in a system prompt."""
        return "\n".join(
            f"- {tool.name}: {tool.description}\n  {tool.usage()}"
            for tool in self._tools.values()
        )

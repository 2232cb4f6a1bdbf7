"""Dispatch parsed invocations to tools, one at a time, in order."""

from __future__ import annotations

from deckhand.exceptions import DeckhandError, ToolNotFoundError
from deckhand.logging import get_logger
from deckhand.protocol import ToolInvocation, parse_tool_calls
from deckhand.results import ToolResult
from deckhand.tools.registry import ToolContext, ToolRegistry

log = get_logger(__name__)


class ToolDispatcher:
    """Execute tool invocations; every outcome is returned as a ToolResult."""

    def __init__(self, registry: ToolRegistry, context: ToolContext):
        self.registry = registry
        self.context = context

    async def dispatch(self, invocation: ToolInvocation) -> ToolResult:
        """Execute one invocation.

        Every exception raised by the tool is converted into
        ``ToolResult.error``; cancellation still propagates.
        """
        name = invocation.name
        try:
            tool = self.registry.get(name)
        except ToolNotFoundError as e:
            log.warning("Unknown tool requested", tool=name)
            available = ", ".join(self.registry.list_tools())
            return ToolResult(tool=name, error=f"{e}. Available tools: {available}")

        try:
            tool.validate_arguments(invocation)
            log.info("Executing tool", tool=name, params=invocation.parameters)
            result = await tool.execute(invocation, self.context)
        except DeckhandError as e:
            log.warning("Tool rejected invocation", tool=name, error=str(e))
            return ToolResult(tool=name, error=str(e))
        except OSError as e:
            log.error("Tool filesystem error", tool=name, error=str(e))
            return ToolResult(tool=name, error=str(e))
        except Exception as e:
            log.error("Tool execution failed", tool=name, error=str(e))
            return ToolResult(tool=name, error=f"Tool '{name}' failed: {e}")

        log.info("Tool executed", tool=name, success=result.success)
        return result

    async def run(self, text: str) -> list[ToolResult]:
        """Parse model text and dispatch every invocation sequentially."""
        invocations = parse_tool_calls(text, self.context.config.protocol.content_tools)
        if not invocations and "<tool" in (text or "").lower():
            log.warning("Model output mentions <tool but no complete invocation was parsed")

        results: list[ToolResult] = []
        for invocation in invocations:
            results.append(await self.dispatch(invocation))
        return results

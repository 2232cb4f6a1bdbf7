"""Shell command tool backed by the process supervisor."""

from deckhand.exceptions import ToolExecutionError
from deckhand.logging import get_logger
from deckhand.protocol import ToolInvocation
from deckhand.results import ToolResult
from deckhand.tools.registry import Tool, ToolContext

log = get_logger(__name__)


class RunCommandTool(Tool):
    """Execute a shell command in the project directory."""

    name = "run_command"
    description = (
        "Run a shell command in the project directory. Output is streamed to the "
        "user; long-running commands are stopped after timeoutMs."
    )
    parameters = {
        "properties": {
            "command": "Shell command line",
            "timeoutMs": "Optional timeout in milliseconds",
        },
        "aliases": {"timeoutMs": ["timeout_ms", "timeout"]},
        "required": ["command"],
    }

    async def execute(self, invocation: ToolInvocation, context: ToolContext) -> ToolResult:
        command = invocation.get("command").strip()

        raw_timeout = invocation.get("timeoutMs", "timeout_ms", "timeout").strip()
        timeout_ms: int | None = None
        if raw_timeout:
            try:
                timeout_ms = int(float(raw_timeout))
            except ValueError:
                raise ToolExecutionError(self.name, f"Invalid timeoutMs: {raw_timeout!r}")

        if not context.approver.confirm_command(command):
            log.info("Command declined", command=command)
            return ToolResult(tool=self.name, result=f"Command cancelled: {command}")

        return await context.runner.run(command, context.cwd, timeout_ms)

"""Read-only filesystem tools."""

from pathlib import Path

from deckhand.logging import get_logger
from deckhand.paths import resolve_path
from deckhand.protocol import ToolInvocation
from deckhand.results import ToolResult
from deckhand.tools.registry import Tool, ToolContext

log = get_logger(__name__)

MAX_READ_BYTES = 200_000


def _format_bytes(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


class ReadFileTool(Tool):
    """Read file contents."""

    name = "read_file"
    description = "Read the contents of a file."
    parameters = {
        "properties": {"path": "Path to the file to read"},
        "required": ["path"],
    }

    async def execute(self, invocation: ToolInvocation, context: ToolContext) -> ToolResult:
        path = invocation.get("path")
        file_path = Path(resolve_path(path, context.cwd))

        if not file_path.exists():
            # Not an error: the model may be about to create it.
            return ToolResult(
                tool=self.name,
                result=(
                    f"File not found: {path}\n\n"
                    "This file does not exist yet. To create it, use propose_edit "
                    "with the full file content."
                ),
            )
        if not file_path.is_file():
            return ToolResult(tool=self.name, error=f"Not a file: {path}")

        size = file_path.stat().st_size
        if size > MAX_READ_BYTES:
            return ToolResult(
                tool=self.name,
                error=f"File too large: {size} bytes (max {MAX_READ_BYTES})",
            )

        content = file_path.read_text(encoding="utf-8", errors="replace")
        lines = len(content.splitlines())
        return ToolResult(tool=self.name, result=f"File: {path} ({lines} lines)\n\n{content}")


class ListFilesTool(Tool):
    """List a directory."""

    name = "list_files"
    description = "List files and folders in a directory (defaults to the project root)."
    parameters = {
        "properties": {"path": "Directory to list"},
        "required": [],
    }

    async def execute(self, invocation: ToolInvocation, context: ToolContext) -> ToolResult:
        path = invocation.get("path")
        dir_path = Path(resolve_path(path, context.cwd))
        label = path or "."

        if not dir_path.is_dir():
            return ToolResult(tool=self.name, error=f"Directory not found: {label}")

        dirs: list[str] = []
        files: list[str] = []
        for item in dir_path.iterdir():
            try:
                if item.is_dir():
                    dirs.append(f"{item.name}/")
                else:
                    files.append(f"{item.name} ({_format_bytes(item.stat().st_size)})")
            except OSError:
                # Broken symlinks and unreadable entries are skipped.
                continue

        listing = "\n".join([*sorted(dirs), *sorted(files)])
        return ToolResult(tool=self.name, result=f"Directory: {label}\n\n{listing}")

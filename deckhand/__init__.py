"""Deckhand - safe action execution for agentic coding assistants."""

__version__ = "0.1.0"

from deckhand.config import Config
from deckhand.diff import DiffHunk, compute_hunks, render_hunks
from deckhand.edits import FileEdit, apply_edit, edit_section, propose_edit
from deckhand.paths import resolve_path
from deckhand.process import ProcessSupervisor, run_command
from deckhand.protocol import ToolInvocation, parse_tool_calls
from deckhand.results import ToolResult

__all__ = [
    "Config",
    "DiffHunk",
    "FileEdit",
    "ProcessSupervisor",
    "ToolInvocation",
    "ToolResult",
    "apply_edit",
    "compute_hunks",
    "edit_section",
    "parse_tool_calls",
    "propose_edit",
    "render_hunks",
    "resolve_path",
    "run_command",
    "__version__",
]

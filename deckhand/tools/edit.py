"""Edit tools: propose a change, show the diff, apply once approved."""

from deckhand.edits import FileEdit, apply_edit, edit_line, edit_section, propose_edit
from deckhand.exceptions import ToolExecutionError
from deckhand.logging import get_logger
from deckhand.protocol import ToolInvocation
from deckhand.results import ToolResult
from deckhand.tools.registry import Tool, ToolContext

log = get_logger(__name__)


def review_and_apply(tool_name: str, edit: FileEdit, context: ToolContext) -> ToolResult:
    """Show the edit to the approver and write it when accepted."""
    hunks = edit.hunks(context.config.diff.context_lines)
    if not hunks and not edit.is_new_file:
        return ToolResult(tool=tool_name, result=f"No changes to apply for {edit.path}")

    if context.config.edits.require_approval and not context.approver.approve_edit(edit, hunks):
        log.info("Edit declined", path=edit.path)
        return ToolResult(tool=tool_name, result=f"Edit skipped for {edit.path} (not approved)")

    applied = apply_edit(edit, context.cwd, context.project)
    if applied.error is not None:
        return ToolResult(tool=tool_name, error=f"Failed to apply edit to {edit.path}: {applied.error}")

    added = sum(1 for hunk in hunks for line in hunk.lines if line.startswith("+"))
    removed = sum(1 for hunk in hunks for line in hunk.lines if line.startswith("-"))
    return ToolResult(tool=tool_name, result=f"{applied.result} (+{added} -{removed})")


class ProposeEditTool(Tool):
    """Replace a whole file with new content."""

    name = "propose_edit"
    description = (
        "Create a file or replace its full content. The body must be the complete "
        "file; placeholders such as '... rest of file' are rejected."
    )
    parameters = {
        "properties": {
            "path": "File to create or replace",
            "description": "Short summary of the change",
        },
        "required": ["path"],
    }
    body = "FULL FILE CONTENT"

    async def execute(self, invocation: ToolInvocation, context: ToolContext) -> ToolResult:
        path = invocation.get("path")
        edit = propose_edit(
            path,
            invocation.body,
            invocation.get("description", default="Edit file"),
            context.cwd,
            validate_syntax=context.config.edits.validate_syntax,
        )
        return review_and_apply(self.name, edit, context)


class EditSectionTool(Tool):
    """Replace one unique block of text in an existing file."""

    name = "edit_section"
    description = (
        "Replace an exact block of text that occurs once in a file. Include enough "
        "surrounding lines in oldText to make the match unique."
    )
    parameters = {
        "properties": {
            "path": "File to edit",
            "oldText": "Exact text to replace",
            "newText": "Replacement text",
        },
        "aliases": {"oldText": ["old_text"], "newText": ["new_text"]},
        "required": ["path", "oldText"],
    }

    async def execute(self, invocation: ToolInvocation, context: ToolContext) -> ToolResult:
        edit = edit_section(
            invocation.get("path"),
            invocation.get("oldText", "old_text"),
            invocation.get("newText", "new_text"),
            context.cwd,
            validate_syntax=context.config.edits.validate_syntax,
            preview_lines=context.config.edits.preview_lines,
        )
        return review_and_apply(self.name, edit, context)


class EditLineTool(Tool):
    """Replace text on one numbered line."""

    name = "edit_line"
    description = "Replace text on a specific line number (e.g. from grep output)."
    parameters = {
        "properties": {
            "path": "File to edit",
            "line": "1-based line number",
            "oldText": "Text currently on that line",
            "newText": "Replacement text",
        },
        "aliases": {
            "line": ["lineNumber", "line_number"],
            "oldText": ["old_text"],
            "newText": ["new_text"],
        },
        "required": ["path", "line", "oldText"],
    }

    async def execute(self, invocation: ToolInvocation, context: ToolContext) -> ToolResult:
        raw_line = invocation.get("line", "lineNumber", "line_number")
        try:
            line_number = int(raw_line)
        except ValueError:
            raise ToolExecutionError(self.name, f"Invalid line number: {raw_line!r}")

        edit = edit_line(
            invocation.get("path"),
            line_number,
            invocation.get("oldText", "old_text"),
            invocation.get("newText", "new_text"),
            context.cwd,
        )
        return review_and_apply(self.name, edit, context)

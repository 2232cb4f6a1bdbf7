"""Line diff engine producing unified-style hunks for edit previews."""

from __future__ import annotations

import difflib
from dataclasses import dataclass
from typing import Iterable, Literal

from rich.console import Console
from rich.text import Text

DEFAULT_CONTEXT_LINES = 3
NO_NEWLINE_MARKER = "\\ No newline at end of file"

OpType = Literal["equal", "add", "remove"]


@dataclass(frozen=True)
class DiffOp:
    """One aligned line.

    ``old_line_no``/``new_line_no`` are 1-based; for a line absent on one side
    they hold the number the next line on that side would get.
    """

    type: OpType
    line: str
    old_line_no: int
    new_line_no: int
    missing_newline: bool = False


@dataclass(frozen=True)
class DiffHunk:
    """Contiguous block of changes with surrounding context.

    Every entry of ``lines`` is the file line prefixed by ``+``, ``-`` or a
    space. ``missing_newline`` holds the indices of lines that end the file
    without a trailing newline; the marker is only added when rendering.
    """

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: tuple[str, ...]
    missing_newline: frozenset[int] = frozenset()

    @property
    def header(self) -> str:
        return f"@@ -{self.old_start},{self.old_count} +{self.new_start},{self.new_count} @@"


def normalize_line_endings(content: str) -> str:
    """Convert CRLF and bare CR line endings to LF."""
    return content.replace("\r\n", "\n").replace("\r", "\n")


def _split_keep_newlines(content: str) -> list[str]:
    """Split LF-normalized text into lines that keep their trailing newline."""
    if not content:
        return []
    parts = content.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def _make_op(kind: OpType, raw: str, old_no: int, new_no: int) -> DiffOp:
    return DiffOp(
        type=kind,
        line=raw[:-1] if raw.endswith("\n") else raw,
        old_line_no=old_no,
        new_line_no=new_no,
        missing_newline=not raw.endswith("\n"),
    )


def _align(old_lines: list[str], new_lines: list[str]) -> list[DiffOp]:
    """Align two line sequences into a flat list of diff operations."""
    matcher = difflib.SequenceMatcher(None, old_lines, new_lines, autojunk=False)
    ops: list[DiffOp] = []
    old_no = 1
    new_no = 1
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            for raw in old_lines[i1:i2]:
                ops.append(_make_op("equal", raw, old_no, new_no))
                old_no += 1
                new_no += 1
            continue
        # "replace" is emitted as removals followed by additions.
        if tag in ("replace", "delete"):
            for raw in old_lines[i1:i2]:
                ops.append(_make_op("remove", raw, old_no, new_no))
                old_no += 1
        if tag in ("replace", "insert"):
            for raw in new_lines[j1:j2]:
                ops.append(_make_op("add", raw, old_no, new_no))
                new_no += 1
    return ops


def _hunk_end(ops: list[DiffOp], index: int, context: int) -> int:
    """Return the exclusive end index of the hunk whose first change is at ``index``."""
    total = len(ops)
    cursor = index
    while cursor < total:
        if ops[cursor].type != "equal":
            cursor += 1
            continue
        run_end = cursor
        while run_end < total and ops[run_end].type == "equal":
            run_end += 1
        run_length = run_end - cursor
        if run_end == total:
            return cursor + min(run_length, context)
        if run_length > 2 * context:
            return cursor + context
        cursor = run_end
    return total


def _build_hunk(hunk_ops: list[DiffOp]) -> DiffHunk:
    old_side = [op for op in hunk_ops if op.type != "add"]
    new_side = [op for op in hunk_ops if op.type != "remove"]
    old_start = old_side[0].old_line_no if old_side else hunk_ops[0].old_line_no - 1
    new_start = new_side[0].new_line_no if new_side else hunk_ops[0].new_line_no - 1

    prefixes = {"equal": " ", "add": "+", "remove": "-"}
    lines = [f"{prefixes[op.type]}{op.line}" for op in hunk_ops]
    missing = frozenset(idx for idx, op in enumerate(hunk_ops) if op.missing_newline)

    return DiffHunk(
        old_start=old_start,
        old_count=len(old_side),
        new_start=new_start,
        new_count=len(new_side),
        lines=tuple(lines),
        missing_newline=missing,
    )


def compute_hunks(
    old_content: str,
    new_content: str,
    context: int = DEFAULT_CONTEXT_LINES,
) -> list[DiffHunk]:
    """Compute unified-diff hunks between two versions of a file.

    Line endings are normalized first, so content differing only in CRLF/LF
    produces no hunks. Changed regions separated by more than ``2 * context``
    unchanged lines become separate hunks; closer regions share one hunk.

    Args:
        old_content: Previous file content
        new_content: Proposed file content
        context: Number of unchanged lines kept around each change

    Returns:
        Hunks in file order (empty when the contents are identical)
    """
    old_text = normalize_line_endings(old_content or "")
    new_text = normalize_line_endings(new_content or "")
    if old_text == new_text:
        return []

    context = max(0, int(context))
    ops = _align(_split_keep_newlines(old_text), _split_keep_newlines(new_text))

    hunks: list[DiffHunk] = []
    index = 0
    previous_end = 0
    total = len(ops)
    while index < total:
        while index < total and ops[index].type == "equal":
            index += 1
        if index >= total:
            break
        start = max(index - context, previous_end)
        end = _hunk_end(ops, index, context)
        hunks.append(_build_hunk(ops[start:end]))
        previous_end = end
        index = end
    return hunks


def render_hunks(hunks: Iterable[DiffHunk]) -> list[str]:
    """Render hunks as plain unified-diff lines (header then prefixed lines).

    A ``\\ No newline at end of file`` line follows each line listed in
    ``missing_newline``.
    """
    output: list[str] = []
    for hunk in hunks:
        output.append(hunk.header)
        for idx, line in enumerate(hunk.lines):
            output.append(line)
            if idx in hunk.missing_newline:
                output.append(NO_NEWLINE_MARKER)
    return output


def format_diff(old_content: str, new_content: str, context: int = DEFAULT_CONTEXT_LINES) -> str:
    """Return the rendered diff between two contents as a single string."""
    return "\n".join(render_hunks(compute_hunks(old_content, new_content, context)))


def apply_hunks(old_content: str, hunks: Iterable[DiffHunk]) -> str:
    """Rebuild the new content by replaying hunks over the old content.

    Context and ``+`` lines are taken in order, ``-`` lines are skipped and
    untouched regions between hunks are copied from ``old_content``.
    """
    old_lines = _split_keep_newlines(normalize_line_endings(old_content or ""))
    output: list[str] = []
    cursor = 0
    for hunk in hunks:
        start = hunk.old_start - 1 if hunk.old_count else hunk.old_start
        output.extend(old_lines[cursor:start])
        cursor = start
        for idx, line in enumerate(hunk.lines):
            prefix = line[:1]
            if prefix == " ":
                output.append(old_lines[cursor])
                cursor += 1
            elif prefix == "-":
                cursor += 1
            elif prefix == "+":
                ending = "" if idx in hunk.missing_newline else "\n"
                output.append(line[1:] + ending)
    output.extend(old_lines[cursor:])
    return "".join(output)


def print_diff(hunks: Iterable[DiffHunk], console: Console | None = None) -> None:
    """Print hunks to the terminal with added/removed lines colored."""
    console = console or Console(highlight=False)
    for line in render_hunks(hunks):
        if line.startswith("@@"):
            style = "cyan"
        elif line.startswith("+"):
            style = "green"
        elif line.startswith("-"):
            style = "red"
        else:
            style = "dim"
        console.print(Text(line, style=style))

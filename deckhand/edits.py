"""Propose/apply edit pipeline with safety checks.

Edits are validated and snapshotted at propose time; ``apply_edit`` is the
only function that writes to disk.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from deckhand.context import NullProjectContext, ProjectContext
from deckhand.diff import DEFAULT_CONTEXT_LINES, DiffHunk, compute_hunks
from deckhand.exceptions import EditValidationError
from deckhand.logging import get_logger
from deckhand.paths import resolve_path
from deckhand.results import ToolResult
from deckhand.syntax import check_syntax

log = get_logger(__name__)

DEFAULT_PREVIEW_LINES = 10

PLACEHOLDER_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"rest of (the )?file", re.IGNORECASE),
    re.compile(r"rest of (the )?code", re.IGNORECASE),
    re.compile(r"rest will remain( the same)?", re.IGNORECASE),
    re.compile(r"remaining (code|file|content)", re.IGNORECASE),
    re.compile(r"\.\.\.\s*(rest|snip|omitted)", re.IGNORECASE),
    re.compile(r"\bTODO:?[^.\n]*rest", re.IGNORECASE),
)


@dataclass(frozen=True)
class FileEdit:
    """A proposed, not yet applied, file mutation.

    ``old_content`` is the on-disk content when the edit was proposed
    (empty for a new file).
    """

    path: str
    old_content: str
    new_content: str
    description: str

    @property
    def is_new_file(self) -> bool:
        return self.old_content == ""

    def hunks(self, context: int = DEFAULT_CONTEXT_LINES) -> list[DiffHunk]:
        return compute_hunks(self.old_content, self.new_content, context)


def detect_placeholder(content: str) -> str | None:
    """Return the first elision marker found in ``content``, if any."""
    for pattern in PLACEHOLDER_PATTERNS:
        match = pattern.search(content)
        if match:
            return match.group(0)
    return None


def _read_text(full_path: Path) -> str:
    with open(full_path, encoding="utf-8", newline="") as f:
        return f.read()


def _read_existing(full_path: Path) -> str:
    if not full_path.exists():
        return ""
    return _read_text(full_path)


def _head_preview(content: str, max_lines: int) -> str:
    lines = content.splitlines()
    preview = "\n".join(lines[:max_lines])
    if len(lines) > max_lines:
        preview += f"\n... ({len(lines) - max_lines} more lines)"
    return preview


def _ensure_valid_syntax(path: str, full_path: Path, content: str) -> None:
    result = check_syntax(str(full_path), content)
    if result.valid:
        return
    details = "\n".join(result.errors[:5])
    raise EditValidationError(
        path,
        f"Edit would leave {path} with syntax errors:\n{details}\n"
        "Fix the content and propose the edit again.",
    )


def propose_edit(
    path: str,
    new_content: str,
    description: str,
    cwd: str,
    *,
    validate_syntax: bool = False,
) -> FileEdit:
    """Validate a full-file replacement and snapshot the current content.

    Raises:
        EditValidationError: for an empty overwrite of a non-empty file,
            placeholder text in ``new_content`` or (optionally) a syntax error
    """
    full_path = Path(resolve_path(path, cwd))
    old_content = _read_existing(full_path)

    if old_content and not new_content.strip():
        raise EditValidationError(
            path,
            f"Refusing to overwrite {path} with empty content via propose_edit. "
            "Use an explicit delete if you intend to remove it.",
        )

    placeholder = detect_placeholder(new_content)
    if placeholder:
        raise EditValidationError(
            path,
            f'Proposed edit for {path} contains placeholder text ("{placeholder.strip()}"). '
            "Provide the full file content instead.",
        )

    if validate_syntax:
        _ensure_valid_syntax(path, full_path, new_content)

    log.debug("Edit proposed", path=path, new_file=not old_content)
    return FileEdit(
        path=path,
        old_content=old_content,
        new_content=new_content,
        description=description,
    )


def edit_section(
    path: str,
    old_text: str,
    new_text: str,
    cwd: str,
    *,
    validate_syntax: bool = True,
    preview_lines: int = DEFAULT_PREVIEW_LINES,
) -> FileEdit:
    """Replace one unique occurrence of ``old_text`` in an existing file.

    Raises:
        EditValidationError: if the file is missing, ``old_text`` does not
            occur exactly once, ``new_text`` holds placeholder text or the
            result fails the syntax check
    """
    full_path = Path(resolve_path(path, cwd))
    if not full_path.is_file():
        raise EditValidationError(path, f"File not found: {path}")
    if not old_text:
        raise EditValidationError(path, "edit_section requires a non-empty old_text.")

    content = _read_text(full_path)
    needle, replacement = old_text, new_text
    # Model text uses LF; match CRLF files too.
    if needle not in content and "\r\n" in content and "\r\n" not in needle:
        needle = needle.replace("\n", "\r\n")
        replacement = replacement.replace("\r\n", "\n").replace("\n", "\r\n")

    occurrences = content.count(needle)
    if occurrences == 0:
        raise EditValidationError(
            path,
            f"Could not find the text to replace in {path}. "
            "Re-read the file and copy the exact text, including whitespace.\n"
            f"File starts with:\n{_head_preview(content, preview_lines)}",
            occurrences=0,
        )
    if occurrences > 1:
        raise EditValidationError(
            path,
            f"Found {occurrences} occurrences of the text to replace in {path}. "
            "Provide more surrounding context so the match is unique.",
            occurrences=occurrences,
        )

    placeholder = detect_placeholder(new_text)
    if placeholder:
        raise EditValidationError(
            path,
            f'Replacement text for {path} contains placeholder text ("{placeholder.strip()}"). '
            "Provide the complete replacement instead.",
        )

    new_content = content.replace(needle, replacement, 1)
    if validate_syntax:
        _ensure_valid_syntax(path, full_path, new_content)

    return FileEdit(
        path=path,
        old_content=content,
        new_content=new_content,
        description=f"Edit section of {path}",
    )


def edit_line(
    path: str,
    line_number: int,
    old_text: str,
    new_text: str,
    cwd: str,
) -> FileEdit:
    """Replace ``old_text`` on a single known line (1-based).

    Raises:
        EditValidationError: if the file is missing, the line is out of range
            or does not contain ``old_text``
    """
    full_path = Path(resolve_path(path, cwd))
    if not full_path.is_file():
        raise EditValidationError(path, f"File not found: {path}")

    content = _read_text(full_path)
    lines = content.split("\n")
    if line_number < 1 or line_number > len(lines):
        raise EditValidationError(
            path,
            f"Line number {line_number} is out of range (file has {len(lines)} lines)",
        )

    current = lines[line_number - 1]
    if not old_text or old_text not in current:
        raise EditValidationError(
            path,
            f'Line {line_number} does not contain "{old_text}".\nActual line: {current.rstrip()}',
        )

    lines[line_number - 1] = current.replace(old_text, new_text, 1)
    return FileEdit(
        path=path,
        old_content=content,
        new_content="\n".join(lines),
        description=f'Edit line {line_number}: replace "{old_text}" with "{new_text}"',
    )


def apply_edit(
    edit: FileEdit,
    cwd: str,
    context: ProjectContext | None = None,
) -> ToolResult:
    """Write an approved edit to disk.

    Safety checks already ran at propose time and are not repeated.
    """
    full_path = Path(resolve_path(edit.path, cwd))
    try:
        full_path.parent.mkdir(parents=True, exist_ok=True)
        with open(full_path, "w", encoding="utf-8", newline="") as f:
            f.write(edit.new_content)
    except OSError as e:
        log.error("Apply edit failed", path=edit.path, error=str(e))
        return ToolResult(tool="apply_edit", error=str(e))

    (context or NullProjectContext()).invalidate(cwd)
    log.info("Edit applied", path=edit.path, chars=len(edit.new_content))
    return ToolResult(tool="apply_edit", result=f"Successfully updated {edit.path}")

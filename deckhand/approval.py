"""Approval capabilities consulted before edits are written or commands run."""

from __future__ import annotations

from typing import Protocol

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm

from deckhand.diff import DiffHunk, print_diff
from deckhand.edits import FileEdit


class EditApprover(Protocol):
    """Decides whether a proposed edit or command may proceed."""

    def approve_edit(self, edit: FileEdit, hunks: list[DiffHunk]) -> bool: ...

    def confirm_command(self, command: str) -> bool: ...


class AutoApprover:
    """Approve everything (non-interactive runs, tests)."""

    def approve_edit(self, edit: FileEdit, hunks: list[DiffHunk]) -> bool:
        return True

    def confirm_command(self, command: str) -> bool:
        return True


class ConsoleApprover:
    """Ask on the terminal after showing the colored diff."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(highlight=False)

    def approve_edit(self, edit: FileEdit, hunks: list[DiffHunk]) -> bool:
        title = "new file" if edit.is_new_file else "edit"
        self.console.print(f"[bold]{escape(edit.path)}[/bold] ({title}): {escape(edit.description)}")
        print_diff(hunks, self.console)
        return Confirm.ask("Apply this change?", console=self.console, default=True)

    def confirm_command(self, command: str) -> bool:
        self.console.print(f"[bold]Run command:[/bold] {escape(command)}")
        return Confirm.ask("Execute?", console=self.console, default=True)

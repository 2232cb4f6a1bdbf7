"""Command-line entry point for Deckhand."""

import asyncio
import json
import os
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from deckhand.approval import AutoApprover, ConsoleApprover
from deckhand.config import Config, get_config, set_config
from deckhand.context import NullProjectContext
from deckhand.diff import compute_hunks, print_diff
from deckhand.exceptions import ConfigurationError
from deckhand.logging import configure_logging
from deckhand.plan import PlanStore
from deckhand.process import NullSink, ProcessSupervisor
from deckhand.protocol import parse_tool_calls
from deckhand.tools import ToolContext, ToolDispatcher, create_default_registry

app = typer.Typer(help="Deckhand - safe tool execution for coding agents", no_args_is_help=True)


def _setup(config_path: str, verbose: bool, json_logs: bool | None = None) -> Config:
    if config_path:
        try:
            set_config(Config.from_yaml(Path(config_path)))
        except ConfigurationError as e:
            Console(stderr=True).print(f"[red]{escape(str(e))}[/red]")
            raise typer.Exit(code=2)
    configure_logging("DEBUG" if verbose else None, json_format=json_logs)
    return get_config()


def _read_input(source: str) -> str:
    if not source or source == "-":
        return sys.stdin.read()
    return Path(source).expanduser().read_text(encoding="utf-8")


@app.command("exec")
def exec_(
    source: str = typer.Argument("-", help="File with model output ('-' for stdin)"),
    cwd: str = typer.Option("", "--cwd", help="Working directory (default: current)"),
    yes: bool = typer.Option(False, "-y", "--yes", help="Apply edits and run commands without asking"),
    json_output: bool = typer.Option(False, "--json", help="Print results as JSON"),
    config: str = typer.Option("", "-c", "--config", help="Path to config file"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
) -> None:
    """Execute every tool invocation found in model output."""
    cfg = _setup(config, verbose, json_logs=True if json_output else None)
    text = _read_input(source)
    workdir = os.path.abspath(os.path.expanduser(cwd)) if cwd else os.getcwd()

    # Prompts need a terminal; stdin may be carrying the model text.
    interactive = not yes and source not in ("", "-") and sys.stdin.isatty()
    project = NullProjectContext()
    context = ToolContext(
        cwd=workdir,
        project=project,
        plans=PlanStore(),
        approver=ConsoleApprover() if interactive else AutoApprover(),
        # stdout is reserved for the JSON document.
        runner=ProcessSupervisor(context=project, sink=NullSink()) if json_output else None,
        config=cfg,
    )
    dispatcher = ToolDispatcher(create_default_registry(), context)
    results = asyncio.run(dispatcher.run(text))

    if json_output:
        print(json.dumps([r.model_dump(exclude_none=True) for r in results], ensure_ascii=False, indent=2))
    else:
        console = Console(highlight=False)
        for item in results:
            status = "[green]ok[/green]" if item.success else "[red]error[/red]"
            console.print(f"[bold]{item.tool}[/bold] {status}")
            console.print(item.to_prompt_text(), markup=False)

    if any(not r.success for r in results):
        raise typer.Exit(code=1)


@app.command()
def parse(
    source: str = typer.Argument("-", help="File with model output ('-' for stdin)"),
) -> None:
    """Print the tool invocations found in model output as JSON."""
    invocations = parse_tool_calls(_read_input(source))
    payload = [
        {"name": inv.name, "parameters": inv.parameters, "body": inv.body}
        for inv in invocations
    ]
    print(json.dumps(payload, ensure_ascii=False, indent=2))


@app.command()
def diff(
    old: Path = typer.Argument(..., help="Original file"),
    new: Path = typer.Argument(..., help="Updated file"),
    context: int = typer.Option(3, "-U", "--context", help="Context lines per hunk"),
) -> None:
    """Show a colored unified diff between two files."""
    old_text = old.read_text(encoding="utf-8") if old.exists() else ""
    new_text = new.read_text(encoding="utf-8") if new.exists() else ""
    hunks = compute_hunks(old_text, new_text, context)
    if not hunks:
        print("No differences.")
        return
    print_diff(hunks)


@app.command()
def version() -> None:
    """Show version information."""
    from deckhand import __version__

    print(f"Deckhand v{__version__}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()

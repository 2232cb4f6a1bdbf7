"""Process supervisor: run shell commands with a bounded lifetime.

Output is buffered for the tool result and mirrored live to the terminal.
The child is not sandboxed; only its lifetime is controlled.
"""

from __future__ import annotations

import asyncio
import codecs
import os
import signal
import sys
from dataclasses import dataclass
from typing import Callable, Protocol

from deckhand.config import get_config
from deckhand.context import NullProjectContext, ProjectContext
from deckhand.logging import get_logger
from deckhand.results import ToolResult

log = get_logger(__name__)

TOOL_NAME = "run_command"
_READ_CHUNK = 4096
# Upper bound for collecting remaining output once the child has exited.
_DRAIN_SECONDS = 2.0
_EXIT_POLL_SECONDS = 0.02


class OutputSink(Protocol):
    """Receives live command output."""

    def write_stdout(self, text: str) -> None: ...

    def write_stderr(self, text: str) -> None: ...


class TerminalSink:
    """Mirror output to this process's stdout/stderr."""

    def write_stdout(self, text: str) -> None:
        sys.stdout.write(text)
        sys.stdout.flush()

    def write_stderr(self, text: str) -> None:
        sys.stderr.write(text)
        sys.stderr.flush()


class NullSink:
    """Discard live output (buffers are still filled)."""

    def write_stdout(self, text: str) -> None:
        return None

    def write_stderr(self, text: str) -> None:
        return None


class CommandRunner(Protocol):
    """Capability used by tools that need to run commands."""

    async def run(self, command: str, cwd: str, timeout_ms: int | None = None) -> ToolResult: ...


@dataclass
class ProcessExecution:
    """Transient state of one supervised command."""

    command: str
    cwd: str
    timeout_ms: int
    stdout_buffer: str = ""
    stderr_buffer: str = ""
    timed_out: bool = False
    killed: bool = False


class ProcessSupervisor:
    """Run one shell command per call with timeout and kill escalation."""

    def __init__(
        self,
        context: ProjectContext | None = None,
        sink: OutputSink | None = None,
        kill_grace_seconds: float | None = None,
        default_timeout_ms: int | None = None,
        on_spawn: Callable[[asyncio.subprocess.Process], None] | None = None,
    ):
        config = get_config()
        self.context = context or NullProjectContext()
        if sink is None:
            sink = TerminalSink() if config.process.mirror_output else NullSink()
        self.sink = sink
        self.kill_grace_seconds = float(
            config.process.kill_grace_seconds if kill_grace_seconds is None else kill_grace_seconds
        )
        self.default_timeout_ms = int(
            config.process.timeout_ms if default_timeout_ms is None else default_timeout_ms
        )
        self._on_spawn = on_spawn

    async def _pump(
        self,
        stream: asyncio.StreamReader | None,
        execution: ProcessExecution,
        channel: str,
    ) -> None:
        """Copy one pipe into the execution buffer and the sink."""
        if stream is None:
            return
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            chunk = await stream.read(_READ_CHUNK)
            text = decoder.decode(chunk, final=not chunk)
            if text:
                if channel == "stdout":
                    execution.stdout_buffer += text
                    self.sink.write_stdout(text)
                else:
                    execution.stderr_buffer += text
                    self.sink.write_stderr(text)
            if not chunk:
                return

    @staticmethod
    def _signal_group(process: asyncio.subprocess.Process, sig: signal.Signals) -> None:
        """Signal the child and everything it started (its own process group)."""
        try:
            os.killpg(process.pid, sig)
        except (ProcessLookupError, PermissionError):
            pass

    @staticmethod
    async def _wait_exit(process: asyncio.subprocess.Process) -> None:
        """Wait for the exit status only.

        ``Process.wait()`` also waits for the pipes to close, which never
        happens while a grandchild still holds them.
        """
        while process.returncode is None:
            await asyncio.sleep(_EXIT_POLL_SECONDS)

    @staticmethod
    async def _cancel_tasks(*tasks: asyncio.Task | None) -> None:
        """Cancel tasks and await them to avoid pending task warnings."""
        for task in tasks:
            if task is None or task.done():
                continue
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def run(self, command: str, cwd: str, timeout_ms: int | None = None) -> ToolResult:
        """Run ``command`` through the shell in ``cwd``.

        Args:
            command: Shell command line
            cwd: Working directory for the child
            timeout_ms: Lifetime bound; ``None`` uses the configured default,
                zero or less disables the timeout

        Returns:
            ToolResult with stdout as ``result``; ``error`` describes a spawn
            failure, timeout, unexpected signal or non-zero exit
        """
        if timeout_ms is None:
            timeout_ms = self.default_timeout_ms
        execution = ProcessExecution(command=command, cwd=cwd, timeout_ms=int(timeout_ms))

        log.info("Running command", command=command, cwd=cwd, timeout_ms=execution.timeout_ms)
        try:
            # stdin is inherited so interactive prompts keep working. The
            # child leads a new session so its whole process group can be
            # signalled on timeout.
            process = await asyncio.create_subprocess_shell(
                command,
                cwd=cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as e:
            log.error("Command failed to start", command=command, error=str(e))
            return ToolResult(tool=TOOL_NAME, error=f"Failed to start command: {e}")

        if self._on_spawn is not None:
            self._on_spawn(process)

        stdout_task = asyncio.create_task(self._pump(process.stdout, execution, "stdout"))
        stderr_task = asyncio.create_task(self._pump(process.stderr, execution, "stderr"))
        exit_task = asyncio.create_task(self._wait_exit(process))
        try:
            timeout = execution.timeout_ms / 1000 if execution.timeout_ms > 0 else None
            done, _ = await asyncio.wait({exit_task}, timeout=timeout)
            if exit_task not in done:
                execution.timed_out = True
                log.warning(
                    "Command timed out, sending SIGTERM",
                    command=command,
                    timeout_ms=execution.timeout_ms,
                )
                self._signal_group(process, signal.SIGTERM)
                done, _ = await asyncio.wait({exit_task}, timeout=self.kill_grace_seconds)
                if exit_task not in done:
                    log.warning("Command unresponsive, sending SIGKILL", command=command)
                    self._signal_group(process, signal.SIGKILL)
                    execution.killed = True
                    await exit_task

            pumps = {stdout_task, stderr_task}
            done, _ = await asyncio.wait(pumps, timeout=_DRAIN_SECONDS)
            if done != pumps:
                # Leftover background jobs still hold the pipes open.
                log.warning("Killing processes left behind by command", command=command)
                self._signal_group(process, signal.SIGKILL)
                await asyncio.wait(pumps, timeout=_DRAIN_SECONDS)
        except asyncio.CancelledError:
            self._signal_group(process, signal.SIGKILL)
            await self._wait_exit(process)
            raise
        finally:
            await self._cancel_tasks(exit_task, stdout_task, stderr_task)

        return self._finalize(execution, process.returncode)

    def _finalize(self, execution: ProcessExecution, returncode: int | None) -> ToolResult:
        """Classify the finished execution into a ToolResult."""
        stdout = execution.stdout_buffer

        if execution.timed_out:
            message = (
                f"Command timed out after {execution.timeout_ms}ms"
                + (" and was killed" if execution.killed else "")
                + ". Increase timeout_ms if the command needs more time."
            )
            return ToolResult(tool=TOOL_NAME, result=stdout, error=message)

        if returncode is not None and returncode < 0:
            try:
                signal_name = signal.Signals(-returncode).name
            except ValueError:
                signal_name = str(-returncode)
            log.warning("Command terminated by signal", command=execution.command, signal=signal_name)
            return ToolResult(
                tool=TOOL_NAME,
                result=stdout,
                error=f"Command terminated by signal {signal_name}",
            )

        if returncode == 0:
            self.context.invalidate(execution.cwd)
            log.info("Command completed", command=execution.command)
            return ToolResult(tool=TOOL_NAME, result=stdout or "Command executed successfully.")

        stderr_text = execution.stderr_buffer.strip()
        log.info("Command failed", command=execution.command, exit_code=returncode)
        if stderr_text:
            error = f"Command failed with exit code {returncode}: {stderr_text}"
        else:
            error = f"Command failed with exit code {returncode}."
        return ToolResult(tool=TOOL_NAME, result=stdout, error=error)


async def run_command(
    command: str,
    cwd: str,
    timeout_ms: int | None = None,
    context: ProjectContext | None = None,
) -> ToolResult:
    """Run a command with a one-off supervisor mirroring to the terminal."""
    return await ProcessSupervisor(context=context).run(command, cwd, timeout_ms)

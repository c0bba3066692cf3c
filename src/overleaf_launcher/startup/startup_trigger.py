"""Overleaf Startup Trigger.

Spawns the toolkit startup script (``bin/up -d``) without blocking the
caller and reports how it ended. A clean exit only means the script did not
fail right away; readiness still has to be confirmed by polling.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
import logging
import os
from pathlib import Path
import shlex
import time

from overleaf_launcher.core.exceptions import StartupCommandFailedError

logger = logging.getLogger(__name__)

# Shell exit codes with a well known meaning
SHELL_NOT_EXECUTABLE = 126
SHELL_COMMAND_NOT_FOUND = 127

OUTPUT_CHUNK_SIZE = 4096
MAX_LOGGED_LINE = 64 * 1024


@dataclass
class TriggerExit:
    """How the startup script ended."""

    returncode: int
    duration_ms: float


class StartupTrigger:
    """Runs the startup command once, in the background."""

    def __init__(
        self,
        command: str,
        args: Sequence[str] = (),
        cwd: Path | str | None = None,
    ) -> None:
        """Initialize startup trigger.

        Args:
            command: Script path, relative to ``cwd`` or absolute
            args: Extra arguments, e.g. ``["-d"]`` for detached mode
            cwd: Working directory the shell starts in
        """
        self.command = command
        self.args = list(args)
        self.cwd = Path(cwd) if cwd is not None else None

        self._process: asyncio.subprocess.Process | None = None
        self._output_task: asyncio.Task[None] | None = None
        self._start_time: float | None = None

    @property
    def command_line(self) -> str:
        """Command line as handed to the shell."""
        return " ".join([self.command, *(shlex.quote(arg) for arg in self.args)])

    @property
    def started(self) -> bool:
        return self._process is not None

    @property
    def finished(self) -> bool:
        """True once the process has exited."""
        return self._process is not None and self._process.returncode is not None

    @property
    def returncode(self) -> int | None:
        return self._process.returncode if self._process else None

    async def start(self) -> None:
        """Spawn the command and return as soon as it is running.

        Raises:
            StartupCommandFailedError: The process could not be spawned
            RuntimeError: ``start`` was already called
        """
        if self._process is not None:
            msg = "Startup command already started"
            raise RuntimeError(msg)

        logger.info(
            "Running startup command: %s (cwd=%s)", self.command_line, self.cwd or "."
        )
        self._start_time = time.time()

        try:
            self._process = await asyncio.create_subprocess_shell(
                self.command_line,
                cwd=self.cwd,
                env=os.environ.copy(),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            msg = f"Could not run {self.command_line}: {e.strerror or e}"
            raise StartupCommandFailedError(msg, command=self.command_line) from e

        self._output_task = asyncio.create_task(self._stream_output())

    def _log_line(self, raw_line: bytes) -> None:
        line = raw_line.decode(errors="replace").rstrip()
        if line:
            logger.info("[%s] %s", self.command, line)

    async def _stream_output(self) -> None:
        assert self._process is not None  # noqa: S101
        stream = self._process.stdout
        if stream is None:
            return

        # Chunked reads: a line longer than the reader limit must not stop draining
        pending = b""
        while chunk := await stream.read(OUTPUT_CHUNK_SIZE):
            *lines, pending = (pending + chunk).split(b"\n")
            for raw_line in lines:
                self._log_line(raw_line)
            if len(pending) > MAX_LOGGED_LINE:
                self._log_line(pending)
                pending = b""
        self._log_line(pending)

    async def wait(self) -> TriggerExit:
        """Wait for the command to exit.

        Returns:
            TriggerExit for a zero exit code

        Raises:
            StartupCommandFailedError: Non-zero exit code
            RuntimeError: ``start`` was never called
        """
        if self._process is None:
            msg = "Startup command has not been started"
            raise RuntimeError(msg)

        returncode = await self._process.wait()
        if self._output_task is not None:
            # Drain whatever the script printed last; output never decides the exit
            try:
                await asyncio.shield(self._output_task)
            except Exception as e:  # noqa: BLE001
                logger.warning("Could not read startup command output: %s", e)

        duration_ms = (time.time() - (self._start_time or time.time())) * 1000

        if returncode == 0:
            logger.info("Startup command finished in %.0fms", duration_ms)
            return TriggerExit(returncode=returncode, duration_ms=duration_ms)

        if returncode == SHELL_COMMAND_NOT_FOUND:
            msg = f"Startup command not found: {self.command}"
        elif returncode == SHELL_NOT_EXECUTABLE:
            msg = f"Startup command is not executable: {self.command}"
        else:
            msg = f"Process exited with code {returncode}"

        logger.error("Startup command failed: %s", msg)
        raise StartupCommandFailedError(
            msg, returncode=returncode, command=self.command_line
        )

"""Exception hierarchy for the Overleaf launcher.

Probe failures never show up here as raised errors: a container runtime or
web service that cannot be reached is simply reported as "not ready". Only
the startup script and the readiness budget can end a launch with an error.
"""

from __future__ import annotations

from typing import Any


class LauncherError(Exception):
    """Base exception for all launcher specific errors."""

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {super().__str__()}"
        return super().__str__()


class ConfigurationError(LauncherError):
    """Raised when launcher settings cannot be loaded or validated."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(
            message, error_code="CONFIG_001", details={"errors": errors or []}
        )
        self.errors = errors or []


class ProbeUnavailableError(LauncherError):
    """A readiness probe could not reach the container runtime or service.

    Probes catch this themselves and degrade to a negative result.
    """

    def __init__(self, probe: str, reason: str) -> None:
        super().__init__(
            f"{probe} probe unavailable: {reason}",
            error_code="RUNTIME_001",
            details={"probe": probe},
        )
        self.probe = probe
        self.reason = reason


class StartupCommandFailedError(LauncherError):
    """The startup script exited non-zero or could not be spawned."""

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        command: str | None = None,
    ) -> None:
        # 126/127: the shell started but could not run the script itself
        not_runnable = returncode is None or returncode in {126, 127}
        error_code = "SCRIPT_002" if not_runnable else "SCRIPT_001"
        super().__init__(
            message,
            error_code=error_code,
            details={"returncode": returncode, "command": command},
        )
        self.returncode = returncode
        self.command = command

    @property
    def spawn_failed(self) -> bool:
        """True when the process never started."""
        return self.returncode is None


class ReadinessTimeoutError(LauncherError):
    """The readiness budget ran out before the stack became ready."""

    def __init__(self, message: str, *, containers_running: bool) -> None:
        super().__init__(
            message,
            error_code="READY_002" if containers_running else "READY_001",
            details={"containers_running": containers_running},
        )
        self.containers_running = containers_running

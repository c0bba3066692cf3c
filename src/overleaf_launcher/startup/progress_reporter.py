"""Overleaf Launch Progress Reporter.

Console notification sink: prints launch phases, progress messages and the
final outcome, and renders the ``--check`` readiness report.
"""

from __future__ import annotations

import logging
import sys
import time
from typing import Any, TextIO

from overleaf_launcher.startup.health_checks import ServiceStatus
from overleaf_launcher.startup.notifications import LaunchState

logger = logging.getLogger(__name__)

PHASE_EMOJIS = {
    LaunchState.CHECKING: "🔍",
    LaunchState.ALREADY_READY: "✅",
    LaunchState.STARTING: "🚀",
    LaunchState.POLLING: "⏳",
    LaunchState.READY: "✅",
    LaunchState.FAILED: "❌",
}


class StartupProgressReporter:
    """Reports launch progress with clear status messages."""

    def __init__(
        self, output: TextIO | None = None, *, enable_colors: bool = True
    ) -> None:
        """Initialize progress reporter.

        Args:
            output: Output stream (defaults to stdout)
            enable_colors: Whether to use colored output
        """
        self.output = output or sys.stdout
        self.enable_colors = (
            enable_colors and hasattr(self.output, "isatty") and self.output.isatty()
        )
        self.current_phase: LaunchState | None = None
        self.messages: list[str] = []
        self.start_time = time.time()
        self.end_time: float | None = None

        # Color codes
        self.colors = (
            {
                "reset": "\033[0m",
                "bold": "\033[1m",
                "green": "\033[32m",
                "yellow": "\033[33m",
                "red": "\033[31m",
                "cyan": "\033[36m",
                "gray": "\033[90m",
            }
            if self.enable_colors
            else dict.fromkeys(
                ["reset", "bold", "green", "yellow", "red", "cyan", "gray"], ""
            )
        )

    def _colorize(self, text: str, color: str) -> str:
        """Apply color to text if colors are enabled."""
        return f"{self.colors[color]}{text}{self.colors['reset']}"

    def _print(self, message: str) -> None:
        print(message, file=self.output, flush=True)

    @property
    def elapsed_ms(self) -> float:
        end = self.end_time or time.time()
        return (end - self.start_time) * 1000

    def start_launch(self, app_name: str = "Overleaf") -> None:
        """Print the launch header."""
        self.start_time = time.time()
        header = f"{self._colorize('🚀 Launching', 'bold')} {self._colorize(app_name, 'cyan')}"
        self._print(f"\n{header}")
        self._print(self._colorize("=" * 60, "gray"))

    # NotificationSink

    def state_changed(self, state: LaunchState) -> None:
        """Print a phase header when the launch moves on."""
        if state == self.current_phase:
            return
        self.current_phase = state
        emoji = PHASE_EMOJIS.get(state, "📍")
        phase_name = state.value.replace("_", " ").title()
        self._print(f"\n{emoji} {self._colorize(phase_name, 'bold')}")
        logger.info("Launch phase: %s", phase_name)

    def status_update(self, message: str) -> None:
        self.messages.append(message)
        self._print(f"  🔄 {message}")

    def started(self) -> None:
        self._complete(success=True, message="Overleaf is ready")

    def already_running(self) -> None:
        self._complete(success=True, message="Overleaf is already running")

    def error(self, reason: str) -> None:
        self._complete(success=False, message=reason)

    def _complete(self, *, success: bool, message: str) -> None:
        self.end_time = time.time()
        total_duration = self.elapsed_ms

        if success:
            emoji = PHASE_EMOJIS[LaunchState.READY]
            status_msg = f"{emoji} {self._colorize('Launch Complete', 'green')} ({total_duration:.0f}ms)"
            logger.info("Launch completed in %.0fms: %s", total_duration, message)
        else:
            emoji = PHASE_EMOJIS[LaunchState.FAILED]
            status_msg = f"{emoji} {self._colorize('Launch Failed', 'red')} ({total_duration:.0f}ms)"
            logger.error("Launch failed after %.0fms: %s", total_duration, message)

        self._print(f"\n{status_msg}: {message}")
        self._print(f"{self._colorize('=' * 60, 'gray')}\n")

    # Reports

    def print_report(self, text: str) -> None:
        """Print a multi-line report or help text."""
        self._print(text)

    def create_check_report(
        self, summary: dict[str, Any], status: ServiceStatus
    ) -> str:
        """Create the ``--check`` readiness report."""
        lines = [
            "🔍 Overleaf Readiness Report",
            "=" * 50,
            "",
            "📋 Configuration Summary:",
        ]
        lines.extend(f"  • {key}: {value}" for key, value in summary.items())
        lines.extend(("", "🐳 Containers:"))
        if status.containers:
            for name, running in status.containers.items():
                symbol = "✅" if running else "❌"
                lines.append(f"  {symbol} {name}: {'running' if running else 'not running'}")
        else:
            lines.append("  (none required)")

        service_symbol = "✅" if status.service_accessible else "❌"
        service_text = "responding" if status.service_accessible else "not responding"
        lines.extend(("", "🌐 Web Service:", f"  {service_symbol} {service_text}", ""))

        if status.all_ready:
            lines.append("✅ OVERLEAF IS READY")
        elif status.containers_running:
            lines.append("⚠️  CONTAINERS ARE UP BUT THE SERVICE IS NOT RESPONDING")
        else:
            lines.append("❌ OVERLEAF IS NOT RUNNING")

        return "\n".join(lines)

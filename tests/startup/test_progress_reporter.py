"""Tests for the console progress reporter."""

from __future__ import annotations

from io import StringIO

from overleaf_launcher.startup.notifications import LaunchState
from overleaf_launcher.startup.progress_reporter import StartupProgressReporter
from tests.conftest import NOTHING_UP, READY, SERVICE_DOWN


class TestStartupProgressReporter:
    """Console notification sink."""

    def setup_method(self) -> None:
        self.output = StringIO()
        self.reporter = StartupProgressReporter(self.output, enable_colors=False)

    def test_no_colors_for_non_terminal(self) -> None:
        reporter = StartupProgressReporter(StringIO(), enable_colors=True)

        assert reporter.enable_colors is False
        assert reporter._colorize("text", "red") == "text"

    def test_phase_headers_printed_once(self) -> None:
        self.reporter.state_changed(LaunchState.CHECKING)
        self.reporter.state_changed(LaunchState.CHECKING)
        self.reporter.state_changed(LaunchState.ALREADY_READY)

        text = self.output.getvalue()
        assert text.count("🔍 Checking") == 1
        assert "Already Ready" in text

    def test_status_updates_recorded(self) -> None:
        self.reporter.status_update("Starting Overleaf...")

        assert self.reporter.messages == ["Starting Overleaf..."]
        assert "  🔄 Starting Overleaf..." in self.output.getvalue()

    def test_started(self) -> None:
        self.reporter.start_launch()
        self.reporter.started()

        text = self.output.getvalue()
        assert "🚀 Launching Overleaf" in text
        assert "Launch Complete" in text
        assert text.rstrip().splitlines()[-2].endswith(": Overleaf is ready")
        assert self.reporter.end_time is not None

    def test_already_running(self) -> None:
        self.reporter.already_running()

        assert "Overleaf is already running" in self.output.getvalue()

    def test_error(self) -> None:
        self.reporter.error("Process exited with code 1")

        text = self.output.getvalue()
        assert "Launch Failed" in text
        assert ": Process exited with code 1" in text


class TestCheckReport:
    """Readiness report for ``--check``."""

    def setup_method(self) -> None:
        self.reporter = StartupProgressReporter(StringIO(), enable_colors=False)
        self.summary = {"startup_command": "bin/up -d"}

    def test_ready(self) -> None:
        report = self.reporter.create_check_report(self.summary, READY)

        assert "  • startup_command: bin/up -d" in report
        assert "✅ sharelatex: running" in report
        assert "✅ responding" in report
        assert report.endswith("✅ OVERLEAF IS READY")

    def test_service_down(self) -> None:
        report = self.reporter.create_check_report(self.summary, SERVICE_DOWN)

        assert "❌ not responding" in report
        assert report.endswith("CONTAINERS ARE UP BUT THE SERVICE IS NOT RESPONDING")

    def test_nothing_up(self) -> None:
        report = self.reporter.create_check_report(self.summary, NOTHING_UP)

        assert "❌ mongo: not running" in report
        assert report.endswith("❌ OVERLEAF IS NOT RUNNING")

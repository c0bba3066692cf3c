# overleaf_launcher/main.py
"""
Overleaf Launcher – command line entry point
============================================

Run options
-----------
• Console launch:      overleaf-launcher
• Readiness report:    overleaf-launcher --check
• Desktop window:      overleaf-launcher --desktop
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
import sys
import webbrowser

from overleaf_launcher.core.exceptions import ConfigurationError
from overleaf_launcher.core.logging_config import setup_logging
from overleaf_launcher.startup.config_schema import LauncherConfig, LogLevel, load_config
from overleaf_launcher.startup.error_catalog import error_catalog
from overleaf_launcher.startup.notifications import LaunchOutcome
from overleaf_launcher.startup.orchestrator import LaunchCoordinator, build_aggregator
from overleaf_launcher.startup.progress_reporter import StartupProgressReporter
from overleaf_launcher.version import get_version

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_LAUNCH_FAILED = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


async def run_check(config: LauncherConfig, reporter: StartupProgressReporter) -> bool:
    """Check readiness once and print a report. Never starts anything."""
    status = await build_aggregator(config).check()
    reporter.print_report(
        reporter.create_check_report(config.get_startup_summary(), status)
    )
    return status.all_ready


async def run_launch(
    config: LauncherConfig,
    reporter: StartupProgressReporter,
    *,
    open_browser: bool = False,
) -> LaunchOutcome:
    """Launch with console reporting and wait for a running script to exit."""
    coordinator = LaunchCoordinator(config, sink=reporter)
    reporter.start_launch()

    outcome = await coordinator.launch()

    if outcome.succeeded and open_browser:
        webbrowser.open(config.launchpad_url)

    if not outcome.succeeded:
        code = outcome.error_code or error_catalog.suggest_error_code(
            outcome.reason or ""
        )
        if code:
            reporter.print_report(
                error_catalog.format_error_help(
                    code,
                    context={
                        "toolkit_dir": str(config.toolkit_dir),
                        "command": config.startup_command,
                        "reason": outcome.reason or outcome.kind.value,
                    },
                )
            )

    await coordinator.aclose()
    return outcome


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="overleaf-launcher",
        description="Start a local Overleaf toolkit stack and wait until it is ready",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {get_version()}"
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--check",
        action="store_true",
        help="Report whether Overleaf is running without starting it",
    )
    mode.add_argument(
        "--desktop",
        action="store_true",
        help="Open the launcher in a native window (needs pywebview)",
    )
    parser.add_argument(
        "--toolkit-dir", type=Path, help="Overleaf toolkit directory (contains bin/up)"
    )
    parser.add_argument(
        "--log-level", choices=[level.value for level in LogLevel], help="Log level"
    )
    parser.add_argument(
        "--open",
        action="store_true",
        help="Open the launchpad in a browser once Overleaf is ready",
    )
    parser.add_argument(
        "--no-color", action="store_true", help="Disable colored output"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    overrides: dict[str, object] = {}
    if args.toolkit_dir is not None:
        overrides["toolkit_dir"] = args.toolkit_dir
    if args.log_level is not None:
        overrides["log_level"] = args.log_level

    reporter = StartupProgressReporter(enable_colors=not args.no_color)

    try:
        config = load_config(**overrides)
    except ConfigurationError as e:
        reporter.print_report(
            error_catalog.format_error_help(
                "CONFIG_001",
                context={str(i): error for i, error in enumerate(e.errors, 1)},
            )
        )
        return EXIT_CONFIG_ERROR

    setup_logging(config)

    try:
        if args.check:
            ready = asyncio.run(run_check(config, reporter))
            return EXIT_OK if ready else EXIT_LAUNCH_FAILED

        if args.desktop:
            from overleaf_launcher.desktop import run_desktop  # noqa: PLC0415

            run_desktop(config)
            return EXIT_OK

        outcome = asyncio.run(run_launch(config, reporter, open_browser=args.open))
        return EXIT_OK if outcome.succeeded else EXIT_LAUNCH_FAILED

    except KeyboardInterrupt:
        print("\n❌ Launch cancelled")  # noqa: T201
        return EXIT_INTERRUPTED
    except Exception as e:
        print(f"❌ Unexpected error: {e}")  # noqa: T201
        logger.exception("Unexpected error in launcher")
        return EXIT_LAUNCH_FAILED


if __name__ == "__main__":
    sys.exit(main())

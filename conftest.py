"""Global pytest configuration for logging setup.

Keeps launcher loggers at DEBUG with propagation on, so caplog sees
messages from every module regardless of test order.
"""

import logging

import pytest

LAUNCHER_LOGGERS = [
    "overleaf_launcher",
    "overleaf_launcher.startup.health_checks",
    "overleaf_launcher.startup.orchestrator",
    "overleaf_launcher.startup.poller",
    "overleaf_launcher.startup.startup_trigger",
]


@pytest.fixture(autouse=True)
def setup_logging() -> None:
    """Ensure consistent logging configuration across all tests."""
    for logger_name in LAUNCHER_LOGGERS:
        logger = logging.getLogger(logger_name)
        logger.setLevel(logging.DEBUG)
        # Ensure propagation is enabled so caplog can capture messages
        logger.propagate = True

    logging.getLogger().setLevel(logging.DEBUG)


@pytest.fixture(autouse=True)
def configure_caplog(caplog: pytest.LogCaptureFixture) -> None:
    """Capture DEBUG logs from all launcher modules."""
    caplog.set_level(logging.DEBUG)
    caplog.set_level(logging.DEBUG, logger="overleaf_launcher")

"""Overleaf Launch System.

Readiness probes, polling and the launch coordinator that brings a local
Overleaf toolkit stack up and reports when it is usable.
"""

from __future__ import annotations

from overleaf_launcher.startup.config_schema import LauncherConfig, PollConfig
from overleaf_launcher.startup.health_checks import (
    ContainerProbe,
    ReadinessAggregator,
    ServiceProbe,
    ServiceStatus,
)
from overleaf_launcher.startup.notifications import (
    LaunchOutcome,
    LaunchState,
    NotificationSink,
    OutcomeKind,
)
from overleaf_launcher.startup.orchestrator import LaunchCoordinator
from overleaf_launcher.startup.poller import PollResult, ReadinessPoller
from overleaf_launcher.startup.progress_reporter import StartupProgressReporter
from overleaf_launcher.startup.startup_trigger import StartupTrigger

__all__ = [
    "ContainerProbe",
    "LaunchCoordinator",
    "LaunchOutcome",
    "LaunchState",
    "LauncherConfig",
    "NotificationSink",
    "OutcomeKind",
    "PollConfig",
    "PollResult",
    "ReadinessAggregator",
    "ReadinessPoller",
    "ServiceProbe",
    "ServiceStatus",
    "StartupProgressReporter",
    "StartupTrigger",
]

"""Shared test fixtures and fakes for the launcher test suite."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path

import pytest

from overleaf_launcher.core.exceptions import StartupCommandFailedError
from overleaf_launcher.startup.config_schema import LauncherConfig, PollConfig
from overleaf_launcher.startup.health_checks import ServiceStatus
from overleaf_launcher.startup.notifications import LaunchState
from overleaf_launcher.startup.startup_trigger import TriggerExit

CONTAINERS = ["sharelatex", "mongo", "redis"]


def make_status(*, containers: bool, service: bool) -> ServiceStatus:
    """Build a status where every container shares the same state."""
    return ServiceStatus(
        containers_running=containers,
        service_accessible=service,
        containers=dict.fromkeys(CONTAINERS, containers),
    )


READY = make_status(containers=True, service=True)
NOTHING_UP = make_status(containers=False, service=False)
SERVICE_DOWN = make_status(containers=True, service=False)


class ScriptedAggregator:
    """Returns queued statuses, then ``default`` forever."""

    def __init__(
        self,
        statuses: list[ServiceStatus] | None = None,
        default: ServiceStatus = NOTHING_UP,
        hooks: dict[int, Callable[[], None]] | None = None,
        *,
        yield_control: bool = True,
    ) -> None:
        self.statuses = list(statuses or [])
        self.default = default
        self.hooks = hooks or {}
        self.yield_control = yield_control
        self.calls = 0

    async def check(self) -> ServiceStatus:
        self.calls += 1
        if self.yield_control:
            await asyncio.sleep(0)
        hook = self.hooks.get(self.calls)
        if hook is not None:
            hook()
        if self.statuses:
            return self.statuses.pop(0)
        return self.default


class FakeTrigger:
    """Startup trigger whose exit is released by the test."""

    def __init__(
        self,
        returncode: int = 0,
        *,
        exit_immediately: bool = False,
        spawn_error: bool = False,
    ) -> None:
        self.returncode = returncode
        self.spawn_error = spawn_error
        self.start_calls = 0
        self.wait_calls = 0
        self._exited = asyncio.Event()
        if exit_immediately:
            self._exited.set()

    @property
    def finished(self) -> bool:
        return self._exited.is_set()

    def exit(self) -> None:
        self._exited.set()

    async def start(self) -> None:
        self.start_calls += 1
        if self.spawn_error:
            msg = "Could not run bin/up -d: No such file or directory"
            raise StartupCommandFailedError(msg, command="bin/up -d")

    async def wait(self) -> TriggerExit:
        self.wait_calls += 1
        await self._exited.wait()
        if self.returncode != 0:
            msg = f"Process exited with code {self.returncode}"
            raise StartupCommandFailedError(
                msg, returncode=self.returncode, command="bin/up -d"
            )
        return TriggerExit(returncode=0, duration_ms=0.0)


class RecordingSink:
    """Notification sink that records every event."""

    def __init__(self) -> None:
        self.events: list[tuple[str, ...]] = []

    def status_update(self, message: str) -> None:
        self.events.append(("status_update", message))

    def state_changed(self, state: LaunchState) -> None:
        self.events.append(("state_changed", state.value))

    def started(self) -> None:
        self.events.append(("started",))

    def already_running(self) -> None:
        self.events.append(("already_running",))

    def error(self, reason: str) -> None:
        self.events.append(("error", reason))

    @property
    def terminal_events(self) -> list[tuple[str, ...]]:
        return [
            event
            for event in self.events
            if event[0] in {"started", "already_running", "error"}
        ]

    @property
    def status_messages(self) -> list[str]:
        return [event[1] for event in self.events if event[0] == "status_update"]

    @property
    def states(self) -> list[str]:
        return [event[1] for event in self.events if event[0] == "state_changed"]


@pytest.fixture
def launcher_config(tmp_path: Path) -> LauncherConfig:
    """Fast launcher settings: tiny poll budgets, no waiting."""
    return LauncherConfig(
        toolkit_dir=tmp_path,
        containers=CONTAINERS,
        primary_poll=PollConfig(max_attempts=3, interval_ms=0),
        secondary_poll=PollConfig(max_attempts=2, interval_ms=0),
        grace_delay=60,
    )


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()

"""Overleaf Launch Coordinator.

Checks whether the stack is already up, runs the startup script when it is
not, and polls until the stack is ready or the launch has clearly failed.

While the startup script runs, two paths race:

* the primary path waits up to ``script_timeout`` for the script to exit,
  then polls with the full budget;
* the secondary path waits a grace delay and, if the script is still busy,
  polls with a shorter budget so a stack that is already healthy is picked
  up without waiting on the script.

Whichever path resolves first decides the outcome; the other is cancelled.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from overleaf_launcher.core.exceptions import StartupCommandFailedError
from overleaf_launcher.startup.config_schema import LauncherConfig, PollConfig
from overleaf_launcher.startup.health_checks import (
    ContainerProbe,
    ReadinessAggregator,
    ServiceProbe,
    ServiceStatus,
)
from overleaf_launcher.startup.notifications import (
    LaunchOutcome,
    LaunchResolution,
    LaunchState,
    NotificationSink,
    NullNotificationSink,
    OutcomeKind,
)
from overleaf_launcher.startup.poller import ReadinessCheck, ReadinessPoller
from overleaf_launcher.startup.startup_trigger import StartupTrigger, TriggerExit

logger = logging.getLogger(__name__)


class Trigger(Protocol):
    """What the coordinator needs from a startup trigger."""

    @property
    def finished(self) -> bool: ...

    async def start(self) -> None: ...

    async def wait(self) -> TriggerExit: ...


def build_aggregator(config: LauncherConfig) -> ReadinessAggregator:
    """Readiness aggregator wired from launcher settings."""
    return ReadinessAggregator(
        containers=config.containers,
        url=config.health_url,
        container_probe=ContainerProbe(
            runtime=config.container_runtime,
            timeout=config.container_check_timeout,
        ),
        service_probe=ServiceProbe(timeout=config.health_check_timeout),
    )


def build_trigger(config: LauncherConfig) -> StartupTrigger:
    """Startup trigger wired from launcher settings."""
    return StartupTrigger(
        command=config.up_command,
        args=config.up_args,
        cwd=config.toolkit_dir,
    )


class LaunchCoordinator:
    """Runs one launch from first check to terminal outcome.

    A coordinator is single-use: the startup script can be triggered at most
    once per instance.
    """

    def __init__(
        self,
        config: LauncherConfig,
        aggregator: ReadinessCheck | None = None,
        trigger: Trigger | None = None,
        sink: NotificationSink | None = None,
    ) -> None:
        """Initialize launch coordinator.

        Args:
            config: Launcher settings (poll budgets, grace delay, probes)
            aggregator: Readiness check (built from config if not provided)
            trigger: Startup trigger (built from config if not provided)
            sink: Receiver for launch events
        """
        self.config = config
        self.aggregator = aggregator or build_aggregator(config)
        self.trigger = trigger or build_trigger(config)
        self.sink = sink or NullNotificationSink()

        self.state = LaunchState.CHECKING
        self.initial_status: ServiceStatus | None = None
        self._resolution: LaunchResolution | None = None
        self._trigger_started = False

    def _set_state(self, state: LaunchState) -> None:
        if self._resolution is not None and self._resolution.done:
            return
        self.state = state
        logger.debug("Launch state: %s", state.value)
        self.sink.state_changed(state)

    def _finish(self, outcome: LaunchOutcome) -> None:
        """Set the terminal state and resolve, unless already resolved."""
        resolution = self._resolution
        if resolution is None or resolution.done:
            logger.debug("Launch already resolved, dropping %s", outcome.kind)
            return

        if outcome.kind == OutcomeKind.ALREADY_RUNNING:
            self._set_state(LaunchState.ALREADY_READY)
        elif outcome.succeeded:
            self._set_state(LaunchState.READY)
        else:
            self._set_state(LaunchState.FAILED)
        resolution.resolve(outcome)

    def _status(self, message: str, _status: ServiceStatus | None = None) -> None:
        if self._resolution is not None:
            self._resolution.status_update(message)

    def _poller(self, config: PollConfig, name: str) -> ReadinessPoller:
        return ReadinessPoller(
            config, self.aggregator, on_status=self._status, name=name
        )

    async def launch(self) -> LaunchOutcome:
        """Bring the stack up and resolve to exactly one outcome."""
        if self._resolution is not None:
            msg = "LaunchCoordinator instances are single-use"
            raise RuntimeError(msg)

        self._resolution = LaunchResolution(self.sink)
        tasks: list[asyncio.Task[None]] = []

        try:
            self._set_state(LaunchState.CHECKING)
            self._status("Checking Overleaf status...")
            self.initial_status = await self.aggregator.check()

            if self.initial_status.all_ready:
                logger.info("Overleaf is already running")
                self._finish(LaunchOutcome.already_running())
                return await self._resolution.wait()

            self._set_state(LaunchState.STARTING)
            self._status("Starting Overleaf...")
            try:
                await self.trigger.start()
            except StartupCommandFailedError as e:
                self._finish(LaunchOutcome.failed(e.message, e.error_code))
                return await self._resolution.wait()
            self._trigger_started = True

            tasks = [
                asyncio.create_task(self._primary_path(), name="launch-primary"),
                asyncio.create_task(self._secondary_path(), name="launch-secondary"),
            ]
            return await self._resolution.wait()

        except Exception as e:  # noqa: BLE001
            logger.exception("Unexpected launch error")
            self._finish(LaunchOutcome.failed(f"Unexpected error: {e!s}"))
            return await self._resolution.wait()

        finally:
            for task in tasks:
                task.cancel()
            if tasks:
                await asyncio.gather(*tasks, return_exceptions=True)

    async def _primary_path(self) -> None:
        try:
            try:
                async with asyncio.timeout(self.config.script_timeout):
                    await self.trigger.wait()
            except TimeoutError:
                msg = (
                    "Startup script still running after "
                    f"{self.config.script_timeout:g}s"
                )
                self._finish(LaunchOutcome.timed_out(msg, "SCRIPT_003"))
                return

            if self._resolution is not None and self._resolution.done:
                return

            self._set_state(LaunchState.POLLING)
            self._status("Startup script finished, waiting for Overleaf...")
            result = await self._poller(self.config.primary_poll, "primary").poll()

            if result.ready:
                self._finish(LaunchOutcome.started())
            else:
                error = result.timeout_error()
                self._finish(LaunchOutcome.timed_out(error.message, error.error_code))

        except StartupCommandFailedError as e:
            self._finish(LaunchOutcome.failed(e.message, e.error_code))

        except Exception as e:  # noqa: BLE001
            logger.exception("Primary readiness poll failed")
            self._finish(LaunchOutcome.failed(f"Unexpected error: {e!s}"))

    async def _secondary_path(self) -> None:
        await asyncio.sleep(self.config.grace_delay)

        if self.trigger.finished:
            return

        try:
            self._set_state(LaunchState.POLLING)
            self._status("Startup script still running, checking if Overleaf is up...")
            result = await self._poller(self.config.secondary_poll, "secondary").poll()
        except Exception:  # noqa: BLE001
            logger.exception("Secondary readiness poll failed")
            return

        if result.ready:
            self._finish(LaunchOutcome.started())
        else:
            logger.info("Secondary poll exhausted, waiting for startup script")

    async def aclose(self) -> None:
        """Wait for a still-running startup script to exit.

        The launcher does not kill the script; a stack started in detached
        mode keeps running after the launcher goes away. The wait is bounded
        by ``script_timeout``.
        """
        if not self._trigger_started or self.trigger.finished:
            return

        logger.info("Waiting for the startup script to exit")
        try:
            async with asyncio.timeout(self.config.script_timeout):
                await self.trigger.wait()
        except TimeoutError:
            logger.warning(
                "Startup script still running after %gs, no longer waiting",
                self.config.script_timeout,
            )
        except StartupCommandFailedError as e:
            logger.warning("Startup script exited after launch: %s", e.message)

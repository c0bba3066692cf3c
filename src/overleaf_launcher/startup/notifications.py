"""Launch notifications.

``NotificationSink`` is what a presentation layer implements to hear about a
launch. ``LaunchResolution`` wraps one launch's terminal outcome in a future
so that exactly one terminal notification reaches the sink, however many
poll paths race to report.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import StrEnum
import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class OutcomeKind(StrEnum):
    """Terminal outcome of a launch."""

    ALREADY_RUNNING = "already_running"
    STARTED = "started"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


class LaunchState(StrEnum):
    """Launch coordinator states."""

    CHECKING = "checking"
    ALREADY_READY = "already_ready"
    STARTING = "starting"
    POLLING = "polling"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class LaunchOutcome:
    """Result of one launch."""

    kind: OutcomeKind
    reason: str | None = None
    error_code: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.kind in {OutcomeKind.ALREADY_RUNNING, OutcomeKind.STARTED}

    @classmethod
    def already_running(cls) -> LaunchOutcome:
        return cls(OutcomeKind.ALREADY_RUNNING)

    @classmethod
    def started(cls) -> LaunchOutcome:
        return cls(OutcomeKind.STARTED)

    @classmethod
    def timed_out(cls, reason: str, error_code: str | None = None) -> LaunchOutcome:
        return cls(OutcomeKind.TIMED_OUT, reason, error_code)

    @classmethod
    def failed(cls, reason: str, error_code: str | None = None) -> LaunchOutcome:
        return cls(OutcomeKind.FAILED, reason, error_code)


class NotificationSink(Protocol):
    """Receiver for launch events.

    ``status_update`` and ``state_changed`` may fire many times. Exactly one
    of ``started``, ``already_running`` or ``error`` fires per launch.
    """

    def status_update(self, message: str) -> None: ...

    def state_changed(self, state: LaunchState) -> None: ...

    def started(self) -> None: ...

    def already_running(self) -> None: ...

    def error(self, reason: str) -> None: ...


class NullNotificationSink:
    """Sink that drops every event."""

    def status_update(self, message: str) -> None:
        pass

    def state_changed(self, state: LaunchState) -> None:
        pass

    def started(self) -> None:
        pass

    def already_running(self) -> None:
        pass

    def error(self, reason: str) -> None:
        pass


class LaunchResolution:
    """Single-resolution latch for one launch.

    The first call to ``resolve`` wins and notifies the sink; later calls
    return False and are otherwise ignored. Progress messages arriving after
    resolution are dropped.
    """

    def __init__(self, sink: NotificationSink) -> None:
        self.sink = sink
        self._future: asyncio.Future[LaunchOutcome] = (
            asyncio.get_running_loop().create_future()
        )

    @property
    def done(self) -> bool:
        return self._future.done()

    def status_update(self, message: str) -> None:
        """Forward a progress message unless the launch is already over."""
        if self.done:
            logger.debug("Dropping late status update: %s", message)
            return
        self.sink.status_update(message)

    def resolve(self, outcome: LaunchOutcome) -> bool:
        """Record the terminal outcome; True if this call decided it."""
        if self.done:
            logger.debug("Ignoring late outcome %s", outcome.kind)
            return False

        self._future.set_result(outcome)

        if outcome.kind == OutcomeKind.ALREADY_RUNNING:
            self.sink.already_running()
        elif outcome.kind == OutcomeKind.STARTED:
            self.sink.started()
        else:
            self.sink.error(outcome.reason or outcome.kind.value)
        return True

    async def wait(self) -> LaunchOutcome:
        """Wait for the terminal outcome."""
        return await asyncio.shield(self._future)

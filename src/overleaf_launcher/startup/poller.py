"""Overleaf Readiness Poller.

Checks readiness on a fixed interval until the stack is ready or the attempt
budget runs out.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
import logging
from typing import Protocol

from overleaf_launcher.core.exceptions import ReadinessTimeoutError
from overleaf_launcher.startup.config_schema import PollConfig
from overleaf_launcher.startup.health_checks import ServiceStatus

logger = logging.getLogger(__name__)

StatusCallback = Callable[[str, ServiceStatus], None]


class ReadinessCheck(Protocol):
    """Anything that can produce a ``ServiceStatus`` snapshot."""

    async def check(self) -> ServiceStatus: ...


@dataclass
class PollResult:
    """Outcome of one poll run."""

    ready: bool
    attempts: int
    last_status: ServiceStatus | None = None

    def timeout_error(self) -> ReadinessTimeoutError:
        """Describe an exhausted poll as a ``ReadinessTimeoutError``."""
        return describe_timeout(self.last_status)


def progress_message(status: ServiceStatus, attempt: int, max_attempts: int) -> str:
    """Advisory text for a failed attempt."""
    if status.containers_running:
        text = "Containers are running, waiting for Overleaf to respond..."
    else:
        text = "Waiting for containers to start..."
    return f"{text} (attempt {attempt}/{max_attempts})"


def describe_timeout(status: ServiceStatus | None) -> ReadinessTimeoutError:
    """Build the timeout error, naming which part never came up."""
    if status is not None and status.containers_running:
        return ReadinessTimeoutError(
            "Overleaf started but the service is not responding",
            containers_running=True,
        )

    missing = status.missing_containers if status else []
    msg = "Overleaf containers never came up"
    if missing:
        msg += f" (not running: {', '.join(missing)})"
    return ReadinessTimeoutError(msg, containers_running=False)


class ReadinessPoller:
    """Sequential readiness polling with a bounded attempt budget."""

    def __init__(
        self,
        config: PollConfig,
        aggregator: ReadinessCheck,
        on_status: StatusCallback | None = None,
        name: str = "primary",
    ) -> None:
        self.config = config
        self.aggregator = aggregator
        self.on_status = on_status
        self.name = name

    async def poll(self) -> PollResult:
        """Poll until ready or out of attempts."""
        max_attempts = self.config.max_attempts
        last_status: ServiceStatus | None = None

        for attempt in range(1, max_attempts + 1):
            last_status = await self.aggregator.check()

            if last_status.all_ready:
                logger.info("%s poll: ready after %d attempt(s)", self.name, attempt)
                return PollResult(ready=True, attempts=attempt, last_status=last_status)

            message = progress_message(last_status, attempt, max_attempts)
            logger.debug("%s poll: %s", self.name, message)
            if self.on_status is not None:
                self.on_status(message, last_status)

            if attempt < max_attempts:
                await asyncio.sleep(self.config.interval_seconds)

        logger.warning("%s poll: not ready after %d attempts", self.name, max_attempts)
        return PollResult(ready=False, attempts=max_attempts, last_status=last_status)

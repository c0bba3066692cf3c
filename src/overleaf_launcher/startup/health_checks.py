"""Overleaf Readiness Health Checks.

Independent probes for the container runtime and the Overleaf web service,
and the aggregator that folds them into a single ``ServiceStatus``.

Probe failures are never raised to the caller. A runtime that is missing or
a service that does not answer is simply "not ready yet".
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
import contextlib
from dataclasses import dataclass, field
import logging
import time

import httpx

from overleaf_launcher.core.exceptions import ProbeUnavailableError

logger = logging.getLogger(__name__)

# A redirect means the web service is up and routing (e.g. launchpad -> login).
ALIVE_STATUS_CODES = frozenset({200, 302})


@dataclass(frozen=True, eq=False)
class ServiceStatus:
    """Snapshot of stack readiness from one probe cycle.

    Compared and hashed by identity; each probe cycle is its own snapshot.
    """

    containers_running: bool
    service_accessible: bool
    containers: dict[str, bool] = field(default_factory=dict)
    checked_at: float = field(default_factory=time.time)

    @property
    def all_ready(self) -> bool:
        """Containers are up and the service answers."""
        return self.containers_running and self.service_accessible

    @property
    def missing_containers(self) -> list[str]:
        """Names of required containers that are not running."""
        return [name for name, running in self.containers.items() if not running]


class ContainerProbe:
    """Asks the container runtime whether a named container is running."""

    def __init__(self, runtime: str = "docker", timeout: float = 10.0) -> None:
        """Initialize container probe.

        Args:
            runtime: Container runtime CLI (``docker`` or a compatible one)
            timeout: Seconds to wait for the runtime to answer
        """
        self.runtime = runtime
        self.timeout = timeout

    def build_command(self, name: str) -> list[str]:
        """Argument vector listing running containers with exactly ``name``."""
        return [
            self.runtime,
            "ps",
            "--filter",
            f"name=^{name}$",
            "--format",
            "{{.Names}}",
        ]

    async def _list_running(self, name: str) -> list[str]:
        try:
            process = await asyncio.create_subprocess_exec(
                *self.build_command(name),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ProbeUnavailableError("container", str(e)) from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout
            )
        except TimeoutError as e:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            msg = f"{self.runtime} did not answer within {self.timeout}s"
            raise ProbeUnavailableError("container", msg) from e

        if process.returncode != 0:
            msg = (
                f"{self.runtime} exited with code {process.returncode}: "
                f"{stderr.decode(errors='replace').strip()}"
            )
            raise ProbeUnavailableError("container", msg)

        return [
            line.strip()
            for line in stdout.decode(errors="replace").splitlines()
            if line.strip()
        ]

    async def is_running(self, name: str) -> bool:
        """Return True iff a container called ``name`` is running."""
        if not name:
            msg = "Container name cannot be empty"
            raise ValueError(msg)

        try:
            names = await self._list_running(name)
        except ProbeUnavailableError as e:
            logger.debug("Container check for %s failed: %s", name, e.reason)
            return False

        return name in names


class ServiceProbe:
    """Single HTTP GET against the service health endpoint."""

    def __init__(
        self,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize service probe.

        Args:
            timeout: Client-side request timeout in seconds
            transport: Optional httpx transport (tests inject a mock one)
        """
        self.timeout = timeout
        self._transport = transport

    async def is_accessible(self, url: str) -> bool:
        """Return True iff ``url`` answers with 200 or 302."""
        start_time = time.time()

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=False,
                transport=self._transport,
            ) as client:
                response = await client.get(url)
        except httpx.TimeoutException:
            logger.debug("Service check timed out after %ss: %s", self.timeout, url)
            return False
        except (httpx.HTTPError, httpx.InvalidURL, OSError, OverflowError) as e:
            logger.debug("Service check failed for %s: %s", url, e)
            return False

        response_time = (time.time() - start_time) * 1000
        logger.debug(
            "Service check %s -> %s in %.0fms", url, response.status_code, response_time
        )
        return response.status_code in ALIVE_STATUS_CODES


class ReadinessAggregator:
    """Runs all probes concurrently and combines them into a ``ServiceStatus``."""

    def __init__(
        self,
        containers: Sequence[str],
        url: str,
        container_probe: ContainerProbe | None = None,
        service_probe: ServiceProbe | None = None,
    ) -> None:
        self.containers = list(containers)
        self.url = url
        self.container_probe = container_probe or ContainerProbe()
        self.service_probe = service_probe or ServiceProbe()

    async def check(self) -> ServiceStatus:
        """Probe every container and the service once."""
        *container_results, service_accessible = await asyncio.gather(
            *(self.container_probe.is_running(name) for name in self.containers),
            self.service_probe.is_accessible(self.url),
        )

        containers = dict(zip(self.containers, container_results, strict=True))
        status = ServiceStatus(
            containers_running=all(container_results),
            service_accessible=service_accessible,
            containers=containers,
        )
        logger.debug(
            "Readiness: containers=%s service=%s",
            status.containers_running,
            status.service_accessible,
        )
        return status

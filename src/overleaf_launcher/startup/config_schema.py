"""Overleaf Launcher Configuration Schema.

Pydantic-based settings for the launcher, read from ``OVERLEAF_LAUNCHER_*``
environment variables or a ``.env`` file, with readable validation errors.
"""

from __future__ import annotations

from enum import StrEnum
import logging
from pathlib import Path
from typing import Annotated, Any
from urllib.parse import urlparse

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from overleaf_launcher.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONTAINERS = ("sharelatex", "mongo", "redis")
DEFAULT_LAUNCHPAD_URL = "http://127.0.0.1/launchpad"


class LogLevel(StrEnum):
    """Valid log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class PollConfig(BaseModel):
    """Attempt budget for one readiness poll."""

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(
        default=60,
        description="Maximum number of readiness checks",
        gt=0,
    )
    interval_ms: int = Field(
        default=2000,
        description="Pause between two readiness checks in milliseconds",
        ge=0,
    )

    @property
    def interval_seconds(self) -> float:
        """Interval as seconds for ``asyncio.sleep``."""
        return self.interval_ms / 1000

    @property
    def budget_seconds(self) -> float:
        """Upper bound of time spent sleeping between attempts."""
        return (self.max_attempts - 1) * self.interval_seconds


def _split_csv(value: Any) -> Any:
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


class LauncherConfig(BaseSettings):
    """Settings for one launcher process.

    Every field can be overridden with ``OVERLEAF_LAUNCHER_<FIELD>``; poll
    budgets use the nested form, e.g.
    ``OVERLEAF_LAUNCHER_PRIMARY_POLL__MAX_ATTEMPTS=90``.
    """

    model_config = SettingsConfigDict(
        env_prefix="OVERLEAF_LAUNCHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Startup script
    toolkit_dir: Path = Field(
        default_factory=Path.cwd,
        description="Overleaf toolkit checkout the startup script runs in",
    )
    up_command: str = Field(
        default="bin/up",
        description="Startup script, relative to the toolkit directory",
        min_length=1,
    )
    up_args: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["-d"],
        description="Arguments for the startup script (detached mode)",
    )
    script_timeout: float = Field(
        default=600.0,
        description="Seconds to wait for the startup script to exit",
        gt=0,
    )

    # Readiness probes
    container_runtime: str = Field(
        default="docker",
        description="Container runtime CLI used to list running containers",
        min_length=1,
    )
    containers: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_CONTAINERS),
        description="Containers that must be running",
    )
    health_url: str = Field(
        default=DEFAULT_LAUNCHPAD_URL,
        description="URL probed to decide whether the web service answers",
    )
    launchpad_url: str = Field(
        default=DEFAULT_LAUNCHPAD_URL,
        description="URL the user is sent to once the stack is ready",
    )
    health_check_timeout: float = Field(
        default=5.0,
        description="HTTP health check timeout in seconds",
        gt=0,
        le=60,
    )
    container_check_timeout: float = Field(
        default=10.0,
        description="Container runtime query timeout in seconds",
        gt=0,
        le=120,
    )

    # Polling
    primary_poll: PollConfig = Field(
        default_factory=lambda: PollConfig(max_attempts=60, interval_ms=2000),
        description="Poll run after the startup script finished",
    )
    secondary_poll: PollConfig = Field(
        default_factory=lambda: PollConfig(max_attempts=15, interval_ms=2000),
        description="Shorter poll run while the startup script is still busy",
    )
    grace_delay: float = Field(
        default=10.0,
        description="Seconds to wait before the secondary poll starts",
        ge=0,
    )

    # Logging
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    debug: bool = Field(default=False, description="Verbose log format")

    @field_validator("up_args", mode="before")
    @classmethod
    def parse_up_args(cls, v: Any) -> Any:
        """Accept a whitespace separated string for the script arguments."""
        if isinstance(v, str):
            return v.split()
        return v

    @field_validator("containers", mode="before")
    @classmethod
    def parse_containers(cls, v: Any) -> Any:
        """Accept a comma separated container list."""
        return _split_csv(v)

    @field_validator("containers")
    @classmethod
    def validate_containers(cls, v: list[str]) -> list[str]:
        """Reject blank names and duplicates."""
        seen: set[str] = set()
        for name in v:
            if not name.strip():
                msg = "Container names cannot be empty"
                raise ValueError(msg)
            if name in seen:
                msg = f"Duplicate container name: {name}"
                raise ValueError(msg)
            seen.add(name)
        return v

    @field_validator("health_url", "launchpad_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Require an absolute http(s) URL."""
        parsed = urlparse(v)
        if parsed.scheme not in {"http", "https"} or not parsed.hostname:
            msg = f"Invalid URL: {v}"
            raise ValueError(msg)
        try:
            parsed.port  # noqa: B018
        except ValueError as e:
            msg = f"Invalid URL: {v} ({e})"
            raise ValueError(msg) from e
        return v

    @field_validator("toolkit_dir")
    @classmethod
    def expand_toolkit_dir(cls, v: Path) -> Path:
        """Expand ``~`` in the toolkit directory."""
        return v.expanduser()

    @property
    def startup_command(self) -> str:
        """Full command line handed to the shell."""
        return " ".join([self.up_command, *self.up_args])

    def get_startup_summary(self) -> dict[str, Any]:
        """Get startup configuration summary."""
        return {
            "toolkit_dir": str(self.toolkit_dir),
            "startup_command": self.startup_command,
            "script_timeout": f"{self.script_timeout:g}s",
            "container_runtime": self.container_runtime,
            "containers": ", ".join(self.containers) or "(none)",
            "health_url": self.health_url,
            "primary_poll": (
                f"{self.primary_poll.max_attempts} x {self.primary_poll.interval_ms}ms"
            ),
            "secondary_poll": (
                f"{self.secondary_poll.max_attempts} x "
                f"{self.secondary_poll.interval_ms}ms after {self.grace_delay:g}s"
            ),
            "log_level": self.log_level.value,
        }

    @classmethod
    def validate_from_env(
        cls, **overrides: Any
    ) -> tuple[LauncherConfig | None, list[str]]:
        """Validate configuration from environment variables.

        Returns:
            Tuple of (config, errors). Config is None if validation fails.
        """
        try:
            return cls(**overrides), []
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field_path = ".".join(str(loc) for loc in error["loc"])
                errors.append(f"{field_path}: {error['msg']}")
            return None, errors


def load_config(**overrides: Any) -> LauncherConfig:
    """Load and validate configuration with clear error reporting."""
    config, errors = LauncherConfig.validate_from_env(**overrides)

    if errors or config is None:
        logger.error("Configuration validation failed:")
        for error in errors:
            logger.error("  • %s", error)
        msg = "Configuration validation failed - see logs for details"
        raise ConfigurationError(msg, errors)

    logger.debug("Configuration loaded successfully")
    return config

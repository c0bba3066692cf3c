"""Overleaf Launch Error Catalog.

Catalog of launch errors with clear messages and solutions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class ErrorCategory(StrEnum):
    """Error categories for organization."""

    CONFIGURATION = "configuration"
    CONTAINER_RUNTIME = "container_runtime"
    STARTUP_SCRIPT = "startup_script"
    READINESS = "readiness"


class ErrorSeverity(StrEnum):
    """Error severity levels."""

    CRITICAL = "critical"  # Launch cannot proceed
    HIGH = "high"  # Launch ended without a usable stack
    MEDIUM = "medium"  # Stack may come up later on its own


@dataclass
class ErrorSolution:
    """Suggested solution for an error."""

    description: str
    steps: list[str]
    documentation_links: list[str] = field(default_factory=list)


@dataclass
class StartupErrorInfo:
    """Comprehensive error information."""

    code: str
    title: str
    description: str
    category: ErrorCategory
    severity: ErrorSeverity
    solutions: list[ErrorSolution]
    common_causes: list[str]
    related_errors: list[str] = field(default_factory=list)


TOOLKIT_DOCS = "https://github.com/overleaf/toolkit/blob/master/doc/quick-start-guide.md"


class StartupErrorCatalog:
    """Catalog of launch errors with solutions."""

    def __init__(self) -> None:
        self.errors: dict[str, StartupErrorInfo] = self._build_error_catalog()

    def _build_error_catalog(self) -> dict[str, StartupErrorInfo]:
        """Build the error catalog."""
        errors = {}

        errors["CONFIG_001"] = StartupErrorInfo(
            code="CONFIG_001",
            title="Invalid Launcher Configuration",
            description="A launcher setting is missing or has an invalid value.",
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.CRITICAL,
            common_causes=[
                "Malformed URL in OVERLEAF_LAUNCHER_HEALTH_URL",
                "Non-positive attempt count in a poll setting",
                "Typo in a .env file",
            ],
            solutions=[
                ErrorSolution(
                    description="Fix the invalid setting",
                    steps=[
                        "Check the field named in the error message",
                        "Update the OVERLEAF_LAUNCHER_* variable or .env entry",
                        "Run 'overleaf-launcher --check' to verify",
                    ],
                ),
            ],
        )

        errors["RUNTIME_001"] = StartupErrorInfo(
            code="RUNTIME_001",
            title="Container Runtime Unavailable",
            description="The container runtime could not be queried for running containers.",
            category=ErrorCategory.CONTAINER_RUNTIME,
            severity=ErrorSeverity.HIGH,
            common_causes=[
                "Docker is not installed or not on PATH",
                "The Docker daemon is not running",
                "The current user may not talk to the Docker socket",
            ],
            solutions=[
                ErrorSolution(
                    description="Make sure Docker is running",
                    steps=[
                        "Start Docker Desktop or the docker service",
                        "Run 'docker ps' in a terminal and check it succeeds",
                        "Add your user to the 'docker' group if access is denied",
                    ],
                ),
            ],
            related_errors=["READY_001"],
        )

        errors["SCRIPT_001"] = StartupErrorInfo(
            code="SCRIPT_001",
            title="Startup Script Failed",
            description="The toolkit startup script exited with a non-zero code.",
            category=ErrorCategory.STARTUP_SCRIPT,
            severity=ErrorSeverity.CRITICAL,
            common_causes=[
                "Toolkit not initialised (bin/init was never run)",
                "Docker Compose could not pull or create a container",
                "A port needed by Overleaf is already in use",
            ],
            solutions=[
                ErrorSolution(
                    description="Run the startup script by hand to see its output",
                    steps=[
                        "Open a terminal in the toolkit directory",
                        "Run 'bin/up -d' and read the error it prints",
                        "Run 'bin/doctor' for a configuration check",
                    ],
                    documentation_links=[TOOLKIT_DOCS],
                ),
            ],
            related_errors=["SCRIPT_002"],
        )

        errors["SCRIPT_002"] = StartupErrorInfo(
            code="SCRIPT_002",
            title="Startup Script Not Runnable",
            description="The toolkit startup script could not be started at all.",
            category=ErrorCategory.STARTUP_SCRIPT,
            severity=ErrorSeverity.CRITICAL,
            common_causes=[
                "OVERLEAF_LAUNCHER_TOOLKIT_DIR does not point at the toolkit",
                "bin/up is missing or not executable",
            ],
            solutions=[
                ErrorSolution(
                    description="Point the launcher at the toolkit checkout",
                    steps=[
                        "Set OVERLEAF_LAUNCHER_TOOLKIT_DIR to the toolkit directory",
                        "Check that bin/up exists there",
                        "Run 'chmod +x bin/up' if it is not executable",
                    ],
                    documentation_links=[TOOLKIT_DOCS],
                ),
            ],
            related_errors=["SCRIPT_001"],
        )

        errors["SCRIPT_003"] = StartupErrorInfo(
            code="SCRIPT_003",
            title="Startup Script Hung",
            description="The toolkit startup script did not exit within the script timeout.",
            category=ErrorCategory.STARTUP_SCRIPT,
            severity=ErrorSeverity.HIGH,
            common_causes=[
                "bin/up was started without -d and runs in the foreground",
                "Docker is waiting on a slow image download",
                "The script is waiting for input on a prompt",
            ],
            solutions=[
                ErrorSolution(
                    description="Make the script return once containers are created",
                    steps=[
                        "Keep '-d' in OVERLEAF_LAUNCHER_UP_ARGS",
                        "Run 'bin/up -d' by hand and watch where it stops",
                        "Raise OVERLEAF_LAUNCHER_SCRIPT_TIMEOUT for first-time image pulls",
                    ],
                    documentation_links=[TOOLKIT_DOCS],
                ),
            ],
            related_errors=["SCRIPT_001", "READY_001"],
        )

        errors["READY_001"] = StartupErrorInfo(
            code="READY_001",
            title="Containers Never Came Up",
            description="The required containers were not running before the poll budget ran out.",
            category=ErrorCategory.READINESS,
            severity=ErrorSeverity.HIGH,
            common_causes=[
                "Container names differ from the configured ones",
                "A container keeps crashing on start",
                "Images are still downloading on a slow connection",
            ],
            solutions=[
                ErrorSolution(
                    description="Inspect the containers",
                    steps=[
                        "Run 'docker ps -a' and compare names with OVERLEAF_LAUNCHER_CONTAINERS",
                        "Run 'bin/logs' in the toolkit directory",
                        "Raise OVERLEAF_LAUNCHER_PRIMARY_POLL__MAX_ATTEMPTS for slow machines",
                    ],
                ),
            ],
            related_errors=["RUNTIME_001", "READY_002"],
        )

        errors["READY_002"] = StartupErrorInfo(
            code="READY_002",
            title="Service Not Responding",
            description="The containers are running but the web service did not answer in time.",
            category=ErrorCategory.READINESS,
            severity=ErrorSeverity.MEDIUM,
            common_causes=[
                "Overleaf is still running database migrations",
                "The health URL does not match the configured listen address",
                "A reverse proxy in front of Overleaf is down",
            ],
            solutions=[
                ErrorSolution(
                    description="Give the service more time or fix the URL",
                    steps=[
                        "Open the launchpad URL in a browser",
                        "Check OVERLEAF_LAUNCHER_HEALTH_URL",
                        "Run 'bin/logs sharelatex' in the toolkit directory",
                    ],
                ),
            ],
            related_errors=["READY_001"],
        )

        return errors

    def get_error_info(self, error_code: str) -> StartupErrorInfo | None:
        """Get error information by code."""
        return self.errors.get(error_code)

    def find_errors_by_category(
        self, category: ErrorCategory
    ) -> list[StartupErrorInfo]:
        """Find all errors in a specific category."""
        return [error for error in self.errors.values() if error.category == category]

    def suggest_error_code(self, error_message: str) -> str | None:
        """Suggest error code based on error message content."""
        error_message_lower = error_message.lower()

        if "not found" in error_message_lower or "not executable" in error_message_lower:
            return "SCRIPT_002"
        if "could not run" in error_message_lower:
            return "SCRIPT_002"
        if "exited with code" in error_message_lower:
            return "SCRIPT_001"
        if "still running after" in error_message_lower:
            return "SCRIPT_003"
        if "never came up" in error_message_lower:
            return "READY_001"
        if "not responding" in error_message_lower:
            return "READY_002"
        if "docker" in error_message_lower or "runtime" in error_message_lower:
            return "RUNTIME_001"
        if "configuration" in error_message_lower:
            return "CONFIG_001"
        return None

    def format_error_help(
        self, error_code: str, context: dict[str, str] | None = None
    ) -> str:
        """Format comprehensive error help message."""
        error_info = self.get_error_info(error_code)
        if not error_info:
            return f"Unknown error code: {error_code}"

        lines: list[str] = []
        lines.extend(
            (
                f"🚨 {error_info.title} ({error_info.code})",
                "=" * 60,
                "",
                f"📝 Description: {error_info.description}",
                f"📊 Severity: {error_info.severity.value.upper()}",
                f"🏷️  Category: {error_info.category.value.replace('_', ' ').title()}",
                "",
            )
        )

        if error_info.common_causes:
            lines.append("🔍 Common Causes:")
            lines.extend(f"  • {cause}" for cause in error_info.common_causes)
            lines.append("")

        if error_info.solutions:
            lines.append("💡 Solutions:")
            for i, solution in enumerate(error_info.solutions, 1):
                lines.append(f"\n  {i}. {solution.description}")
                lines.extend(f"     • {step}" for step in solution.steps)

                if solution.documentation_links:
                    lines.append("     📖 Documentation:")
                    lines.extend(
                        f"        {link}" for link in solution.documentation_links
                    )

        if context:
            lines.extend(("", "🔧 Context:"))
            for key, value in context.items():
                lines.append(f"  • {key}: {value}")

        if error_info.related_errors:
            lines.extend(("", "🔗 Related Errors:"))
            for related_code in error_info.related_errors:
                related_error = self.get_error_info(related_code)
                if related_error:
                    lines.append(f"  • {related_code}: {related_error.title}")

        return "\n".join(lines)


# Global error catalog instance
error_catalog = StartupErrorCatalog()

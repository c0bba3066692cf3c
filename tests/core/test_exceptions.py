"""Tests for the launcher exception hierarchy."""

from __future__ import annotations

import pytest

from overleaf_launcher.core.exceptions import (
    ConfigurationError,
    LauncherError,
    ProbeUnavailableError,
    ReadinessTimeoutError,
    StartupCommandFailedError,
)


class TestLauncherError:
    def test_str_includes_code(self) -> None:
        error = LauncherError("Something broke", error_code="TEST_001")

        assert str(error) == "[TEST_001] Something broke"
        assert error.message == "Something broke"
        assert error.details == {}

    def test_str_without_code(self) -> None:
        assert str(LauncherError("plain")) == "plain"

    def test_configuration_error_keeps_field_errors(self) -> None:
        error = ConfigurationError("bad config", ["health_url: Invalid URL"])

        assert error.error_code == "CONFIG_001"
        assert error.errors == ["health_url: Invalid URL"]
        assert isinstance(error, LauncherError)

    def test_probe_unavailable(self) -> None:
        error = ProbeUnavailableError("container", "docker not found")

        assert error.error_code == "RUNTIME_001"
        assert error.reason == "docker not found"
        assert error.message == "container probe unavailable: docker not found"


class TestStartupCommandFailedError:
    @pytest.mark.parametrize(
        ("returncode", "expected_code"),
        [(None, "SCRIPT_002"), (127, "SCRIPT_002"), (126, "SCRIPT_002"), (1, "SCRIPT_001")],
    )
    def test_error_code(self, returncode: int | None, expected_code: str) -> None:
        error = StartupCommandFailedError("failed", returncode=returncode)

        assert error.error_code == expected_code
        assert error.spawn_failed is (returncode is None)


class TestReadinessTimeoutError:
    def test_codes(self) -> None:
        assert ReadinessTimeoutError("x", containers_running=True).error_code == "READY_002"
        assert ReadinessTimeoutError("x", containers_running=False).error_code == "READY_001"

"""Tests for launch outcomes and the single-resolution latch."""

from __future__ import annotations

import asyncio

import pytest

from overleaf_launcher.startup.notifications import (
    LaunchOutcome,
    LaunchResolution,
    NullNotificationSink,
    OutcomeKind,
)
from tests.conftest import RecordingSink


class TestLaunchOutcome:
    """Outcome constructors."""

    def test_success_kinds(self) -> None:
        assert LaunchOutcome.already_running().succeeded is True
        assert LaunchOutcome.started().succeeded is True

    def test_failure_kinds_keep_reason(self) -> None:
        outcome = LaunchOutcome.timed_out("not responding", "READY_002")

        assert outcome.succeeded is False
        assert outcome.kind is OutcomeKind.TIMED_OUT
        assert outcome.reason == "not responding"
        assert outcome.error_code == "READY_002"
        assert LaunchOutcome.failed("boom").error_code is None


class TestLaunchResolution:
    """Exactly one terminal notification per launch."""

    @pytest.mark.asyncio
    async def test_first_resolution_wins(self) -> None:
        """Test that later outcomes are ignored."""
        sink = RecordingSink()
        resolution = LaunchResolution(sink)

        assert resolution.resolve(LaunchOutcome.started()) is True
        assert resolution.resolve(LaunchOutcome.failed("late failure")) is False
        assert resolution.resolve(LaunchOutcome.already_running()) is False

        assert sink.terminal_events == [("started",)]
        assert (await resolution.wait()).kind is OutcomeKind.STARTED

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("outcome", "expected_event"),
        [
            (LaunchOutcome.already_running(), ("already_running",)),
            (LaunchOutcome.started(), ("started",)),
            (LaunchOutcome.failed("Process exited with code 1"), ("error", "Process exited with code 1")),
            (LaunchOutcome.timed_out("never came up"), ("error", "never came up")),
        ],
    )
    async def test_dispatch(
        self, outcome: LaunchOutcome, expected_event: tuple[str, ...]
    ) -> None:
        """Test that each outcome kind maps to one sink method."""
        sink = RecordingSink()

        LaunchResolution(sink).resolve(outcome)

        assert sink.events == [expected_event]

    @pytest.mark.asyncio
    async def test_status_updates_dropped_after_resolution(self) -> None:
        """Test that no progress message follows the terminal one."""
        sink = RecordingSink()
        resolution = LaunchResolution(sink)

        resolution.status_update("Waiting for containers to start...")
        resolution.resolve(LaunchOutcome.started())
        resolution.status_update("Containers are running...")

        assert sink.events == [
            ("status_update", "Waiting for containers to start..."),
            ("started",),
        ]

    @pytest.mark.asyncio
    async def test_wait_survives_waiter_cancellation(self) -> None:
        """Test that cancelling one waiter leaves the outcome intact."""
        resolution = LaunchResolution(NullNotificationSink())
        waiter = asyncio.create_task(resolution.wait())
        await asyncio.sleep(0)

        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter

        assert resolution.done is False
        resolution.resolve(LaunchOutcome.failed("boom"))

        assert resolution.done is True
        assert (await resolution.wait()).reason == "boom"

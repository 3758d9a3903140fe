"""Tests for deployment status polling."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from vercel_preview.api import VercelApiClient, VercelConnectionError
from vercel_preview.data import PollSession
from vercel_preview.exceptions import (
    DeploymentErrorState,
    PollCancelled,
    PollTimeout,
)
from vercel_preview.poller import StatusPoller


class FakeClock:
    """Monotonic clock advanced only by sleeping."""

    def __init__(self) -> None:
        """Start the clock at zero."""
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        """Return the current time."""
        return self.now

    async def sleep(self, seconds: float) -> None:
        """Record the wait and advance the clock."""
        self.sleeps.append(seconds)
        self.now += seconds


def _make_session(**overrides) -> PollSession:
    """Create a poll session with sensible defaults."""
    base = {
        "deployment_id": "dpl_abc",
        "ready_states": frozenset({"READY"}),
        "error_states": frozenset({"ERROR"}),
        "interval_seconds": 5,
        "timeout_seconds": 10,
        "last_state": "BUILDING",
    }
    base.update(overrides)
    return PollSession(**base)


def _make_poller(states: list[str]) -> tuple[StatusPoller, AsyncMock, FakeClock]:
    """Create a poller whose client reports states in order."""
    client = AsyncMock(spec=VercelApiClient)
    client.async_get_deployment.side_effect = [{"status": s} for s in states]
    clock = FakeClock()
    return StatusPoller(client, clock=clock, sleep=clock.sleep), client, clock


async def test_ready_after_building() -> None:
    """Test that polling returns the first ready state."""
    poller, client, clock = _make_poller(["BUILDING", "READY"])
    assert await poller.async_poll(_make_session(timeout_seconds=60)) == "READY"
    assert client.async_get_deployment.await_count == 2
    client.async_get_deployment.assert_awaited_with("dpl_abc")
    assert clock.sleeps == [5]


async def test_first_ready_wins_over_later_error() -> None:
    """Test that the loop stops at the first ready state."""
    poller, client, _ = _make_poller(["QUEUED", "READY", "ERROR"])
    assert await poller.async_poll(_make_session(timeout_seconds=60)) == "READY"
    assert client.async_get_deployment.await_count == 2


async def test_custom_ready_states() -> None:
    """Test that any configured ready state ends polling."""
    poller, _, _ = _make_poller(["BUILDING", "PROMOTED"])
    session = _make_session(
        ready_states=frozenset({"READY", "PROMOTED"}), timeout_seconds=60
    )
    assert await poller.async_poll(session) == "PROMOTED"


async def test_ready_checked_before_error() -> None:
    """Test that a state in both sets counts as ready."""
    poller, _, _ = _make_poller(["READY"])
    session = _make_session(error_states=frozenset({"ERROR", "READY"}))
    assert await poller.async_poll(session) == "READY"


async def test_timeout_reports_last_state() -> None:
    """Test a deployment that never leaves BUILDING times out after two polls."""
    client = AsyncMock(spec=VercelApiClient)
    client.async_get_deployment.return_value = {"status": "BUILDING"}
    clock = FakeClock()
    poller = StatusPoller(client, clock=clock, sleep=clock.sleep)

    with pytest.raises(PollTimeout) as exc_info:
        await poller.async_poll(_make_session(timeout_seconds=10))

    assert exc_info.value.last_state == "BUILDING"
    assert exc_info.value.timeout == 10
    assert "Final state: BUILDING" in str(exc_info.value)
    assert client.async_get_deployment.await_count == 2
    assert clock.now == 10


async def test_error_state_on_second_poll() -> None:
    """Test that an error state fails polling."""
    poller, client, _ = _make_poller(["BUILDING", "ERROR"])
    with pytest.raises(DeploymentErrorState) as exc_info:
        await poller.async_poll(_make_session())
    assert exc_info.value.state == "ERROR"
    assert client.async_get_deployment.await_count == 2


async def test_zero_timeout_does_not_request() -> None:
    """Test that an exhausted budget fails before any request."""
    poller, client, _ = _make_poller([])
    with pytest.raises(PollTimeout) as exc_info:
        await poller.async_poll(_make_session(timeout_seconds=0))
    assert exc_info.value.last_state == "BUILDING"
    client.async_get_deployment.assert_not_awaited()


async def test_transport_error_propagates() -> None:
    """Test that a failed status request aborts polling."""
    client = AsyncMock(spec=VercelApiClient)
    client.async_get_deployment.side_effect = VercelConnectionError("down")
    clock = FakeClock()
    poller = StatusPoller(client, clock=clock, sleep=clock.sleep)
    with pytest.raises(VercelConnectionError):
        await poller.async_poll(_make_session())


async def test_cancelled_before_first_request() -> None:
    """Test that a set cancellation token stops polling immediately."""
    poller, client, _ = _make_poller([])
    cancel_event = asyncio.Event()
    cancel_event.set()
    with pytest.raises(PollCancelled) as exc_info:
        await poller.async_poll(_make_session(), cancel_event)
    assert exc_info.value.last_state == "BUILDING"
    client.async_get_deployment.assert_not_awaited()


async def test_cancelled_while_waiting() -> None:
    """Test that cancellation interrupts the wait between polls."""
    cancel_event = asyncio.Event()

    async def _sleep_until_cancelled(seconds: float) -> None:
        """Request cancellation, then block like a long sleep."""
        cancel_event.set()
        await asyncio.Event().wait()

    client = AsyncMock(spec=VercelApiClient)
    client.async_get_deployment.return_value = {"status": "QUEUED"}
    poller = StatusPoller(client, clock=lambda: 0.0, sleep=_sleep_until_cancelled)

    with pytest.raises(PollCancelled) as exc_info:
        await poller.async_poll(_make_session(), cancel_event)
    assert exc_info.value.last_state == "QUEUED"
    assert client.async_get_deployment.await_count == 1


async def test_wait_without_cancellation_uses_interval() -> None:
    """Test that the poller sleeps the full interval when not cancelled."""
    poller, _, clock = _make_poller(["BUILDING", "BUILDING", "READY"])
    cancel_event = asyncio.Event()
    session = _make_session(interval_seconds=3, timeout_seconds=60)
    assert await poller.async_poll(session, cancel_event) == "READY"
    assert clock.sleeps == [3, 3]


@pytest.mark.parametrize("interval", [0, -5])
def test_non_positive_interval_rejected(interval: int) -> None:
    """Test that a zero or negative interval is invalid."""
    with pytest.raises(ValueError):
        _make_session(interval_seconds=interval)


def test_session_converts_to_milliseconds() -> None:
    """Test the internal millisecond representation."""
    session = _make_session(interval_seconds=5, timeout_seconds=300)
    assert session.interval_ms == 5000
    assert session.timeout_ms == 300000

"""Poll a deployment until it reaches a ready or error state."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
import time

from .api import VercelApiClient
from .const import LOGGER
from .data import PollSession
from .exceptions import DeploymentErrorState, PollCancelled, PollTimeout


class StatusPoller:
    """Fetches a deployment's status at a fixed interval until it settles."""

    def __init__(
        self,
        client: VercelApiClient,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the poller."""
        self.client = client
        self._clock = clock
        self._sleep = sleep

    async def async_poll(
        self,
        session: PollSession,
        cancel_event: asyncio.Event | None = None,
    ) -> str:
        """Poll until ready and return the ready state.

        Raises DeploymentErrorState for a configured error state, PollTimeout
        once session.timeout_seconds have elapsed and PollCancelled when
        cancel_event is set. Ready states are checked before error states.
        """
        start = self._clock()
        last_state = session.last_state

        while True:
            elapsed_ms = (self._clock() - start) * 1000
            if elapsed_ms >= session.timeout_ms:
                raise PollTimeout(session.timeout_seconds, last_state)
            if cancel_event is not None and cancel_event.is_set():
                raise PollCancelled(last_state)

            LOGGER.info(
                "Checking deployment status (%ds elapsed)...",
                round(elapsed_ms / 1000),
            )
            data = await self.client.async_get_deployment(session.deployment_id)
            last_state = data["status"]
            LOGGER.info("Current state: %s", last_state)

            if last_state in session.ready_states:
                LOGGER.info("Deployment is ready!")
                return last_state
            if last_state in session.error_states:
                raise DeploymentErrorState(last_state)

            LOGGER.info(
                "Waiting %d seconds before next check...", session.interval_seconds
            )
            await self._wait(session.interval_seconds, cancel_event, last_state)

    async def _wait(
        self,
        seconds: int,
        cancel_event: asyncio.Event | None,
        last_state: str | None,
    ) -> None:
        """Sleep for the polling interval, waking early on cancellation."""
        if cancel_event is None:
            await self._sleep(seconds)
            return

        sleep_task = asyncio.ensure_future(self._sleep(seconds))
        cancel_task = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait(
                {sleep_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            sleep_task.cancel()
            cancel_task.cancel()
            await asyncio.gather(sleep_task, cancel_task, return_exceptions=True)
        if cancel_event.is_set():
            raise PollCancelled(last_state)

"""Find the Vercel preview URL for a branch and wait for it to be ready."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
import contextlib
import os
import signal

from aiohttp import ClientSession, ClientTimeout

from .alias import get_alias_strategy
from .api import VercelApiClient
from .config import ActionConfig, load_config
from .const import (
    LOGGER,
    OUTPUT_BRANCH_ALIAS,
    OUTPUT_DEPLOYMENT_STATE,
    OUTPUT_PREVIEW_URL,
    VERCEL_API_BASE,
)
from .exceptions import (
    DeploymentErrorState,
    PollCancelled,
    PollTimeout,
    PreviewUrlError,
)
from .outputs import ActionOutputs, setup_logging
from .poller import StatusPoller
from .resolver import DeploymentResolver

REQUEST_TIMEOUT = ClientTimeout(total=30)


async def async_run(
    config: ActionConfig,
    client: VercelApiClient,
    outputs: ActionOutputs,
    cancel_event: asyncio.Event | None = None,
    poller: StatusPoller | None = None,
) -> str:
    """Resolve the branch deployment, publish it and wait until it is ready.

    Returns the final deployment state. Outputs published before a failure
    stay published.
    """
    resolver = DeploymentResolver(client, get_alias_strategy(config.alias_strategy))

    LOGGER.info("Retrieving Vercel preview URL...")
    resolved = await resolver.async_resolve(config.resolution_query())

    LOGGER.info("Found preview URL: %s", resolved.url)
    LOGGER.info("Current deployment state: %s", resolved.state)
    outputs.set(OUTPUT_PREVIEW_URL, resolved.url)
    outputs.set(OUTPUT_DEPLOYMENT_STATE, resolved.state)
    if resolved.branch_alias:
        LOGGER.info("Branch alias: %s", resolved.branch_alias)
        outputs.set(OUTPUT_BRANCH_ALIAS, resolved.branch_alias)

    if resolved.state in config.ready_states:
        LOGGER.info("Deployment is already ready!")
        return resolved.state
    if resolved.state in config.error_states:
        raise DeploymentErrorState(resolved.state, resolved=True)

    LOGGER.info("Starting to poll for deployment status...")
    poller = poller or StatusPoller(client)
    try:
        final_state = await poller.async_poll(
            config.poll_session(resolved.deployment_id, resolved.state),
            cancel_event,
        )
    except DeploymentErrorState as err:
        outputs.set(OUTPUT_DEPLOYMENT_STATE, err.state)
        raise
    except (PollTimeout, PollCancelled) as err:
        if err.last_state:
            outputs.set(OUTPUT_DEPLOYMENT_STATE, err.last_state)
        raise

    LOGGER.info("Final deployment state: %s", final_state)
    outputs.set(OUTPUT_DEPLOYMENT_STATE, final_state)
    return final_state


async def _async_main(
    config: ActionConfig,
    outputs: ActionOutputs,
    base_url: str = VERCEL_API_BASE,
) -> str:
    """Run the action with a fresh HTTP session and signal-driven cancellation."""
    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    installed: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        # not available on Windows event loops
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, cancel_event.set)
            installed.append(sig)

    try:
        async with ClientSession(timeout=REQUEST_TIMEOUT) as session:
            client = VercelApiClient(
                token=config.token,
                session=session,
                team_id=config.team_id,
                base_url=base_url,
            )
            return await async_run(config, client, outputs, cancel_event)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def main(environ: Mapping[str, str] | None = None) -> int:
    """Entry point. Returns the process exit code."""
    if environ is None:
        environ = os.environ
    setup_logging(debug=environ.get("RUNNER_DEBUG") == "1")

    try:
        config = load_config(environ)
        LOGGER.debug("Configuration: %s", config.as_redacted_dict())
        outputs = ActionOutputs(environ.get("GITHUB_OUTPUT"))
        asyncio.run(_async_main(config, outputs))
    except PreviewUrlError as err:
        LOGGER.error("%s", err)
        return 1
    return 0

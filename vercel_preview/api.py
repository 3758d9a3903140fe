"""Vercel API client."""

from __future__ import annotations

import asyncio
from typing import Any

from aiohttp import ClientError, ClientResponseError, ClientSession, ContentTypeError
import voluptuous as vol

from .const import (
    DEFAULT_REQUEST_RETRIES,
    DEFAULT_RETRY_BACKOFF,
    DEPLOYMENT_LIST_LIMIT,
    DEPLOYMENT_PATH,
    DEPLOYMENTS_PATH,
    LOGGER,
    MAX_RETRY_DELAY,
    VERCEL_API_BASE,
)
from .data import Deployment
from .exceptions import UpstreamError
from .schemas import DEPLOYMENT_LIST_SCHEMA, DEPLOYMENT_STATUS_SCHEMA


class VercelApiError(UpstreamError):
    """Base exception for Vercel API errors."""

    transient = False


class VercelAuthenticationError(VercelApiError):
    """Raised when authentication fails."""


class VercelConnectionError(VercelApiError):
    """Raised when a connection or HTTP error occurs."""

    def __init__(self, message: str, status: int | None = None) -> None:
        """Initialize the error."""
        super().__init__(message)
        self.status = status

    @property
    def transient(self) -> bool:  # type: ignore[override]
        """Return True if the request may succeed when repeated."""
        return self.status is None or self.status >= 500


class VercelRateLimitError(VercelApiError):
    """Raised when the API rate limit is exceeded."""

    transient = True

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        """Initialize the error."""
        super().__init__(message)
        self.retry_after = retry_after


class VercelResponseError(VercelApiError):
    """Raised when a response does not have the expected shape."""


def _parse_retry_after(value: str | None) -> float | None:
    """Parse a Retry-After header given in seconds."""
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None


class VercelApiClient:
    """Async client for the read-only deployment endpoints of the Vercel API."""

    def __init__(
        self,
        token: str,
        session: ClientSession,
        team_id: str | None = None,
        base_url: str = VERCEL_API_BASE,
        retries: int = DEFAULT_REQUEST_RETRIES,
        backoff: float = DEFAULT_RETRY_BACKOFF,
        max_retry_delay: float = MAX_RETRY_DELAY,
    ) -> None:
        """Initialize the client."""
        self._token = token
        self._session = session
        self._team_id = team_id
        self._base_url = base_url.rstrip("/")
        self._retries = retries
        self._backoff = backoff
        self._max_retry_delay = max_retry_delay

    def _headers(self) -> dict[str, str]:
        """Return auth headers."""
        return {"Authorization": f"Bearer {self._token}"}

    def _team_params(self) -> dict[str, str]:
        """Return team query params if team_id is set."""
        if self._team_id:
            return {"teamId": self._team_id}
        return {}

    async def _request_once(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Make a single API request."""
        url = f"{self._base_url}{path}"
        merged_params = {**self._team_params(), **(params or {})}
        try:
            async with self._session.request(
                method, url, headers=self._headers(), params=merged_params or None
            ) as resp:
                if resp.status in (401, 403):
                    raise VercelAuthenticationError(
                        f"Authentication failed: {resp.status}"
                    )
                if resp.status == 429:
                    raise VercelRateLimitError(
                        "Rate limit exceeded",
                        retry_after=_parse_retry_after(
                            resp.headers.get("Retry-After")
                        ),
                    )
                resp.raise_for_status()
                return await resp.json()
        except VercelApiError:
            raise
        except ContentTypeError as err:
            raise VercelResponseError(
                f"Unexpected response content type from {path}: {err.message}"
            ) from err
        except ClientResponseError as err:
            raise VercelConnectionError(
                f"API error: {err.status} {err.message}", status=err.status
            ) from err
        except (ClientError, TimeoutError) as err:
            raise VercelConnectionError(
                f"Connection error: {err}"
            ) from err
        except ValueError as err:
            raise VercelResponseError(
                f"Invalid JSON in response from {path}: {err}"
            ) from err

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Make an API request, retrying transient failures with backoff."""
        attempt = 0
        while True:
            try:
                return await self._request_once(method, path, params)
            except VercelApiError as err:
                if not err.transient or attempt >= self._retries:
                    raise
                delay = self._retry_delay(attempt, err)
                attempt += 1
                LOGGER.warning(
                    "Request to %s failed (%s), retry %d/%d in %.1fs",
                    path,
                    err,
                    attempt,
                    self._retries,
                    delay,
                )
                await asyncio.sleep(delay)

    def _retry_delay(self, attempt: int, err: VercelApiError) -> float:
        """Return the wait before the next attempt, never above the cap."""
        delay = self._backoff * 2**attempt
        if isinstance(err, VercelRateLimitError) and err.retry_after:
            delay = max(delay, err.retry_after)
        return min(delay, self._max_retry_delay)

    async def async_list_deployments(
        self,
        project_id: str,
        limit: int = DEPLOYMENT_LIST_LIMIT,
        team_id: str | None = None,
    ) -> list[Deployment]:
        """Get the most recent deployments for a project.

        A team_id overrides the team scope the client was created with.
        """
        params = {"projectId": project_id, "limit": str(limit)}
        if team_id:
            params["teamId"] = team_id
        data = await self._request("GET", DEPLOYMENTS_PATH, params=params)
        try:
            data = DEPLOYMENT_LIST_SCHEMA(data)
        except vol.Invalid as err:
            raise VercelResponseError(
                f"Malformed deployments response: {err}"
            ) from err
        return [Deployment.from_api(record) for record in data["deployments"]]

    async def async_get_deployment(self, deployment_id: str) -> dict[str, Any]:
        """Get a single deployment. The result always carries a status."""
        data = await self._request(
            "GET", DEPLOYMENT_PATH.format(deployment_id=deployment_id)
        )
        try:
            return DEPLOYMENT_STATUS_SCHEMA(data)
        except vol.Invalid as err:
            raise VercelResponseError(
                f"Malformed deployment response: {err}"
            ) from err

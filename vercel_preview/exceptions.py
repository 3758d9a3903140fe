"""Exceptions raised while resolving and polling a preview deployment."""

from __future__ import annotations


class PreviewUrlError(Exception):
    """Base exception for every failure that aborts a run."""


class ConfigurationError(PreviewUrlError):
    """Raised when a required input is missing or invalid."""


class UpstreamError(PreviewUrlError):
    """Raised when the hosting API fails or returns a malformed payload."""


class NotFoundError(PreviewUrlError):
    """Raised when no deployment matches the requested branch."""

    def __init__(self, branch_name: str) -> None:
        """Initialize the error."""
        super().__init__(f"No deployments found for branch: {branch_name}")
        self.branch_name = branch_name


class DeploymentErrorState(PreviewUrlError):
    """Raised when a deployment is observed in a configured error state."""

    def __init__(self, state: str, resolved: bool = False) -> None:
        """Initialize the error.

        resolved marks a deployment that had already failed when it was found,
        as opposed to one that failed while being polled.
        """
        if resolved:
            message = f"Deployment is in error state: {state}"
        else:
            message = f"Deployment failed with state: {state}"
        super().__init__(message)
        self.state = state
        self.resolved = resolved


class PollTimeout(PreviewUrlError):
    """Raised when no terminal state was observed before the timeout."""

    def __init__(self, timeout: int, last_state: str | None) -> None:
        """Initialize the error."""
        super().__init__(
            f"Timed out after {timeout} seconds. Final state: {last_state}"
        )
        self.timeout = timeout
        self.last_state = last_state


class PollCancelled(PreviewUrlError):
    """Raised when the caller cancels polling before a terminal state."""

    def __init__(self, last_state: str | None) -> None:
        """Initialize the error."""
        super().__init__(f"Polling cancelled. Last state: {last_state}")
        self.last_state = last_state

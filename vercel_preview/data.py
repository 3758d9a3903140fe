"""Data types for deployment resolution and status polling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Deployment:
    """Read-only snapshot of a Vercel deployment."""

    id: str
    url: str
    state: str
    branch_ref: str | None
    created_at: int
    name: str | None = None
    branch_alias: str | None = None

    @classmethod
    def from_api(cls, record: dict[str, Any]) -> Deployment:
        """Build a deployment from a validated API record."""
        meta = record.get("meta") or {}
        created = record.get("created")
        if created is None:
            created = record["createdAt"]
        return cls(
            id=record["uid"],
            url=record["url"],
            state=record["state"],
            branch_ref=meta.get("githubCommitRef"),
            created_at=int(created),
            name=record.get("name"),
            branch_alias=meta.get("branchAlias") or None,
        )


@dataclass(frozen=True)
class ResolutionQuery:
    """What to look for when resolving a deployment."""

    project_id: str
    branch_name: str
    match_preview_url: str | None = None
    team_id: str | None = None

    def __post_init__(self) -> None:
        """Validate the query."""
        if not self.branch_name:
            raise ValueError("branch_name must not be empty")


@dataclass(frozen=True)
class ResolvedDeployment:
    """The deployment picked for a branch, with its derived alias."""

    deployment: Deployment
    branch_alias: str | None = None

    @property
    def url(self) -> str:
        """Return the host-relative preview URL."""
        return self.deployment.url

    @property
    def deployment_id(self) -> str:
        """Return the deployment identifier."""
        return self.deployment.id

    @property
    def state(self) -> str:
        """Return the state observed at resolution time."""
        return self.deployment.state


@dataclass(frozen=True)
class PollSession:
    """Parameters of one status polling run."""

    deployment_id: str
    ready_states: frozenset[str]
    error_states: frozenset[str]
    interval_seconds: int
    timeout_seconds: int
    last_state: str | None = None

    def __post_init__(self) -> None:
        """Validate the session parameters."""
        if self.interval_seconds <= 0:
            raise ValueError(
                f"polling interval must be positive, got {self.interval_seconds}"
            )
        if self.timeout_seconds < 0:
            raise ValueError(
                f"timeout must not be negative, got {self.timeout_seconds}"
            )

    @property
    def interval_ms(self) -> int:
        """Return the polling interval in milliseconds."""
        return self.interval_seconds * 1000

    @property
    def timeout_ms(self) -> int:
        """Return the timeout in milliseconds."""
        return self.timeout_seconds * 1000

"""Action configuration read from the GitHub Actions environment."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

import voluptuous as vol

from .data import PollSession, ResolutionQuery
from .exceptions import ConfigurationError
from .schemas import CONFIG_SCHEMA

TO_REDACT = {"token"}

PULL_REQUEST_EVENTS = {"pull_request", "pull_request_target"}
HEADS_PREFIX = "refs/heads/"

# config key -> action input name
INPUTS = {
    "token": "vercel_token",
    "team_id": "vercel_team_id",
    "project_id": "vercel_project_id",
    "match_preview_url": "match_preview_url",
    "max_timeout": "max_timeout",
    "polling_interval": "polling_interval",
    "ready_states": "deployment_ready_states",
    "error_states": "deployment_error_states",
    "alias_strategy": "branch_alias_strategy",
}


def get_input(environ: Mapping[str, str], name: str) -> str:
    """Return an action input, as the runner exposes it, stripped."""
    key = f"INPUT_{name.replace(' ', '_').upper()}"
    return environ.get(key, "").strip()


def resolve_branch_name(environ: Mapping[str, str]) -> str:
    """Return the branch whose deployments should be searched.

    An explicit override wins. Pull request events use the head branch; any
    other event uses GITHUB_REF without its refs/heads/ prefix.
    """
    override = get_input(environ, "search_branch_name") or environ.get(
        "SEARCH_BRANCH_NAME", ""
    ).strip()
    if override:
        return override

    if environ.get("GITHUB_EVENT_NAME") in PULL_REQUEST_EVENTS:
        return environ.get("GITHUB_HEAD_REF", "")

    ref = environ.get("GITHUB_REF", "")
    if ref.startswith(HEADS_PREFIX):
        return ref[len(HEADS_PREFIX):]
    return ref


@dataclass(frozen=True)
class ActionConfig:
    """Validated inputs of one action run."""

    token: str
    project_id: str
    branch_name: str
    team_id: str | None
    match_preview_url: str | None
    max_timeout: int
    polling_interval: int
    ready_states: tuple[str, ...]
    error_states: tuple[str, ...]
    alias_strategy: str

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> ActionConfig:
        """Validate raw values and build the config."""
        try:
            validated = CONFIG_SCHEMA(dict(raw))
        except vol.Invalid as err:
            raise ConfigurationError(
                f"Invalid configuration: {err}"
            ) from err
        return cls(**validated)

    def resolution_query(self) -> ResolutionQuery:
        """Return the query for the deployment resolver."""
        return ResolutionQuery(
            project_id=self.project_id,
            branch_name=self.branch_name,
            match_preview_url=self.match_preview_url,
            team_id=self.team_id,
        )

    def poll_session(
        self, deployment_id: str, last_state: str | None = None
    ) -> PollSession:
        """Return a polling session for a deployment."""
        return PollSession(
            deployment_id=deployment_id,
            ready_states=frozenset(self.ready_states),
            error_states=frozenset(self.error_states),
            interval_seconds=self.polling_interval,
            timeout_seconds=self.max_timeout,
            last_state=last_state,
        )

    def as_redacted_dict(self) -> dict[str, Any]:
        """Return the config with secrets hidden, for debug output."""
        return {
            key: "**REDACTED**" if key in TO_REDACT and value else value
            for key, value in asdict(self).items()
        }


def load_config(environ: Mapping[str, str]) -> ActionConfig:
    """Build the action config from runner-provided environment variables."""
    raw: dict[str, Any] = {}
    for key, name in INPUTS.items():
        value = get_input(environ, name)
        # unset inputs arrive as empty strings; let the schema apply defaults
        if value:
            raw[key] = value
    raw["branch_name"] = resolve_branch_name(environ)
    for required in ("token", "project_id"):
        if required not in raw:
            raise ConfigurationError(
                f"Input required and not supplied: {INPUTS[required]}"
            )
    if not raw["branch_name"]:
        raise ConfigurationError(
            "Could not determine the branch name from the GitHub context"
        )
    return ActionConfig.from_dict(raw)

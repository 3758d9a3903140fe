"""Voluptuous schemas validating Vercel payloads and action inputs."""

from __future__ import annotations

from typing import Any

import voluptuous as vol

from .const import (
    ALIAS_STRATEGY_AUTO,
    ALIAS_STRATEGY_METADATA,
    ALIAS_STRATEGY_SYNTHESIZED,
    DEFAULT_ERROR_STATES,
    DEFAULT_MAX_TIMEOUT,
    DEFAULT_POLLING_INTERVAL,
    DEFAULT_READY_STATES,
)


def _require_created(record: dict[str, Any]) -> dict[str, Any]:
    """Ensure a deployment record carries a creation timestamp."""
    if record.get("created") is None and record.get("createdAt") is None:
        raise vol.Invalid("deployment has no creation timestamp", path=["created"])
    return record


DEPLOYMENT_META_SCHEMA = vol.Schema(
    {
        vol.Optional("githubCommitRef"): vol.Any(None, str),
        vol.Optional("branchAlias"): vol.Any(None, str),
    },
    extra=vol.ALLOW_EXTRA,
)

DEPLOYMENT_SCHEMA = vol.All(
    vol.Schema(
        {
            vol.Required("uid"): str,
            vol.Required("url"): str,
            vol.Required("state"): str,
            vol.Optional("name"): vol.Any(None, str),
            vol.Optional("created"): vol.Any(None, vol.Coerce(int)),
            vol.Optional("createdAt"): vol.Any(None, vol.Coerce(int)),
            vol.Optional("meta"): vol.Any(None, DEPLOYMENT_META_SCHEMA),
        },
        extra=vol.ALLOW_EXTRA,
    ),
    _require_created,
)

DEPLOYMENT_LIST_SCHEMA = vol.Schema(
    {vol.Required("deployments"): [DEPLOYMENT_SCHEMA]},
    extra=vol.ALLOW_EXTRA,
)

DEPLOYMENT_STATUS_SCHEMA = vol.Schema(
    {vol.Required("status"): str},
    extra=vol.ALLOW_EXTRA,
)


def state_list(value: Any) -> tuple[str, ...]:
    """Split a comma-separated list of states, dropping blanks."""
    if isinstance(value, (list, tuple)):
        items = [str(item) for item in value]
    elif isinstance(value, str):
        items = value.split(",")
    else:
        raise vol.Invalid(f"expected a comma-separated list, got {value!r}")
    states = tuple(item.strip() for item in items if item.strip())
    if not states:
        raise vol.Invalid("at least one state is required")
    return states


def _disjoint_states(config: dict[str, Any]) -> dict[str, Any]:
    """Reject states configured as both ready and error."""
    overlap = set(config["ready_states"]) & set(config["error_states"])
    if overlap:
        raise vol.Invalid(
            f"states configured as both ready and error: {', '.join(sorted(overlap))}"
        )
    return config


_NON_EMPTY = vol.All(str, str.strip, vol.Length(min=1))

CONFIG_SCHEMA = vol.All(
    vol.Schema(
        {
            vol.Required("token"): _NON_EMPTY,
            vol.Required("project_id"): _NON_EMPTY,
            vol.Required("branch_name"): _NON_EMPTY,
            vol.Optional("team_id", default=None): vol.Any(None, _NON_EMPTY),
            vol.Optional("match_preview_url", default=None): vol.Any(
                None, _NON_EMPTY
            ),
            vol.Optional("max_timeout", default=DEFAULT_MAX_TIMEOUT): vol.All(
                vol.Coerce(int), vol.Range(min=0)
            ),
            vol.Optional(
                "polling_interval", default=DEFAULT_POLLING_INTERVAL
            ): vol.All(vol.Coerce(int), vol.Range(min=1)),
            vol.Optional("ready_states", default=DEFAULT_READY_STATES): state_list,
            vol.Optional("error_states", default=DEFAULT_ERROR_STATES): state_list,
            vol.Optional(
                "alias_strategy", default=ALIAS_STRATEGY_METADATA
            ): vol.In(
                [
                    ALIAS_STRATEGY_METADATA,
                    ALIAS_STRATEGY_SYNTHESIZED,
                    ALIAS_STRATEGY_AUTO,
                ]
            ),
        }
    ),
    _disjoint_states,
)

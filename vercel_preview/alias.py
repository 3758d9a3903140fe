"""Branch alias derivation strategies.

Vercel exposes a stable per-branch hostname, but not every deployment record
carries it. The alias can be read from the deployment metadata or synthesized
from the branch name and the deployment URL; which one matches the live
platform depends on the project, so the choice is configurable.
"""

from __future__ import annotations

import re
from typing import Protocol

from .const import (
    ALIAS_STRATEGY_AUTO,
    ALIAS_STRATEGY_METADATA,
    ALIAS_STRATEGY_SYNTHESIZED,
)
from .data import Deployment
from .exceptions import ConfigurationError

# Vercel truncates each DNS label to 63 characters
MAX_LABEL_LENGTH = 63

_SLUG_INVALID = re.compile(r"[^a-z0-9-]+")


class BranchAliasStrategy(Protocol):
    """Derives a branch alias hostname for a deployment."""

    def derive(self, deployment: Deployment) -> str | None:
        """Return the alias, or None when it cannot be derived."""


def slugify_branch(branch: str) -> str:
    """Turn a branch name into a DNS label fragment."""
    return _SLUG_INVALID.sub("-", branch.lower()).strip("-")


class MetadataAliasStrategy:
    """Use the alias supplied by the platform in the deployment metadata."""

    def derive(self, deployment: Deployment) -> str | None:
        """Return the platform-supplied alias."""
        return deployment.branch_alias


class SynthesizedAliasStrategy:
    """Build `<project>-git-<branch>.<domain>` from the deployment URL."""

    def derive(self, deployment: Deployment) -> str | None:
        """Return the synthesized alias."""
        if not deployment.branch_ref or "." not in deployment.url:
            return None
        first_label, domain = deployment.url.split(".", 1)
        project = deployment.name or first_label.split("-", 1)[0]
        branch = slugify_branch(deployment.branch_ref)
        if not project or not branch:
            return None
        label = f"{project}-git-{branch}"[:MAX_LABEL_LENGTH].rstrip("-")
        return f"{label}.{domain}"


class ChainedAliasStrategy:
    """Return the first alias any of the wrapped strategies derives."""

    def __init__(self, *strategies: BranchAliasStrategy) -> None:
        """Initialize the chain."""
        self._strategies = strategies

    def derive(self, deployment: Deployment) -> str | None:
        """Return the first non-empty alias."""
        for strategy in self._strategies:
            alias = strategy.derive(deployment)
            if alias:
                return alias
        return None


def get_alias_strategy(name: str) -> BranchAliasStrategy:
    """Return the strategy registered under name."""
    if name == ALIAS_STRATEGY_METADATA:
        return MetadataAliasStrategy()
    if name == ALIAS_STRATEGY_SYNTHESIZED:
        return SynthesizedAliasStrategy()
    if name == ALIAS_STRATEGY_AUTO:
        return ChainedAliasStrategy(
            MetadataAliasStrategy(), SynthesizedAliasStrategy()
        )
    raise ConfigurationError(f"Unknown branch alias strategy: {name!r}")

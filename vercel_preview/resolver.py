"""Resolve the preview deployment for a branch."""

from __future__ import annotations

from .alias import BranchAliasStrategy, MetadataAliasStrategy
from .api import VercelApiClient
from .const import DEPLOYMENT_LIST_LIMIT, LOGGER
from .data import Deployment, ResolutionQuery, ResolvedDeployment
from .exceptions import NotFoundError

SCHEME_PREFIXES = ("https://", "http://")


def strip_scheme(url: str) -> str:
    """Remove a leading transport scheme from a URL."""
    for prefix in SCHEME_PREFIXES:
        if url.startswith(prefix):
            return url[len(prefix):]
    return url


def select_deployment(
    deployments: list[Deployment],
    branch_name: str,
    match_preview_url: str | None = None,
) -> Deployment:
    """Pick exactly one deployment built from branch_name.

    An exact URL match wins; otherwise the most recently created deployment
    is returned. Among equally recent deployments the first one listed wins.
    """
    candidates = [d for d in deployments if d.branch_ref == branch_name]
    if not candidates:
        raise NotFoundError(branch_name)

    if match_preview_url:
        exact_match = strip_scheme(match_preview_url)
        for deployment in candidates:
            if deployment.url == exact_match:
                return deployment
        LOGGER.warning(
            "No deployment found with exact URL match: %s. "
            "Falling back to most recent deployment.",
            exact_match,
        )
    else:
        LOGGER.info(
            "No preview URL to match, falling back to most recent deployment"
        )

    # max() keeps the first of equal keys, so ties resolve to listing order
    return max(candidates, key=lambda d: d.created_at)


class DeploymentResolver:
    """Finds the deployment for a branch of a Vercel project."""

    def __init__(
        self,
        client: VercelApiClient,
        alias_strategy: BranchAliasStrategy | None = None,
        limit: int = DEPLOYMENT_LIST_LIMIT,
    ) -> None:
        """Initialize the resolver."""
        self.client = client
        self._alias_strategy = alias_strategy or MetadataAliasStrategy()
        self._limit = limit

    async def async_resolve(self, query: ResolutionQuery) -> ResolvedDeployment:
        """List the project's deployments and select one for the branch."""
        LOGGER.info("Looking for deployments for branch: %s", query.branch_name)
        deployments = await self.client.async_list_deployments(
            query.project_id, limit=self._limit, team_id=query.team_id
        )
        LOGGER.debug(
            "Received %d deployments for project %s",
            len(deployments),
            query.project_id,
        )
        deployment = select_deployment(
            deployments, query.branch_name, query.match_preview_url
        )
        return ResolvedDeployment(
            deployment=deployment,
            branch_alias=self._alias_strategy.derive(deployment),
        )

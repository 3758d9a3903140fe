"""Resolve Vercel preview deployments for a branch from CI."""

from __future__ import annotations

from .action import async_run, main
from .api import VercelApiClient
from .data import Deployment, PollSession, ResolutionQuery, ResolvedDeployment
from .poller import StatusPoller
from .resolver import DeploymentResolver

__all__ = [
    "Deployment",
    "DeploymentResolver",
    "PollSession",
    "ResolutionQuery",
    "ResolvedDeployment",
    "StatusPoller",
    "VercelApiClient",
    "async_run",
    "main",
]

"""Constants for the Vercel preview URL action."""

from __future__ import annotations

import logging

LOGGER = logging.getLogger(__package__)

VERCEL_API_BASE = "https://api.vercel.com"

DEPLOYMENTS_PATH = "/v6/deployments"
DEPLOYMENT_PATH = "/v13/deployments/{deployment_id}"

DEPLOYMENT_LIST_LIMIT = 100

DEFAULT_MAX_TIMEOUT = 300  # seconds
DEFAULT_POLLING_INTERVAL = 5  # seconds
DEFAULT_READY_STATES = ("READY",)
DEFAULT_ERROR_STATES = ("ERROR",)

DEFAULT_REQUEST_RETRIES = 3
DEFAULT_RETRY_BACKOFF = 1.0  # seconds, doubled per attempt
MAX_RETRY_DELAY = 30.0  # seconds, caps backoff and Retry-After

ALIAS_STRATEGY_METADATA = "metadata"
ALIAS_STRATEGY_SYNTHESIZED = "synthesized"
ALIAS_STRATEGY_AUTO = "auto"

OUTPUT_PREVIEW_URL = "preview_url"
OUTPUT_DEPLOYMENT_STATE = "deployment_state"
OUTPUT_BRANCH_ALIAS = "branch_alias"

"""Publishing results and log lines to the GitHub Actions runner."""

from __future__ import annotations

import logging
from pathlib import Path
import sys
import uuid

from .const import LOGGER

WORKFLOW_COMMANDS = {
    logging.DEBUG: "debug",
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}


def escape_data(value: str) -> str:
    """Escape a workflow command message."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class GitHubActionsFormatter(logging.Formatter):
    """Render records as workflow commands the runner annotates."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the record."""
        message = super().format(record)
        command = WORKFLOW_COMMANDS.get(record.levelno)
        if command is None:
            return message
        return f"::{command}::{escape_data(message)}"


def setup_logging(debug: bool = False) -> None:
    """Send package logs to stdout in workflow command format."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(GitHubActionsFormatter("%(message)s"))
    LOGGER.handlers[:] = [handler]
    LOGGER.setLevel(logging.DEBUG if debug else logging.INFO)
    LOGGER.propagate = False


class ActionOutputs:
    """Step outputs, appended to the file named by GITHUB_OUTPUT."""

    def __init__(self, path: str | Path | None = None) -> None:
        """Initialize the outputs."""
        self._path = Path(path) if path else None
        self.values: dict[str, str] = {}

    def set(self, name: str, value: str) -> None:
        """Publish an output. A later value for the same name wins."""
        self.values[name] = value
        if self._path is None:
            LOGGER.info("Output %s=%s", name, value)
            return
        if "\n" in value:
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            line = f"{name}<<{delimiter}\n{value}\n{delimiter}\n"
        else:
            line = f"{name}={value}\n"
        with self._path.open("a", encoding="utf-8") as fh:
            fh.write(line)

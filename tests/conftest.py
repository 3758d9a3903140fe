"""Fixtures for Vercel preview URL tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from dataclasses import dataclass
import logging
from typing import Any

from aiohttp import ClientSession, web
from aiohttp.test_utils import TestServer
import pytest

from vercel_preview.const import LOGGER


@dataclass
class RecordedRequest:
    """A request received by the fake API."""

    method: str
    path: str
    query: dict[str, str]
    authorization: str | None


class FakeVercelApi:
    """In-process stand-in for the Vercel REST API.

    Responses are queued per path; the last queued response repeats.
    """

    def __init__(self) -> None:
        """Initialize the fake."""
        self.base_url = ""
        self.requests: list[RecordedRequest] = []
        self._responses: dict[str, list[dict[str, Any]]] = {}
        self.app = web.Application()
        self.app.router.add_route("*", "/{tail:.*}", self._handle)

    def add(
        self,
        path: str,
        json: Any = None,
        status: int = 200,
        text: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Queue a response for path."""
        self._responses.setdefault(path, []).append(
            {"json": json, "status": status, "text": text, "headers": headers}
        )

    def requests_to(self, path: str) -> list[RecordedRequest]:
        """Return the requests received for path."""
        return [r for r in self.requests if r.path == path]

    async def _handle(self, request: web.Request) -> web.Response:
        """Record the request and answer with the next queued response."""
        self.requests.append(
            RecordedRequest(
                method=request.method,
                path=request.path,
                query=dict(request.query),
                authorization=request.headers.get("Authorization"),
            )
        )
        queue = self._responses.get(request.path)
        if not queue:
            return web.json_response(
                {"error": {"code": "not_found", "message": "Not Found"}},
                status=404,
            )
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if response["text"] is not None:
            return web.Response(
                text=response["text"], status=response["status"], headers=response["headers"]
            )
        return web.json_response(
            response["json"], status=response["status"], headers=response["headers"]
        )


@pytest.fixture(autouse=True)
def restore_logger() -> Iterator[None]:
    """Undo logging setup done by the entry point."""
    handlers = LOGGER.handlers[:]
    level = LOGGER.level
    propagate = LOGGER.propagate
    yield
    LOGGER.handlers[:] = handlers
    LOGGER.setLevel(level)
    LOGGER.propagate = propagate


@pytest.fixture
async def vercel_api() -> AsyncIterator[FakeVercelApi]:
    """Serve a fake Vercel API on a local port."""
    fake = FakeVercelApi()
    server = TestServer(fake.app)
    await server.start_server()
    fake.base_url = str(server.make_url("/")).rstrip("/")
    yield fake
    await server.close()


@pytest.fixture
async def session() -> AsyncIterator[ClientSession]:
    """Return an aiohttp client session."""
    async with ClientSession() as client_session:
        yield client_session


@pytest.fixture
def caplog_info(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    """Capture package logs at INFO and above."""
    caplog.set_level(logging.INFO, logger=LOGGER.name)
    return caplog

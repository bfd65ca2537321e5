"""Shared fixtures for orchestrator client tests."""

import json
from typing import Callable

import httpx
import pytest

from orchestrator_client.dispatcher import RequestDispatcher
from orchestrator_client.driver import CommandDriver
from orchestrator_client.session import Session
from orchestrator_client.types import Credentials

LEADER = "http://orc-1:3000/api"


class RecordingTransport(httpx.BaseTransport):
    """Mock transport that records requests and delegates to a handler."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        """
        Initialize with a request handler.

        Args:
            handler: Called with each request, returns the response or
                     raises an httpx transport error.
        """
        self._handler = handler
        self.requests: list[httpx.Request] = []

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        """Record the request, then answer it."""
        self.requests.append(request)
        return self._handler(request)

    @property
    def paths(self) -> list[str]:
        """Raw path and query of every request, e.g. "/api/search?s=db"."""
        return [r.url.raw_path.decode() for r in self.requests]


def json_response(data, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code=status_code, text=json.dumps(data))


def routes(mapping: dict[str, httpx.Response]) -> Callable[[httpx.Request], httpx.Response]:
    """Handler answering by raw path; unknown paths get a 404 error envelope."""

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.raw_path.decode()
        if path in mapping:
            return mapping[path]
        return json_response({"Code": "ERROR", "Message": f"no route {path}", "Details": None}, 404)

    return handler


@pytest.fixture
def sleeps() -> list[float]:
    """Collects sleep intervals instead of sleeping."""
    return []


@pytest.fixture
def make_driver(sleeps):
    """
    Build a driver against a mock transport.

    Returns a factory: make_driver(handler, leader=LEADER, endpoints=())
    -> (driver, transport). Passing leader=None forces leader resolution.
    """

    def factory(handler, leader: str | None = LEADER, endpoints: tuple[str, ...] = ()):
        transport = RecordingTransport(handler)
        session = Session(
            http=httpx.Client(transport=transport),
            endpoints=endpoints,
            credentials=Credentials("admin", "secret"),
            leader=leader,
        )
        driver = CommandDriver(RequestDispatcher(session, sleep=sleeps.append))
        return driver, transport

    return factory


def instance(hostname: str, port: int = 3306, master: tuple[str, int] | None = None) -> dict:
    """A minimal instance record as the API returns it."""
    data = {"Key": {"Hostname": hostname, "Port": port}}
    if master is not None:
        data["MasterKey"] = {"Hostname": master[0], "Port": master[1]}
    return data


def ok(details) -> dict:
    return {"Code": "OK", "Message": "", "Details": details}

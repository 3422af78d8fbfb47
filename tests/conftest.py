"""
Pytest configuration and shared fixtures for clocking client tests.

This module contains:
- FakeClockingServer: In-memory clocking service behind httpx.MockTransport
- Shared fixtures available to all test modules
"""

from __future__ import annotations

from collections.abc import Iterator

import httpx
import pytest

from clocking_client.config import Config
from clocking_client.controller import Controller
from clocking_client.gateway import ApiGateway

BASE_URL = "http://clocking.test"
T0 = "2024-05-01T09:00:00Z"
T1 = "2024-05-01T10:30:00Z"


class FakeClockingServer:
    """
    In-memory stand-in for the remote clocking service.

    Implements the six endpoints the client consumes with the same status
    codes as the real service: starting while a session is open fails with
    500, finishing a title that is not open fails with 404.

    FEATURES:
    - requests: every request received, for asserting on network calls
    - fail(prefix, status): force an HTTP status for matching paths
    - break_transport(prefix): raise a ConnectError for matching paths
    """

    def __init__(self) -> None:
        """
        Initialize an empty server.

        Business context: Tests declare their own preconditions by seeding
        open, finished and recent explicitly.
        """
        self.open: list[dict[str, str]] = []
        self.finished: list[dict[str, object]] = []
        self.recent: list[str] = []
        self.requests: list[httpx.Request] = []
        self.failures: dict[str, int] = {}
        self.broken: set[str] = set()
        self.report_text = "Daily report"
        self.start_time = T0
        self.end_time = T1

    # -- test helpers --------------------------------------------------------

    def seed_open(self, title: str, start: str = T0) -> None:
        self.open.append({"title": title, "start": start})
        if title not in self.recent:
            self.recent.insert(0, title)

    def fail(self, prefix: str, status: int) -> None:
        self.failures[prefix] = status

    def break_transport(self, prefix: str) -> None:
        self.broken.add(prefix)

    def calls(self, prefix: str, method: str | None = None) -> list[httpx.Request]:
        """Requests whose path starts with prefix (optionally filtered by method)."""
        return [
            r
            for r in self.requests
            if r.url.path.startswith(prefix) and (method is None or r.method == method)
        ]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def gateway(self) -> ApiGateway:
        return ApiGateway(BASE_URL, timeout=None, transport=self.transport())

    # -- request handling ----------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        for prefix in self.broken:
            if path.startswith(prefix):
                raise httpx.ConnectError("Connection refused", request=request)
        for prefix, status in self.failures.items():
            if path.startswith(prefix):
                return httpx.Response(status)

        if path == "/api/recent/" and request.method == "GET":
            return httpx.Response(200, json=self.recent)
        if path == "/api/unfinished/" and request.method == "GET":
            return httpx.Response(200, json=self.open)
        if path.startswith("/api/start/") and request.method == "POST":
            return self._start(path.removeprefix("/api/start/"))
        if path.startswith("/api/finish/") and request.method == "POST":
            return self._finish(path.removeprefix("/api/finish/"), request.content.decode())
        if path.startswith("/api/latest/") and request.method == "GET":
            return self._latest(path.removeprefix("/api/latest/"))
        if path.startswith("/api/report/") and request.method == "GET":
            offset, days = path.removeprefix("/api/report/").split("/")
            view_type = request.url.params.get("view_type")
            return httpx.Response(200, text=f"{self.report_text} {offset} {days} {view_type}")
        return httpx.Response(404)

    def _start(self, title: str) -> httpx.Response:
        if not title:
            return httpx.Response(400)
        if self.open:
            return httpx.Response(500)
        self.open.append({"title": title, "start": self.start_time})
        if title in self.recent:
            self.recent.remove(title)
        self.recent.insert(0, title)
        return httpx.Response(200)

    def _finish(self, title: str, notes: str) -> httpx.Response:
        for item in self.open:
            if item["title"] == title:
                self.open.remove(item)
                self.finished.insert(
                    0,
                    {
                        "id": {"title": title, "start": item["start"]},
                        "end": self.end_time,
                        "notes": notes,
                    },
                )
                return httpx.Response(200)
        return httpx.Response(404)

    def _latest(self, title: str) -> httpx.Response:
        for item in self.open:
            if item["title"] == title:
                return httpx.Response(
                    200,
                    json={"id": {"title": title, "start": item["start"]}, "end": None, "notes": ""},
                )
        for entry in self.finished:
            if entry["id"]["title"] == title:  # type: ignore[index]
                return httpx.Response(200, json=entry)
        return httpx.Response(200, text="null", headers={"content-type": "application/json"})


@pytest.fixture
def fake_server() -> FakeClockingServer:
    """Fresh fake clocking service."""
    return FakeClockingServer()


@pytest.fixture
def gateway(fake_server: FakeClockingServer) -> ApiGateway:
    """ApiGateway wired to the fake server through httpx.MockTransport."""
    return fake_server.gateway()


@pytest.fixture
def controller(gateway: ApiGateway) -> Controller:
    """Controller over the fake server (state not loaded yet)."""
    return Controller(gateway)


@pytest.fixture(autouse=True)
def _reset_config() -> Iterator[None]:
    """Keep Config overrides from leaking between tests."""
    yield
    Config.reset_test_overrides()

"""Pytest configuration and fixtures."""

import json
import os
from unittest.mock import AsyncMock

import httpx
import pytest

from couch_tools.client.api import CouchDB
from couch_tools.client.config import CouchConfig
from couch_tools.client.gateway import Gateway


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep COUCHDB_* variables from the environment out of tests."""
    for key in list(os.environ):
        if key.startswith("COUCHDB_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def config():
    """Create a test config without a default database."""
    return CouchConfig(host="http://couch.test", port=5984, timeout=30.0)


@pytest.fixture
def db_config():
    """Create a test config with a default database."""
    return CouchConfig(host="http://couch.test", port=5984, default_database="orders")


class RecordingServer:
    """Canned CouchDB responses for httpx.MockTransport.

    Routes are keyed by (method, path) where path includes the query string
    as sent. Unrouted requests answer 404 not_found. Every request is kept
    in `requests`.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], tuple[int, bytes]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, status: int = 200, body=None):
        content = b"" if body is None else json.dumps(body).encode()
        self.routes[(method, path)] = (status, content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        target = request.url.raw_path.decode()
        route = self.routes.get((request.method, target))
        if route is None:
            return httpx.Response(404, json={"error": "not_found", "reason": "missing"})
        status, content = route
        return httpx.Response(status, content=content, headers={"content-type": "application/json"})

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def server():
    """Create an in-memory CouchDB stand-in."""
    return RecordingServer()


@pytest.fixture
def make_client(server):
    """Build a CouchDB client wired to the in-memory server."""

    def _make(cfg: CouchConfig) -> CouchDB:
        return CouchDB(gateway=Gateway(cfg, transport=server.transport()))

    return _make


@pytest.fixture
def mock_couch():
    """Create a mock CouchDB client for CLI tests."""
    client = AsyncMock()
    client.__aenter__.return_value = client
    client.__aexit__.return_value = False
    return client

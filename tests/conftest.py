# tests/conftest.py
from typing import Any, Callable, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient

from plump_rest.main import app
from plump_rest.api.records import get_storage
from plump_rest.infra.events import SchemaRegistry, UpdateStream
from plump_rest.infra.memory_storage import MemoryStore
from plump_rest.infra.rest_store import RestStore
from plump_rest.models import InvalidationSignal


# ------------------ Schemas used by tests ------------------

WIDGET_SCHEMA = {
    "name": "widget",
    "attributes": {
        "id": {"type": "number"},
        "name": {"type": "string"},
        "created_at": {"type": "date"},
        "updated_at": {"type": "date"},
    },
    "relationships": {
        "tags": {"type": {"extras": {"tagged_at": {"type": "date"}, "weight": {"type": "number"}}}},
        "owner": {"type": {}},
    },
}

TAG_SCHEMA = {
    "name": "tag",
    "attributes": {"label": {"type": "string"}, "created_at": {"type": "date"}},
    "relationships": {},
}


def make_schemas() -> SchemaRegistry:
    return SchemaRegistry({"widget": WIDGET_SCHEMA, "tag": TAG_SCHEMA})


# ------------------ Update recorder ------------------

class Recorder:
    """Subscribes to an UpdateStream and keeps everything it sees, in order."""

    def __init__(self, stream: UpdateStream):
        self.reads: List[Dict[str, Any]] = []
        self.writes: List[InvalidationSignal] = []
        stream.on_read(self.reads.append)
        stream.on_write(self.writes.append)


@pytest.fixture
def stream() -> UpdateStream:
    return UpdateStream()


@pytest.fixture
def recorder(stream) -> Recorder:
    return Recorder(stream)


# ------------------ RestStore over a mock transport ------------------

class CountingHandler:
    """Wraps a request handler and records every request that reaches the 'network'."""

    def __init__(self, fn: Callable[[httpx.Request], Any]):
        self.fn = fn
        self.requests: List[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        out = self.fn(request)
        if not isinstance(out, httpx.Response):
            out = await out
        return out

    @property
    def calls(self) -> int:
        return len(self.requests)


def mock_store(handler: Callable, stream: UpdateStream, **opts) -> RestStore:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test/api")
    opts.setdefault("socket_url", None)
    return RestStore(make_schemas(), stream, client=client, **opts)


# ------------------ Dev backend wiring ------------------

@pytest.fixture
def backend_store() -> MemoryStore:
    """
    Give each test a fresh in-memory store behind the dev backend by overriding the app dependency.
    """
    fake = MemoryStore(sink=UpdateStream())
    app.dependency_overrides[get_storage] = lambda: fake
    try:
        yield fake
    finally:
        app.dependency_overrides.clear()


def backend_rest_store(stream: UpdateStream, **opts) -> RestStore:
    """RestStore talking to the dev backend in-process."""
    client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")
    return RestStore(make_schemas(), stream, client=client, socket_url=None, **opts)


# Many tests do `from tests.conftest import client` and call client.post(...)
# So we expose a module-level TestClient named `client` (NOT a fixture).
client = TestClient(app)

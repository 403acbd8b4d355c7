# tests/test_rest_store_e2e.py
"""RestStore against the dev backend, in-process over ASGI."""
from datetime import datetime, timezone

import pytest

from plump_rest.errors import TransportFailure
from plump_rest.models import ModelReference
from tests.conftest import backend_rest_store


@pytest.mark.asyncio
async def test_full_round_trip(backend_store, stream, recorder):
    store = backend_rest_store(stream)

    created = await store.write_attributes(
        {"type": "widget", "attributes": {"name": "sprocket", "created_at": "2024-03-01T12:00:00Z"}}
    )
    ref = ModelReference(type="widget", id=created["id"])

    rec = await store.read_attributes(ref)
    assert rec["attributes"]["name"] == "sprocket"
    assert rec["attributes"]["created_at"] == datetime(2024, 3, 1, 12, tzinfo=timezone.utc)

    await store.write_relationship_item(ref, "tags", {"id": "t1", "meta": {"tagged_at": "2024-03-02T00:00:00Z"}})
    rel = await store.read_relationship(ref, "tags")
    assert rel["relationships"]["tags"][0]["meta"]["tagged_at"] == datetime(2024, 3, 2, tzinfo=timezone.utc)

    await store.delete_relationship_item(ref, "tags", {"id": "t1"})
    rel = await store.read_relationship(ref, "tags")
    assert rel["relationships"]["tags"] == []

    rows = await store.query("widget", {"name": "sprocket"})
    assert [r["id"] for r in rows] == [created["id"]]

    await store.delete(ref)
    assert await store.read_attributes(ref) is None
    assert await store.read_relationship(ref, "tags") == []

    assert [s.invalidate for s in recorder.writes] == [
        ["attributes"],
        ["relationships.tags"],
        ["relationships.tags"],
        ["attributes"],
    ]


@pytest.mark.asyncio
async def test_update_missing_record_surfaces_not_found(backend_store, stream):
    store = backend_rest_store(stream)
    with pytest.raises(TransportFailure) as ei:
        await store.write_attributes({"type": "widget", "id": "ghost", "attributes": {}})
    assert ei.value.status == 404
    assert ei.value.message == "widget/ghost not found"

# src/plump_rest/api/records.py
"""
REST surface the adapter speaks, served from a store implementing the port.
Every response body is `{"data": ...}`.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from plump_rest.infra.providers import get_memory_store
from plump_rest.models import ModelReference
from plump_rest.ports.storage import TerminalStorePort


def get_storage() -> TerminalStorePort:
    # Swap this to a real backend in deployments; tests override it per test.
    return get_memory_store()


router = APIRouter(tags=["records"])


# ----- Collection routes -----

@router.get("/{type_}")
async def query_records(type_: str, request: Request, storage: TerminalStorePort = Depends(get_storage)):
    rows = await storage.query(type_, dict(request.query_params))
    return {"data": rows}


@router.post("/{type_}", status_code=status.HTTP_201_CREATED)
async def create_record(type_: str, body: Dict[str, Any], storage: TerminalStorePort = Depends(get_storage)):
    value = {k: v for k, v in body.items() if k != "id"}
    value["type"] = type_
    return {"data": await storage.write_attributes(value)}


# ----- Record routes -----

@router.get("/{type_}/{record_id}")
async def read_record(
    type_: str,
    record_id: str,
    view: Optional[str] = None,
    storage: TerminalStorePort = Depends(get_storage),
):
    rec = await storage.read_attributes(ModelReference(type=type_, id=record_id), view=view)
    if rec is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Record not found")
    return {"data": rec}


@router.patch("/{type_}/{record_id}")
async def update_record(type_: str, record_id: str, body: Dict[str, Any], storage: TerminalStorePort = Depends(get_storage)):
    value = {**body, "type": type_, "id": record_id}
    return {"data": await storage.write_attributes(value)}


@router.delete("/{type_}/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_record(type_: str, record_id: str, storage: TerminalStorePort = Depends(get_storage)) -> Response:
    await storage.delete(ModelReference(type=type_, id=record_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ----- Relationship routes -----

@router.get("/{type_}/{record_id}/{rel}")
async def read_relationship(type_: str, record_id: str, rel: str, storage: TerminalStorePort = Depends(get_storage)):
    out = await storage.read_relationship(ModelReference(type=type_, id=record_id), rel)
    if out == []:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Record not found")
    return {"data": out}


@router.put("/{type_}/{record_id}/{rel}")
async def put_relationship_item(
    type_: str, record_id: str, rel: str, body: Dict[str, Any], storage: TerminalStorePort = Depends(get_storage)
):
    child = body
    if "id" not in child:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="child must have an id")
    ref = ModelReference(type=type_, id=record_id)
    return {"data": await storage.write_relationship_item(ref, rel, child)}


@router.delete("/{type_}/{record_id}/{rel}/{child_id}")
async def delete_relationship_item(
    type_: str, record_id: str, rel: str, child_id: str, storage: TerminalStorePort = Depends(get_storage)
):
    ref = ModelReference(type=type_, id=record_id)
    return {"data": await storage.delete_relationship_item(ref, rel, {"id": child_id})}

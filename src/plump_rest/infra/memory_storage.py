# src/plump_rest/infra/memory_storage.py
from __future__ import annotations

import copy
from typing import Dict, Any, Optional, List, Union
from uuid import uuid4

from plump_rest.errors import InvariantViolation, NotFound
from plump_rest.models import InvalidationSignal, ModelData, ModelReference, RelationshipEdge
from plump_rest.ports.storage import UpdateSink


class MemoryStore:
    """
    Dev-only in-process terminal store (ephemeral).
    Implements the same port as RestStore; backs the dev server.
    NOT for production.
    """

    def __init__(self, sink: Optional[UpdateSink] = None, terminal: bool = True) -> None:
        self.terminal = terminal
        self.sink = sink
        self._db: Dict[str, Dict[str, Dict[str, Any]]] = {}

    # --- helpers ---
    def _get(self, type_: str, id_: Any) -> Dict[str, Any]:
        rec = self._db.get(type_, {}).get(str(id_))
        if rec is None:
            raise NotFound(type_, id_)
        return rec

    def _fire(self, type_: str, id_: Any, invalidate: List[str]) -> None:
        if self.sink is not None:
            self.sink.fire_write_update(InvalidationSignal(type=type_, id=id_, invalidate=invalidate))

    @staticmethod
    def _attributes_view(rec: Dict[str, Any]) -> Dict[str, Any]:
        return {"type": rec["type"], "id": rec["id"], "attributes": copy.deepcopy(rec["attributes"])}

    @staticmethod
    def _relationship_view(rec: Dict[str, Any], rel: str) -> Dict[str, Any]:
        edges = copy.deepcopy(rec["relationships"].get(rel, []))
        return {"type": rec["type"], "id": rec["id"], "relationships": {rel: edges}}

    # --- Port methods ---
    async def read_attributes(self, item: ModelReference, view: Optional[str] = None) -> Optional[Dict[str, Any]]:
        try:
            return self._attributes_view(self._get(item.type, item.id))
        except NotFound:
            return None

    async def read_relationship(self, item: ModelReference, rel: str) -> Union[Dict[str, Any], List[Any]]:
        try:
            return self._relationship_view(self._get(item.type, item.id), rel)
        except NotFound:
            return []

    async def write_attributes(self, value: Dict[str, Any]) -> Dict[str, Any]:
        data = ModelData.model_validate(value)
        if data.id:
            rec = self._get(data.type, data.id)
            rec["attributes"].update(copy.deepcopy(data.attributes))
        elif self.terminal:
            oid = str(uuid4())
            rec = {
                "type": data.type,
                "id": oid,
                "attributes": copy.deepcopy(data.attributes),
                "relationships": {
                    name: [e.model_dump() for e in edges] for name, edges in data.relationships.items()
                },
            }
            self._db.setdefault(data.type, {})[oid] = rec
        else:
            raise InvariantViolation("Cannot create new content in a non-terminal store")
        self._fire(rec["type"], rec["id"], ["attributes"])
        return self._attributes_view(rec)

    async def write_relationship_item(
        self, value: ModelReference, rel: str, child: Dict[str, Any]
    ) -> Dict[str, Any]:
        rec = self._get(value.type, value.id)
        edge = RelationshipEdge.model_validate(child).model_dump()
        edges = [e for e in rec["relationships"].get(rel, []) if str(e["id"]) != str(edge["id"])]
        edges.append(edge)
        rec["relationships"][rel] = edges
        self._fire(value.type, value.id, [f"relationships.{rel}"])
        return self._relationship_view(rec, rel)

    async def delete_relationship_item(
        self, value: ModelReference, rel: str, child: Dict[str, Any]
    ) -> Dict[str, Any]:
        rec = self._get(value.type, value.id)
        edges = rec["relationships"].get(rel, [])
        rec["relationships"][rel] = [e for e in edges if str(e["id"]) != str(child["id"])]
        self._fire(value.type, value.id, [f"relationships.{rel}"])
        return self._relationship_view(rec, rel)

    async def delete(self, value: ModelReference) -> None:
        self._get(value.type, value.id)
        del self._db[value.type][str(value.id)]
        self._fire(value.type, value.id, ["attributes"])

    async def query(self, type_: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        rows = list(self._db.get(type_, {}).values())
        for k, v in (params or {}).items():
            rows = [r for r in rows if str(r["attributes"].get(k)) == str(v)]
        rows.sort(key=lambda r: r["id"])
        return [self._attributes_view(r) for r in rows]

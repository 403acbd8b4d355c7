# src/plump_rest/ports/storage.py
"""
TerminalStorePort: the hexagonal 'port' every storage backend implements.

Semantics:
  - read_attributes          -> record dict, or None when the record is absent
  - read_relationship        -> record dict carrying the relationship, or [] when absent
  - write_attributes         -> update (id present) or create (id absent, terminal stores only)
  - write_relationship_item  -> add/replace one edge
  - delete_relationship_item -> remove one edge
  - delete                   -> remove the record
  - query                    -> list of record dicts of one type

The framework side of the contract is split into two small ports the store
consumes: SchemaSource (schema lookup) and UpdateSink (read/write signals).
"""

from __future__ import annotations

from typing import Protocol, Optional, Dict, Any, List, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from plump_rest.models import ModelReference, InvalidationSignal, Schema


class SchemaSource(Protocol):
    def get_schema(self, type_: str) -> "Schema":
        ...


class UpdateSink(Protocol):
    def fire_read_update(self, record: Dict[str, Any]) -> None:
        ...

    def fire_write_update(self, signal: "InvalidationSignal") -> None:
        ...


class TerminalStorePort(Protocol):
    terminal: bool

    async def read_attributes(
        self, item: "ModelReference", view: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        ...

    async def read_relationship(
        self, item: "ModelReference", rel: str
    ) -> Union[Dict[str, Any], List[Any]]:
        ...

    async def write_attributes(self, value: Dict[str, Any]) -> Dict[str, Any]:
        ...

    async def write_relationship_item(
        self, value: "ModelReference", rel: str, child: Dict[str, Any]
    ) -> Any:
        ...

    async def delete_relationship_item(
        self, value: "ModelReference", rel: str, child: Dict[str, Any]
    ) -> Any:
        ...

    async def delete(self, value: "ModelReference") -> Any:
        ...

    async def query(self, type_: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        ...

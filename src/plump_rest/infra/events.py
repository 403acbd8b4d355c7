# src/plump_rest/infra/events.py
"""
In-process stand-ins for the framework collaborators a store talks to.

SchemaRegistry answers get_schema(); UpdateStream fans read/write updates out
to whatever subscribed (normally the framework's cache).
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from plump_rest.models import InvalidationSignal, Schema

logger = logging.getLogger(__name__)

ReadListener = Callable[[Dict[str, Any]], None]
WriteListener = Callable[[InvalidationSignal], None]


class SchemaRegistry:
    def __init__(self, schemas: Optional[Mapping[str, Union[Schema, Dict[str, Any]]]] = None) -> None:
        self._schemas: Dict[str, Schema] = {}
        for type_, schema in (schemas or {}).items():
            self.register(type_, schema)

    def register(self, type_: str, schema: Union[Schema, Dict[str, Any]]) -> Schema:
        if not isinstance(schema, Schema):
            schema = Schema.model_validate(schema)
        self._schemas[type_] = schema
        return schema

    def get_schema(self, type_: str) -> Schema:
        try:
            return self._schemas[type_]
        except KeyError:
            raise KeyError(f"no schema registered for type {type_!r}") from None


class UpdateStream:
    """
    Synchronous fan-out. Listeners run inside fire_*; an exception from a
    listener propagates to the store operation that fired it.
    """

    def __init__(self) -> None:
        self._read: List[ReadListener] = []
        self._write: List[WriteListener] = []

    def on_read(self, listener: ReadListener) -> Callable[[], None]:
        self._read.append(listener)
        return lambda: self._read.remove(listener)

    def on_write(self, listener: WriteListener) -> Callable[[], None]:
        self._write.append(listener)
        return lambda: self._write.remove(listener)

    def fire_read_update(self, record: Dict[str, Any]) -> None:
        logger.debug("read update %s/%s", record.get("type"), record.get("id"))
        for listener in list(self._read):
            listener(record)

    def fire_write_update(self, signal: InvalidationSignal) -> None:
        logger.debug("write update %s/%s %s", signal.type, signal.id, signal.invalidate)
        for listener in list(self._write):
            listener(signal)

# src/plump_rest/infra/providers.py
from __future__ import annotations

from typing import Optional

from plump_rest.config import settings
from plump_rest.ports.storage import SchemaSource, TerminalStorePort, UpdateSink
from .memory_storage import MemoryStore

# singletons per-process
_memory: Optional[MemoryStore] = None


def get_memory_store(sink: Optional[UpdateSink] = None) -> MemoryStore:
    """Process-wide MemoryStore. Passing a sink rebinds the singleton's signals to it."""
    global _memory
    if _memory is None:
        _memory = MemoryStore(sink=sink)
    elif sink is not None:
        _memory.sink = sink
    return _memory


def get_store(
    schemas: SchemaSource,
    sink: UpdateSink,
    backend: Optional[str] = None,
) -> TerminalStorePort:
    """
    Adapter selector. Default: the REST adapter, configured from settings.
    Set PLUMP_STORE_BACKEND=memory for an in-process store during development.
    """
    backend = (backend or settings.STORE_BACKEND or "rest").strip().lower()

    if backend in ("memory", "mem", "inmemory", "in-memory"):
        return get_memory_store(sink)

    if backend in ("", "rest", "http"):
        from .rest_store import RestStore
        return RestStore(schemas, sink)

    raise ValueError(f"unknown store backend: {backend!r}")

from __future__ import annotations
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

RecordId = Union[int, str]


class ModelReference(BaseModel):
    """Identifies one record."""
    model_config = ConfigDict(frozen=True)

    type: str
    id: RecordId


class RelationshipEdge(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: RecordId
    meta: Dict[str, Any] = Field(default_factory=dict)


class InvalidationSignal(BaseModel):
    """Tells a cache which facets of a record are stale ("attributes" or "relationships.<name>")."""
    model_config = ConfigDict(frozen=True)

    type: str
    id: RecordId
    invalidate: List[str]


class ModelData(BaseModel):
    # Records travel as plain dicts; this model documents (and validates) the shape.
    model_config = ConfigDict(extra="allow")

    type: str
    id: Optional[RecordId] = None
    attributes: Dict[str, Any] = Field(default_factory=dict)
    relationships: Dict[str, List[RelationshipEdge]] = Field(default_factory=dict)

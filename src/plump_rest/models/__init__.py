from .records import (
    ModelReference,
    ModelData,
    RelationshipEdge,
    InvalidationSignal,
    RecordId,
)
from .schema import Schema, FieldSpec, RelationshipSpec, RelationshipType, InvalidDate, DATE_TYPE
from .push import PushEvent, PUSH_EVENT_NAME, PUSH_EVENT_TYPES, RELATIONSHIP_EVENTS

__all__ = [
    "ModelReference",
    "ModelData",
    "RelationshipEdge",
    "InvalidationSignal",
    "RecordId",
    "Schema",
    "FieldSpec",
    "RelationshipSpec",
    "RelationshipType",
    "InvalidDate",
    "DATE_TYPE",
    "PushEvent",
    "PUSH_EVENT_NAME",
    "PUSH_EVENT_TYPES",
    "RELATIONSHIP_EVENTS",
]

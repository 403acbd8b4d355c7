from __future__ import annotations
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

DATE_TYPE = "date"


class FieldSpec(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str


class RelationshipType(BaseModel):
    model_config = ConfigDict(extra="allow")

    extras: Optional[Dict[str, FieldSpec]] = None


class RelationshipSpec(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: RelationshipType


class Schema(BaseModel):
    """
    Per-type descriptor. Only the parts the adapter reads are typed; anything
    else the framework puts in a schema is kept but ignored.
    """
    model_config = ConfigDict(extra="allow", frozen=True)

    name: Optional[str] = None
    attributes: Dict[str, FieldSpec] = Field(default_factory=dict)
    relationships: Dict[str, RelationshipSpec] = Field(default_factory=dict)

    def date_attributes(self) -> List[str]:
        return [name for name, spec in self.attributes.items() if spec.type == DATE_TYPE]

    def date_extras(self, rel_name: str) -> List[str]:
        rel = self.relationships.get(rel_name)
        if rel is None or not rel.type.extras:
            return []
        return [name for name, spec in rel.type.extras.items() if spec.type == DATE_TYPE]


class InvalidDate(BaseModel):
    """Value of a declared date field whose raw value could not be parsed."""
    model_config = ConfigDict(frozen=True)

    raw: Any = None

    def __bool__(self) -> bool:
        return False

    def isoformat(self) -> str:
        return "Invalid Date"

from __future__ import annotations
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

from .records import RecordId

PUSH_EVENT_NAME = "plumpUpdate"

RELATIONSHIP_EVENTS = ("relationshipCreate", "relationshipUpdate", "relationshipDelete")
PUSH_EVENT_TYPES = ("update",) + RELATIONSHIP_EVENTS

EventType = Literal["update", "relationshipCreate", "relationshipUpdate", "relationshipDelete"]


class PushEvent(BaseModel):
    # keep wire field names as-is
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    event_type: EventType = Field(alias="eventType")
    type: str
    id: RecordId
    field: Optional[str] = None

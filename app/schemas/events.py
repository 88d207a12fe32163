# app/schemas/events.py
"""
Messages exchanged over the activities event bus.

The catalog envelope is deliberately minimal: consumers resolve the full
document from the owning service instead of trusting the payload.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def rfc3339_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class EventOperation(str, Enum):
    create = "create"
    update = "update"
    delete = "delete"


class EventEnvelope(BaseModel):
    """
    Change notification for an activity or one of its sessions.
    Inapplicable ids are sent as empty strings, never omitted.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    op: EventOperation
    activity_id: str = Field("", alias="activityId")
    session_id: str = Field("", alias="sessionId")
    timestamp: str = ""

    @classmethod
    def for_activity(cls, op: EventOperation, activity_id: str) -> "EventEnvelope":
        return cls(op=op, activity_id=activity_id, session_id="", timestamp=rfc3339_now())

    @classmethod
    def for_session(
        cls, op: EventOperation, activity_id: str, session_id: str
    ) -> "EventEnvelope":
        return cls(
            op=op, activity_id=activity_id, session_id=session_id, timestamp=rfc3339_now()
        )

    @property
    def is_session_event(self) -> bool:
        return self.session_id not in ("", "0")

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class EnrollmentOperation(str, Enum):
    enroll = "enroll"
    cancel = "cancel"


class EnrollmentEvent(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    op: EnrollmentOperation
    id: str
    session_id: str = Field(..., alias="sessionId")
    activity_id: str = Field(..., alias="activityId")
    user_id: str = Field(..., alias="userId")
    total: Optional[float] = None
    ts: str = Field(default_factory=rfc3339_now)

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

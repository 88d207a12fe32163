# app/schemas/session.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
# Zero-padded 24-hour clock; string comparison relies on it
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class SessionBase(BaseModel):
    date: str = Field(..., pattern=DATE_PATTERN, json_schema_extra={"example": "2025-11-10"})
    start_time: str = Field(..., pattern=TIME_PATTERN, json_schema_extra={"example": "19:00"})
    end_time: str = Field(..., pattern=TIME_PATTERN, json_schema_extra={"example": "20:00"})
    capacity: int = Field(..., ge=0)


class SessionCreate(SessionBase):
    @model_validator(mode="after")
    def check_time_window(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class SessionUpdate(BaseModel):
    date: Optional[str] = Field(None, pattern=DATE_PATTERN)
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    capacity: Optional[int] = Field(None, ge=0)


class Session(SessionBase):
    id: str
    activity_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

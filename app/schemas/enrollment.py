# app/schemas/enrollment.py
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class EnrollmentStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"


class EnrollmentCreate(BaseModel):
    session_id: str = Field(..., min_length=1)


class Enrollment(BaseModel):
    id: str
    session_id: str
    activity_id: str
    user_id: str
    final_price: float
    status: EnrollmentStatus
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

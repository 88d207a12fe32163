# app/schemas/activity.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ActivityBase(BaseModel):
    category: str = Field(..., min_length=1, json_schema_extra={"example": "football"})
    name: str = Field(..., min_length=1, json_schema_extra={"example": "Futbol 5"})
    location: str = Field(..., min_length=1, json_schema_extra={"example": "Sede Centro"})
    instructor: Optional[str] = None
    base_price: float = Field(..., gt=0)
    difficulty: int = Field(1, ge=1, le=5)
    tags: List[str] = Field(default_factory=list)


class ActivityCreate(ActivityBase):
    pass


class ActivityUpdate(BaseModel):
    """
    Partial update. Only the fields present in the request body are applied;
    use `model_dump(exclude_unset=True)` to read the patch.
    """
    category: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = Field(None, min_length=1)
    instructor: Optional[str] = None
    base_price: Optional[float] = Field(None, gt=0)
    difficulty: Optional[int] = Field(None, ge=1, le=5)
    tags: Optional[List[str]] = None


class Activity(ActivityBase):
    id: str
    owner_user_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ActivityList(BaseModel):
    activities: List[Activity]
    total: int
    skip: int
    limit: int


class ReindexResponse(BaseModel):
    message: str
    count: int

# app/models/activity.py
import uuid
from sqlalchemy import Column, String, Float, Integer, DateTime, JSON, func
from sqlalchemy.orm import relationship
from app.db.base_class import Base


class Activity(Base):
    __tablename__ = "activities"

    id = Column(
        String, primary_key=True, default=lambda: f"act_{uuid.uuid4().hex[:12]}"
    )
    owner_user_id = Column(String, nullable=False, index=True)
    category = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    location = Column(String, nullable=False, index=True)
    instructor = Column(String, nullable=True)
    base_price = Column(Float, nullable=False)
    difficulty = Column(Integer, nullable=False, default=1)
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    sessions = relationship(
        "Session",
        back_populates="activity",
        cascade="all, delete-orphan",
    )

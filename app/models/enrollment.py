import uuid
from sqlalchemy import Column, String, Float, Enum, DateTime, Index, func
from app.db.base_class import Base


class Enrollment(Base):
    __tablename__ = "enrollments"

    id = Column(
        String, primary_key=True, default=lambda: f"enr_{uuid.uuid4().hex[:12]}"
    )
    # No FK to sessions: enrollments are kept for history when a session is removed
    session_id = Column(String, nullable=False, index=True)
    activity_id = Column(String, nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    final_price = Column(Float, nullable=False)

    status = Column(
        Enum("pending", "confirmed", "cancelled", name="enrollment_status_enum"),
        nullable=False,
        default="confirmed",
        server_default="confirmed",
    )
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("ix_enrollments_session_user_status", "session_id", "user_id", "status"),
    )

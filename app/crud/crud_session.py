# app/crud/crud_session.py
from typing import List, Optional

from sqlalchemy.orm import Session

from .base import CRUDBase
from app.models.session import Session as ActivitySession
from app.schemas.session import SessionCreate, SessionUpdate


class CRUDSession(CRUDBase[ActivitySession, SessionCreate, SessionUpdate]):
    def get_multi_by_activity(
        self, db: Session, *, activity_id: str, skip: int = 0, limit: int = 100
    ) -> List[ActivitySession]:
        return (
            db.query(self.model)
            .filter(self.model.activity_id == activity_id)
            .order_by(self.model.date, self.model.start_time)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_earliest_for_activity(
        self, db: Session, *, activity_id: str
    ) -> Optional[ActivitySession]:
        return (
            db.query(self.model)
            .filter(self.model.activity_id == activity_id)
            .order_by(self.model.date, self.model.start_time)
            .first()
        )

    def create_for_activity(
        self, db: Session, *, obj_in: SessionCreate, activity_id: str
    ) -> ActivitySession:
        return self.create(db, obj_in=obj_in, activity_id=activity_id)


session = CRUDSession(ActivitySession)

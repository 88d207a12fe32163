# app/crud/crud_activity.py
from typing import List

from sqlalchemy.orm import Session

from .base import CRUDBase
from app.models.activity import Activity
from app.schemas.activity import ActivityCreate, ActivityUpdate


class CRUDActivity(CRUDBase[Activity, ActivityCreate, ActivityUpdate]):
    def create_with_owner(
        self, db: Session, *, obj_in: ActivityCreate, owner_user_id: str
    ) -> Activity:
        return self.create(db, obj_in=obj_in, owner_user_id=owner_user_id)

    def get_multi_ordered(
        self, db: Session, *, skip: int = 0, limit: int = 100
    ) -> List[Activity]:
        return (
            db.query(self.model)
            .order_by(self.model.created_at.desc(), self.model.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_all_ids(self, db: Session) -> List[str]:
        return [row.id for row in db.query(self.model.id).all()]


activity = CRUDActivity(Activity)

# app/crud/crud_enrollment.py
from typing import List

from sqlalchemy.orm import Session

from .base import CRUDBase
from app.models.enrollment import Enrollment
from app.schemas.enrollment import EnrollmentCreate, EnrollmentStatus


class CRUDEnrollment(CRUDBase[Enrollment, EnrollmentCreate, EnrollmentCreate]):
    def exists_confirmed(self, db: Session, *, session_id: str, user_id: str) -> bool:
        """
        Checks whether the user already holds a confirmed seat in the session.
        Cancelled enrollments do not block a new one.
        """
        return (
            db.query(self.model.id)
            .filter(
                self.model.session_id == session_id,
                self.model.user_id == user_id,
                self.model.status == EnrollmentStatus.confirmed.value,
            )
            .first()
            is not None
        )

    def count_confirmed(self, db: Session, *, session_id: str) -> int:
        return (
            db.query(self.model)
            .filter(
                self.model.session_id == session_id,
                self.model.status == EnrollmentStatus.confirmed.value,
            )
            .count()
        )

    def get_multi_by_user(
        self, db: Session, *, user_id: str, skip: int = 0, limit: int = 100
    ) -> List[Enrollment]:
        return (
            db.query(self.model)
            .filter(self.model.user_id == user_id)
            .order_by(self.model.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def create_confirmed(
        self,
        db: Session,
        *,
        session_id: str,
        activity_id: str,
        user_id: str,
        final_price: float,
    ) -> Enrollment:
        db_obj = self.model(
            session_id=session_id,
            activity_id=activity_id,
            user_id=user_id,
            final_price=final_price,
            status=EnrollmentStatus.confirmed.value,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def set_status(
        self, db: Session, *, db_obj: Enrollment, status: EnrollmentStatus
    ) -> Enrollment:
        return self.update(db, db_obj=db_obj, obj_in={"status": status.value})


enrollment = CRUDEnrollment(Enrollment)

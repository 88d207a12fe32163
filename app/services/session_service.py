# app/services/session_service.py
import logging
from typing import List

from sqlalchemy.orm import Session

from app import crud
from app.core.broker import SESSION_ROUTING_KEYS
from app.core.kafka_producer import EventPublisher
from app.middleware.error_handler import NotFoundError, ValidationError
from app.models.session import Session as ActivitySession
from app.schemas.events import EventEnvelope, EventOperation
from app.schemas.session import SessionCreate, SessionUpdate

logger = logging.getLogger(__name__)


class SessionService:
    def __init__(self, db: Session, publisher: EventPublisher):
        self.db = db
        self.publisher = publisher

    def _publish(self, op: EventOperation, db_obj: ActivitySession) -> bool:
        envelope = EventEnvelope.for_session(op, db_obj.activity_id, db_obj.id)
        return self.publisher.publish(
            SESSION_ROUTING_KEYS[op], envelope, key=db_obj.activity_id
        )

    def _require_activity(self, activity_id: str) -> None:
        if crud.activity.get(self.db, id=activity_id) is None:
            raise NotFoundError("Activity", activity_id)

    def create(self, activity_id: str, obj_in: SessionCreate) -> ActivitySession:
        self._require_activity(activity_id)
        db_obj = crud.session.create_for_activity(
            self.db, obj_in=obj_in, activity_id=activity_id
        )
        logger.info(f"Session {db_obj.id} created for activity {activity_id}")
        self._publish(EventOperation.create, db_obj)
        return db_obj

    def get(self, session_id: str) -> ActivitySession:
        db_obj = crud.session.get(self.db, id=session_id)
        if db_obj is None:
            raise NotFoundError("Session", session_id)
        return db_obj

    def list_by_activity(
        self, activity_id: str, skip: int = 0, limit: int = 100
    ) -> List[ActivitySession]:
        self._require_activity(activity_id)
        return crud.session.get_multi_by_activity(
            self.db, activity_id=activity_id, skip=skip, limit=limit
        )

    def update(self, session_id: str, obj_in: SessionUpdate) -> ActivitySession:
        db_obj = self.get(session_id)
        patch = {
            field: value
            for field, value in obj_in.model_dump(exclude_unset=True).items()
            if value is not None
        }

        start_time = patch.get("start_time", db_obj.start_time)
        end_time = patch.get("end_time", db_obj.end_time)
        if end_time <= start_time:
            raise ValidationError("end_time must be after start_time", field="end_time")

        db_obj = crud.session.update(self.db, db_obj=db_obj, obj_in=patch)
        self._publish(EventOperation.update, db_obj)
        return db_obj

    def delete(self, session_id: str) -> None:
        db_obj = self.get(session_id)
        activity_id = db_obj.activity_id
        crud.session.remove(self.db, id=session_id)
        logger.info(f"Session {session_id} deleted from activity {activity_id}")
        self.publisher.publish(
            SESSION_ROUTING_KEYS[EventOperation.delete],
            EventEnvelope.for_session(EventOperation.delete, activity_id, session_id),
            key=activity_id,
        )

# app/services/activity_service.py
"""
Write side of the activity catalog.

Every successful write is followed by a fire-and-forget catalog event so the
search index can converge. Publishing never fails the write.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from app import crud
from app.core.broker import ACTIVITY_ROUTING_KEYS
from app.core.kafka_producer import EventPublisher
from app.middleware.error_handler import NotFoundError, OwnerNotFoundError
from app.models.activity import Activity
from app.schemas.activity import ActivityCreate, ActivityUpdate
from app.schemas.events import EventEnvelope, EventOperation
from app.schemas.search import SearchDocument
from app.services.users_client import UsersClient

logger = logging.getLogger(__name__)

NULLABLE_FIELDS = {"instructor"}


def _rfc3339(value) -> Optional[str]:
    if value is None:
        return None
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


class ActivityService:
    def __init__(
        self,
        db: Session,
        publisher: EventPublisher,
        users_client: Optional[UsersClient] = None,
    ):
        self.db = db
        self.publisher = publisher
        self.users_client = users_client

    def _publish(self, op: EventOperation, activity_id: str) -> bool:
        envelope = EventEnvelope.for_activity(op, activity_id)
        return self.publisher.publish(ACTIVITY_ROUTING_KEYS[op], envelope, key=activity_id)

    def create(self, obj_in: ActivityCreate, owner_user_id: str) -> Activity:
        if self.users_client is not None and self.users_client.enabled:
            if not self.users_client.user_exists(owner_user_id):
                raise OwnerNotFoundError(owner_user_id)

        db_obj = crud.activity.create_with_owner(
            self.db, obj_in=obj_in, owner_user_id=owner_user_id
        )
        logger.info(f"Activity {db_obj.id} created by {owner_user_id}")
        self._publish(EventOperation.create, db_obj.id)
        return db_obj

    def get(self, activity_id: str) -> Activity:
        db_obj = crud.activity.get(self.db, id=activity_id)
        if db_obj is None:
            raise NotFoundError("Activity", activity_id)
        return db_obj

    def list(self, skip: int = 0, limit: int = 100) -> Tuple[List[Activity], int]:
        items = crud.activity.get_multi_ordered(self.db, skip=skip, limit=limit)
        return items, crud.activity.count(self.db)

    def update(self, activity_id: str, obj_in: ActivityUpdate) -> Activity:
        db_obj = self.get(activity_id)
        patch = obj_in.model_dump(exclude_unset=True)
        # Explicit nulls are only meaningful for nullable columns
        patch = {
            field: value for field, value in patch.items()
            if value is not None or field in NULLABLE_FIELDS
        }
        db_obj = crud.activity.update(self.db, db_obj=db_obj, obj_in=patch)
        self._publish(EventOperation.update, activity_id)
        return db_obj

    def delete(self, activity_id: str) -> None:
        """Deletes the activity together with its sessions."""
        self.get(activity_id)
        crud.activity.remove(self.db, id=activity_id)
        logger.info(f"Activity {activity_id} deleted")
        self._publish(EventOperation.delete, activity_id)

    def build_search_document(self, activity_id: str) -> SearchDocument:
        """
        Denormalized representation served to the search projector.
        The schedule window comes from the earliest session, if any.
        """
        db_obj = self.get(activity_id)
        earliest = crud.session.get_earliest_for_activity(self.db, activity_id=activity_id)

        start_dt = end_dt = None
        if earliest is not None:
            start_dt = f"{earliest.date}T{earliest.start_time}:00Z"
            end_dt = f"{earliest.date}T{earliest.end_time}:00Z"

        return SearchDocument(
            id=db_obj.id,
            activity_id=db_obj.id,
            name=db_obj.name,
            category=db_obj.category,
            location=db_obj.location,
            instructor=db_obj.instructor or "",
            start_dt=start_dt,
            end_dt=end_dt,
            difficulty=db_obj.difficulty or 1,
            price=db_obj.base_price,
            tags=list(db_obj.tags or []),
            updated_dt=_rfc3339(db_obj.updated_at),
        )

    def reindex_all(self) -> int:
        """Republishes an update event for every activity. Returns how many were sent."""
        activity_ids = crud.activity.get_all_ids(self.db)
        published = sum(
            1 for activity_id in activity_ids
            if self._publish(EventOperation.update, activity_id)
        )
        logger.info(f"Reindex requested: {published}/{len(activity_ids)} events published")
        return published

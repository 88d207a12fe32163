import pytest
from sqlalchemy.orm import Session

from app.middleware.error_handler import NotFoundError, OwnerNotFoundError, ValidationError
from app.models.activity import Activity
from app.schemas.activity import ActivityCreate, ActivityUpdate
from app.schemas.session import SessionCreate, SessionUpdate
from app.services.activity_service import ActivityService
from app.services.session_service import SessionService
from tests.utils.catalog import create_random_activity, create_random_session


def _activity_in(**overrides) -> ActivityCreate:
    data = dict(
        category="yoga",
        name="Yoga Flow",
        location="Sede Norte",
        instructor="Ana",
        base_price=50.0,
    )
    data.update(overrides)
    return ActivityCreate(**data)


class TestActivityService:
    def test_create_publishes_created_event(self, db_session: Session, publisher, users_client):
        service = ActivityService(db_session, publisher, users_client)

        activity = service.create(_activity_in(), owner_user_id="admin_1")

        assert activity.id.startswith("act_")
        assert activity.owner_user_id == "admin_1"
        users_client.user_exists.assert_called_once_with("admin_1")
        routing_key, envelope = publisher.publish.call_args.args
        assert routing_key == "activity.created"
        assert envelope.activity_id == activity.id
        assert envelope.session_id == ""
        assert publisher.publish.call_args.kwargs["key"] == activity.id

    def test_create_with_unknown_owner(self, db_session: Session, publisher, users_client):
        users_client.user_exists.return_value = False
        service = ActivityService(db_session, publisher, users_client)

        with pytest.raises(OwnerNotFoundError):
            service.create(_activity_in(), owner_user_id="ghost")

        assert db_session.query(Activity).count() == 0
        publisher.publish.assert_not_called()

    def test_create_skips_owner_check_when_users_service_disabled(
        self, db_session: Session, publisher, users_client
    ):
        users_client.enabled = False
        service = ActivityService(db_session, publisher, users_client)

        service.create(_activity_in(), owner_user_id="admin_1")

        users_client.user_exists.assert_not_called()

    def test_publish_failure_does_not_fail_the_write(self, db_session: Session, publisher):
        publisher.publish.return_value = False
        service = ActivityService(db_session, publisher)

        activity = service.create(_activity_in(), owner_user_id="admin_1")

        assert db_session.get(Activity, activity.id) is not None

    def test_update_applies_only_present_fields(self, db_session: Session, publisher):
        activity = create_random_activity(db_session, name="Futbol 5")
        service = ActivityService(db_session, publisher)

        updated = service.update(activity.id, ActivityUpdate(base_price=120.0))

        assert updated.base_price == 120.0
        assert updated.name == "Futbol 5"
        assert updated.instructor == "Juan Perez"
        assert publisher.publish.call_args.args[0] == "activity.updated"

    def test_update_can_clear_instructor_but_not_required_fields(
        self, db_session: Session, publisher
    ):
        activity = create_random_activity(db_session)
        service = ActivityService(db_session, publisher)

        patch = ActivityUpdate.model_validate({"instructor": None, "name": None})
        updated = service.update(activity.id, patch)

        assert updated.instructor is None
        assert updated.name == "Futbol 5"

    def test_update_unknown_activity(self, db_session: Session, publisher):
        with pytest.raises(NotFoundError):
            ActivityService(db_session, publisher).update("act_missing", ActivityUpdate(name="x"))
        publisher.publish.assert_not_called()

    def test_delete_publishes_deleted_event(self, db_session: Session, publisher):
        activity = create_random_activity(db_session)
        create_random_session(db_session, activity.id)
        service = ActivityService(db_session, publisher)

        service.delete(activity.id)

        assert db_session.get(Activity, activity.id) is None
        routing_key, envelope = publisher.publish.call_args.args
        assert routing_key == "activity.deleted"
        assert envelope.activity_id == activity.id

    def test_search_document_uses_earliest_session(self, db_session: Session, publisher):
        activity = create_random_activity(db_session)
        create_random_session(db_session, activity.id, date="2025-11-12")
        create_random_session(
            db_session, activity.id, date="2025-11-10", start_time="08:00", end_time="09:30"
        )

        doc = ActivityService(db_session, publisher).build_search_document(activity.id)

        assert doc.id == activity.id
        assert doc.activity_id == activity.id
        assert doc.session_id == ""
        assert doc.start_dt == "2025-11-10T08:00:00Z"
        assert doc.end_dt == "2025-11-10T09:30:00Z"
        assert doc.category == "football"
        assert doc.instructor == "Juan Perez"
        assert doc.price == 100.0
        assert doc.tags == ["outdoor"]

    def test_search_document_without_sessions(self, db_session: Session, publisher):
        activity = create_random_activity(db_session)

        doc = ActivityService(db_session, publisher).build_search_document(activity.id)

        assert doc.start_dt is None
        assert doc.end_dt is None

    def test_reindex_publishes_update_for_every_activity(self, db_session: Session, publisher):
        ids = {create_random_activity(db_session, name=f"A{i}").id for i in range(3)}

        count = ActivityService(db_session, publisher).reindex_all()

        assert count == 3
        assert {c.args[0] for c in publisher.publish.call_args_list} == {"activity.updated"}
        assert {c.args[1].activity_id for c in publisher.publish.call_args_list} == ids


class TestSessionService:
    def test_create_publishes_session_event_with_both_ids(self, db_session: Session, publisher):
        activity = create_random_activity(db_session)
        service = SessionService(db_session, publisher)

        session = service.create(
            activity.id,
            SessionCreate(date="2025-11-10", start_time="19:00", end_time="20:00", capacity=12),
        )

        routing_key, envelope = publisher.publish.call_args.args
        assert routing_key == "activity.session.created"
        assert envelope.activity_id == activity.id
        assert envelope.session_id == session.id

    def test_create_for_unknown_activity(self, db_session: Session, publisher):
        with pytest.raises(NotFoundError):
            SessionService(db_session, publisher).create(
                "act_missing",
                SessionCreate(date="2025-11-10", start_time="19:00", end_time="20:00", capacity=1),
            )

    def test_update_rejects_inverted_window(self, db_session: Session, publisher):
        activity = create_random_activity(db_session)
        session = create_random_session(db_session, activity.id, start_time="19:00", end_time="20:00")

        with pytest.raises(ValidationError):
            SessionService(db_session, publisher).update(session.id, SessionUpdate(end_time="18:00"))

    def test_update_and_delete(self, db_session: Session, publisher):
        activity = create_random_activity(db_session)
        session = create_random_session(db_session, activity.id)
        service = SessionService(db_session, publisher)

        updated = service.update(session.id, SessionUpdate(capacity=30))
        assert updated.capacity == 30
        assert updated.start_time == "19:00"

        service.delete(session.id)
        routing_key, envelope = publisher.publish.call_args.args
        assert routing_key == "activity.session.deleted"
        assert envelope.session_id == session.id
        with pytest.raises(NotFoundError):
            service.get(session.id)

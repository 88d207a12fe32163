import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.api import deps
from app.main import app
from app.schemas.token import TokenPayload
from tests.utils.auth import MEMBER
from tests.utils.catalog import create_random_activity, create_random_session


@pytest.fixture
def member_client(client: TestClient) -> TestClient:
    app.dependency_overrides[deps.get_current_user] = lambda: MEMBER
    return client


def _login_as(user_id: str, role: str = "user") -> None:
    payload = TokenPayload(sub=user_id, role=role, exp=9999999999)
    app.dependency_overrides[deps.get_current_user] = lambda: payload


def test_enroll(member_client: TestClient, db_session: Session, publisher) -> None:
    activity = create_random_activity(db_session, base_price=100.0)
    session = create_random_session(db_session, activity.id, start_time="19:00")

    response = member_client.post("/api/v1/enrollments", json={"session_id": session.id})

    assert response.status_code == 201
    content = response.json()
    assert content["user_id"] == MEMBER.sub
    assert content["status"] == "confirmed"
    assert content["final_price"] == 104.5
    assert publisher.publish.call_args.args[0] == "enrollment.created"


def test_duplicate_enrollment_conflicts(member_client: TestClient, db_session: Session) -> None:
    activity = create_random_activity(db_session)
    session = create_random_session(db_session, activity.id)
    member_client.post("/api/v1/enrollments", json={"session_id": session.id})

    response = member_client.post("/api/v1/enrollments", json={"session_id": session.id})

    assert response.status_code == 409
    assert response.json()["error"]["category"] == "conflict_error"


def test_full_session_conflicts(client: TestClient, db_session: Session) -> None:
    activity = create_random_activity(db_session)
    session = create_random_session(db_session, activity.id, capacity=1)
    _login_as("user_a")
    client.post("/api/v1/enrollments", json={"session_id": session.id})

    _login_as("user_b")
    response = client.post("/api/v1/enrollments", json={"session_id": session.id})

    assert response.status_code == 409
    assert "capacity" in response.json()["error"]["message"]


def test_enroll_in_unknown_session(member_client: TestClient) -> None:
    response = member_client.post("/api/v1/enrollments", json={"session_id": "ses_missing"})

    assert response.status_code == 404


def test_enroll_without_session_id(member_client: TestClient) -> None:
    response = member_client.post("/api/v1/enrollments", json={})

    assert response.status_code == 400


def test_cancel_flow(client: TestClient, db_session: Session, publisher) -> None:
    activity = create_random_activity(db_session)
    session = create_random_session(db_session, activity.id)
    _login_as("user_a")
    enrollment_id = client.post("/api/v1/enrollments", json={"session_id": session.id}).json()["id"]

    _login_as("user_b")
    forbidden = client.patch(f"/api/v1/enrollments/{enrollment_id}/cancel")
    assert forbidden.status_code == 403

    _login_as("user_a")
    cancelled = client.patch(f"/api/v1/enrollments/{enrollment_id}/cancel")
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "cancelled"
    assert publisher.publish.call_args.args[0] == "enrollment.cancelled"

    again = client.patch(f"/api/v1/enrollments/{enrollment_id}/cancel")
    assert again.status_code == 409


def test_admin_can_cancel_any_enrollment(client: TestClient, db_session: Session) -> None:
    activity = create_random_activity(db_session)
    session = create_random_session(db_session, activity.id)
    _login_as("user_a")
    enrollment_id = client.post("/api/v1/enrollments", json={"session_id": session.id}).json()["id"]

    _login_as("admin_1", role="admin")
    response = client.patch(f"/api/v1/enrollments/{enrollment_id}/cancel")

    assert response.status_code == 200


def test_list_enrollments_by_user(client: TestClient, db_session: Session) -> None:
    activity = create_random_activity(db_session)
    session = create_random_session(db_session, activity.id)
    _login_as("user_a")
    client.post("/api/v1/enrollments", json={"session_id": session.id})

    own = client.get("/api/v1/enrollments/by-user/user_a")
    assert own.status_code == 200
    assert len(own.json()) == 1

    other = client.get("/api/v1/enrollments/by-user/user_b")
    assert other.status_code == 403

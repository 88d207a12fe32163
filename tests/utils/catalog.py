from sqlalchemy.orm import Session

from app import crud
from app.models.activity import Activity
from app.models.session import Session as ActivitySession
from app.schemas.activity import ActivityCreate
from app.schemas.session import SessionCreate


def create_random_activity(
    db: Session,
    owner_user_id: str = "admin_1",
    name: str = "Futbol 5",
    base_price: float = 100.0,
) -> Activity:
    """
    Creates a dummy activity for testing purposes.
    """
    activity_in = ActivityCreate(
        category="football",
        name=name,
        location="Sede Centro",
        instructor="Juan Perez",
        base_price=base_price,
        difficulty=2,
        tags=["outdoor"],
    )
    return crud.activity.create_with_owner(db, obj_in=activity_in, owner_user_id=owner_user_id)


def create_random_session(
    db: Session,
    activity_id: str,
    date: str = "2025-11-10",
    start_time: str = "19:00",
    end_time: str = "20:00",
    capacity: int = 10,
) -> ActivitySession:
    session_in = SessionCreate(
        date=date, start_time=start_time, end_time=end_time, capacity=capacity
    )
    return crud.session.create_for_activity(db, obj_in=session_in, activity_id=activity_id)

# app/services/enrollment_service.py
"""
Enrollment (booking) flow.

Pricing and the capacity check are independent, so they run concurrently on
a shared worker pool and are joined before anything is written. Each branch
has its own deadline, measured from the moment both were launched.
"""

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, List

from sqlalchemy.orm import Session, sessionmaker

from app import crud
from app.core.broker import ENROLLMENT_CANCELLED, ENROLLMENT_CREATED
from app.core.config import settings
from app.core.kafka_producer import EventPublisher
from app.db.session import SessionLocal
from app.middleware.error_handler import (
    DuplicateEnrollmentError,
    EnrollmentNotActiveError,
    FanOutTimeoutError,
    ForbiddenError,
    NoCapacityError,
    NotFoundError,
)
from app.models.enrollment import Enrollment
from app.schemas.enrollment import EnrollmentStatus
from app.schemas.events import EnrollmentEvent, EnrollmentOperation
from app.services.pricing import compute_final_price

logger = logging.getLogger(__name__)

# Process-wide pool shared by every enrollment request
fanout_executor = ThreadPoolExecutor(
    max_workers=settings.FANOUT_MAX_WORKERS, thread_name_prefix="enroll-fanout"
)


class EnrollmentService:
    def __init__(
        self,
        db: Session,
        publisher: EventPublisher,
        executor: ThreadPoolExecutor = fanout_executor,
        timeout: float = settings.FANOUT_TIMEOUT_SECONDS,
        price_calculator: Callable[[float, str], float] = compute_final_price,
        session_factory: sessionmaker = SessionLocal,
    ):
        self.db = db
        self.publisher = publisher
        self.executor = executor
        self.timeout = timeout
        self.price_calculator = price_calculator
        self.session_factory = session_factory

    def _check_capacity(self, session_id: str, capacity: int) -> None:
        # Runs on a pool thread that may outlive the request, so never on self.db
        db = self.session_factory()
        try:
            confirmed = crud.enrollment.count_confirmed(db, session_id=session_id)
        finally:
            db.close()
        if confirmed >= capacity:
            raise NoCapacityError()

    def _join(self, branches: List[tuple], started: float) -> list:
        results = []
        for name, future in branches:
            remaining = max(0.0, started + self.timeout - time.monotonic())
            try:
                results.append(future.result(timeout=remaining))
            except FutureTimeoutError:
                for _, other in branches:
                    other.cancel()
                logger.error(f"Enrollment {name} branch exceeded {self.timeout}s deadline")
                raise FanOutTimeoutError(name)
        return results

    def enroll(self, session_id: str, user_id: str) -> Enrollment:
        session = crud.session.get(self.db, id=session_id)
        if session is None:
            raise NotFoundError("Session", session_id)
        activity = crud.activity.get(self.db, id=session.activity_id)
        if activity is None:
            raise NotFoundError("Activity", session.activity_id)

        if crud.enrollment.exists_confirmed(self.db, session_id=session_id, user_id=user_id):
            raise DuplicateEnrollmentError()

        # Plain values only: worker threads must not lazy-load ORM attributes
        base_price = activity.base_price
        start_time = session.start_time
        capacity = session.capacity

        started = time.monotonic()
        price_future: Future = self.executor.submit(
            self.price_calculator, base_price, start_time
        )
        capacity_future: Future = self.executor.submit(
            self._check_capacity, session_id, capacity
        )
        # A business-rule failure on capacity wins over a slow price branch
        _, final_price = self._join(
            [("capacity", capacity_future), ("price", price_future)], started
        )

        db_obj = crud.enrollment.create_confirmed(
            self.db,
            session_id=session_id,
            activity_id=session.activity_id,
            user_id=user_id,
            final_price=final_price,
        )
        logger.info(
            f"User {user_id} enrolled in session {session_id} "
            f"(enrollment {db_obj.id}, total {final_price})"
        )

        event = EnrollmentEvent(
            op=EnrollmentOperation.enroll,
            id=db_obj.id,
            session_id=session_id,
            activity_id=db_obj.activity_id,
            user_id=user_id,
            total=final_price,
        )
        self.publisher.publish(ENROLLMENT_CREATED, event, key=db_obj.id)
        return db_obj

    def cancel(self, enrollment_id: str, requester_id: str, is_admin: bool = False) -> Enrollment:
        db_obj = crud.enrollment.get(self.db, id=enrollment_id)
        if db_obj is None:
            raise NotFoundError("Enrollment", enrollment_id)
        if db_obj.user_id != requester_id and not is_admin:
            logger.warning(
                f"User {requester_id} attempted to cancel enrollment {enrollment_id} they do not own"
            )
            raise ForbiddenError("Only the enrollment owner or an admin can cancel it")
        if db_obj.status != EnrollmentStatus.confirmed.value:
            raise EnrollmentNotActiveError()

        db_obj = crud.enrollment.set_status(
            self.db, db_obj=db_obj, status=EnrollmentStatus.cancelled
        )
        logger.info(f"Enrollment {enrollment_id} cancelled by {requester_id}")

        event = EnrollmentEvent(
            op=EnrollmentOperation.cancel,
            id=db_obj.id,
            session_id=db_obj.session_id,
            activity_id=db_obj.activity_id,
            user_id=db_obj.user_id,
        )
        self.publisher.publish(ENROLLMENT_CANCELLED, event, key=db_obj.id)
        return db_obj

    def list_by_user(self, user_id: str, skip: int = 0, limit: int = 100) -> List[Enrollment]:
        return crud.enrollment.get_multi_by_user(
            self.db, user_id=user_id, skip=skip, limit=limit
        )

# app/api/v1/endpoints/enrollments.py
from typing import List

from fastapi import APIRouter, Depends, status

from app.api import deps
from app.middleware.error_handler import ForbiddenError
from app.schemas.enrollment import Enrollment as EnrollmentSchema, EnrollmentCreate
from app.schemas.token import TokenPayload
from app.services.enrollment_service import EnrollmentService

router = APIRouter(prefix="/enrollments", tags=["Enrollments"])


@router.post("", response_model=EnrollmentSchema, status_code=status.HTTP_201_CREATED)
def create_enrollment(
    enrollment_in: EnrollmentCreate,
    service: EnrollmentService = Depends(deps.get_enrollment_service),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Enroll the calling user in a session.

    Pricing and the capacity check run concurrently; the enrollment is only
    written once both have succeeded.
    """
    return service.enroll(enrollment_in.session_id, user_id=current_user.sub)


@router.patch("/{enrollment_id}/cancel", response_model=EnrollmentSchema)
def cancel_enrollment(
    enrollment_id: str,
    service: EnrollmentService = Depends(deps.get_enrollment_service),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Cancel an enrollment. Only its owner or an admin may do this."""
    return service.cancel(
        enrollment_id, requester_id=current_user.sub, is_admin=current_user.is_admin
    )


@router.get("/by-user/{user_id}", response_model=List[EnrollmentSchema])
def list_user_enrollments(
    user_id: str,
    service: EnrollmentService = Depends(deps.get_enrollment_service),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    if user_id != current_user.sub and not current_user.is_admin:
        raise ForbiddenError("Not authorized to view these enrollments")
    return service.list_by_user(user_id)

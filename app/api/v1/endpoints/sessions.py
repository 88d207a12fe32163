# app/api/v1/endpoints/sessions.py
from typing import List

from fastapi import APIRouter, Depends, Query, Response, status

from app.api import deps
from app.schemas.session import Session as SessionSchema, SessionCreate, SessionUpdate
from app.schemas.token import TokenPayload
from app.services.session_service import SessionService

router = APIRouter(tags=["Sessions"])


@router.post(
    "/activities/{activity_id}/sessions",
    response_model=SessionSchema,
    status_code=status.HTTP_201_CREATED,
)
def create_session(
    activity_id: str,
    session_in: SessionCreate,
    service: SessionService = Depends(deps.get_session_service),
    current_user: TokenPayload = Depends(deps.require_admin),
):
    """Create a new session for a specific activity."""
    return service.create(activity_id, session_in)


@router.get("/activities/{activity_id}/sessions", response_model=List[SessionSchema])
def list_sessions(
    activity_id: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    service: SessionService = Depends(deps.get_session_service),
):
    """Retrieve the sessions of an activity in chronological order."""
    return service.list_by_activity(activity_id, skip=skip, limit=limit)


@router.get("/sessions/{session_id}", response_model=SessionSchema)
def get_session(
    session_id: str,
    service: SessionService = Depends(deps.get_session_service),
):
    return service.get(session_id)


@router.patch("/sessions/{session_id}", response_model=SessionSchema)
def update_session(
    session_id: str,
    session_in: SessionUpdate,
    service: SessionService = Depends(deps.get_session_service),
    current_user: TokenPayload = Depends(deps.require_admin),
):
    return service.update(session_id, session_in)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_session(
    session_id: str,
    service: SessionService = Depends(deps.get_session_service),
    current_user: TokenPayload = Depends(deps.require_admin),
):
    service.delete(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

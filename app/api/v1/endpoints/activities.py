# app/api/v1/endpoints/activities.py
from fastapi import APIRouter, Depends, Query, Response, status

from app.api import deps
from app.schemas.activity import (
    Activity as ActivitySchema,
    ActivityCreate,
    ActivityList,
    ActivityUpdate,
    ReindexResponse,
)
from app.schemas.search import SearchDocument
from app.schemas.token import TokenPayload
from app.services.activity_service import ActivityService

router = APIRouter(prefix="/activities", tags=["Activities"])


@router.get("", response_model=ActivityList)
def list_activities(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    service: ActivityService = Depends(deps.get_activity_service),
):
    """Retrieve activities, newest first."""
    activities, total = service.list(skip=skip, limit=limit)
    return ActivityList(activities=activities, total=total, skip=skip, limit=limit)


@router.post("", response_model=ActivitySchema, status_code=status.HTTP_201_CREATED)
def create_activity(
    activity_in: ActivityCreate,
    service: ActivityService = Depends(deps.get_activity_service),
    current_user: TokenPayload = Depends(deps.require_admin),
):
    """Create an activity owned by the calling admin."""
    return service.create(activity_in, owner_user_id=current_user.sub)


# Declared before the {activity_id} routes so "reindex" is not taken for an id
@router.post("/reindex", response_model=ReindexResponse, status_code=status.HTTP_202_ACCEPTED)
def reindex_activities(
    service: ActivityService = Depends(deps.get_activity_service),
    current_user: TokenPayload = Depends(deps.require_admin),
):
    """Republish an update event for every activity so the index can be rebuilt."""
    count = service.reindex_all()
    return ReindexResponse(message="Reindex events published", count=count)


@router.get("/{activity_id}", response_model=ActivitySchema)
def get_activity(
    activity_id: str,
    service: ActivityService = Depends(deps.get_activity_service),
):
    return service.get(activity_id)


@router.patch("/{activity_id}", response_model=ActivitySchema)
def update_activity(
    activity_id: str,
    activity_in: ActivityUpdate,
    service: ActivityService = Depends(deps.get_activity_service),
    current_user: TokenPayload = Depends(deps.require_admin),
):
    """Partially update an activity. Fields absent from the body are left untouched."""
    return service.update(activity_id, activity_in)


@router.delete("/{activity_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_activity(
    activity_id: str,
    service: ActivityService = Depends(deps.get_activity_service),
    current_user: TokenPayload = Depends(deps.require_admin),
):
    service.delete(activity_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{activity_id}/search-doc", response_model=SearchDocument)
def get_search_document(
    activity_id: str,
    service: ActivityService = Depends(deps.get_activity_service),
):
    """Current denormalized document for the search projector."""
    return service.build_search_document(activity_id)

# app/api/v1/endpoints/search.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api import deps
from app.core.config import settings
from app.middleware.error_handler import ValidationError
from app.schemas.search import SearchDocument, SearchQuery, SearchResult
from app.schemas.session import DATE_PATTERN
from app.services.search import SearchService

router = APIRouter(prefix="/search", tags=["Search"])

SORT_PATTERN = r"^[a-z_]+ (asc|desc)$"


@router.get("", response_model=SearchResult)
def search_activities(
    query: Optional[str] = Query(None, alias="query"),
    category: Optional[str] = None,
    location: Optional[str] = None,
    date: Optional[str] = Query(None, pattern=DATE_PATTERN),
    sort: Optional[str] = Query(None, pattern=SORT_PATTERN),
    page: int = 1,
    size: int = 10,
    service: SearchService = Depends(deps.get_search_service),
):
    """
    Full-text search over indexed activities.
    Results are served from the local cache, then Redis, then the index.
    """
    if page < 1:
        raise ValidationError("page must be greater than or equal to 1", field="page")
    if size < 1 or size > settings.SEARCH_MAX_PAGE_SIZE:
        raise ValidationError(
            f"size must be between 1 and {settings.SEARCH_MAX_PAGE_SIZE}", field="size"
        )

    search_query = SearchQuery.normalized(
        text=query,
        category=category,
        location=location,
        date=date,
        sort=sort,
        page=page,
        size=size,
    )
    return service.search(search_query)


@router.get("/documents/{document_id}", response_model=SearchDocument)
def get_document(
    document_id: str,
    service: SearchService = Depends(deps.get_search_service),
):
    return service.get_document(document_id)

# app/services/search/__init__.py
from .local_cache import LocalCache
from .redis_cache import RedisCache
from .solr_repository import SearchIndexError, SolrRepository
from .search_service import SearchService
from .origin_client import ActivitiesOriginClient, OriginDocumentGone, OriginFetchError
from .projector import (
    PoisonMessageError,
    ProjectionError,
    ProjectionOutcome,
    SearchProjector,
)

__all__ = [
    "LocalCache",
    "RedisCache",
    "SearchIndexError",
    "SolrRepository",
    "SearchService",
    "ActivitiesOriginClient",
    "OriginDocumentGone",
    "OriginFetchError",
    "PoisonMessageError",
    "ProjectionError",
    "ProjectionOutcome",
    "SearchProjector",
]

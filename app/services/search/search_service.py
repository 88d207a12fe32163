# app/services/search/search_service.py
"""
Read path of the search service: local cache, then Redis, then the index.

Keys for query results are derived from the normalized query tuple; single
documents are cached under their id, which is also what the projector busts.
"""

import logging
from typing import Optional

from app.core.config import settings
from app.middleware.error_handler import ExternalServiceError, NotFoundError
from app.schemas.search import SearchDocument, SearchQuery, SearchResult
from app.services.search.local_cache import LocalCache
from app.services.search.redis_cache import RedisCache
from app.services.search.solr_repository import SearchIndexError, SolrRepository

logger = logging.getLogger(__name__)


class SearchService:
    def __init__(
        self,
        repository: SolrRepository,
        local_cache: LocalCache,
        shared_cache: Optional[RedisCache] = None,
        ttl: int = settings.CACHE_TTL_SECONDS,
    ):
        self.repository = repository
        self.local_cache = local_cache
        self.shared_cache = shared_cache
        self.ttl = ttl

    def _lookup(self, key: str) -> Optional[dict]:
        cached = self.local_cache.get(key)
        if cached is not None:
            logger.debug(f"Local cache hit for {key}")
            return cached

        if self.shared_cache is not None:
            cached = self.shared_cache.get(key)
            if cached is not None:
                logger.debug(f"Shared cache hit for {key}")
                self.local_cache.set(key, cached, self.ttl)
                return cached
        return None

    def _store(self, key: str, value: dict) -> None:
        self.local_cache.set(key, value, self.ttl)
        if self.shared_cache is not None:
            self.shared_cache.set(key, value, self.ttl)

    def search(self, query: SearchQuery) -> SearchResult:
        key = query.cache_key()
        cached = self._lookup(key)
        if cached is not None:
            return SearchResult.model_validate(cached)

        try:
            result = self.repository.search(query)
        except SearchIndexError as e:
            logger.error(f"Search index query failed: {e}")
            raise ExternalServiceError("Search index unavailable", service="solr")

        self._store(key, result.model_dump(mode="json"))
        return result

    def get_document(self, document_id: str) -> SearchDocument:
        cached = self._lookup(document_id)
        if cached is not None:
            return SearchDocument.model_validate(cached)

        try:
            doc = self.repository.get_by_id(document_id)
        except SearchIndexError as e:
            logger.error(f"Search index lookup for {document_id} failed: {e}")
            raise ExternalServiceError("Search index unavailable", service="solr")
        if doc is None:
            raise NotFoundError("Document", document_id)

        self._store(document_id, doc.model_dump(mode="json"))
        return doc

    def bust(self, key: str) -> None:
        """Evicts a key from both tiers."""
        self.local_cache.delete(key)
        if self.shared_cache is not None:
            self.shared_cache.delete(key)
        logger.debug(f"Cache busted for {key}")

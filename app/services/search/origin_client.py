# app/services/search/origin_client.py
"""
Client for the activities service search-document endpoint.

The projector never trusts event payloads for document contents; it always
resolves the current state from the owning service.
"""

import logging
from typing import Optional

import httpx

from app.core.config import settings
from app.schemas.search import SearchDocument

logger = logging.getLogger(__name__)


class OriginFetchError(Exception):
    """The activities service could not be reached or answered with an error."""


class OriginDocumentGone(Exception):
    """The entity no longer exists at the origin."""


class ActivitiesOriginClient:
    def __init__(
        self,
        base_url: str = settings.ACTIVITIES_API_BASE,
        timeout: float = settings.HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def fetch_document(self, activity_id: str) -> SearchDocument:
        url = f"{self.base_url}/activities/{activity_id}/search-doc"
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.get(url)
        except httpx.RequestError as e:
            raise OriginFetchError(f"GET {url} failed: {e}") from e

        if response.status_code == 404:
            raise OriginDocumentGone(activity_id)
        if response.status_code != 200:
            raise OriginFetchError(f"GET {url} returned status {response.status_code}")

        try:
            return SearchDocument.model_validate(response.json())
        except ValueError as e:
            raise OriginFetchError(f"Unreadable search document for {activity_id}: {e}") from e

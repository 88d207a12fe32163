# app/services/search/projector.py
"""
Turns catalog change events into search index mutations.

For each message:

    filter -> validate -> delete: index delete -> cache bust
                       -> create/update: origin fetch -> index upsert -> cache bust

The projector only depends on small structural interfaces so the origin,
the index and the cache can each be replaced in tests.
"""

import json
import logging
from enum import Enum
from typing import Protocol

from pydantic import ValidationError as PydanticValidationError

from app.core.broker import CATALOG_PATTERN, topic_matches
from app.schemas.events import EventEnvelope, EventOperation
from app.schemas.search import SearchDocument
from app.services.search.origin_client import OriginDocumentGone, OriginFetchError
from app.services.search.solr_repository import SearchIndexError

logger = logging.getLogger(__name__)


class ProjectionOutcome(str, Enum):
    PROJECTED = "projected"
    DELETED = "deleted"
    SKIPPED = "skipped"
    STALE = "stale"
    REJECTED = "rejected"


class PoisonMessageError(Exception):
    """The message can never be projected; retrying will not help."""


class ProjectionError(Exception):
    """A collaborator failed. The message may succeed on a later attempt."""


class DocumentSource(Protocol):
    def fetch_document(self, activity_id: str) -> SearchDocument: ...


class DocumentIndex(Protocol):
    def upsert(self, doc: SearchDocument) -> None: ...

    def delete_by_id(self, document_id: str) -> None: ...


class CacheInvalidator(Protocol):
    def bust(self, key: str) -> None: ...


class SearchProjector:
    def __init__(
        self,
        source: DocumentSource,
        index: DocumentIndex,
        invalidator: CacheInvalidator,
        binding: str = "#",
    ):
        self.source = source
        self.index = index
        self.invalidator = invalidator
        self.binding = binding

    def accepts(self, routing_key: str) -> bool:
        if not routing_key:
            # Untagged messages are validated on their payload alone
            return True
        return topic_matches(self.binding, routing_key) and topic_matches(
            CATALOG_PATTERN, routing_key
        )

    @staticmethod
    def parse(body) -> EventEnvelope:
        try:
            return EventEnvelope.model_validate(json.loads(body))
        except (TypeError, ValueError, PydanticValidationError) as e:
            raise PoisonMessageError(f"Malformed event payload: {e}") from e

    def process(self, body, routing_key: str = "") -> ProjectionOutcome:
        if not self.accepts(routing_key):
            logger.debug(f"Skipping {routing_key}: not a catalog event")
            return ProjectionOutcome.SKIPPED
        return self.handle(self.parse(body), routing_key)

    def handle(self, envelope: EventEnvelope, routing_key: str = "") -> ProjectionOutcome:
        logger.info(
            f"Received {envelope.op.value} event "
            f"(activity={envelope.activity_id!r}, session={envelope.session_id!r}, key={routing_key!r})"
        )
        if envelope.is_session_event:
            logger.info(f"Skipping session event for session {envelope.session_id}")
            return ProjectionOutcome.SKIPPED
        if not envelope.activity_id:
            raise PoisonMessageError("Event has no activity id")

        if envelope.op == EventOperation.delete:
            return self._project_delete(envelope.activity_id)
        return self._project_upsert(envelope.activity_id)

    def _project_delete(self, activity_id: str) -> ProjectionOutcome:
        try:
            self.index.delete_by_id(activity_id)
        except SearchIndexError as e:
            raise ProjectionError(f"Index delete failed for {activity_id}: {e}") from e
        self.invalidator.bust(activity_id)
        logger.info(f"Projected delete of {activity_id}")
        return ProjectionOutcome.DELETED

    def _project_upsert(self, activity_id: str) -> ProjectionOutcome:
        try:
            doc = self.source.fetch_document(activity_id)
        except OriginDocumentGone:
            logger.warning(f"Activity {activity_id} no longer exists at origin, skipping")
            return ProjectionOutcome.STALE
        except OriginFetchError as e:
            raise ProjectionError(str(e)) from e

        if doc.id != activity_id:
            logger.warning(f"Origin returned document {doc.id!r} for {activity_id}, re-keying")
            doc = doc.model_copy(update={"id": activity_id})

        try:
            self.index.upsert(doc)
        except SearchIndexError as e:
            raise ProjectionError(f"Index upsert failed for {activity_id}: {e}") from e
        self.invalidator.bust(activity_id)
        logger.info(f"Projected {activity_id} into the index")
        return ProjectionOutcome.PROJECTED


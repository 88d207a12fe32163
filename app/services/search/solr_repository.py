# app/services/search/solr_repository.py
"""
Solr-backed search index, accessed over its HTTP JSON API.

Index field names carry Solr dynamic-field suffixes (`_txt`, `_s`, `_i`,
`_f`, `_ss`, `_dt`); the mapping to `SearchDocument` lives here only.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import httpx

from app.core.config import settings
from app.schemas.search import SearchDocument, SearchQuery, SearchResult

logger = logging.getLogger(__name__)

QUERY_FIELDS = "name_txt^2 category_s^1 location_s^1 instructor_s^1"
PHRASE_FIELDS = "name_txt^3"

# Wildcards are not used with edismax, so `*` is left alone
_SPECIAL = re.compile(r'(&&|\|\||[+\-!(){}\[\]^"~?:\\/])')


class SearchIndexError(Exception):
    """Raised when the index rejects a request or cannot be reached."""


def escape_query_word(word: str) -> str:
    return _SPECIAL.sub(r"\\\1", word)


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def build_select_params(query: SearchQuery) -> List[Tuple[str, str]]:
    words = [escape_query_word(w) for w in query.text.split()]
    words = [w for w in words if w]

    params = [
        ("defType", "edismax"),
        ("q", " ".join(words) if words else "*:*"),
        ("qf", QUERY_FIELDS),
        ("pf", PHRASE_FIELDS),
        # One word matches loosely; several words must all match
        ("mm", "100%" if len(words) > 1 else "1"),
        ("q.op", "OR"),
    ]
    if query.category:
        params.append(("fq", f"category_s:{_quote(query.category)}"))
    if query.location:
        params.append(("fq", f"location_s:{_quote(query.location)}"))
    if query.date:
        params.append(("fq", f"start_dt:[{query.date}T00:00:00Z TO *]"))
    params.extend(
        [
            ("sort", query.sort),
            ("start", str(query.start)),
            ("rows", str(query.size)),
            ("wt", "json"),
        ]
    )
    return params


def to_solr_document(doc: SearchDocument) -> Dict[str, Any]:
    solr_doc = {
        "id": doc.id,
        "activity_id": doc.activity_id,
        "name_txt": doc.name,
        "category_s": doc.category,
        "location_s": doc.location,
        "instructor_s": doc.instructor,
        "difficulty_i": doc.difficulty,
        "price_f": doc.price,
        "tags_ss": doc.tags,
    }
    # Date fields reject empty strings, so they are only sent when set
    for field, value in (
        ("start_dt", doc.start_dt),
        ("end_dt", doc.end_dt),
        ("updated_dt", doc.updated_dt),
    ):
        if value:
            solr_doc[field] = value
    return solr_doc


def _single(value: Any) -> Any:
    # text fields may come back multivalued depending on the schema
    if isinstance(value, list):
        return value[0] if value else None
    return value


def from_solr_document(raw: Dict[str, Any]) -> SearchDocument:
    return SearchDocument(
        id=str(raw.get("id", "")),
        activity_id=str(_single(raw.get("activity_id")) or raw.get("id", "")),
        session_id=str(_single(raw.get("session_id")) or ""),
        name=str(_single(raw.get("name_txt")) or ""),
        category=str(_single(raw.get("category_s")) or ""),
        location=str(_single(raw.get("location_s")) or ""),
        instructor=str(_single(raw.get("instructor_s")) or ""),
        start_dt=_single(raw.get("start_dt")),
        end_dt=_single(raw.get("end_dt")),
        difficulty=int(_single(raw.get("difficulty_i")) or 1),
        price=float(_single(raw.get("price_f")) or 0.0),
        tags=[str(t) for t in raw.get("tags_ss") or []],
        updated_dt=_single(raw.get("updated_dt")),
    )


class SolrRepository:
    def __init__(
        self,
        base_url: str = settings.SOLR_URL,
        timeout: float = settings.HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url, timeout=self.timeout, transport=self._transport
        )

    def _send(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            with self._client() as client:
                response = client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.error(f"Solr {method} {path} failed: {e}")
            raise SearchIndexError(f"Solr unreachable: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            raise SearchIndexError(f"Solr error: {error.get('msg')}")
        if response.status_code != 200:
            raise SearchIndexError(f"Solr returned status {response.status_code}")
        return body

    def search(self, query: SearchQuery) -> SearchResult:
        body = self._send("GET", "/select", params=build_select_params(query))
        payload = body.get("response") or {}
        docs = [from_solr_document(d) for d in payload.get("docs", [])]
        logger.debug(f"Solr returned {len(docs)} of {payload.get('numFound', 0)} documents")
        return SearchResult(
            total=payload.get("numFound", 0), page=query.page, size=query.size, docs=docs
        )

    def get_by_id(self, document_id: str) -> Optional[SearchDocument]:
        body = self._send("GET", "/get", params={"id": document_id, "wt": "json"})
        raw = body.get("doc")
        return from_solr_document(raw) if raw else None

    def upsert(self, doc: SearchDocument) -> None:
        """Overwrites the document with the same id, if any."""
        self._send(
            "POST",
            "/update",
            params={"commit": "true"},
            json={"add": {"doc": to_solr_document(doc), "overwrite": True}},
        )
        logger.info(f"Indexed document {doc.id}")

    def delete_by_id(self, document_id: str) -> None:
        """Deleting an id that is not indexed is not an error."""
        self._send(
            "POST",
            "/update",
            params={"commit": "true"},
            json={"delete": {"id": document_id}},
        )
        logger.info(f"Deleted document {document_id} from index")

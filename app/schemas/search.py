# app/schemas/search.py
import hashlib
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SORT = "start_dt asc"


class SearchDocument(BaseModel):
    """Denormalized index representation of an activity."""
    id: str
    activity_id: str
    session_id: str = ""
    name: str
    category: str
    location: str
    instructor: str = ""
    start_dt: Optional[str] = None
    end_dt: Optional[str] = None
    difficulty: int = 1
    price: float = 0.0
    tags: List[str] = Field(default_factory=list)
    updated_dt: Optional[str] = None


class SearchResult(BaseModel):
    total: int
    page: int
    size: int
    docs: List[SearchDocument] = Field(default_factory=list)


class SearchQuery(BaseModel):
    """Normalized read query. Two equal queries always share a cache key."""
    model_config = ConfigDict(frozen=True)

    text: str = ""
    category: str = ""
    location: str = ""
    date: str = ""
    sort: str = DEFAULT_SORT
    page: int = 1
    size: int = 10

    @classmethod
    def normalized(
        cls,
        text: Optional[str] = None,
        category: Optional[str] = None,
        location: Optional[str] = None,
        date: Optional[str] = None,
        sort: Optional[str] = None,
        page: int = 1,
        size: int = 10,
    ) -> "SearchQuery":
        return cls(
            text=(text or "").strip().lower(),
            category=(category or "").strip(),
            location=(location or "").strip(),
            date=(date or "").strip(),
            sort=(sort or "").strip() or DEFAULT_SORT,
            page=page,
            size=size,
        )

    @property
    def start(self) -> int:
        return max(0, (self.page - 1) * self.size)

    def cache_key(self) -> str:
        raw = "|".join(
            [
                self.text,
                self.category,
                self.location,
                self.date,
                self.sort,
                str(self.page),
                str(self.size),
            ]
        )
        return "q:" + hashlib.sha1(raw.encode("utf-8")).hexdigest()

"""
Pagination models shared by every list query.
One canonical shape, whatever the backend sent.
"""

import math
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field, field_validator

T = TypeVar('T')

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 50


def coerce_int(value: Any) -> Optional[int]:
    """Best-effort integer conversion; anything unusable becomes None"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            value = float(value)
        except ValueError:
            return None
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return int(value)
    return None


class PageMeta(BaseModel):
    """Pagination metadata as declared by the backend (every field optional)"""
    total: Optional[int] = None
    page: Optional[int] = None
    limit: Optional[int] = None
    total_pages: Optional[int] = Field(None, alias="totalPages")

    class Config:
        populate_by_name = True

    @field_validator("total", "page", "limit", "total_pages", mode="before")
    @classmethod
    def _lenient_int(cls, value: Any) -> Optional[int]:
        return coerce_int(value)


class PagedResult(BaseModel, Generic[T]):
    """Canonical paginated result"""
    items: List[T] = Field(default_factory=list)
    total: int = Field(0, ge=0)
    page: int = Field(DEFAULT_PAGE, ge=1)
    limit: int = Field(DEFAULT_LIMIT, ge=1)
    total_pages: int = Field(0, ge=0, alias="totalPages")

    class Config:
        populate_by_name = True

    @classmethod
    def empty(cls, page: Optional[int] = None, limit: Optional[int] = None) -> "PagedResult":
        return cls(
            items=[],
            total=0,
            page=page if page and page > 0 else DEFAULT_PAGE,
            limit=limit if limit and limit > 0 else DEFAULT_LIMIT,
            total_pages=0,
        )

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def next_page(self) -> Optional[int]:
        return self.page + 1 if self.has_next else None

    @property
    def prev_page(self) -> Optional[int]:
        return self.page - 1 if self.has_prev else None

    def to_payload(self) -> Dict[str, Any]:
        """Wire representation ({items, total, page, limit, totalPages})"""
        return self.model_dump(mode="json", by_alias=True)

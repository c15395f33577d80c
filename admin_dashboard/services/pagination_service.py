"""
Pagination service - turns whatever a list endpoint returned into a PagedResult.

Recognised payload shapes, tried in this order:
    [ ... ]                                   bare array
    {"items": [...], total?, page?, limit?, totalPages?, meta?}
    {"data": [...], meta?: {...}, total?, ...}
Anything else normalizes to an empty result. Normalizing never raises.
"""

import logging
from enum import Enum
from math import ceil
from typing import Any, List, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError, field_validator

from admin_dashboard.models.pagination import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    PagedResult,
    PageMeta,
    coerce_int,
)

logger = logging.getLogger(__name__)


class PageShape(str, Enum):
    ARRAY = "array"
    ITEMS = "items"
    DATA = "data"
    EMPTY = "empty"


def _first(*values: Optional[int]) -> Optional[int]:
    for value in values:
        if value is not None:
            return value
    return None


class _Envelope(PageMeta):
    """Top-level pagination fields plus an optional nested meta block"""
    meta: Optional[PageMeta] = None

    @field_validator("meta", mode="before")
    @classmethod
    def _meta_must_be_mapping(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, PageMeta)) else None

    def _meta(self) -> PageMeta:
        return self.meta or PageMeta()


class ItemsEnvelope(_Envelope):
    items: List[Any]

    def declared(self) -> PageMeta:
        # top-level fields win over meta
        meta = self._meta()
        return PageMeta(
            total=_first(self.total, meta.total),
            page=_first(self.page, meta.page),
            limit=_first(self.limit, meta.limit),
            total_pages=_first(self.total_pages, meta.total_pages),
        )


class DataEnvelope(_Envelope):
    data: List[Any]

    def declared(self) -> PageMeta:
        # meta wins over top-level fields
        meta = self._meta()
        return PageMeta(
            total=_first(meta.total, self.total),
            page=_first(meta.page, self.page),
            limit=_first(meta.limit, self.limit),
            total_pages=_first(meta.total_pages, self.total_pages),
        )


class PaginationService:
    """
    Centralized pagination logic for every list endpoint.

    The backend is allowed to drift: an unexpected shape degrades to an empty
    page instead of failing the whole screen.
    """

    @staticmethod
    def calculate_offset(page: int, limit: int) -> int:
        """Offset of the first item of a 1-indexed page"""
        return (page - 1) * limit

    @staticmethod
    def total_pages(total: int, limit: int) -> int:
        """ceil(total / limit), 0 when there is nothing to show"""
        if total <= 0 or limit <= 0:
            return 0
        return ceil(total / limit)

    @staticmethod
    def decode(payload: Any) -> Tuple[PageShape, List[Any], PageMeta]:
        """Try each known shape as a typed decode, in priority order"""
        if isinstance(payload, PagedResult):
            payload = payload.to_payload()

        if isinstance(payload, (list, tuple)):
            return PageShape.ARRAY, list(payload), PageMeta()

        if isinstance(payload, dict):
            for shape, envelope_cls in ((PageShape.ITEMS, ItemsEnvelope), (PageShape.DATA, DataEnvelope)):
                try:
                    envelope = envelope_cls.model_validate(payload)
                except ValidationError:
                    continue
                items = envelope.items if shape == PageShape.ITEMS else envelope.data
                return shape, items, envelope.declared()

        return PageShape.EMPTY, [], PageMeta()

    @staticmethod
    def detect_shape(payload: Any) -> PageShape:
        return PaginationService.decode(payload)[0]

    @staticmethod
    def normalize(
        payload: Any,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        item_model: Optional[Type[BaseModel]] = None,
    ) -> PagedResult:
        """
        Normalize a raw list payload.

        Args:
            payload: decoded JSON body
            page, limit: what was requested; used when the payload is silent
            item_model: optional pydantic model each item is validated into

        Returns:
            PagedResult (parametrized with item_model when given)
        """
        requested_page = PaginationService._positive(page)
        requested_limit = PaginationService._positive(limit)

        shape, raw_items, declared = PaginationService.decode(payload)

        if shape == PageShape.EMPTY:
            logger.debug(f"📭 Unrecognised list payload ({type(payload).__name__}), using empty page")
            items: List[Any] = []
            total = 0
            page_no = requested_page or DEFAULT_PAGE
            page_size = requested_limit or DEFAULT_LIMIT
            pages = 0
        elif shape == PageShape.ARRAY:
            items, total, page_no, page_size, pages = PaginationService._from_array(
                raw_items, requested_page, requested_limit
            )
        else:
            items, total, page_no, page_size, pages = PaginationService._from_envelope(
                raw_items, declared, requested_page, requested_limit
            )

        result_cls = PagedResult
        if item_model is not None:
            items = PaginationService.parse_items(items, item_model)
            result_cls = PagedResult[item_model]

        logger.debug(
            f"📄 Normalized {shape.value} payload: page={page_no}, limit={page_size}, "
            f"total={total}, pages={pages}, returned={len(items)}"
        )
        return result_cls(items=items, total=total, page=page_no, limit=page_size, total_pages=pages)

    @staticmethod
    def parse_items(raw_items: List[Any], item_model: Type[BaseModel]) -> List[Any]:
        """Validate items one by one; malformed ones are dropped, never raised"""
        parsed = []
        for index, raw in enumerate(raw_items):
            if isinstance(raw, item_model):
                parsed.append(raw)
                continue
            try:
                parsed.append(item_model.model_validate(raw))
            except ValidationError as e:
                logger.warning(
                    f"⚠️ Dropping malformed {item_model.__name__} at index {index}: "
                    f"{e.error_count()} validation error(s)"
                )
        return parsed

    @staticmethod
    def _positive(value: Any) -> Optional[int]:
        number = coerce_int(value)
        return number if number is not None and number > 0 else None

    @staticmethod
    def _from_array(items: List[Any], requested_page: Optional[int], requested_limit: Optional[int]):
        total = len(items)
        page_no = requested_page or DEFAULT_PAGE
        page_size = requested_limit or total or DEFAULT_LIMIT

        if total > page_size:
            # Server ignored paging and sent everything; cut the requested window
            offset = PaginationService.calculate_offset(page_no, page_size)
            items = items[offset:offset + page_size]

        return items, total, page_no, page_size, PaginationService.total_pages(total, page_size)

    @staticmethod
    def _from_envelope(
        items: List[Any],
        declared: PageMeta,
        requested_page: Optional[int],
        requested_limit: Optional[int],
    ):
        total = declared.total if declared.total is not None and declared.total >= 0 else len(items)
        page_no = PaginationService._positive(declared.page) or requested_page or DEFAULT_PAGE
        page_size = PaginationService._positive(declared.limit) or requested_limit or len(items) or DEFAULT_LIMIT

        if len(items) > page_size:
            logger.debug(f"📏 Page holds {len(items)} items but limit is {page_size}; widening limit")
            page_size = len(items)

        pages = declared.total_pages
        if pages is None or pages < 0 or (pages == 0) != (total == 0):
            pages = PaginationService.total_pages(total, page_size)

        return items, total, page_no, page_size, pages


# Singleton
pagination_service = PaginationService()
normalize_page = PaginationService.normalize

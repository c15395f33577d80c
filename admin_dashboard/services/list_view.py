#!/usr/bin/env python3
"""
Paged list state for one resource screen
Only the response to the most recent request is applied, and nothing is
applied once the view has been closed.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from admin_dashboard.exceptions import ApiError, AuthenticationError
from admin_dashboard.models.pagination import PagedResult

logger = logging.getLogger(__name__)

# Page sizes used by each dashboard screen
ORDERS_PAGE_SIZE = 10
PAYMENTS_PAGE_SIZE = 12
ENROLLMENTS_PAGE_SIZE = 12
DRAFTS_PAGE_SIZE = 10
COURSES_PAGE_SIZE = 100

FetchPage = Callable[..., Awaitable[PagedResult]]


class RequestSequencer:
    """Hands out increasing tickets; only the newest one may apply its response"""

    def __init__(self):
        self._latest = 0
        self.closed = False

    @property
    def latest(self) -> int:
        return self._latest

    def issue(self) -> int:
        self._latest += 1
        return self._latest

    def is_current(self, ticket: int) -> bool:
        return not self.closed and ticket == self._latest

    def close(self) -> None:
        self.closed = True


class PagedListView:
    """State behind one paginated table (orders, payments, enrollments, courses)"""

    def __init__(
        self,
        fetch: FetchPage,
        page_size: int = 10,
        name: str = "records",
        error_message: Optional[str] = None,
    ):
        self.fetch = fetch
        self.page_size = page_size
        self.name = name
        self.error_message = error_message or f"Failed to load {name}."

        self.items: List[Any] = []
        self.total = 0
        self.total_pages = 0
        self.page = 1
        self.filters: Dict[str, Any] = {}
        self.loading = False
        self.error: Optional[str] = None

        self._sequencer = RequestSequencer()

    @property
    def closed(self) -> bool:
        return self._sequencer.closed

    def close(self) -> None:
        """Tear the view down; in-flight responses will be ignored"""
        self._sequencer.close()

    async def load(self, page: Optional[int] = None, **filters: Any) -> bool:
        """
        Fetch a page and apply it if it is still the latest request.

        Filters passed here are merged into the current ones (None clears a
        filter) and send the view back to page 1 unless a page is given.

        Returns:
            True when the response was applied to the view
        """
        if self.closed:
            return False

        if filters:
            for key, value in filters.items():
                if value is None:
                    self.filters.pop(key, None)
                else:
                    self.filters[key] = value
            if page is None:
                page = 1
        if page is not None:
            self.page = max(1, page)

        ticket = self._sequencer.issue()
        requested_page = self.page
        self.loading = True
        self.error = None

        try:
            result = await self.fetch(page=requested_page, limit=self.page_size, **self.filters)
        except AuthenticationError:
            # token already cleared and redirect signalled by the auth guard
            logger.warning(f"🚫 Loading {self.name} rejected: not authenticated")
            if self._sequencer.is_current(ticket):
                self.loading = False
            return False
        except ApiError as e:
            logger.error(f"❌ Failed to load {self.name}: {e.message}")
            if self._sequencer.is_current(ticket):
                self.error = e.message or self.error_message
                self.loading = False
            return False

        if not self._sequencer.is_current(ticket):
            logger.debug(
                f"⏭️ Discarding stale {self.name} response (request {ticket}, latest {self._sequencer.latest})"
            )
            return False

        self.items = list(result.items)
        self.total = result.total
        self.total_pages = result.total_pages
        self.page = result.page
        self.loading = False
        return True

    async def reload(self) -> bool:
        return await self.load(self.page)

    async def next_page(self) -> bool:
        if self.page < self.total_pages:
            return await self.load(self.page + 1)
        return False

    async def prev_page(self) -> bool:
        if self.page > 1:
            return await self.load(self.page - 1)
        return False

    def search(self, query: str) -> List[Any]:
        """Client-side text search over the loaded page"""
        if not (query or "").strip():
            return list(self.items)
        return [item for item in self.items if hasattr(item, "matches") and item.matches(query)]

    def find(self, record_id: str) -> Optional[Any]:
        for item in self.items:
            if getattr(item, "identifier", None) == record_id:
                return item
        return None

#!/usr/bin/env python3
"""
Newsletter draft editing

Two sources of truth are reconciled here: the remote draft list and a single
autosaved draft kept in a local key/value store. Editing is fully optimistic.

States:
    REMOTE          list mirrors the last successful fetch
    LOCAL_FALLBACK  fetch failed, showing the autosaved draft instead
    DIRTY           local changes the backend has not confirmed
    SYNCED          the last local change was confirmed by the backend

Precedence rules:
    - a successful fetch replaces the list, except that a DIRTY selected draft
      keeps its local edits over the remote copy with the same draftId
    - a failed fetch shows the autosaved draft when there is one, otherwise
      leaves the list untouched
    - confirmation from the backend replaces the local copy and clears the
      autosave, unless the draft was edited again while the call was in flight
"""

import json
import logging
import random
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional, Set

from pydantic import ValidationError

from admin_dashboard.api.newsletter import SEND_ERROR_MESSAGE, NewsletterApi
from admin_dashboard.exceptions import ApiError, AuthenticationError, DashboardError
from admin_dashboard.models.schemas import Draft
from admin_dashboard.services.kv_store import MemoryStore
from admin_dashboard.services.list_view import DRAFTS_PAGE_SIZE, RequestSequencer
from admin_dashboard.services.pagination_service import PaginationService

logger = logging.getLogger(__name__)

AUTOSAVE_KEY = "newsletter-draft-autosave"
NEW_DRAFT_TITLE = "Untitled Draft"


class DraftSyncState(str, Enum):
    REMOTE = "remote"
    LOCAL_FALLBACK = "local_fallback"
    DIRTY = "dirty"
    SYNCED = "synced"


ALLOWED_TRANSITIONS: Dict[DraftSyncState, Set[DraftSyncState]] = {
    DraftSyncState.REMOTE: {DraftSyncState.REMOTE, DraftSyncState.LOCAL_FALLBACK, DraftSyncState.DIRTY},
    DraftSyncState.LOCAL_FALLBACK: {DraftSyncState.REMOTE, DraftSyncState.LOCAL_FALLBACK, DraftSyncState.DIRTY},
    DraftSyncState.DIRTY: set(DraftSyncState),
    DraftSyncState.SYNCED: {DraftSyncState.REMOTE, DraftSyncState.LOCAL_FALLBACK, DraftSyncState.DIRTY},
}


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_draft_id() -> str:
    return f"DR-{random.randint(1000, 9999)}"


class DraftEditor:
    """State behind the newsletter screen"""

    def __init__(
        self,
        newsletter_api: NewsletterApi,
        autosave_store: Optional[MemoryStore] = None,
        page_size: int = DRAFTS_PAGE_SIZE,
        clock: Callable[[], str] = _utc_now,
        id_factory: Callable[[], str] = _new_draft_id,
    ):
        self.api = newsletter_api
        self.store = autosave_store if autosave_store is not None else MemoryStore()
        self.page_size = page_size
        self._now = clock
        self._new_id = id_factory

        self.drafts: List[Draft] = []
        self.selected: Optional[Draft] = None
        self.page = 1
        self.total = 0
        self.total_pages = 0
        self.state = DraftSyncState.REMOTE
        self.loading = False
        self.error: Optional[str] = None

        self.is_sending = False
        self.send_success = False
        self.send_error: Optional[str] = None

        self._sequencer = RequestSequencer()

    # ------------------------------------------------------------------
    # state helpers
    # ------------------------------------------------------------------

    def _move_to(self, state: DraftSyncState) -> None:
        if state not in ALLOWED_TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal draft state transition {self.state.value} -> {state.value}")
        if state != self.state:
            logger.debug(f"🔄 Draft state {self.state.value} -> {state.value}")
        self.state = state

    def _select(self, draft: Optional[Draft]) -> None:
        """Change the selection; every selected draft is autosaved"""
        self.selected = draft
        if draft is not None:
            self.store.set(AUTOSAVE_KEY, draft.to_payload())

    def _replace(self, draft_id: Optional[str], draft: Draft) -> None:
        self.drafts = [draft if d.draft_id == draft_id else d for d in self.drafts]

    def _recount(self) -> None:
        self.total_pages = PaginationService.total_pages(self.total, self.page_size)

    def find(self, draft_id: str) -> Optional[Draft]:
        for draft in self.drafts:
            if draft.draft_id == draft_id:
                return draft
        return None

    def autosaved(self) -> Optional[Draft]:
        """Draft currently held in the autosave store, if readable"""
        raw = self.store.get(AUTOSAVE_KEY)
        if raw is None:
            return None
        try:
            if isinstance(raw, str):
                raw = json.loads(raw)
            return Draft.model_validate(raw)
        except (ValueError, ValidationError) as e:
            logger.warning(f"⚠️ Ignoring unreadable autosaved draft: {e}")
            return None

    @property
    def closed(self) -> bool:
        return self._sequencer.closed

    def close(self) -> None:
        self._sequencer.close()

    # ------------------------------------------------------------------
    # loading
    # ------------------------------------------------------------------

    async def load(self, page: Optional[int] = None) -> bool:
        """Fetch a page of drafts; returns True when the view changed"""
        if self.closed:
            return False
        if page is not None:
            self.page = max(1, page)

        ticket = self._sequencer.issue()
        self.loading = True
        self.error = None

        try:
            result = await self.api.list(page=self.page, limit=self.page_size)
        except AuthenticationError:
            if self._sequencer.is_current(ticket):
                self.loading = False
            return False
        except ApiError as e:
            if not self._sequencer.is_current(ticket):
                return False
            self.loading = False
            return self._fall_back_to_autosave(e)

        if not self._sequencer.is_current(ticket):
            logger.debug(f"⏭️ Discarding stale drafts response (request {ticket})")
            return False

        self.loading = False
        self.total = result.total
        self.total_pages = result.total_pages
        drafts = list(result.items)

        pending = self.selected if self.state == DraftSyncState.DIRTY else None
        if pending is not None and any(d.draft_id == pending.draft_id for d in drafts):
            self.drafts = [pending if d.draft_id == pending.draft_id else d for d in drafts]
            self._select(pending)
            self._move_to(DraftSyncState.DIRTY)
            return True

        self.drafts = drafts
        previous_id = self.selected.draft_id if self.selected is not None else None
        match = next((d for d in drafts if d.draft_id == previous_id), None) if previous_id else None
        if match is not None:
            self._select(match)
        elif drafts:
            self._select(drafts[0])
        else:
            self.selected = None
        self._move_to(DraftSyncState.REMOTE)
        return True

    def _fall_back_to_autosave(self, error: ApiError) -> bool:
        draft = self.autosaved()
        if draft is None:
            logger.error(f"❌ Failed to load drafts and nothing autosaved: {error.message}")
            self.error = error.message
            return False

        logger.warning(f"📴 Drafts unavailable ({error.message}), showing autosaved draft {draft.draft_id}")
        draft = draft.model_copy(update={"updated_at": self._now()})
        self.drafts = [draft]
        self._select(draft)
        self.total = 1
        self.total_pages = 1
        self._move_to(DraftSyncState.LOCAL_FALLBACK)
        return True

    async def next_page(self) -> bool:
        if self.page < self.total_pages:
            return await self.load(self.page + 1)
        return False

    async def prev_page(self) -> bool:
        if self.page > 1:
            return await self.load(self.page - 1)
        return False

    # ------------------------------------------------------------------
    # editing
    # ------------------------------------------------------------------

    def select(self, draft_id: str) -> Optional[Draft]:
        draft = self.find(draft_id)
        if draft is not None:
            self._select(draft)
        return draft

    def edit(self, title: Optional[str] = None, content: Optional[str] = None) -> Optional[Draft]:
        """Apply an edit to the selected draft immediately, before any save"""
        if self.selected is None:
            return None
        updates = {key: value for key, value in (("title", title), ("content", content)) if value is not None}
        if not updates:
            return self.selected

        edited = self.selected.model_copy(update=updates)
        self._replace(edited.draft_id, edited)
        self._select(edited)
        self._move_to(DraftSyncState.DIRTY)
        return edited

    async def new_draft(self) -> Draft:
        draft = Draft(draft_id=self._new_id(), title=NEW_DRAFT_TITLE, content="", updated_at=self._now())
        self.drafts.insert(0, draft)
        self._select(draft)
        self._move_to(DraftSyncState.DIRTY)

        try:
            created = await self.api.create(draft)
        except DashboardError as e:
            # keep the optimistic draft; it can still be saved later
            logger.warning(f"⚠️ Draft {draft.draft_id} kept locally: {e.message}")
            self.error = e.message
            return draft

        self._count_created()
        return self._confirm(draft, created)

    async def save(self) -> Optional[Draft]:
        if self.selected is None:
            return None

        draft = self.selected.model_copy(update={"updated_at": self._now()})
        self._replace(draft.draft_id, draft)
        self._select(draft)
        self._move_to(DraftSyncState.DIRTY)

        try:
            if draft.identifier:
                saved = await self.api.update(draft.identifier, draft)
            else:
                saved = await self.api.create(draft)
                self._count_created()
        except DashboardError as e:
            logger.warning(f"⚠️ Draft {draft.draft_id} not saved: {e.message}")
            self.error = e.message
            return None

        return self._confirm(draft, saved)

    def _count_created(self) -> None:
        # a load that landed meanwhile already carries the server's totals
        if self.state == DraftSyncState.DIRTY:
            self.total += 1
            self.total_pages = max(1, PaginationService.total_pages(self.total, self.page_size))

    def _confirm(self, sent: Draft, confirmed: Draft) -> Draft:
        """Reconcile a backend confirmation of `sent` with the current local state"""
        if self.selected is not None and self.selected is not sent and self.selected.draft_id == sent.draft_id:
            # edited again while the call was in flight: keep the edits, adopt the server id
            merged = self.selected.model_copy(update={"record_id": confirmed.record_id})
            self._replace(sent.draft_id, merged)
            self._select(merged)
            return merged

        self._replace(sent.draft_id, confirmed)
        if self.selected is sent:
            self.selected = confirmed
            self.store.delete(AUTOSAVE_KEY)

        if self.state != DraftSyncState.DIRTY:
            # a load finished while the call was in flight; the list it applied stands
            logger.debug(f"🔄 Draft {sent.draft_id} confirmed after a reload, staying {self.state.value}")
            return confirmed

        self.error = None
        self._move_to(DraftSyncState.SYNCED)
        return confirmed

    def _remove_local(self, draft_id: str) -> None:
        self.drafts = [d for d in self.drafts if d.draft_id != draft_id]
        if self.selected is not None and self.selected.draft_id == draft_id:
            self._select(self.drafts[0] if self.drafts else None)

    async def delete(self, draft_id: str) -> bool:
        target = self.find(draft_id)
        if target is None:
            return False

        self._remove_local(draft_id)
        autosaved = self.autosaved()
        if autosaved is not None and autosaved.draft_id == draft_id:
            self.store.delete(AUTOSAVE_KEY)
        self._move_to(DraftSyncState.DIRTY)

        if target.identifier:
            try:
                await self.api.remove(target.identifier)
            except DashboardError as e:
                # left removed locally; the next load reconciles with the backend
                logger.warning(f"⚠️ Draft {draft_id} not deleted remotely: {e.message}")
                self.error = e.message
                return False

            # a load during the call may have brought it back
            self._remove_local(draft_id)
            if self.state != DraftSyncState.DIRTY:
                logger.debug(f"🔄 Draft {draft_id} deleted after a reload, staying {self.state.value}")
                return True
            self.total = max(0, self.total - 1)
            self._recount()

        self._move_to(DraftSyncState.SYNCED)
        if not self.drafts and self.page > 1:
            await self.load(self.page - 1)
        return True

    # ------------------------------------------------------------------
    # sending
    # ------------------------------------------------------------------

    async def send(self) -> bool:
        """Send the selected draft; a second call while one is in flight is ignored"""
        if self.selected is None or self.is_sending:
            return False

        self.is_sending = True
        self.send_success = False
        self.send_error = None
        try:
            await self.api.send(self.selected)
        except DashboardError as e:
            self.send_error = e.message or SEND_ERROR_MESSAGE
            logger.error(f"❌ Newsletter send failed: {self.send_error}")
            return False
        finally:
            self.is_sending = False

        self.send_success = True
        self.store.delete(AUTOSAVE_KEY)
        return True

"""
Newsletter drafts resource client
CRUD on /newsletter, send via POST /newsletter/{id}, subscriber count
"""

import logging
from typing import Any, Dict, Optional, Union

from admin_dashboard.api.base import ResourceApi, require_id
from admin_dashboard.models.pagination import PagedResult, coerce_int
from admin_dashboard.models.schemas import Draft

logger = logging.getLogger(__name__)

SEND_ERROR_MESSAGE = "Failed to send newsletter. Please try again."


def _payload(draft: Union[Draft, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(draft, Draft):
        return draft.to_payload()
    return dict(draft)


class NewsletterApi(ResourceApi):
    path = "newsletter"
    label = "newsletter drafts"
    record_model = Draft

    async def list(self, page: Optional[int] = None, limit: Optional[int] = None) -> PagedResult[Draft]:
        return await self._list(page=page, limit=limit)

    async def create(self, draft: Union[Draft, Dict[str, Any]]) -> Draft:
        payload = _payload(draft)
        body = await self.client.post(self.path, json_body=payload, error_message="Failed to create draft.")
        created = self._to_record(body, sent=payload)
        logger.info(f"📝 Draft created: {created.draft_id} ({created.identifier})")
        return created

    async def update(self, draft_id: str, draft: Union[Draft, Dict[str, Any]]) -> Draft:
        draft_id = require_id(draft_id, "draft")
        payload = _payload(draft)
        body = await self.client.put(self._item_path(draft_id), json_body=payload, error_message="Failed to save draft.")
        return self._to_record(body, sent=payload)

    async def remove(self, draft_id: str) -> None:
        draft_id = require_id(draft_id, "draft")
        await self.client.delete(self._item_path(draft_id), error_message="Failed to delete draft.")
        logger.info(f"🗑️ Draft {draft_id} deleted")

    async def send(self, draft: Draft) -> Any:
        """Send a draft to all subscribers. Not idempotent: every call sends again."""
        draft_id = require_id(draft.identifier, "draft")
        body = await self.client.post(self._item_path(draft_id), json_body={}, error_message=SEND_ERROR_MESSAGE)
        logger.info(f"📨 Newsletter sent from draft {draft_id}")
        return body

    async def subscribers_count(self) -> int:
        body = await self.client.get(f"{self.path}/subscription/count", error_message="Failed to load subscribers.")
        count = coerce_int(body.get("count")) if isinstance(body, dict) else None
        return count if count is not None and count >= 0 else 0

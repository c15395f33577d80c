"""
Shared plumbing for the per-resource clients
"""

import logging
from typing import Any, Dict, Optional, Type

from pydantic import ValidationError

from admin_dashboard.exceptions import ServerError, ValidationFailure
from admin_dashboard.models.pagination import PagedResult
from admin_dashboard.models.schemas import ResourceRecord
from admin_dashboard.services.api_client import ApiClient
from admin_dashboard.services.pagination_service import normalize_page

logger = logging.getLogger(__name__)


def require_id(record_id: Optional[str], what: str = "record") -> str:
    if record_id is None or not str(record_id).strip():
        raise ValidationFailure(f"A {what} identifier is required", field="id")
    return str(record_id).strip()


class ResourceApi:
    """Typed facade over one backend collection"""

    path: str = ""
    label: str = "records"
    record_model: Type[ResourceRecord] = ResourceRecord

    def __init__(self, client: ApiClient):
        self.client = client

    def _item_path(self, record_id: str) -> str:
        return f"{self.path}/{record_id}"

    async def _list(self, page: Optional[int] = None, limit: Optional[int] = None, **filters: Any) -> PagedResult:
        params: Dict[str, Any] = {"page": page, "limit": limit}
        params.update(filters)
        body = await self.client.get(self.path, params=params, error_message=f"Failed to load {self.label}.")
        result = normalize_page(body, page=page, limit=limit, item_model=self.record_model)
        logger.info(f"📄 Loaded {self.label}: page={result.page}, returned={len(result.items)}, total={result.total}")
        return result

    async def _get(self, record_id: str) -> ResourceRecord:
        record_id = require_id(record_id)
        body = await self.client.get(self._item_path(record_id), error_message=f"Failed to load {self.label}.")
        return self._to_record(body)

    def _to_record(self, body: Any, sent: Optional[Dict[str, Any]] = None) -> ResourceRecord:
        """Build a record from a single-object response, tolerating a {data: {...}} wrapper"""
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            body = body["data"]
        data = dict(sent or {})
        if isinstance(body, dict):
            data.update(body)
        try:
            return self.record_model.model_validate(data)
        except ValidationError as e:
            logger.error(f"❌ Unexpected {self.record_model.__name__} response: {e.error_count()} error(s)")
            raise ServerError("Unexpected response from server", response_body=body) from e

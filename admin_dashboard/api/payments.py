"""
Payments resource client (read only)
"""

from typing import Optional

from admin_dashboard.api.base import ResourceApi
from admin_dashboard.models.pagination import PagedResult
from admin_dashboard.models.schemas import Payment


class PaymentsApi(ResourceApi):
    path = "payments"
    label = "payments"
    record_model = Payment

    async def list(self, page: Optional[int] = None, limit: Optional[int] = None) -> PagedResult[Payment]:
        return await self._list(page=page, limit=limit)

    async def get(self, payment_id: str) -> Payment:
        return await self._get(payment_id)

"""
Orders resource client
GET /orders, PUT /orders/{id}/status
"""

import logging
from typing import Optional, Union

from admin_dashboard.api.base import ResourceApi, require_id
from admin_dashboard.exceptions import ValidationFailure
from admin_dashboard.models.pagination import PagedResult
from admin_dashboard.models.schemas import Order, OrderStatus

logger = logging.getLogger(__name__)

ALL_STATUSES = "All"


def parse_status(status: Union[OrderStatus, str]) -> OrderStatus:
    try:
        parsed = OrderStatus(status)
    except ValueError:
        parsed = OrderStatus.UNKNOWN
    if parsed == OrderStatus.UNKNOWN:
        raise ValidationFailure(f"Unknown order status: {status}", field="status")
    return parsed


class OrdersApi(ResourceApi):
    path = "orders"
    label = "orders"
    record_model = Order

    async def list(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        status: Optional[Union[OrderStatus, str]] = None,
    ) -> PagedResult[Order]:
        """List orders, optionally filtered by status ("All" means no filter)"""
        if status == ALL_STATUSES or status == "":
            status = None
        elif status is not None:
            status = parse_status(status)
        return await self._list(page=page, limit=limit, status=status)

    async def update_status(self, order_id: str, status: Union[OrderStatus, str]) -> None:
        order_id = require_id(order_id, "order")
        status = parse_status(status)
        await self.client.put(
            f"{self.path}/{order_id}/status",
            json_body={"status": status.value},
            error_message="Failed to update order status.",
        )
        logger.info(f"📦 Order {order_id} status set to {status.value}")

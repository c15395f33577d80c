"""
Dashboard home: latest orders, latest drafts and subscriber count
"""

import logging
from typing import List, Optional

from admin_dashboard.api.client import DashboardApi
from admin_dashboard.exceptions import ApiError, AuthenticationError
from admin_dashboard.models.schemas import DashboardOverview, Draft, Order
from admin_dashboard.services.order_status_service import OrderStatusCoordinator

logger = logging.getLogger(__name__)

RECENT_LIMIT = 3


class DashboardService:
    def __init__(self, api: DashboardApi):
        self.api = api
        self.overview: Optional[DashboardOverview] = None
        self.coordinator: Optional[OrderStatusCoordinator] = None

    async def load_overview(self) -> DashboardOverview:
        """Load everything the home screen shows; API errors propagate to the caller"""
        orders = await self._recent_orders()
        drafts = await self._recent_drafts()
        subscribers = await self.api.newsletter.subscribers_count()

        self.overview = DashboardOverview(
            recent_orders=orders,
            recent_drafts=drafts,
            subscribers_count=subscribers,
        )
        # quick actions on the home screen act on the same order objects
        self.coordinator = OrderStatusCoordinator(self.api.orders, self.overview.recent_orders)

        logger.info(
            f"📊 Overview: {len(orders)} orders ({self.overview.pending_orders} pending), "
            f"{len(drafts)} drafts, {subscribers} subscribers"
        )
        return self.overview

    async def _recent_orders(self) -> List[Order]:
        try:
            result = await self.api.orders.list(page=1, limit=RECENT_LIMIT)
        except AuthenticationError:
            raise
        except ApiError as e:
            logger.warning(f"⚠️ Paged orders request failed ({e.message}), retrying without paging")
            result = await self.api.orders.list()
        return list(result.items)[:RECENT_LIMIT]

    async def _recent_drafts(self) -> List[Draft]:
        try:
            result = await self.api.newsletter.list(page=1, limit=RECENT_LIMIT)
        except AuthenticationError:
            raise
        except ApiError as e:
            logger.warning(f"⚠️ Paged drafts request failed ({e.message}), retrying without paging")
            result = await self.api.newsletter.list()
        return list(result.items)[:RECENT_LIMIT]

#!/usr/bin/env python3
"""
Order status changes from the dashboard

Flow for every action:
  1. refuse unknown orders and transitions the lifecycle does not allow
  2. refuse if the order already has a change in flight, else mark it busy
  3. call the backend
  4. success: write the requested status locally (no re-fetch)
  5. failure: keep the local order as it was, expose the error message
  6. clear busy either way
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from admin_dashboard.api.orders import OrdersApi
from admin_dashboard.exceptions import DashboardError
from admin_dashboard.models.schemas import Order, OrderStatus, is_legal_transition

logger = logging.getLogger(__name__)

UPDATE_ERROR_MESSAGE = "Failed to update order status."


class OrderAction(str, Enum):
    ACCEPT = "accept"
    DECLINE = "decline"
    SHIP = "ship"
    DELIVER = "deliver"


ACTION_TARGETS: Dict[OrderAction, OrderStatus] = {
    OrderAction.ACCEPT: OrderStatus.ACCEPTED,
    OrderAction.DECLINE: OrderStatus.DECLINED,
    OrderAction.SHIP: OrderStatus.SHIPPED,
    OrderAction.DELIVER: OrderStatus.DELIVERED,
}


@dataclass
class MutationResult:
    """Outcome of one status change attempt"""
    applied: bool
    status: Optional[OrderStatus] = None
    error: Optional[str] = None
    skipped: Optional[str] = None  # why nothing was attempted


class OrderStatusCoordinator:
    """
    Applies status changes to a set of loaded orders.

    `source` is either a list of orders or anything exposing one as `.items`
    (a PagedListView); local updates replace the order in that list.
    """

    def __init__(self, orders_api: OrdersApi, source: Any):
        self.orders_api = orders_api
        self.source = source
        self.busy: Dict[str, OrderAction] = {}
        self.error: Optional[str] = None

    def _orders(self) -> List[Order]:
        return self.source if isinstance(self.source, list) else self.source.items

    def find(self, order_id: str) -> Optional[Order]:
        for order in self._orders():
            if order.identifier == order_id:
                return order
        return None

    def is_busy(self, order_id: str) -> bool:
        return order_id in self.busy

    @staticmethod
    def is_action_enabled(action: Union[OrderAction, str], status: OrderStatus) -> bool:
        return is_legal_transition(status, ACTION_TARGETS[OrderAction(action)])

    def available_actions(self, order: Order) -> List[OrderAction]:
        if self.is_busy(order.identifier):
            return []
        return [action for action in OrderAction if self.is_action_enabled(action, order.status)]

    def _set_local_status(self, order_id: str, status: OrderStatus) -> None:
        orders = self._orders()
        for index, order in enumerate(orders):
            if order.identifier == order_id:
                orders[index] = order.model_copy(update={"status": status, "raw_status": None})

    async def perform(self, order_id: str, action: Union[OrderAction, str]) -> MutationResult:
        action = OrderAction(action)
        order = self.find(order_id)
        if order is None:
            logger.info(f"⏭️ Ignoring {action.value}: order {order_id} is not loaded")
            return MutationResult(applied=False, skipped="unknown order")

        target = ACTION_TARGETS[action]
        if not is_legal_transition(order.status, target):
            logger.info(f"⏭️ Ignoring {action.value} on order {order_id}: {order.status.value} -> {target.value} not allowed")
            return MutationResult(applied=False, status=order.status, skipped="transition not allowed")

        if self.is_busy(order_id):
            logger.info(f"⏳ Order {order_id} already has a change in flight")
            return MutationResult(applied=False, status=order.status, skipped="busy")

        self.busy[order_id] = action
        self.error = None
        try:
            await self.orders_api.update_status(order_id, target)
        except DashboardError as e:
            self.error = e.message or UPDATE_ERROR_MESSAGE
            logger.error(f"❌ Failed to {action.value} order {order_id}: {self.error}")
            return MutationResult(applied=False, status=order.status, error=self.error)
        finally:
            self.busy.pop(order_id, None)

        self._set_local_status(order_id, target)
        logger.info(f"✅ Order {order_id}: {order.status.value} -> {target.value}")
        return MutationResult(applied=True, status=target)

    async def change_status(self, order_id: str, status: Union[OrderStatus, str]) -> MutationResult:
        """Move an order to `status` through whichever action leads there"""
        status = OrderStatus(status)
        for action, target in ACTION_TARGETS.items():
            if target == status:
                return await self.perform(order_id, action)
        logger.info(f"⏭️ No action leads to {status.value}; order {order_id} unchanged")
        return MutationResult(applied=False, skipped="transition not allowed")

    async def accept(self, order_id: str) -> MutationResult:
        return await self.perform(order_id, OrderAction.ACCEPT)

    async def decline(self, order_id: str) -> MutationResult:
        return await self.perform(order_id, OrderAction.DECLINE)

    async def ship(self, order_id: str) -> MutationResult:
        return await self.perform(order_id, OrderAction.SHIP)

    async def deliver(self, order_id: str) -> MutationResult:
        return await self.perform(order_id, OrderAction.DELIVER)

#!/usr/bin/env python3
"""
Pydantic models for the records managed from the dashboard
Field names follow python conventions; wire names (camelCase, _id) are aliases
"""

import logging
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


# =============================================================================
# ENUMS
# =============================================================================

class OrderStatus(str, Enum):
    """Order lifecycle states"""
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    DECLINED = "Declined"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    UNKNOWN = "Unknown"  # anything else the backend reports

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value.lower() == lowered:
                    return member
        return None


# Forward transitions offered to staff; everything else is refused client-side
ORDER_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.ACCEPTED, OrderStatus.DECLINED}),
    OrderStatus.ACCEPTED: frozenset({OrderStatus.SHIPPED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
}


def is_legal_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ORDER_TRANSITIONS.get(current, frozenset())


class PaymentStatus(str, Enum):
    """Payment states (anything unknown maps to OTHER)"""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    OTHER = "other"


# =============================================================================
# BASE RECORD
# =============================================================================

class ResourceRecord(BaseModel):
    """
    Common base for every backend record.

    Accepts both the database identifier (`_id`) and a plain `id`. Fields the
    client does not model are kept and exposed through `extensions`.
    """
    SEARCH_FIELDS: ClassVar[Tuple[str, ...]] = ()

    record_id: Optional[str] = Field(None, alias="_id")
    id: Optional[str] = None

    class Config:
        populate_by_name = True
        extra = "allow"
        coerce_numbers_to_str = True

    @property
    def identifier(self) -> Optional[str]:
        return self.record_id or self.id

    @property
    def extensions(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})

    def to_payload(self) -> Dict[str, Any]:
        """JSON body for the backend (wire names, unset values omitted)"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def matches(self, query: str) -> bool:
        """Case-insensitive substring search over SEARCH_FIELDS"""
        needle = (query or "").strip().lower()
        if not needle:
            return True
        for name in self.SEARCH_FIELDS:
            value = getattr(self, name, None)
            if isinstance(value, Enum):
                value = value.value
            if value is None or value == "":
                continue
            if needle in str(value).lower():
                return True
        return False


# =============================================================================
# ORDERS
# =============================================================================

class Order(ResourceRecord):
    SEARCH_FIELDS: ClassVar[Tuple[str, ...]] = ("id", "customer", "email", "status_label", "total", "order_id")

    order_id: Optional[str] = Field(None, alias="orderId")
    customer: Optional[str] = None
    email: Optional[str] = None
    total: Optional[str] = None  # currency formatted, e.g. "$120.00"
    date: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    raw_status: Optional[str] = Field(None, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def _tolerate_unknown_status(cls, data: Any) -> Any:
        """Statuses this client does not know are listed as UNKNOWN, never dropped"""
        if not isinstance(data, dict):
            return data
        value = data.get("status")
        if isinstance(value, str):
            try:
                OrderStatus(value)
            except ValueError:
                order = data.get("_id") or data.get("id") or data.get("orderId")
                logger.warning(f"⚠️ Order {order} has unknown status {value!r}, listed as {OrderStatus.UNKNOWN.value}")
                data = {**data, "status": OrderStatus.UNKNOWN, "raw_status": value}
        return data

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value: Any) -> Any:
        if value is None:
            return OrderStatus.PENDING
        if isinstance(value, str):
            return OrderStatus(value)
        return value

    @property
    def status_label(self) -> str:
        """Status as the backend sent it"""
        return self.raw_status or self.status.value


# =============================================================================
# PAYMENTS
# =============================================================================

class Payment(ResourceRecord):
    SEARCH_FIELDS: ClassVar[Tuple[str, ...]] = ("reference", "email", "payer_name", "method", "status")

    reference: Optional[str] = None
    payer_name: Optional[str] = Field(None, alias="payerName")
    email: Optional[str] = None
    phone: Optional[str] = None
    amount: Optional[float] = None
    currency: Optional[str] = None
    status: Optional[str] = None
    method: Optional[str] = None
    created_at: Optional[str] = Field(None, alias="createdAt")
    meta: Optional[Any] = None

    @property
    def status_kind(self) -> PaymentStatus:
        try:
            return PaymentStatus((self.status or "").lower())
        except ValueError:
            return PaymentStatus.OTHER


# =============================================================================
# ENROLLMENTS
# =============================================================================

class CourseItem(BaseModel):
    course_id: str = Field(..., alias="courseId")
    course_title: Optional[str] = Field(None, alias="courseTitle")
    qty: int = 1

    class Config:
        populate_by_name = True
        extra = "allow"
        coerce_numbers_to_str = True


class Enrollment(ResourceRecord):
    SEARCH_FIELDS: ClassVar[Tuple[str, ...]] = (
        "first_name", "last_name", "email", "payment_reference", "payment_status",
    )

    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    email: Optional[str] = None
    phone: Optional[str] = None
    course_items: List[CourseItem] = Field(default_factory=list, alias="courseItems")
    total_amount: Optional[float] = Field(None, alias="totalAmount")
    payment_reference: Optional[str] = Field(None, alias="paymentReference")
    payment_status: Optional[str] = Field(None, alias="paymentStatus")
    created_at: Optional[str] = Field(None, alias="createdAt")

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


# =============================================================================
# NEWSLETTER
# =============================================================================

class Draft(ResourceRecord):
    SEARCH_FIELDS: ClassVar[Tuple[str, ...]] = ("draft_id", "title")

    draft_id: Optional[str] = Field(None, alias="draftId")
    title: str = ""
    content: str = ""  # rich text, opaque to this client
    updated_at: Optional[str] = Field(None, alias="updatedAt")

    @field_validator("title", "content", mode="before")
    @classmethod
    def _null_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


# =============================================================================
# COURSES
# =============================================================================

class Course(ResourceRecord):
    SEARCH_FIELDS: ClassVar[Tuple[str, ...]] = ("title", "instructor", "description")

    title: Optional[str] = None
    description: Optional[str] = None
    instructor: Optional[str] = None
    duration: Optional[str] = None
    price: Optional[float] = None
    price_usd: Optional[float] = Field(None, alias="priceUSD")
    modules: Optional[int] = None
    image: Optional[str] = None


class UploadResult(BaseModel):
    url: Optional[str] = None

    class Config:
        extra = "allow"


# =============================================================================
# DASHBOARD
# =============================================================================

class DashboardOverview(BaseModel):
    recent_orders: List[Order] = Field(default_factory=list)
    recent_drafts: List[Draft] = Field(default_factory=list)
    subscribers_count: int = 0

    @property
    def pending_orders(self) -> int:
        # counted on read so quick actions on recent_orders show up at once
        return sum(1 for order in self.recent_orders if order.status == OrderStatus.PENDING)

"""Utility type definitions."""

from enum import Enum
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    PAYMENT_FAILED = "payment_failed"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    AWAITING_PAYMENT = "awaiting_payment"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class PageVersion(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class OrderFilters(BaseModel):
    """Filters accepted by OrderService.get_orders."""

    status: Optional[str] = None
    startDate: Optional[datetime] = None
    endDate: Optional[datetime] = None
    minAmount: Optional[float] = None
    maxAmount: Optional[float] = None
    searchTerm: Optional[str] = None
    productName: Optional[str] = None
    pageSize: Optional[int] = Field(default=None, ge=1)
    lastDocId: Optional[str] = None

    @property
    def has_amount_filter(self) -> bool:
        return self.minAmount is not None or self.maxAmount is not None

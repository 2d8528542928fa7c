"""Models package initialization."""

from .firestore_types import (
    BaseDoc,
    ProductDoc,
    CategoryDoc,
    ShippingRuleDoc,
    UserDoc,
    PageContentDoc,
    PublishedPageContentDoc,
    MediaDoc,
    MediaCollectionDoc,
    PaymentMethodDoc,
    OrderDoc,
    OrderItem,
)
from .util_types import UserRole, OrderStatus, PaymentStatus, PageVersion, OrderFilters

__all__ = [
    # Firestore types
    "BaseDoc",
    "ProductDoc",
    "CategoryDoc",
    "ShippingRuleDoc",
    "UserDoc",
    "PageContentDoc",
    "PublishedPageContentDoc",
    "MediaDoc",
    "MediaCollectionDoc",
    "PaymentMethodDoc",
    "OrderDoc",
    "OrderItem",
    # Utility types
    "UserRole",
    "OrderStatus",
    "PaymentStatus",
    "PageVersion",
    "OrderFilters",
]

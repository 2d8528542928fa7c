"""Documents package initialization."""

from .products import Product
from .categories import Category
from .users import User
from .orders import Order
from .media import MediaItem, MediaCollection
from .payments import PaymentMethod

__all__ = ["Product", "Category", "User", "Order", "MediaItem", "MediaCollection", "PaymentMethod"]

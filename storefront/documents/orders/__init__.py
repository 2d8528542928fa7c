"""Orders document package."""

from .Order import Order

__all__ = ["Order"]

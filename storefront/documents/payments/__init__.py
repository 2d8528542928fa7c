"""Payment method document package."""

from .PaymentMethod import PaymentMethod

__all__ = ["PaymentMethod"]

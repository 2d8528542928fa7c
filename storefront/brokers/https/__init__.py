"""HTTPS brokers package."""

from .health_check import health_check
from .stripe_webhook import stripe_webhook

__all__ = [
    "health_check",
    "stripe_webhook",
]

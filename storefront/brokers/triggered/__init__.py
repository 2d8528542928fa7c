"""Triggered brokers package."""

from .on_media_resized import on_media_resized
from .on_order_status_changed import on_order_status_changed

__all__ = [
    "on_media_resized",
    "on_order_status_changed",
]

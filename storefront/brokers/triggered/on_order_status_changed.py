"""Trigger function for order status changes."""

from typing import Optional, Dict, Any
from firebase_functions import firestore_fn
from storefront.apis.Db import Db
from storefront.models.util_types import OrderStatus
from storefront.util.logger import get_logger

logger = get_logger(__name__)

SHIPPING_TIMESTAMPS = {
    OrderStatus.SHIPPED.value: "shippedAt",
    OrderStatus.DELIVERED.value: "deliveredAt",
}


def handle_order_status_changed(order_id: str, before_data: Optional[Dict[str, Any]],
                                after_data: Optional[Dict[str, Any]]) -> Optional[str]:
    """Stamp shipping.shippedAt / shipping.deliveredAt the first time an order reaches that status.

    Returns:
        The field that was set, or None
    """
    before_status = (before_data or {}).get("status")
    after_status = (after_data or {}).get("status")
    if before_status == after_status:
        return None

    logger.info(f"Order {order_id} status changed from {before_status} to {after_status}")

    field = SHIPPING_TIMESTAMPS.get(after_status)
    if field is None:
        return None

    shipping = (after_data or {}).get("shipping") or {}
    if shipping.get(field):
        return None

    db = Db.get_instance()
    db.collections["orders"].document(order_id).update({f"shipping.{field}": db.timestamp_now()})
    logger.info(f"Set shipping.{field} on order {order_id}")
    return field


@firestore_fn.on_document_updated(
    document="orders/{orderId}",
    timeout_sec=60,
)
def on_order_status_changed(event: firestore_fn.Event[firestore_fn.Change[firestore_fn.DocumentSnapshot]]):
    """Handle order update events.

    Args:
        event: Firestore document update event
    """
    try:
        order_id = event.params["orderId"]
        before_data = event.data.before.to_dict()
        after_data = event.data.after.to_dict()

        handle_order_status_changed(order_id, before_data, after_data)

    except Exception as e:
        logger.error(f"Error processing order update: {e}")
        raise

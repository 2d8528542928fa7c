"""Order administration and payment status updates."""

from datetime import datetime, timezone
from typing import Optional, Dict, Any, List, Union
from firebase_admin import firestore
from storefront.apis.Db import Db
from storefront.config.loader import get_settings, get_orders_page_size, get_amount_filter_multiplier
from storefront.documents.orders.Order import Order
from storefront.exceptions.CustomError import (
    NotFoundError,
    PermissionError,
    PreconditionError,
    ValidationError,
)
from storefront.models.util_types import OrderFilters, OrderStatus, PaymentStatus
from storefront.util.json_response import service_result
from storefront.util.logger import get_logger

logger = get_logger(__name__)

ORDER_WORKFLOW: Dict[str, Dict[str, Any]] = {
    OrderStatus.PENDING.value: {
        "label": "Pending",
        "next": [OrderStatus.PROCESSING.value, OrderStatus.CANCELLED.value, OrderStatus.PAYMENT_FAILED.value],
    },
    OrderStatus.PROCESSING.value: {
        "label": "Processing",
        "next": [OrderStatus.SHIPPED.value, OrderStatus.CANCELLED.value],
    },
    OrderStatus.SHIPPED.value: {
        "label": "Shipped",
        "next": [OrderStatus.DELIVERED.value],
    },
    OrderStatus.DELIVERED.value: {"label": "Delivered", "next": []},
    OrderStatus.CANCELLED.value: {"label": "Cancelled", "next": []},
    OrderStatus.PAYMENT_FAILED.value: {
        "label": "Payment failed",
        "next": [OrderStatus.PENDING.value, OrderStatus.CANCELLED.value],
    },
}

SYSTEM_ACTOR = "system"


def _order_total(order: Dict[str, Any]) -> float:
    return (order.get("totals") or {}).get("total") or 0


def _matches_search(order: Dict[str, Any], term: str) -> bool:
    term = term.lower()
    name = ((order.get("shipping") or {}).get("address") or {}).get("name") or ""
    return term in order["id"].lower() or term in name.lower()


def _matches_product(order: Dict[str, Any], product_name: str) -> bool:
    product_name = product_name.lower()
    return any(product_name in (item.get("name") or "").lower() for item in order.get("items") or [])


class OrderService:
    def __init__(self):
        self.db = Db.get_instance()
        self.settings = get_settings()

    @service_result
    def get_orders(self, filters: Union[OrderFilters, Dict[str, Any], None] = None) -> Dict[str, Any]:
        """One page of orders, newest first.

        Status and date filters run in Firestore; amount, search term and
        product name are applied to the fetched page, which is enlarged when an
        amount filter is set.

        Returns:
            {"orders": [...], "lastDoc": {"id": ...} | None, "hasMore": bool}
        """
        if not isinstance(filters, OrderFilters):
            filters = OrderFilters(**(filters or {}))

        page_size = filters.pageSize or get_orders_page_size(self.settings)
        fetch_size = page_size
        if filters.has_amount_filter:
            fetch_size = page_size * get_amount_filter_multiplier(self.settings)

        query = self.db.collections["orders"]
        if filters.status and filters.status != "all":
            query = query.where("status", "==", filters.status)
        if filters.startDate:
            query = query.where("createdAt", ">=", filters.startDate)
        if filters.endDate:
            query = query.where("createdAt", "<=", filters.endDate)
        query = query.order_by("createdAt", direction=firestore.Query.DESCENDING)

        if filters.lastDocId:
            cursor = self.db.collections["orders"].document(filters.lastDocId).get()
            if cursor.exists:
                query = query.start_after(cursor)
            else:
                logger.warning(f"Pagination cursor {filters.lastDocId} does not exist, starting from the top")

        snapshots = list(query.limit(fetch_size).stream())
        fetched = [{"id": s.id, **s.to_dict()} for s in snapshots]

        orders = fetched
        if filters.minAmount is not None:
            orders = [o for o in orders if _order_total(o) >= filters.minAmount]
        if filters.maxAmount is not None:
            orders = [o for o in orders if _order_total(o) <= filters.maxAmount]
        if filters.searchTerm:
            orders = [o for o in orders if _matches_search(o, filters.searchTerm)]
        if filters.productName:
            orders = [o for o in orders if _matches_product(o, filters.productName)]

        orders = orders[:page_size]
        return {
            "orders": orders,
            "lastDoc": {"id": fetched[-1]["id"]} if fetched else None,
            "hasMore": len(snapshots) == fetch_size,
        }

    @service_result
    def get_order_by_id(self, order_id: str) -> Dict[str, Any]:
        return Order(order_id).to_dict()

    @service_result
    def update_order_status(self, order_id: str, new_status: str, admin_id: str, notes: str = "") -> Dict[str, Any]:
        if not order_id or not admin_id:
            raise ValidationError("Order id and admin id are required")
        if new_status not in ORDER_WORKFLOW:
            raise ValidationError(f"Unknown order status: {new_status}", field="status")

        entry = Order(order_id).change_status(new_status, admin_id, notes)
        return {"id": order_id, "statusChange": entry}

    @service_result
    def add_order_note(self, order_id: str, note: str, admin_id: str) -> Dict[str, Any]:
        if not order_id or not note or not admin_id:
            raise ValidationError("Order id, note and admin id are required")

        added = Order(order_id).add_note(note, admin_id)
        logger.info(f"Note added to order {order_id} by {admin_id}")
        return {"id": order_id, "note": added}

    @service_result
    def get_order_statistics(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Order count and revenue overall and since midnight UTC, plus counts per status."""
        now = now or self.db.timestamp_now()
        today = now.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)

        stats: Dict[str, Any] = {
            "totalOrders": 0,
            "totalRevenue": 0,
            "todaysOrders": 0,
            "todaysRevenue": 0,
            "byStatus": {status: 0 for status in ORDER_WORKFLOW},
        }

        for snapshot in self.db.collections["orders"].stream():
            order = snapshot.to_dict()
            total = _order_total(order)
            stats["totalOrders"] += 1
            stats["totalRevenue"] += total

            created = order.get("createdAt")
            if isinstance(created, datetime):
                if created.tzinfo is None:
                    created = created.replace(tzinfo=timezone.utc)
                if created >= today:
                    stats["todaysOrders"] += 1
                    stats["todaysRevenue"] += total

            status = order.get("status")
            if status in stats["byStatus"]:
                stats["byStatus"][status] += 1

        return stats

    @service_result
    def get_order_workflow_info(self, status: str) -> Dict[str, Any]:
        workflow = ORDER_WORKFLOW.get(status)
        if workflow is None:
            raise ValidationError(f"Unknown order status: {status}", field="status")
        return {
            "status": status,
            "label": workflow["label"],
            "nextStatuses": list(workflow["next"]),
            "isFinal": not workflow["next"],
        }

    def _find_by_payment_intent(self, payment_intent_id: str) -> Order:
        query = (
            self.db.collections["orders"]
            .where("payment.paymentIntentId", "==", payment_intent_id)
            .limit(1)
        )
        snapshots = list(query.stream())
        if not snapshots:
            raise NotFoundError("Order", payment_intent_id)
        return Order(snapshots[0].id, snapshots[0].to_dict())

    def _set_payment_outcome(self, payment_intent_id: str, status: str, payment_status: str,
                             note: str) -> Dict[str, Any]:
        order = self._find_by_payment_intent(payment_intent_id)
        order.change_status(status, SYSTEM_ACTOR, note, extra={"payment.status": payment_status})
        return {"orderId": order.id, "status": status}

    @service_result
    def mark_payment_succeeded(self, payment_intent_id: str) -> Dict[str, Any]:
        return self._set_payment_outcome(
            payment_intent_id, OrderStatus.PROCESSING.value, PaymentStatus.SUCCEEDED.value,
            "Payment confirmed by Stripe")

    @service_result
    def mark_payment_failed(self, payment_intent_id: str) -> Dict[str, Any]:
        return self._set_payment_outcome(
            payment_intent_id, OrderStatus.PAYMENT_FAILED.value, PaymentStatus.FAILED.value,
            "Payment failed in Stripe")

    @service_result
    def simulate_oxxo_payment(self, order_id: str, payment_intent_id: str, uid: str) -> Dict[str, Any]:
        """Mark a pending OXXO voucher as paid. Only meant for development."""
        if Db.is_production():
            raise PreconditionError("OXXO payment simulation is not available in production")
        if not order_id or not payment_intent_id:
            raise ValidationError("orderId and paymentIntentId are required")

        order = Order(order_id)
        if order.doc.userId != uid:
            raise PermissionError("This order belongs to another user", resource=order_id)
        if order.doc.payment.type != "oxxo":
            raise PreconditionError("Only OXXO orders can be simulated", details={"orderId": order_id})
        if order.doc.status != OrderStatus.PENDING.value:
            raise PreconditionError(f"Order is already {order.doc.status}", details={"orderId": order_id})

        order.change_status(
            OrderStatus.PROCESSING.value, uid, "Simulated OXXO payment",
            extra={"payment.status": PaymentStatus.SUCCEEDED.value,
                   "payment.paymentIntentId": payment_intent_id},
        )

        intent_ref = self.db.collections["paymentIntents"].document(payment_intent_id)
        if intent_ref.get().exists:
            intent_ref.update({
                "status": PaymentStatus.SUCCEEDED.value,
                "updatedAt": self.db.timestamp_now(),
            })

        logger.info(f"Simulated OXXO payment for order {order_id}")
        return {"orderId": order_id, "status": OrderStatus.PROCESSING.value}

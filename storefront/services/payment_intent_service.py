"""Stripe payment intents for checkout: card, OXXO, setup and capture."""

from typing import Optional, Dict, Any, Tuple
from firebase_admin import auth
from storefront.apis.Db import Db
from storefront.apis.StripeApi import StripeApi
from storefront.config.loader import get_settings, get_email_config
from storefront.documents.orders.Order import Order
from storefront.documents.users.User import User
from storefront.exceptions.CustomError import NotFoundError, PermissionError, ValidationError
from storefront.models.util_types import OrderStatus, PaymentStatus
from storefront.util.json_response import service_result
from storefront.util.logger import get_logger

logger = get_logger(__name__)

# Stripe intent status -> (order status, payment status)
INTENT_OUTCOMES: Dict[str, Tuple[str, str]] = {
    "succeeded": (OrderStatus.PROCESSING.value, PaymentStatus.SUCCEEDED.value),
    "processing": (OrderStatus.PENDING.value, PaymentStatus.PROCESSING.value),
    "requires_payment_method": (OrderStatus.PAYMENT_FAILED.value, PaymentStatus.FAILED.value),
    "requires_action": (OrderStatus.PENDING.value, PaymentStatus.AWAITING_PAYMENT.value),
    "canceled": (OrderStatus.CANCELLED.value, PaymentStatus.CANCELLED.value),
}

# Orders past these statuses keep their status when a payment is re-checked
PAYABLE_STATUSES = (OrderStatus.PENDING.value, OrderStatus.PAYMENT_FAILED.value)


def intent_outcome(intent_status: str) -> Tuple[str, str]:
    return INTENT_OUTCOMES.get(intent_status, (OrderStatus.PENDING.value, intent_status))


def _require_amount(amount: Any) -> int:
    """Amounts are integer cents, as Stripe expects them."""
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValidationError("amount must be a positive whole number of cents", field="amount")
    return amount


def _require(value: Any, field: str) -> str:
    if not value or not isinstance(value, str):
        raise ValidationError(f"{field} is required", field=field)
    return value


class PaymentIntentService:
    """Every intent is logged under payment_intents/{id} with its owner and status."""

    def __init__(self):
        self.db = Db.get_instance()
        self.default_description = f"Purchase at {get_email_config(get_settings())['store_name']}"

    def _customer_id(self, uid: str) -> str:
        """Stripe customer of the user, created and saved on the profile on first use."""
        user = User.find(uid)
        if user and user.doc.stripeCustomerId:
            return user.doc.stripeCustomerId

        try:
            account = auth.get_user(uid)
        except auth.UserNotFoundError:
            raise NotFoundError("User", uid)

        customer = StripeApi.create_customer(uid, account.email, account.display_name)
        User.upsert(uid, {"stripeCustomerId": customer["id"]})
        logger.info(f"Created Stripe customer {customer['id']} for user {uid}")
        return customer["id"]

    @staticmethod
    def _owned_order(uid: str, order_id: str) -> Order:
        order = Order(order_id)
        if order.doc.userId != uid:
            raise PermissionError("This order belongs to another user", resource=order_id)
        return order

    def _log_intent(self, intent, uid: str, amount: int, payment_type: str, order_id: Optional[str] = None):
        now = self.db.timestamp_now()
        record = {
            "userId": uid,
            "amount": amount,
            "status": intent["status"],
            "paymentType": payment_type,
            "createdAt": now,
            "updatedAt": now,
        }
        if order_id:
            record["orderId"] = order_id
        self.db.collections["paymentIntents"].document(intent["id"]).set(record)

    def _track_intent(self, payment_intent_id: str, status: str):
        intent_ref = self.db.collections["paymentIntents"].document(payment_intent_id)
        if intent_ref.get().exists:
            intent_ref.update({"status": status, "updatedAt": self.db.timestamp_now()})

    @staticmethod
    def _link_order(order: Order, payment_intent_id: str, payment_type: str):
        order.update_doc({
            "payment.type": payment_type,
            "payment.status": PaymentStatus.PENDING.value,
            "payment.paymentIntentId": payment_intent_id,
        })

    @service_result
    def create_payment_intent(self, uid: str, amount: Any, payment_method_id: str,
                              description: Optional[str] = None, save_payment_method: bool = False,
                              order_id: Optional[str] = None) -> Dict[str, Any]:
        """Card intent with manual capture.

        The card brand and last digits of the charged method come back with
        the intent so the checkout can show them.
        """
        amount = _require_amount(amount)
        _require(payment_method_id, "paymentMethodId")
        order = self._owned_order(uid, order_id) if order_id else None

        customer_id = self._customer_id(uid)
        intent = StripeApi.create_card_payment_intent(
            uid, customer_id, amount, payment_method_id,
            description or self.default_description, bool(save_payment_method))
        self._log_intent(intent, uid, amount, "card", order_id)
        if order is not None:
            self._link_order(order, intent["id"], "card")

        method = intent.get("payment_method")
        card = {}
        if isinstance(method, dict):
            card = method.get("card") or {}
            method = method.get("id")

        logger.info(f"Created payment intent {intent['id']} for user {uid}")
        return {
            "clientSecret": intent.get("client_secret"),
            "paymentIntentId": intent["id"],
            "cardBrand": card.get("brand"),
            "cardLast4": card.get("last4"),
            "paymentMethodIdUsed": method if isinstance(method, str) else None,
            "stripeCustomerId": customer_id,
        }

    @service_result
    def create_oxxo_payment_intent(self, uid: str, amount: Any, order_id: str,
                                   customer_email: Optional[str] = None,
                                   description: Optional[str] = None) -> Dict[str, Any]:
        """OXXO voucher intent for one order. The voucher expires after three days."""
        amount = _require_amount(amount)
        _require(order_id, "orderId")
        order = self._owned_order(uid, order_id)

        customer_id = self._customer_id(uid)
        if not customer_email:
            user = User.find(uid)
            customer_email = user.doc.email if user else None
        _require(customer_email, "customerEmail")

        intent = StripeApi.create_oxxo_payment_intent(
            uid, customer_id, amount, customer_email, order_id, description or self.default_description)
        self._log_intent(intent, uid, amount, "oxxo", order_id)
        self._link_order(order, intent["id"], "oxxo")

        logger.info(f"Created OXXO payment intent {intent['id']} for order {order_id}")
        return {"clientSecret": intent.get("client_secret"), "paymentIntentId": intent["id"]}

    def _sync_order(self, uid: str, order_id: str, payment_intent_id: str, note: str):
        _require(order_id, "orderId")
        _require(payment_intent_id, "paymentIntentId")
        order = self._owned_order(uid, order_id)

        intent = StripeApi.retrieve_payment_intent(payment_intent_id)
        intent_owner = (intent.get("metadata") or {}).get("firebaseUserId")
        if intent_owner and intent_owner != uid:
            raise PermissionError("This payment belongs to another user", resource=payment_intent_id)

        order_status, payment_status = intent_outcome(intent["status"])
        updates = {"payment.status": payment_status, "payment.paymentIntentId": payment_intent_id}
        if order.doc.status in PAYABLE_STATUSES and order.doc.status != order_status:
            order.change_status(order_status, uid, note, extra=updates)
        else:
            order.update_doc(updates)
        self._track_intent(payment_intent_id, intent["status"])

        result = {"orderId": order_id, "orderStatus": order.doc.status, "paymentStatus": payment_status}
        return result, intent

    @service_result
    def confirm_order_payment(self, uid: str, order_id: str, payment_intent_id: str) -> Dict[str, Any]:
        """Copy the intent's current status onto the caller's order."""
        result, _ = self._sync_order(uid, order_id, payment_intent_id, "Payment confirmed at checkout")
        logger.info(f"Order {order_id} payment is {result['paymentStatus']}")
        return result

    @service_result
    def check_oxxo_payment_status(self, uid: str, order_id: str, payment_intent_id: str) -> Dict[str, Any]:
        """Same as confirm_order_payment, plus the voucher instructions while unpaid."""
        result, intent = self._sync_order(uid, order_id, payment_intent_id, "OXXO payment status checked")
        result["paymentIntent"] = {
            "id": intent["id"],
            "status": intent["status"],
            "nextAction": intent.get("next_action"),
        }
        return result

    @service_result
    def create_setup_intent(self, uid: str) -> Dict[str, Any]:
        """Setup intent for saving a card without charging it."""
        customer_id = self._customer_id(uid)
        intent = StripeApi.create_setup_intent(customer_id)
        logger.info(f"Created setup intent {intent['id']} for user {uid}")
        return {"clientSecret": intent.get("client_secret"), "setupIntentId": intent["id"],
                "stripeCustomerId": customer_id}

    @service_result
    def capture_payment_intent(self, payment_intent_id: str, admin_id: str) -> Dict[str, Any]:
        """Capture the funds held by a card intent."""
        _require(payment_intent_id, "paymentIntentId")
        intent = StripeApi.capture_payment_intent(payment_intent_id)
        self._track_intent(payment_intent_id, intent["status"])
        logger.info(f"Payment intent {payment_intent_id} captured by {admin_id}: {intent['status']}")
        return {"paymentIntentId": payment_intent_id, "status": intent["status"]}

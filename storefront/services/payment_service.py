"""Saved payment methods of a user, kept in step with Stripe."""

from typing import Dict, Any, List
from storefront.apis.Db import Db
from storefront.apis.StripeApi import StripeApi
from storefront.documents.payments.PaymentMethod import PaymentMethod
from storefront.documents.users.User import User
from storefront.exceptions.CustomError import (
    NotFoundError,
    PermissionError,
    PreconditionError,
    ValidationError,
)
from storefront.util.json_response import service_result
from storefront.util.logger import get_logger

logger = get_logger(__name__)


class PaymentService:
    """At most one method per user has ``isDefault`` set."""

    def __init__(self):
        self.db = Db.get_instance()

    @staticmethod
    def _require_user(user_id: str):
        if not user_id:
            raise ValidationError("User id is required", field="userId")

    def _user_methods(self, user_id: str):
        return self.db.collections["paymentMethods"].where("userId", "==", user_id)

    def _reset_defaults(self, user_id: str, batch):
        for snapshot in self._user_methods(user_id).where("isDefault", "==", True).stream():
            batch.update(snapshot.reference, {"isDefault": False, "updatedAt": self.db.timestamp_now()})

    def _owned_method(self, user_id: str, method_id: str) -> PaymentMethod:
        if not method_id:
            raise ValidationError("Payment method id is required", field="paymentMethodId")
        method = PaymentMethod(method_id)
        if not method.belongs_to(user_id):
            raise PermissionError("This payment method belongs to another user", resource=method_id)
        return method

    @service_result
    def get_user_payment_methods(self, user_id: str) -> List[Dict[str, Any]]:
        self._require_user(user_id)
        return [{"id": s.id, **s.to_dict()} for s in self._user_methods(user_id).stream()]

    @staticmethod
    def _require_stripe_id(value: Any, prefix: str, field: str) -> str:
        if not isinstance(value, str) or not value.startswith(prefix):
            raise ValidationError(f"{field} must be a Stripe id starting with {prefix}", field=field)
        return value

    @service_result
    def save_payment_method(self, user_id: str, method: Dict[str, Any]) -> Dict[str, Any]:
        """Store a card the client attached with Stripe.

        Card details are read back from Stripe; the client only supplies ids
        and ``isDefault``. Saving the same card again refreshes ``updatedAt``.
        Existing defaults are cleared first when the new method is the default.
        """
        self._require_user(user_id)
        method = method or {}
        stripe_id = self._require_stripe_id(method.get("stripePaymentMethodId"), "pm_", "stripePaymentMethodId")
        user = User.find(user_id)
        customer_id = self._require_stripe_id(
            method.get("stripeCustomerId") or (user.doc.stripeCustomerId if user else None),
            "cus_", "stripeCustomerId")

        existing = list(
            self._user_methods(user_id).where("stripePaymentMethodId", "==", stripe_id).limit(1).stream())
        if existing:
            saved = PaymentMethod(existing[0].id, existing[0].to_dict())
            saved.update_doc({})
            logger.info(f"Payment method {stripe_id} already saved for user {user_id}")
            return {**saved.to_dict(), "alreadyExisted": True}

        stripe_method = StripeApi.retrieve_payment_method(stripe_id)
        card = stripe_method.get("card")
        if not card:
            raise NotFoundError("Card details", stripe_id)
        owner = stripe_method.get("customer")
        if owner and owner != customer_id:
            raise PermissionError("This card is attached to another Stripe customer", resource=stripe_id)

        is_default = bool(method.get("isDefault"))
        if is_default:
            batch = self.db.firestore.batch()
            self._reset_defaults(user_id, batch)
            batch.commit()

        billing = stripe_method.get("billing_details") or {}
        saved = PaymentMethod.create({
            "userId": user_id,
            "stripePaymentMethodId": stripe_id,
            "stripeCustomerId": customer_id,
            "type": stripe_method.get("type") or "card",
            "brand": card.get("brand"),
            "last4": card.get("last4"),
            "expMonth": card.get("exp_month"),
            "expYear": card.get("exp_year"),
            "expiryDate": f"{int(card.get('exp_month') or 0):02d}/{card.get('exp_year')}",
            "cardholderName": billing.get("name"),
            "isDefault": is_default,
        })
        logger.info(f"Saved payment method {saved.id} for user {user_id}")
        return {**saved.to_dict(), "alreadyExisted": False}

    @service_result
    def delete_payment_method(self, user_id: str, method_id: str) -> Dict[str, str]:
        """Detach the method from Stripe, then delete its doc. The default cannot be deleted."""
        self._require_user(user_id)
        method = self._owned_method(user_id, method_id)
        if method.doc.isDefault:
            raise PreconditionError("The default payment method cannot be deleted",
                                    details={"paymentMethodId": method_id})

        StripeApi.detach_payment_method(method.doc.stripePaymentMethodId)
        method.delete()
        logger.info(f"Deleted payment method {method_id} of user {user_id}")
        return {"id": method_id}

    @service_result
    def set_default_payment_method(self, user_id: str, method_id: str) -> Dict[str, Any]:
        self._require_user(user_id)
        method = self._owned_method(user_id, method_id)

        batch = self.db.firestore.batch()
        self._reset_defaults(user_id, batch)
        batch.update(method.get_doc_ref(), {"isDefault": True, "updatedAt": self.db.timestamp_now()})
        batch.commit()

        stripe_updated = False
        user = User.find(user_id)
        if user and user.doc.stripeCustomerId:
            StripeApi.set_customer_default_payment_method(
                user.doc.stripeCustomerId, method.doc.stripePaymentMethodId)
            stripe_updated = True

        logger.info(f"Payment method {method_id} is now the default of user {user_id}")
        return {"id": method_id, "stripeCustomerUpdated": stripe_updated}

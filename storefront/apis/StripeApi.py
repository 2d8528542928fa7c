"""Stripe calls used by payment methods, payment intents and the payment webhook."""

from typing import Any, Callable
import stripe
from storefront.apis.Db import Db
from storefront.exceptions.CustomError import ExternalServiceError, PreconditionError
from storefront.util.logger import get_logger

logger = get_logger(__name__)

CURRENCY = "mxn"
OXXO_EXPIRES_AFTER_DAYS = 3


class StripeApi:
    """Thin wrapper over the ``stripe`` module.

    The secret key is read from ``STRIPE_SECRET_KEY`` (env var or Secret
    Manager) on first use. Stripe failures surface as ExternalServiceError.
    """
    _configured = False

    @classmethod
    def _configure(cls):
        if not cls._configured:
            stripe.api_key = Db.get_env_or_secret("STRIPE_SECRET_KEY")
            cls._configured = True

    @classmethod
    def _call(cls, action: str, fn: Callable[..., Any], *args, **kwargs):
        cls._configure()
        try:
            return fn(*args, **kwargs)
        except stripe.StripeError as e:
            logger.error(f"Stripe {action} failed: {e}")
            raise ExternalServiceError("stripe", str(e), getattr(e, "http_status", None))

    @classmethod
    def retrieve_payment_method(cls, payment_method_id: str):
        return cls._call(f"retrieve of {payment_method_id}", stripe.PaymentMethod.retrieve, payment_method_id)

    @classmethod
    def detach_payment_method(cls, payment_method_id: str):
        return cls._call(f"detach of {payment_method_id}", stripe.PaymentMethod.detach, payment_method_id)

    @classmethod
    def create_customer(cls, uid: str, email: str, name: str = ""):
        return cls._call(
            f"customer creation for {uid}", stripe.Customer.create,
            email=email, name=name or "", metadata={"firebaseUserId": uid},
        )

    @classmethod
    def set_customer_default_payment_method(cls, customer_id: str, payment_method_id: str):
        return cls._call(
            f"default method update for {customer_id}", stripe.Customer.modify,
            customer_id, invoice_settings={"default_payment_method": payment_method_id},
        )

    @classmethod
    def create_card_payment_intent(cls, uid: str, customer_id: str, amount: int, payment_method_id: str,
                                   description: str, save_payment_method: bool = False):
        """Manual-capture card intent, returned with its payment method expanded.

        Funds are held until an admin captures them.
        """
        params = {
            "amount": amount,
            "currency": CURRENCY,
            "customer": customer_id,
            "payment_method": payment_method_id,
            "description": description,
            "capture_method": "manual",
            "metadata": {"firebaseUserId": uid},
            "expand": ["payment_method"],
        }
        if save_payment_method:
            params["setup_future_usage"] = "off_session"
        return cls._call(f"card payment intent for {uid}", stripe.PaymentIntent.create, **params)

    @classmethod
    def create_oxxo_payment_intent(cls, uid: str, customer_id: str, amount: int, receipt_email: str,
                                   order_id: str, description: str):
        return cls._call(
            f"OXXO payment intent for order {order_id}", stripe.PaymentIntent.create,
            amount=amount,
            currency=CURRENCY,
            customer=customer_id,
            description=description,
            payment_method_types=["oxxo"],
            receipt_email=receipt_email,
            payment_method_options={"oxxo": {"expires_after_days": OXXO_EXPIRES_AFTER_DAYS}},
            metadata={"firebaseUserId": uid, "paymentType": "oxxo", "orderId": order_id},
        )

    @classmethod
    def retrieve_payment_intent(cls, payment_intent_id: str):
        return cls._call(f"retrieve of {payment_intent_id}", stripe.PaymentIntent.retrieve, payment_intent_id)

    @classmethod
    def capture_payment_intent(cls, payment_intent_id: str):
        """Capture held funds.

        Raises:
            PreconditionError: the intent is not waiting for capture
            ExternalServiceError: any other Stripe failure
        """
        cls._configure()
        try:
            return stripe.PaymentIntent.capture(payment_intent_id)
        except stripe.InvalidRequestError as e:
            if getattr(e, "code", None) != "payment_intent_unexpected_state":
                logger.error(f"Stripe capture of {payment_intent_id} failed: {e}")
                raise ExternalServiceError("stripe", str(e), getattr(e, "http_status", None))
            logger.warning(f"Payment intent {payment_intent_id} cannot be captured: {e}")
            raise PreconditionError("Payment intent cannot be captured",
                                    details={"paymentIntentId": payment_intent_id, "reason": str(e)})
        except stripe.StripeError as e:
            logger.error(f"Stripe capture of {payment_intent_id} failed: {e}")
            raise ExternalServiceError("stripe", str(e), getattr(e, "http_status", None))

    @classmethod
    def create_setup_intent(cls, customer_id: str):
        return cls._call(
            f"setup intent for {customer_id}", stripe.SetupIntent.create,
            customer=customer_id, usage="off_session",
        )

    @staticmethod
    def construct_webhook_event(payload: bytes, signature: str):
        """Verified event. Raises ValueError or SignatureVerificationError when invalid."""
        secret = Db.get_env_or_secret("STRIPE_WEBHOOK_SECRET")
        return stripe.Webhook.construct_event(payload, signature, secret)

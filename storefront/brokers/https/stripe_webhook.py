"""Stripe webhook HTTP endpoint."""

from typing import Any, Mapping, Tuple
import stripe
from firebase_functions import https_fn, options
from storefront.apis.StripeApi import StripeApi
from storefront.services.order_service import OrderService
from storefront.util.cors_response import create_cors_response
from storefront.util.logger import get_logger

logger = get_logger(__name__)

PAYMENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_FAILED = "payment_intent.payment_failed"


def handle_stripe_event(event: Mapping[str, Any]) -> Tuple[dict, int]:
    """Apply a verified event to its order.

    Returns:
        Response body and HTTP status. Unknown orders and unhandled event
        types are acknowledged with 200 so Stripe stops retrying; database
        failures return 500 so it retries.
    """
    event_type = event["type"]
    if event_type not in (PAYMENT_SUCCEEDED, PAYMENT_FAILED):
        logger.info(f"Ignoring Stripe event {event_type}")
        return {"received": True}, 200

    payment_intent_id = event["data"]["object"]["id"]
    service = OrderService()
    if event_type == PAYMENT_SUCCEEDED:
        result = service.mark_payment_succeeded(payment_intent_id)
    else:
        result = service.mark_payment_failed(payment_intent_id)

    if result["ok"]:
        logger.info(f"{event_type} applied to order {result['data']['orderId']}")
        return {"received": True, "orderId": result["data"]["orderId"]}, 200

    if result["error"]["code"] == "NOT_FOUND":
        logger.warning(f"No order for payment intent {payment_intent_id}")
        return {"received": True, "message": "Order not found, but webhook received."}, 200

    logger.error(f"Could not apply {event_type} for {payment_intent_id}: {result['error']['message']}")
    return {"error": "Database error processing webhook."}, 500


@https_fn.on_request(
    ingress=options.IngressSetting.ALLOW_ALL,
    timeout_sec=60,
)
def stripe_webhook(req: https_fn.Request):
    """Verify the Stripe signature and route payment intent events."""
    if req.method != "POST":
        return create_cors_response({"error": "Method not allowed"}, status=405)

    try:
        event = StripeApi.construct_webhook_event(
            req.get_data(), req.headers.get("Stripe-Signature", ""))
    except (ValueError, stripe.StripeError) as e:
        logger.warning(f"Rejected Stripe webhook: {e}")
        return create_cors_response({"error": f"Webhook Error: {e}"}, status=400)

    try:
        body, status = handle_stripe_event(event)
        return create_cors_response(body, status=status)
    except Exception as e:
        logger.error(f"Webhook processing failed: {e}")
        return create_cors_response({"error": "Internal server error"}, status=500)

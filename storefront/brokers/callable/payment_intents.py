"""Checkout payment callables over Stripe payment and setup intents."""

from firebase_functions import https_fn, options
from storefront.models.function_types import SuccessResponse
from storefront.services.payment_intent_service import PaymentIntentService
from storefront.util.cors_response import cors_response_on_call
from storefront.util.db_auth_wrapper import db_auth_wrapper, require_role, ADMIN_ROLES
from storefront.util.https_errors import unwrap
from storefront.util.logger import get_logger

logger = get_logger(__name__)


def _internal(action: str, e: Exception) -> https_fn.HttpsError:
    logger.error(f"Failed to {action}: {e}")
    return https_fn.HttpsError(
        https_fn.FunctionsErrorCode.INTERNAL,
        f"Failed to {action}. Please try again later."
    )


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def create_payment_intent(req: https_fn.CallableRequest) -> SuccessResponse:
    """Card payment intent for the caller (CreatePaymentIntentRequest)."""
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        uid = db_auth_wrapper(req)
        data = req.data or {}
        result = unwrap(PaymentIntentService().create_payment_intent(
            uid, data.get("amount"), data.get("paymentMethodId"), data.get("description"),
            bool(data.get("savePaymentMethod")), data.get("orderId")))
        return SuccessResponse(success=True, data=result)

    except https_fn.HttpsError:
        raise
    except Exception as e:
        raise _internal("create payment", e)


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def confirm_order_payment(req: https_fn.CallableRequest) -> SuccessResponse:
    """Apply the Stripe status of a payment to the caller's order (OrderPaymentRequest)."""
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        uid = db_auth_wrapper(req)
        data = req.data or {}
        result = unwrap(PaymentIntentService().confirm_order_payment(
            uid, data.get("orderId"), data.get("paymentIntentId")))
        return SuccessResponse(success=True, data=result)

    except https_fn.HttpsError:
        raise
    except Exception as e:
        raise _internal("confirm payment", e)


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def create_oxxo_payment_intent(req: https_fn.CallableRequest) -> SuccessResponse:
    """OXXO voucher for one of the caller's orders (CreateOxxoPaymentIntentRequest)."""
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        uid = db_auth_wrapper(req)
        data = req.data or {}
        result = unwrap(PaymentIntentService().create_oxxo_payment_intent(
            uid, data.get("amount"), data.get("orderId"), data.get("customerEmail"), data.get("description")))
        return SuccessResponse(success=True, data=result)

    except https_fn.HttpsError:
        raise
    except Exception as e:
        raise _internal("create OXXO payment", e)


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def check_oxxo_payment_status(req: https_fn.CallableRequest) -> SuccessResponse:
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        uid = db_auth_wrapper(req)
        data = req.data or {}
        result = unwrap(PaymentIntentService().check_oxxo_payment_status(
            uid, data.get("orderId"), data.get("paymentIntentId")))
        return SuccessResponse(success=True, data=result)

    except https_fn.HttpsError:
        raise
    except Exception as e:
        raise _internal("check OXXO payment", e)


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def create_setup_intent(req: https_fn.CallableRequest) -> SuccessResponse:
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        uid = db_auth_wrapper(req)
        return SuccessResponse(success=True, data=unwrap(PaymentIntentService().create_setup_intent(uid)))

    except https_fn.HttpsError:
        raise
    except Exception as e:
        raise _internal("prepare card setup", e)


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def capture_payment_intent(req: https_fn.CallableRequest) -> SuccessResponse:
    """Capture a held card payment. Admins only (CapturePaymentIntentRequest)."""
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        uid = require_role(req, *ADMIN_ROLES)
        result = unwrap(PaymentIntentService().capture_payment_intent(
            (req.data or {}).get("paymentIntentId"), uid))
        return SuccessResponse(success=True, message="Payment captured", data=result)

    except https_fn.HttpsError:
        raise
    except Exception as e:
        raise _internal("capture payment", e)

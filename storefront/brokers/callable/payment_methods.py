"""Saved payment method callables. Callers only act on their own methods."""

from firebase_functions import https_fn, options
from storefront.models.function_types import SuccessResponse
from storefront.services.payment_service import PaymentService
from storefront.util.cors_response import cors_response_on_call
from storefront.util.db_auth_wrapper import db_auth_wrapper
from storefront.util.https_errors import unwrap
from storefront.util.logger import get_logger

logger = get_logger(__name__)


def _payment_method_id(req: https_fn.CallableRequest) -> str:
    method_id = (req.data or {}).get("paymentMethodId")
    if not method_id:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            "paymentMethodId is required"
        )
    return method_id


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def get_payment_methods(req: https_fn.CallableRequest) -> SuccessResponse:
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        uid = db_auth_wrapper(req)
        methods = unwrap(PaymentService().get_user_payment_methods(uid))
        return SuccessResponse(success=True, data=methods)

    except https_fn.HttpsError:
        raise
    except Exception as e:
        logger.error(f"Failed to get payment methods: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL,
            "Failed to get payment methods. Please try again later."
        )


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def save_payment_method(req: https_fn.CallableRequest) -> SuccessResponse:
    """Store a method the client already created with Stripe (SavePaymentMethodRequest)."""
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        uid = db_auth_wrapper(req)
        saved = unwrap(PaymentService().save_payment_method(uid, dict(req.data or {})))
        return SuccessResponse(success=True, message="Payment method saved", data=saved)

    except https_fn.HttpsError:
        raise
    except Exception as e:
        logger.error(f"Failed to save payment method: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL,
            "Failed to save payment method. Please try again later."
        )


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def detach_payment_method(req: https_fn.CallableRequest) -> SuccessResponse:
    """Detach a saved method from Stripe and delete it."""
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        uid = db_auth_wrapper(req)
        method_id = _payment_method_id(req)
        unwrap(PaymentService().delete_payment_method(uid, method_id))
        logger.info(f"User {uid} removed payment method {method_id}")
        return SuccessResponse(success=True, message="Payment method removed")

    except https_fn.HttpsError:
        raise
    except Exception as e:
        logger.error(f"Failed to detach payment method: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL,
            "Failed to remove payment method. Please try again later."
        )


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def update_default_payment_method(req: https_fn.CallableRequest) -> SuccessResponse:
    """Make a saved method the default, in Firestore and on the Stripe customer."""
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        uid = db_auth_wrapper(req)
        result = unwrap(PaymentService().set_default_payment_method(uid, _payment_method_id(req)))
        return SuccessResponse(success=True, message="Default payment method updated", data=result)

    except https_fn.HttpsError:
        raise
    except Exception as e:
        logger.error(f"Failed to update default payment method: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL,
            "Failed to update default payment method. Please try again later."
        )

"""Checkout callables: stock decrement and the OXXO payment simulator."""

from firebase_functions import https_fn, options
from storefront.apis.Db import Db
from storefront.models.function_types import SuccessResponse
from storefront.services.order_service import OrderService
from storefront.services.stock_service import StockService, format_stock_error_message
from storefront.util.cors_response import cors_response_on_call
from storefront.util.db_auth_wrapper import db_auth_wrapper
from storefront.util.https_errors import unwrap, to_https_error
from storefront.util.logger import get_logger

logger = get_logger(__name__)


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def verify_and_update_stock(req: https_fn.CallableRequest) -> SuccessResponse:
    """Decrement stock for a cart (VerifyStockRequest), all items or none.

    A shortage fails with FAILED_PRECONDITION and the short items in
    ``details.outOfStockItems``.
    """
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        uid = db_auth_wrapper(req)
        items = (req.data or {}).get("items")
        if not items:
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
                "items are required"
            )

        result = StockService().verify_and_update_stock(items)
        if not result["ok"] and result["error"]["code"] == "INSUFFICIENT_STOCK":
            short = result["error"]["details"]["outOfStockItems"]
            logger.info(f"Stock check failed for user {uid}: {len(short)} items short")
            result["error"]["message"] = format_stock_error_message(short)
            raise to_https_error(result["error"])

        return SuccessResponse(success=True, message="Stock updated", data=unwrap(result))

    except https_fn.HttpsError:
        raise
    except Exception as e:
        logger.error(f"Failed to update stock: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL,
            "Failed to update stock. Please try again later."
        )


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def simulate_oxxo_payment(req: https_fn.CallableRequest) -> SuccessResponse:
    """Mark the caller's pending OXXO order as paid. Unavailable in production."""
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        if Db.is_production():
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.FAILED_PRECONDITION,
                "OXXO payment simulation is only available in development"
            )

        uid = db_auth_wrapper(req)
        order_id = (req.data or {}).get("orderId")
        payment_intent_id = (req.data or {}).get("paymentIntentId")
        if not order_id or not payment_intent_id:
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
                "orderId and paymentIntentId are required"
            )

        result = unwrap(OrderService().simulate_oxxo_payment(order_id, payment_intent_id, uid))
        return SuccessResponse(success=True, message="OXXO payment simulated", data=result)

    except https_fn.HttpsError:
        raise
    except Exception as e:
        logger.error(f"Failed to simulate OXXO payment: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL,
            "Failed to simulate payment. Please try again later."
        )

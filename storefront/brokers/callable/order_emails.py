"""Order email callables."""

from firebase_functions import https_fn, options
from storefront.documents.orders.Order import Order
from storefront.models.function_types import SuccessResponse
from storefront.services.notification_service import NotificationService
from storefront.util.cors_response import cors_response_on_call
from storefront.util.db_auth_wrapper import db_auth_wrapper, get_caller_role, require_role, ADMIN_ROLES
from storefront.util.https_errors import unwrap
from storefront.util.logger import get_logger

logger = get_logger(__name__)


def _order_id(req: https_fn.CallableRequest) -> str:
    order_id = (req.data or {}).get("orderId")
    if not order_id:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            "orderId is required"
        )
    return order_id


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def resend_order_confirmation(req: https_fn.CallableRequest) -> SuccessResponse:
    """Resend the confirmation email. Admins, or the customer for their own order."""
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        uid = db_auth_wrapper(req)
        order_id = _order_id(req)

        if get_caller_role(req) not in ADMIN_ROLES:
            order = Order.find(order_id)
            if order is None:
                raise https_fn.HttpsError(https_fn.FunctionsErrorCode.NOT_FOUND, "Order not found")
            if order.doc.userId != uid:
                raise https_fn.HttpsError(
                    https_fn.FunctionsErrorCode.PERMISSION_DENIED,
                    "You can only resend emails for your own orders"
                )

        result = unwrap(NotificationService().send_order_confirmation(order_id, uid, resend=True))
        return SuccessResponse(success=True, message="Confirmation email sent", data=result)

    except https_fn.HttpsError:
        raise
    except Exception as e:
        logger.error(f"Failed to resend order confirmation: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL,
            "Failed to send email. Please try again later."
        )


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def send_order_shipped_email(req: https_fn.CallableRequest) -> SuccessResponse:
    """Email tracking info (OrderEmailRequest). Moves the order to shipped unless ``resendOnly``."""
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        admin_id = require_role(req, *ADMIN_ROLES)
        data = req.data or {}
        result = unwrap(NotificationService().send_order_shipped(
            _order_id(req),
            data.get("shippingInfo") or {},
            admin_id,
            resend_only=bool(data.get("resendOnly")),
        ))
        return SuccessResponse(success=True, message="Shipping notification sent", data=result)

    except https_fn.HttpsError:
        raise
    except Exception as e:
        logger.error(f"Failed to send shipped email: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL,
            "Failed to send email. Please try again later."
        )


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def send_invoice_email(req: https_fn.CallableRequest) -> SuccessResponse:
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        admin_id = require_role(req, *ADMIN_ROLES)
        result = unwrap(NotificationService().send_invoice_email(_order_id(req), admin_id))
        return SuccessResponse(success=True, message="Invoice email sent", data=result)

    except https_fn.HttpsError:
        raise
    except Exception as e:
        logger.error(f"Failed to send invoice email: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL,
            "Failed to send email. Please try again later."
        )

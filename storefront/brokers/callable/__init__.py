"""Callable brokers package."""

from .set_custom_claims import set_custom_claims
from .users import delete_user_account, get_users_detail
from .payment_methods import (
    get_payment_methods,
    save_payment_method,
    detach_payment_method,
    update_default_payment_method,
)
from .checkout import verify_and_update_stock, simulate_oxxo_payment
from .payment_intents import (
    create_payment_intent,
    confirm_order_payment,
    create_oxxo_payment_intent,
    check_oxxo_payment_status,
    create_setup_intent,
    capture_payment_intent,
)
from .order_emails import resend_order_confirmation, send_order_shipped_email, send_invoice_email
from .admin_actions import content_admin, catalog_admin, order_admin, media_admin, users_admin
from .storefront_public import (
    get_page_content,
    search_products,
    get_categories,
    validate_cart_stock,
    send_contact_email,
)

__all__ = [
    "set_custom_claims",
    "delete_user_account",
    "get_users_detail",
    "get_payment_methods",
    "save_payment_method",
    "detach_payment_method",
    "update_default_payment_method",
    "verify_and_update_stock",
    "simulate_oxxo_payment",
    "create_payment_intent",
    "confirm_order_payment",
    "create_oxxo_payment_intent",
    "check_oxxo_payment_status",
    "create_setup_intent",
    "capture_payment_intent",
    "resend_order_confirmation",
    "send_order_shipped_email",
    "send_invoice_email",
    "content_admin",
    "catalog_admin",
    "order_admin",
    "media_admin",
    "users_admin",
    "get_page_content",
    "search_products",
    "get_categories",
    "validate_cart_stock",
    "send_contact_email",
]

"""
Firebase Functions entry point.
All functions must be exported from this file for deployment.
"""

import logging
import os
import firebase_admin
from firebase_admin import initialize_app

from storefront.config.env_loader import load_environment

load_environment()

# Emulator hosts are normally set by the emulator suite itself
if os.getenv('FUNCTIONS_EMULATOR') == 'true':
    os.environ.setdefault('FIRESTORE_EMULATOR_HOST', 'localhost:8080')
    os.environ.setdefault('FIREBASE_AUTH_EMULATOR_HOST', 'localhost:9099')
    os.environ.setdefault('FIREBASE_STORAGE_EMULATOR_HOST', 'localhost:9199')

if not firebase_admin._apps:
    bucket = os.getenv('STORAGE_BUCKET')
    initialize_app(options={'storageBucket': bucket} if bucket else None)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Callable functions
from storefront.brokers.callable.set_custom_claims import set_custom_claims
from storefront.brokers.callable.users import delete_user_account, get_users_detail
from storefront.brokers.callable.payment_methods import (
    get_payment_methods,
    save_payment_method,
    detach_payment_method,
    update_default_payment_method,
)
from storefront.brokers.callable.checkout import verify_and_update_stock, simulate_oxxo_payment
from storefront.brokers.callable.payment_intents import (
    create_payment_intent,
    confirm_order_payment,
    create_oxxo_payment_intent,
    check_oxxo_payment_status,
    create_setup_intent,
    capture_payment_intent,
)
from storefront.brokers.callable.order_emails import (
    resend_order_confirmation,
    send_order_shipped_email,
    send_invoice_email,
)
from storefront.brokers.callable.admin_actions import (
    content_admin,
    catalog_admin,
    order_admin,
    media_admin,
    users_admin,
)
from storefront.brokers.callable.storefront_public import (
    get_page_content,
    search_products,
    get_categories,
    validate_cart_stock,
    send_contact_email,
)

# HTTPS functions
from storefront.brokers.https.health_check import health_check
from storefront.brokers.https.stripe_webhook import stripe_webhook

# Triggered functions
from storefront.brokers.triggered.on_media_resized import on_media_resized
from storefront.brokers.triggered.on_order_status_changed import on_order_status_changed

__all__ = [
    # Callable functions
    'set_custom_claims',
    'delete_user_account',
    'get_users_detail',
    'get_payment_methods',
    'save_payment_method',
    'detach_payment_method',
    'update_default_payment_method',
    'verify_and_update_stock',
    'simulate_oxxo_payment',
    'create_payment_intent',
    'confirm_order_payment',
    'create_oxxo_payment_intent',
    'check_oxxo_payment_status',
    'create_setup_intent',
    'capture_payment_intent',
    'resend_order_confirmation',
    'send_order_shipped_email',
    'send_invoice_email',
    'content_admin',
    'catalog_admin',
    'order_admin',
    'media_admin',
    'users_admin',
    'get_page_content',
    'search_products',
    'get_categories',
    'validate_cart_stock',
    'send_contact_email',

    # HTTPS functions
    'health_check',
    'stripe_webhook',

    # Triggered functions
    'on_media_resized',
    'on_order_status_changed',
]

logger.info("Firebase Functions initialized successfully")

"""Callables used by the public storefront. No sign-in needed."""

from firebase_functions import https_fn, options
from storefront.models.util_types import PageVersion
from storefront.services.category_service import CategoryService
from storefront.services.content_service import ContentService
from storefront.services.notification_service import NotificationService
from storefront.services.product_service import ProductService
from storefront.services.stock_service import StockService
from storefront.util.cors_response import cors_response_on_call
from storefront.util.https_errors import unwrap
from storefront.util.logger import get_logger

logger = get_logger(__name__)


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def get_page_content(req: https_fn.CallableRequest):
    """Published blocks of a page, served from the content cache when fresh."""
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        page_id = (req.data or {}).get("pageId")
        if not page_id:
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
                "pageId is required"
            )
        return unwrap(ContentService().get_page_content(page_id, PageVersion.PUBLISHED.value))

    except https_fn.HttpsError:
        raise
    except Exception as e:
        logger.error(f"Failed to get page content: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL,
            "Failed to load page. Please try again later."
        )


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def search_products(req: https_fn.CallableRequest):
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        data = req.data or {}
        return unwrap(ProductService().search_products(data.get("term"), data.get("maxResults")))

    except https_fn.HttpsError:
        raise
    except Exception as e:
        logger.error(f"Product search failed: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL,
            "Search failed. Please try again later."
        )


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def get_categories(req: https_fn.CallableRequest):
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        return unwrap(CategoryService().get_categories())

    except https_fn.HttpsError:
        raise
    except Exception as e:
        logger.error(f"Failed to get categories: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL,
            "Failed to load categories. Please try again later."
        )


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def validate_cart_stock(req: https_fn.CallableRequest):
    """Availability of a cart (VerifyStockRequest) without reserving anything."""
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        return unwrap(StockService().validate_cart_stock((req.data or {}).get("items") or []))

    except https_fn.HttpsError:
        raise
    except Exception as e:
        logger.error(f"Cart stock validation failed: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL,
            "Failed to check stock. Please try again later."
        )


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def send_contact_email(req: https_fn.CallableRequest):
    """Contact form message (ContactEmailRequest) to the store, with an auto-reply to the sender."""
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        return unwrap(NotificationService().send_contact_email(dict(req.data or {})))

    except https_fn.HttpsError:
        raise
    except Exception as e:
        logger.error(f"Failed to send contact email: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL,
            "Failed to send your message. Please try again later."
        )

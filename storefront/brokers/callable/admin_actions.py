"""Admin dashboard callables.

Each function takes an ActionRequest ``{"action": str, "params": dict}`` and
runs the matching service operation. Files travel base64-encoded as
``{"name", "contentType", "data"}``.
"""

import base64
import binascii
from typing import Any, Dict, Optional
from firebase_functions import https_fn, options
from storefront.services.category_service import CategoryService
from storefront.services.collections_service import CollectionsService
from storefront.services.content_blocks import get_all_block_types
from storefront.services.content_service import ContentService, clear_content_cache
from storefront.services.invoice_service import InvoiceService
from storefront.services.media_service import MediaService
from storefront.services.order_service import OrderService
from storefront.services.product_service import ProductService
from storefront.services.stock_service import StockService
from storefront.services.user_service import UserService
from storefront.util.cors_response import cors_response_on_call
from storefront.util.db_auth_wrapper import require_role, ADMIN_ROLES
from storefront.util.https_errors import dispatch_action
from storefront.util.json_response import ok
from storefront.util.logger import get_logger

logger = get_logger(__name__)


def decode_file(value: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not value:
        return None
    try:
        content = base64.b64decode(value.get("data") or "", validate=True)
    except (binascii.Error, ValueError):
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
            f"File {value.get('name') or ''} is not valid base64"
        )
    return {"name": value.get("name"), "contentType": value.get("contentType"), "content": content}


def content_actions(admin_id: str):
    service = ContentService()
    return {
        "getPageContent": lambda p: service.get_page_content(p.get("pageId"), p.get("version") or "draft"),
        "savePageContent": lambda p: service.save_page_content(p.get("pageId"), p.get("blocks")),
        "publishPageContent": lambda p: service.publish_page_content(p.get("pageId")),
        "updateBlock": lambda p: service.update_block(p.get("pageId"), p.get("block")),
        "deleteBlock": lambda p: service.delete_block(p.get("pageId"), p.get("blockId")),
        "reorderBlocks": lambda p: service.reorder_blocks(p.get("pageId"), p.get("order")),
        "resetPageContent": lambda p: service.reset_page_content(p.get("pageId"), p.get("pageType")),
        "getBlockTypes": lambda p: ok(get_all_block_types(bool(p.get("includeExperimental")))),
        "clearCache": lambda p: clear_content_cache(),
    }


def catalog_actions(admin_id: str):
    products = ProductService()
    categories = CategoryService()
    stock = StockService()
    return {
        "getProducts": lambda p: products.get_products(),
        "getProduct": lambda p: products.get_product_by_id(p.get("productId")),
        "addProduct": lambda p: products.add_product(p.get("product") or {}),
        "updateProduct": lambda p: products.update_product(p.get("productId"), p.get("product") or {}),
        "deleteProduct": lambda p: products.delete_product(p.get("productId")),
        "searchProducts": lambda p: products.search_products(p.get("term"), p.get("maxResults")),
        "getCategories": lambda p: categories.get_categories(),
        "createCategory": lambda p: categories.create_category(p.get("category") or {}),
        "updateCategory": lambda p: categories.update_category(p.get("categoryId"), p.get("category") or {}),
        "deleteCategory": lambda p: categories.delete_category(p.get("categoryId")),
        "getProductStock": lambda p: stock.get_product_stock(p.get("productId")),
        "getProductsStock": lambda p: stock.get_multiple_products_stock(p.get("productIds") or []),
        "validateItemsStock": lambda p: stock.validate_items_stock(p.get("items")),
    }


def order_actions(admin_id: str):
    orders = OrderService()
    invoices = InvoiceService()
    return {
        "getOrders": lambda p: orders.get_orders(p.get("filters") or {}),
        "getOrder": lambda p: orders.get_order_by_id(p.get("orderId")),
        "updateStatus": lambda p: orders.update_order_status(
            p.get("orderId"), p.get("status"), admin_id, p.get("notes") or ""),
        "addNote": lambda p: orders.add_order_note(p.get("orderId"), p.get("note"), admin_id),
        "getStatistics": lambda p: orders.get_order_statistics(),
        "getWorkflowInfo": lambda p: orders.get_order_workflow_info(p.get("status")),
        "uploadInvoice": lambda p: invoices.upload_invoice_files_for_order(
            p.get("orderId"), decode_file(p.get("pdf")), decode_file(p.get("xml")), admin_id),
        "removeInvoice": lambda p: invoices.remove_invoice_files_from_order(p.get("orderId")),
    }


def _upload_media(media: MediaService, params: Dict[str, Any]):
    file = decode_file(params.get("file")) or {}
    return media.upload_media(file.get("content"), file.get("name"), file.get("contentType"),
                              params.get("metadata") or {})


def media_actions(admin_id: str):
    media = MediaService()
    collections = CollectionsService()
    return {
        "upload": lambda p: _upload_media(media, p),
        "list": lambda p: media.get_media_items(p.get("filters") or {}),
        "get": lambda p: media.get_media_item_by_id(p.get("mediaId")),
        "update": lambda p: media.update_media_item(p.get("mediaId"), p.get("data") or {}),
        "delete": lambda p: media.delete_media_item(p.get("mediaId")),
        "getCollections": lambda p: collections.get_collections(),
        "getCollectionsWithCounts": lambda p: collections.get_collections_with_counts(),
        "getCollection": lambda p: collections.get_collection_by_id(p.get("collectionId")),
        "createCollection": lambda p: collections.create_collection(p.get("collection") or {}),
        "updateCollection": lambda p: collections.update_collection(p.get("collectionId"), p.get("collection") or {}),
        "deleteCollection": lambda p: collections.delete_collection(p.get("collectionId")),
        "getCollectionMedia": lambda p: collections.get_media_by_collection(p.get("collectionId")),
    }


def user_actions(admin_id: str):
    users = UserService()
    return {
        "getUser": lambda p: users.get_user_doc(p.get("uid")),
        "saveUser": lambda p: users.save_user_doc(
            {k: v for k, v in (p.get("user") or {}).items() if k != "role"}),
        "getUsersByRole": lambda p: users.get_users_by_role(p.get("roles") or []),
        "getAllUsers": lambda p: users.get_all_users(),
        "deleteUserDoc": lambda p: users.delete_user_doc(p.get("uid")),
    }


def _run_admin_action(req: https_fn.CallableRequest, name: str, build_handlers) -> Any:
    options_response = cors_response_on_call(req.raw_request)
    if options_response:
        return options_response

    try:
        admin_id = require_role(req, *ADMIN_ROLES)
        return dispatch_action(req.data, build_handlers(admin_id))

    except https_fn.HttpsError:
        raise
    except Exception as e:
        logger.error(f"{name} failed: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INTERNAL,
            "The operation failed. Please try again later."
        )


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def content_admin(req: https_fn.CallableRequest):
    return _run_admin_action(req, "content_admin", content_actions)


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def catalog_admin(req: https_fn.CallableRequest):
    return _run_admin_action(req, "catalog_admin", catalog_actions)


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def order_admin(req: https_fn.CallableRequest):
    return _run_admin_action(req, "order_admin", order_actions)


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
    memory=options.MemoryOption.MB_512,
)
def media_admin(req: https_fn.CallableRequest):
    return _run_admin_action(req, "media_admin", media_actions)


@https_fn.on_call(
    cors=options.CorsOptions(cors_origins=["*"]),
    ingress=options.IngressSetting.ALLOW_ALL,
)
def users_admin(req: https_fn.CallableRequest):
    return _run_admin_action(req, "users_admin", user_actions)

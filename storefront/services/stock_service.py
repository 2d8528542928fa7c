"""Product stock checks and the checkout stock decrement."""

from typing import List, Dict, Any, Iterable
from google.cloud import firestore
from storefront.apis.Db import Db
from storefront.exceptions.CustomError import InsufficientStockError, NotFoundError, ValidationError
from storefront.services.cache_service import content_cache, cart_stock_key, ttl_for
from storefront.util.json_response import service_result
from storefront.util.logger import get_logger

logger = get_logger(__name__)


def _decrement_stock(transaction, products_ref, items: List[Dict[str, Any]], now) -> List[Dict[str, Any]]:
    """Read every product, then write every new stock level.

    Firestore transactions require all reads before the first write.
    """
    snapshots = []
    for item in items:
        snapshot = products_ref.document(item["id"]).get(transaction=transaction)
        if not snapshot.exists:
            raise NotFoundError("Product", item["id"])
        snapshots.append(snapshot)

    out_of_stock = []
    for item, snapshot in zip(items, snapshots):
        product = snapshot.to_dict()
        available = product.get("stock") or 0
        if available < item["quantity"]:
            out_of_stock.append({
                "id": item["id"],
                "name": product.get("name"),
                "requestedQuantity": item["quantity"],
                "availableStock": available,
            })

    if out_of_stock:
        raise InsufficientStockError(out_of_stock)

    updated = []
    for item, snapshot in zip(items, snapshots):
        new_stock = (snapshot.to_dict().get("stock") or 0) - item["quantity"]
        transaction.update(snapshot.reference, {"stock": new_stock, "updatedAt": now})
        updated.append({"id": item["id"], "stock": new_stock})
    return updated


def format_stock_error_message(out_of_stock_items: Iterable[Dict[str, Any]]) -> str:
    lines = [
        f"{item.get('name') or item.get('id')}: requested {item.get('requestedQuantity')}, "
        f"available {item.get('availableStock')}"
        for item in out_of_stock_items
    ]
    if not lines:
        return ""
    return "Not enough stock for some products:\n" + "\n".join(lines)


class StockService:
    def __init__(self):
        self.db = Db.get_instance()

    @staticmethod
    def _normalize_items(items) -> List[Dict[str, Any]]:
        """One entry per product id, quantities of repeated cart lines added up."""
        if not items:
            raise ValidationError("No items to verify", field="items")

        quantities: Dict[str, int] = {}
        for item in items:
            product_id = item.get("id") if isinstance(item, dict) else None
            quantity = item.get("quantity") if isinstance(item, dict) else None
            if not product_id:
                raise ValidationError("Every item needs a product id", field="items.id")
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                raise ValidationError(f"Invalid quantity for product {product_id}", field="items.quantity")
            quantities[product_id] = quantities.get(product_id, 0) + quantity
        return [{"id": product_id, "quantity": quantity} for product_id, quantity in quantities.items()]

    @service_result
    def verify_and_update_stock(self, items: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Decrement stock for every item in one transaction, or for none of them.

        Raises (as a failed envelope):
            NOT_FOUND for a missing product, INSUFFICIENT_STOCK with the
            short items in ``details.outOfStockItems``
        """
        normalized = self._normalize_items(items)
        products_ref = self.db.collections["products"]
        transaction = self.db.firestore.transaction()

        run = firestore.transactional(_decrement_stock)
        updated = run(transaction, products_ref, normalized, self.db.timestamp_now())

        logger.info(f"Stock updated for {len(updated)} products")
        return {"updated": updated}

    @service_result
    def get_product_stock(self, product_id: str) -> int:
        snapshot = self.db.collections["products"].document(product_id).get()
        if not snapshot.exists:
            return 0
        return snapshot.to_dict().get("stock") or 0

    @service_result
    def get_multiple_products_stock(self, product_ids: List[str]) -> Dict[str, int]:
        stock = {}
        for product_id in dict.fromkeys(product_ids):
            snapshot = self.db.collections["products"].document(product_id).get()
            stock[product_id] = (snapshot.to_dict().get("stock") or 0) if snapshot.exists else 0
        return stock

    @service_result
    def validate_items_stock(self, items: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Check availability without writing. An empty cart is valid."""
        if not items:
            return {"valid": True, "outOfStockItems": []}
        return self._check_items(self._normalize_items(items))

    def _check_items(self, items: List[Dict[str, Any]]) -> Dict[str, Any]:
        out_of_stock = []
        for item in items:
            snapshot = self.db.collections["products"].document(item["id"]).get()
            product = snapshot.to_dict() if snapshot.exists else {}
            available = product.get("stock") or 0
            if available < item["quantity"]:
                out_of_stock.append({
                    "id": item["id"],
                    "name": product.get("name"),
                    "requestedQuantity": item["quantity"],
                    "availableStock": available,
                })
        return {"valid": not out_of_stock, "outOfStockItems": out_of_stock}

    def validate_cart_stock(self, items: List[Dict[str, Any]]) -> Dict[str, Any]:
        """``validate_items_stock`` cached briefly per cart contents."""
        if not items:
            return self.validate_items_stock(items)
        return content_cache.get_or_fetch(
            cart_stock_key(items),
            lambda: self.validate_items_stock(items),
            ttl_for("stock_validation"),
        )

"""Product catalog service."""

from typing import List, Optional, Dict, Any
from google.api_core.exceptions import GoogleAPICallError
from storefront.apis.Db import Db
from storefront.config.loader import get_settings, get_search_max_results, get_search_min_length
from storefront.documents.products.Product import Product
from storefront.util.json_response import service_result
from storefront.util.logger import get_logger

logger = get_logger(__name__)

# Highest code point Firestore sorts; closes a prefix range query
PREFIX_END = "\uf8ff"


class ProductService:
    """CRUD and search over the products collection."""

    def __init__(self):
        self.db = Db.get_instance()
        self.settings = get_settings()

    @service_result
    def get_products(self) -> List[Dict[str, Any]]:
        """All products, each annotated with its shipping rule info."""
        products = [
            {"id": snapshot.id, **snapshot.to_dict()}
            for snapshot in self.db.collections["products"].stream()
        ]
        return [self._with_shipping_rules(product) for product in products]

    def _with_shipping_rules(self, product: Dict[str, Any]) -> Dict[str, Any]:
        rule_ids = product.get("shippingRuleIds")
        if not isinstance(rule_ids, list):
            rule_ids = [product["shippingRuleId"]] if product.get("shippingRuleId") else []

        if not rule_ids:
            return product

        rules = []
        try:
            for rule_id in rule_ids:
                snapshot = self.db.collections["shippingRules"].document(rule_id).get()
                if not snapshot.exists:
                    logger.info(f"Shipping rule {rule_id} of product {product['id']} not found")
                    continue
                data = snapshot.to_dict()
                rules.append({
                    "id": snapshot.id,
                    "name": data.get("zone") or "Unnamed",
                    "active": data.get("active") is not False,
                })
        except GoogleAPICallError as e:
            logger.warning(f"Could not resolve shipping rules for product {product['id']}: {e}")
            return product

        if not rules:
            return product

        return {**product, "shippingRulesInfo": rules, "shippingRuleInfo": rules[0]}

    @service_result
    def add_product(self, data: Dict[str, Any]) -> Dict[str, str]:
        payload = {k: v for k, v in data.items() if k != "id"}
        product = Product.create(payload)
        logger.info(f"Created product {product.id}")
        return {"id": product.id}

    @service_result
    def update_product(self, product_id: str, data: Dict[str, Any]) -> Dict[str, str]:
        product = Product(product_id)
        product.update_doc({k: v for k, v in data.items() if k not in ("id", "createdAt")})
        logger.info(f"Updated product {product_id}")
        return {"id": product_id}

    @service_result
    def delete_product(self, product_id: str) -> Dict[str, str]:
        Product(product_id).delete()
        logger.info(f"Deleted product {product_id}")
        return {"id": product_id}

    @service_result
    def get_product_by_id(self, product_id: str) -> Dict[str, Any]:
        return Product(product_id).to_dict()

    @service_result
    def search_products(self, search_term: Optional[str], max_results: Optional[int] = None) -> List[Dict[str, Any]]:
        """Prefix search on name plus exact match on SKU.

        Name matches come first; results are unique by id.
        """
        term = (search_term or "").strip()
        if len(term) < get_search_min_length(self.settings):
            return []

        limit = max_results or get_search_max_results(self.settings)
        lowered = term.lower()
        products_ref = self.db.collections["products"]

        name_query = (
            products_ref
            .order_by("name")
            .start_at([lowered])
            .end_at([lowered + PREFIX_END])
            .limit(limit)
        )
        sku_query = products_ref.where("sku", "==", term).limit(limit)

        results: List[Dict[str, Any]] = []
        seen = set()
        for snapshot in list(name_query.stream()) + list(sku_query.stream()):
            if snapshot.id in seen:
                continue
            seen.add(snapshot.id)
            results.append({"id": snapshot.id, **snapshot.to_dict()})

        return results[:limit]

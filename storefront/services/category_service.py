"""Category service."""

from typing import List, Dict, Any
from google.api_core.exceptions import PermissionDenied
from storefront.apis.Db import Db
from storefront.documents.categories.Category import Category
from storefront.util.json_response import service_result
from storefront.util.logger import get_logger

logger = get_logger(__name__)

SAMPLE_CATEGORIES: List[Dict[str, Any]] = [
    {
        "id": "sample-category-1",
        "name": "Plants",
        "description": "Plants for your home",
        "images": ["/public/images/categories/plants.jpg"],
        "active": True,
    },
    {
        "id": "sample-category-2",
        "name": "Pots",
        "description": "Decorative pots for your plants",
        "images": ["/public/images/categories/pots.jpg"],
        "active": True,
    },
    {
        "id": "sample-category-3",
        "name": "Accessories",
        "description": "Plant care accessories",
        "images": ["/public/images/categories/accessories.jpg"],
        "active": True,
    },
]


class CategoryService:
    def __init__(self):
        self.db = Db.get_instance()

    @service_result
    def get_categories(self) -> Dict[str, Any]:
        """All categories.

        When the caller's credentials cannot read the collection the sample
        categories are returned with ``isPublicFallback`` set.
        """
        try:
            categories = [
                {"id": snapshot.id, **snapshot.to_dict()}
                for snapshot in self.db.collections["categories"].stream()
            ]
        except PermissionDenied as e:
            logger.warning(f"Permission denied reading categories, using sample data: {e}")
            return {"categories": [dict(c) for c in SAMPLE_CATEGORIES], "isPublicFallback": True}

        return {"categories": categories, "isPublicFallback": False}

    @service_result
    def create_category(self, data: Dict[str, Any]) -> Dict[str, str]:
        category = Category.create({k: v for k, v in data.items() if k != "id"})
        logger.info(f"Created category {category.id}")
        return {"id": category.id}

    @service_result
    def update_category(self, category_id: str, data: Dict[str, Any]) -> Dict[str, str]:
        Category(category_id).update_doc({k: v for k, v in data.items() if k not in ("id", "createdAt")})
        logger.info(f"Updated category {category_id}")
        return {"id": category_id}

    @service_result
    def delete_category(self, category_id: str) -> Dict[str, str]:
        Category(category_id).delete()
        logger.info(f"Deleted category {category_id}")
        return {"id": category_id}

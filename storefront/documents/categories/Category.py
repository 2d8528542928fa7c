"""Category document class."""

from storefront.documents.DocumentBase import DocumentBase
from storefront.models.firestore_types import CategoryDoc


class Category(DocumentBase[CategoryDoc]):
    collection_name = "categories"
    resource_name = "Category"
    pydantic_model = CategoryDoc

    @property
    def doc(self) -> CategoryDoc:
        return super().doc

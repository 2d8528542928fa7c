"""Product document class."""

from storefront.documents.DocumentBase import DocumentBase
from storefront.models.firestore_types import ProductDoc


class Product(DocumentBase[ProductDoc]):
    """Catalog product. Stock is only decremented inside the checkout transaction."""

    collection_name = "products"
    resource_name = "Product"
    pydantic_model = ProductDoc

    @property
    def doc(self) -> ProductDoc:
        return super().doc

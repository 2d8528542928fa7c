"""Saved payment method document class."""

from storefront.documents.DocumentBase import DocumentBase
from storefront.models.firestore_types import PaymentMethodDoc


class PaymentMethod(DocumentBase[PaymentMethodDoc]):
    """Reference to a Stripe payment method saved by a user."""

    collection_name = "paymentMethods"
    resource_name = "Payment method"
    pydantic_model = PaymentMethodDoc

    @property
    def doc(self) -> PaymentMethodDoc:
        return super().doc

    def belongs_to(self, user_id: str) -> bool:
        return self.doc.userId == user_id

"""Order document class."""

from typing import Optional, Dict, Any
from storefront.documents.DocumentBase import DocumentBase
from storefront.models.firestore_types import OrderDoc
from storefront.util.logger import get_logger

logger = get_logger(__name__)


class Order(DocumentBase[OrderDoc]):
    """Order placed at checkout. Admin actions append to its history lists."""

    collection_name = "orders"
    resource_name = "Order"
    pydantic_model = OrderDoc

    @property
    def doc(self) -> OrderDoc:
        return super().doc

    def change_status(self, new_status: str, changed_by: str, notes: str = "",
                      extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Set the status and append the transition to statusHistory.

        Returns:
            The history entry that was appended
        """
        entry = {
            "from": self.doc.status,
            "to": new_status,
            "changedAt": self.db.timestamp_now(),
            "changedBy": changed_by,
            "notes": notes or "",
        }
        self.append_to_array("statusHistory", entry, {**(extra or {}), "status": new_status})
        logger.info(f"Order {self.id} status {entry['from']} -> {new_status} by {changed_by}")
        return entry

    def add_note(self, text: str, created_by: str) -> Dict[str, Any]:
        note = {
            "text": text,
            "createdAt": self.db.timestamp_now(),
            "createdBy": created_by,
        }
        self.append_to_array("adminNotes", note)
        return note

    def record_email(self, email_type: str, sent_by: str, success: bool, error: Optional[str] = None,
                     updates: Optional[Dict[str, Any]] = None, **details) -> Dict[str, Any]:
        """Append a send attempt to emailHistory. ``details`` (email, resent) go on the entry."""
        record = {
            "type": email_type,
            "sentAt": self.db.timestamp_now(),
            "sentBy": sent_by,
            "success": success,
            "error": error,
            **details,
        }
        self.append_to_array("emailHistory", record, updates)
        return record

    def has_invoice(self) -> bool:
        billing = self.doc.billing
        return bool(billing.invoicePdfUrl or billing.invoiceXmlUrl or billing.invoiceUrl)

"""Invoice files (PDF and XML) attached to orders."""

import time
from typing import Optional, Dict, Any
from storefront.apis.Db import Db
from storefront.config.loader import get_settings, get_invoices_folder
from storefront.documents.orders.Order import Order
from storefront.exceptions.CustomError import ValidationError
from storefront.util.json_response import service_result
from storefront.util.logger import get_logger

logger = get_logger(__name__)

INVOICE_FIELDS = (
    "invoicePdfUrl", "invoicePdfName", "invoicePdfPath",
    "invoiceXmlUrl", "invoiceXmlName", "invoiceXmlPath",
    "invoiceUrl", "invoiceFileName",
    "invoiceUploadedAt", "invoiceUploadedBy",
)


class InvoiceService:
    """Each file is given as {"name": str, "content": bytes, "contentType": str}."""

    def __init__(self):
        self.db = Db.get_instance()
        self.settings = get_settings()

    def _upload(self, order_id: str, file: Dict[str, Any], default_type: str) -> Dict[str, str]:
        if not file.get("name") or not file.get("content"):
            raise ValidationError("Invoice files need a name and content", field="file")

        path = f"{get_invoices_folder(self.settings)}/{order_id}/{int(time.time() * 1000)}_{file['name']}"
        blob = self.db.upload_file_buffer(file["content"], path, file.get("contentType") or default_type)
        return {"url": self.db.get_download_url(blob), "name": file["name"], "path": path}

    @service_result
    def upload_invoice_files_for_order(self, order_id: str, pdf: Optional[Dict[str, Any]],
                                       xml: Optional[Dict[str, Any]], admin_id: str) -> Dict[str, Any]:
        if not order_id:
            raise ValidationError("Order id is required", field="orderId")
        if not admin_id:
            raise ValidationError("Admin id is required", field="adminId")
        if not pdf and not xml:
            raise ValidationError("At least one invoice file is required", field="file")

        order = Order(order_id)
        update: Dict[str, Any] = {}

        if pdf:
            uploaded = self._upload(order_id, pdf, "application/pdf")
            update.update({
                "billing.invoicePdfUrl": uploaded["url"],
                "billing.invoicePdfName": uploaded["name"],
                "billing.invoicePdfPath": uploaded["path"],
            })
        if xml:
            uploaded = self._upload(order_id, xml, "application/xml")
            update.update({
                "billing.invoiceXmlUrl": uploaded["url"],
                "billing.invoiceXmlName": uploaded["name"],
                "billing.invoiceXmlPath": uploaded["path"],
            })

        # Older clients only read invoiceUrl / invoiceFileName
        primary = "Pdf" if pdf else "Xml"
        update["billing.invoiceUrl"] = update[f"billing.invoice{primary}Url"]
        update["billing.invoiceFileName"] = update[f"billing.invoice{primary}Name"]
        update["billing.invoiceUploadedAt"] = self.db.timestamp_now()
        update["billing.invoiceUploadedBy"] = admin_id

        order.update_doc(update)
        logger.info(f"Invoice files uploaded for order {order_id} by {admin_id}")
        return {key.split(".", 1)[1]: value for key, value in update.items()}

    @service_result
    def remove_invoice_files_from_order(self, order_id: str) -> Dict[str, Any]:
        """Delete the stored files and clear every invoice field of the order."""
        order = Order(order_id)
        billing = order.doc.billing.model_dump()

        removed = []
        for key in ("invoicePdfPath", "invoiceXmlPath"):
            path = billing.get(key)
            if not path:
                continue
            try:
                self.db.delete_file(path)
                removed.append(path)
            except Exception as e:
                logger.error(f"Could not delete invoice file {path}: {e}")

        cleared = {f"billing.{field}": None for field in INVOICE_FIELDS}
        cleared["updatedAt"] = self.db.timestamp_now()
        # update_doc drops None values, so the null fields are written directly
        order.get_doc_ref().update(cleared)
        logger.info(f"Invoice removed from order {order_id}")
        return {"id": order_id, "removedFiles": removed}

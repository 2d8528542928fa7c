"""Order emails (confirmation, shipped, invoice) and the contact form email."""

from typing import Optional, Dict, Any, Callable
from storefront.apis.Db import Db
from storefront.apis.EmailApi import EmailApi
from storefront.config.env_loader import get_optional_env_var
from storefront.config.loader import get_settings, get_email_config
from storefront.documents.orders.Order import Order
from storefront.documents.users.User import User
from storefront.exceptions.CustomError import ExternalServiceError, PreconditionError, ValidationError
from storefront.models.util_types import OrderStatus
from storefront.templates import contact_emails, order_emails
from storefront.util.json_response import service_result
from storefront.util.logger import get_logger

logger = get_logger(__name__)

EMAIL_CONFIRMATION = "confirmation"
EMAIL_SHIPPED = "shipped"
EMAIL_INVOICE = "invoice"


class NotificationService:
    def __init__(self, email_api: Optional[EmailApi] = None):
        self.db = Db.get_instance()
        self.email_api = email_api or EmailApi()
        self.store_name = get_email_config(get_settings())["store_name"]

    @staticmethod
    def _recipient(order: Order) -> str:
        user = User.find(order.doc.userId) if order.doc.userId else None
        if user is None:
            raise PreconditionError("The order has no registered customer", details={"orderId": order.id})
        email = getattr(user.doc, "email", None)
        if not email:
            raise PreconditionError("The customer has no email address", details={"orderId": order.id})
        return email

    def _deliver(self, order: Order, email_type: str, sent_by: str, subject: str,
                 render: Callable[[Dict[str, Any]], str], resent: bool = False,
                 updates: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Render, send and record the attempt in the order's emailHistory.

        ``updates`` are written with the history entry, only when the send succeeds.
        """
        to = self._recipient(order)
        html = render(order.to_dict())
        try:
            self.email_api.send(to, subject, html)
        except ExternalServiceError as e:
            order.record_email(email_type, sent_by, success=False, error=e.message, email=to, resent=resent)
            raise

        order.record_email(email_type, sent_by, success=True, updates=updates, email=to, resent=resent)
        return {"orderId": order.id, "type": email_type, "to": to}

    @service_result
    def send_order_confirmation(self, order_id: str, sent_by: str = "system", resend: bool = False) -> Dict[str, Any]:
        order = Order(order_id)
        subject = f"Order confirmation #{order_id}"
        if resend:
            subject = f"[Resent] {subject}"
        return self._deliver(
            order, EMAIL_CONFIRMATION, sent_by, subject,
            lambda data: order_emails.order_confirmation(data, order_id, self.store_name),
            resent=resend)

    @service_result
    def send_order_shipped(self, order_id: str, shipping_info: Optional[Dict[str, Any]], admin_id: str,
                           resend_only: bool = False) -> Dict[str, Any]:
        """Email the tracking info. Unless resending, the order moves to shipped first."""
        shipping_info = shipping_info or {}
        order = Order(order_id)
        self._recipient(order)

        if not resend_only and order.doc.status != OrderStatus.SHIPPED.value:
            notes = (f"Shipped with {shipping_info.get('carrier') or 'carrier'}, "
                     f"tracking: {shipping_info.get('trackingNumber') or 'N/A'}")
            order.change_status(
                OrderStatus.SHIPPED.value, admin_id, notes,
                extra={"shipping.trackingInfo": shipping_info, "shipping.shippedAt": self.db.timestamp_now()},
            )
        elif shipping_info:
            order.update_doc({"shipping.trackingInfo": shipping_info})

        return self._deliver(
            order, EMAIL_SHIPPED, admin_id, f"Your order #{order_id} has shipped",
            lambda data: order_emails.order_shipped(data, order_id, shipping_info, self.store_name),
            resent=resend_only)

    @service_result
    def send_invoice_email(self, order_id: str, admin_id: str) -> Dict[str, Any]:
        order = Order(order_id)
        if not order.has_invoice():
            raise PreconditionError("The order has no invoice", details={"orderId": order_id})
        return self._deliver(
            order, EMAIL_INVOICE, admin_id, f"Invoice for order #{order_id}",
            lambda data: order_emails.invoice_ready(data, order_id, self.store_name),
            updates={
                "billing.invoiceEmailSent": True,
                "billing.invoiceEmailSentAt": self.db.timestamp_now(),
                "billing.invoiceEmailSentBy": admin_id,
            })

    @service_result
    def send_contact_email(self, form: Dict[str, Any]) -> Dict[str, Any]:
        """Forward a contact form message to the store, then acknowledge it to the sender.

        The store address is ``CONTACT_RECIPIENT_EMAIL``, or the sender address when unset.
        """
        form = {k: v.strip() if isinstance(v, str) else v for k, v in (form or {}).items()}
        for field in ("name", "email", "message"):
            if not form.get(field) or not isinstance(form[field], str):
                raise ValidationError(f"{field} is required", field=field)
        if "@" not in form["email"]:
            raise ValidationError("email is not a valid address", field="email")

        recipient = get_optional_env_var("CONTACT_RECIPIENT_EMAIL") or Db.get_env_or_secret("EMAIL_DEFAULT_SENDER")
        self.email_api.send(recipient, f"New contact message from {form['name']}",
                            contact_emails.contact_message(form, self.store_name))
        self.email_api.send(form["email"], f"We received your message - {self.store_name}",
                            contact_emails.contact_acknowledgement(form, self.store_name))
        logger.info(f"Contact message from {form['email']} forwarded to {recipient}")
        return {"sent": True, "messageId": form.get("messageId")}

"""HTML bodies of the order emails."""

from datetime import datetime
from html import escape
from typing import Dict, Any

WRAPPER = '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">{body}</div>'
CELL = 'style="padding: 8px; border-bottom: 1px solid #eee;"'
CELL_RIGHT = 'style="text-align: right; padding: 8px; border-bottom: 1px solid #eee;"'


def _money(value) -> str:
    return f"${float(value or 0):.2f}"


def _date(value) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    return escape(str(value)) if value else "-"


def _address(order: Dict[str, Any]) -> str:
    address = (order.get("shipping") or {}).get("address") or {}
    if not address:
        return "<p>No shipping address</p>"
    street = " ".join(str(address[k]) for k in ("street", "numExt") if address.get(k))
    city = ", ".join(str(address[k]) for k in ("city", "state") if address.get(k))
    lines = [address.get("name"), street, address.get("colonia"), f"{city} {address.get('zip') or ''}".strip()]
    return "<p>" + "<br>".join(escape(line) for line in lines if line) + "</p>"


def _items_table(order: Dict[str, Any]) -> str:
    rows = []
    for item in order.get("items") or []:
        quantity = int(item.get("quantity") or 0)
        line_total = float(item.get("price") or 0) * quantity
        rows.append(
            f"<tr><td {CELL}>{escape(item.get('name') or 'Unnamed product')}</td>"
            f"<td {CELL_RIGHT}>{quantity}</td><td {CELL_RIGHT}>{_money(line_total)}</td></tr>"
        )

    totals = order.get("totals") or {}
    shipping = totals.get("shipping") or 0
    footer = "".join(
        f'<tr><td colspan="2" style="text-align: right; padding: 8px;"><strong>{label}:</strong></td>'
        f'<td style="text-align: right; padding: 8px;">{value}</td></tr>'
        for label, value in (
            ("Subtotal", _money(totals.get("subtotal"))),
            ("Tax", _money(totals.get("tax"))),
            ("Shipping", _money(shipping) if shipping > 0 else "Free"),
            ("Total", _money(totals.get("total"))),
        )
    )
    return (
        '<table style="width: 100%; border-collapse: collapse;">'
        "<thead><tr><th>Product</th><th>Quantity</th><th>Price</th></tr></thead>"
        f"<tbody>{''.join(rows)}</tbody><tfoot>{footer}</tfoot></table>"
    )


def order_confirmation(order: Dict[str, Any], order_id: str, store_name: str) -> str:
    return WRAPPER.format(body=(
        '<h1 style="color: #28a745;">Thank you for your order!</h1>'
        "<p>Your order was received and is being processed.</p>"
        f"<p><strong>Order number:</strong> {escape(order_id)}<br>"
        f"<strong>Date:</strong> {_date(order.get('createdAt'))}</p>"
        f"<h3>Products</h3>{_items_table(order)}"
        f"<h3>Shipping address</h3>{_address(order)}"
        f"<p>{escape(store_name)}</p>"
    ))


def order_shipped(order: Dict[str, Any], order_id: str, shipping_info: Dict[str, Any], store_name: str) -> str:
    carrier = escape(shipping_info.get("carrier") or "our carrier")
    tracking = escape(shipping_info.get("trackingNumber") or "N/A")
    tracking_url = shipping_info.get("trackingUrl")
    link = f'<p><a href="{escape(tracking_url)}">Track your package</a></p>' if tracking_url else ""
    return WRAPPER.format(body=(
        '<h1 style="color: #007bff;">Your order is on its way!</h1>'
        f"<p>Order <strong>{escape(order_id)}</strong> was shipped with {carrier}.</p>"
        f"<p><strong>Tracking number:</strong> {tracking}</p>{link}"
        f"<h3>Products</h3>{_items_table(order)}"
        f"<h3>Shipping address</h3>{_address(order)}"
        f"<p>{escape(store_name)}</p>"
    ))


def invoice_ready(order: Dict[str, Any], order_id: str, store_name: str) -> str:
    billing = order.get("billing") or {}
    links = []
    if billing.get("invoicePdfUrl"):
        links.append(f'<a href="{escape(billing["invoicePdfUrl"])}">Invoice (PDF)</a>')
    if billing.get("invoiceXmlUrl"):
        links.append(f'<a href="{escape(billing["invoiceXmlUrl"])}">Invoice (XML)</a>')
    if not links and billing.get("invoiceUrl"):
        links.append(f'<a href="{escape(billing["invoiceUrl"])}">Invoice</a>')
    return WRAPPER.format(body=(
        "<h1>Your invoice is ready</h1>"
        f"<p>The invoice for order <strong>{escape(order_id)}</strong> is available:</p>"
        f"<p>{' | '.join(links)}</p>"
        f"<p>Total: {_money((order.get('totals') or {}).get('total'))}</p>"
        f"<p>{escape(store_name)}</p>"
    ))

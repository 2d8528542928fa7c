"""HTML bodies of the contact form emails."""

from html import escape
from typing import Dict, Any

from storefront.templates.order_emails import WRAPPER

SUMMARY_LENGTH = 150


def _paragraph(label: str, value) -> str:
    return f"<p><strong>{label}:</strong> {escape(str(value))}</p>" if value else ""


def contact_message(form: Dict[str, Any], store_name: str) -> str:
    """Message forwarded to the store."""
    message_id = form.get("messageId")
    return WRAPPER.format(body=(
        "<h2>New contact message</h2>"
        f"{_paragraph('Name', form['name'])}{_paragraph('Email', form['email'])}"
        f"{_paragraph('Phone', form.get('phone'))}{_paragraph('Subject', form.get('subject'))}"
        f'<p><strong>Message:</strong></p><p style="white-space: pre-line;">{escape(form["message"])}</p>'
        + (f'<p style="font-size: 12px; color: #666;">Message id: {escape(str(message_id))}</p>'
           if message_id else "")
        + f'<p style="font-size: 12px; color: #666;">Sent from the {escape(store_name)} contact form.</p>'
    ))


def contact_acknowledgement(form: Dict[str, Any], store_name: str) -> str:
    """Auto-reply to the sender with the start of their message."""
    message = form["message"]
    summary = message[:SUMMARY_LENGTH] + ("..." if len(message) > SUMMARY_LENGTH else "")
    return WRAPPER.format(body=(
        "<h2>Thanks for contacting us!</h2>"
        f"<p>Hi {escape(form['name'])},</p>"
        "<p>We received your message and will answer as soon as possible.</p>"
        f"{_paragraph('Subject', form.get('subject') or 'Website contact')}"
        f'<p><strong>Message:</strong></p><p style="white-space: pre-line;">{escape(summary)}</p>'
        f"<p>The {escape(store_name)} team</p>"
        '<p style="font-size: 12px; color: #666;">This is an automatic reply, please do not answer it.</p>'
    ))

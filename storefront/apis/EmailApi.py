"""Transactional email through the SendGrid v3 REST API."""

import requests
from storefront.apis.Db import Db
from storefront.config.loader import get_settings, get_email_config
from storefront.exceptions.CustomError import ExternalServiceError
from storefront.util.logger import get_logger

logger = get_logger(__name__)


class EmailApi:
    def __init__(self):
        self.config = get_email_config(get_settings())

    def send(self, to: str, subject: str, html: str) -> bool:
        """Send one HTML email.

        Raises:
            ExternalServiceError: SendGrid rejected the message or could not be reached
        """
        payload = {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": Db.get_env_or_secret("EMAIL_DEFAULT_SENDER"), "name": self.config["store_name"]},
            "subject": subject,
            "content": [{"type": "text/html", "value": html}],
        }
        headers = {
            "Authorization": f"Bearer {Db.get_env_or_secret('SENDGRID_API_KEY')}",
            "Content-Type": "application/json",
        }

        try:
            response = requests.post(
                self.config["sendgrid_url"], json=payload, headers=headers,
                timeout=self.config["timeout_sec"])
        except requests.RequestException as e:
            logger.error(f"SendGrid request failed: {e}")
            raise ExternalServiceError("sendgrid", str(e))

        if response.status_code >= 400:
            logger.error(f"SendGrid returned {response.status_code}: {response.text}")
            raise ExternalServiceError("sendgrid", f"Email could not be sent ({response.status_code})",
                                       response.status_code)

        logger.info(f"Email '{subject}' sent to {to}")
        return True

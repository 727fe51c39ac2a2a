# storefront/services/email_client.py
import requests

from storefront.utils.retry import http_retry
from storefront.utils.settings import RESEND_API_KEY, EMAIL_API_URL, EMAIL_FROM, EMAIL_TIMEOUT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class EmailClient:
    def __init__(self, api_key: str | None = None, url: str | None = None, timeout: float | None = None):
        self.api_key = api_key if api_key is not None else RESEND_API_KEY
        self.url = url or EMAIL_API_URL
        self.timeout = timeout if timeout is not None else EMAIL_TIMEOUT_SECONDS

    @http_retry()
    def send(self, to: str, subject: str, html: str) -> bool:
        if not self.api_key:
            logger.warning(f"Email API key not configured, skipping email to {to}: {subject}")
            return False

        logger.info(f"EmailClient POST {self.url} to={to}")
        resp = requests.post(
            self.url,
            json={"from": EMAIL_FROM, "to": [to], "subject": subject, "html": html},
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return True

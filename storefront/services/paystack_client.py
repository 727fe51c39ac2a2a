# storefront/services/paystack_client.py
import requests
from requests import RequestException

from storefront.domain.schemas import CheckoutResult
from storefront.utils.errors import GatewayError
from storefront.utils.settings import (
    PAYSTACK_SECRET_KEY,
    PAYSTACK_BASE_URL,
    PAYSTACK_CALLBACK_URL,
    PAYSTACK_TIMEOUT_SECONDS,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class PaystackClient:
    """
    Hosted checkout via Paystack "initialize transaction".

    No retry here: a repeated POST could open a second transaction. The
    caller re-runs checkout instead, which asks for a fresh reference.
    """

    def __init__(
        self,
        secret_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        callback_url: str | None = None,
    ):
        self.secret_key = secret_key if secret_key is not None else PAYSTACK_SECRET_KEY
        self.base_url = (base_url or PAYSTACK_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else PAYSTACK_TIMEOUT_SECONDS
        self.callback_url = callback_url if callback_url is not None else PAYSTACK_CALLBACK_URL

    def initialize_transaction(self, email: str, amount_minor: int, metadata: dict) -> CheckoutResult:
        if not self.secret_key:
            raise GatewayError("Payment gateway not configured")

        url = f"{self.base_url}/transaction/initialize"
        body = {
            "email": email,
            "amount": amount_minor,
            "metadata": metadata,
        }
        if self.callback_url:
            body["callback_url"] = self.callback_url

        logger.info(f"PaystackClient POST {url} amount={amount_minor}")

        try:
            resp = requests.post(
                url,
                json=body,
                headers={"Authorization": f"Bearer {self.secret_key}"},
                timeout=self.timeout,
            )
            data = resp.json()
        except (RequestException, ValueError) as e:
            # timeouts, connection errors and non-JSON bodies all end here
            logger.error(f"Paystack request failed: {e}")
            raise GatewayError("Payment gateway unavailable") from e

        if not data.get("status"):
            message = data.get("message") or "Payment initialization failed"
            logger.error(f"Paystack API error: {message}")
            raise GatewayError(message)

        tx = data.get("data") or {}
        if not tx.get("authorization_url") or not tx.get("reference"):
            logger.error("Paystack response missing authorization_url or reference")
            raise GatewayError("Payment gateway returned an invalid response")

        return CheckoutResult(authorization_url=tx["authorization_url"], reference=tx["reference"])

# storefront/utils/errors.py


class StorefrontError(Exception):
    """Base class for errors raised by the order/payment services."""


class ValidationError(StorefrontError):
    """Missing or malformed checkout input. Nothing was written."""


class GatewayError(StorefrontError):
    """Payment provider unreachable, timed out or rejected the request."""


class ProfileMissing(StorefrontError):
    def __init__(self, message: str = "User profile not found. Please complete your profile first."):
        super().__init__(message)


class OrderNotFound(StorefrontError):
    pass


class NotFoundOnWebhook(StorefrontError):
    """Webhook referenced a payment we never issued. Logged and acknowledged."""

    def __init__(self, reference: str):
        super().__init__(f"No order for reference {reference}")
        self.reference = reference


class AuthenticityFailure(StorefrontError):
    """Webhook signature missing or wrong."""


class WebhookConfigurationError(StorefrontError):
    pass


class MalformedWebhook(StorefrontError):
    pass

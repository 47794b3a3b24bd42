"""Email services."""

from nhc.services.email.email_service import EmailService, EmailMessage, EmailDeliveryError

__all__ = [
    "EmailService",
    "EmailMessage",
    "EmailDeliveryError",
]

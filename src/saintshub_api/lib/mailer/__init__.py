"""Mailer library: transactional email rendering and delivery."""

from saintshub_api.lib.mailer.client import Brand, Mailer, MailDeliveryError, Recipient

__all__ = [
    "Brand",
    "MailDeliveryError",
    "Mailer",
    "Recipient",
]

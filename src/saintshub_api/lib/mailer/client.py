"""Transactional email over an HTTP mail API (Brevo-compatible).

Messages are rendered from Jinja2 templates shipped with the package and
posted as JSON.  When no API key is configured, sending is skipped and
logged, so local and test environments need no mail account.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import httpx
from jinja2 import Environment, PackageLoader, select_autoescape
from loguru import logger

from saintshub_api.core.config import Settings

DEFAULT_TIMEOUT = 15.0

_templates = Environment(
    loader=PackageLoader("saintshub_api.lib.mailer", "templates"),
    autoescape=select_autoescape(["html"]),
)


class MailDeliveryError(Exception):
    """Raised when the mail API rejects or cannot receive a message."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class Recipient:
    """The person an email is about and addressed to."""

    first_name: str
    last_name: str
    email: str
    role: str


@dataclass(frozen=True)
class Brand:
    name: str
    logo_url: str
    dashboard_url: str


class Mailer:
    """Renders and sends the application's transactional emails.

    Args:
        api_url: Mail API endpoint.
        api_key: Mail API key; ``None`` disables delivery.
        sender_noreply: Sender address for user-facing messages.
        sender_admin: Sender address for administrative messages.
        admin_email: Recipient of registration notices.
        brand: Product name and URLs embedded in messages.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests inject a mock).
    """

    def __init__(
        self,
        api_url: str,
        api_key: str | None,
        sender_noreply: str,
        sender_admin: str,
        admin_email: str,
        brand: Brand,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_url = api_url
        self._api_key = api_key
        self._sender_noreply = sender_noreply
        self._sender_admin = sender_admin
        self._admin_email = admin_email
        self._brand = brand
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "Mailer":
        return cls(
            api_url=settings.mail_api_url,
            api_key=settings.mail_api_key,
            sender_noreply=settings.mail_from_noreply,
            sender_admin=settings.mail_from_admin,
            admin_email=settings.admin_notification_email,
            brand=Brand(
                name=settings.brand_name,
                logo_url=settings.brand_logo_url,
                dashboard_url=settings.brand_dashboard_url,
            ),
            timeout=settings.mail_timeout,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def render(self, template: str, **context: Any) -> str:
        """Render an email template with the brand and current year in scope."""
        return _templates.get_template(template).render(
            brand=self._brand,
            year=datetime.now(UTC).year,
            **context,
        )

    async def send(self, *, sender: str, to: str, subject: str, html: str) -> bool:
        """Post one message to the mail API.

        Returns:
            True if the message was accepted, False if delivery is disabled.

        Raises:
            MailDeliveryError: On transport errors or a non-2xx response.
        """
        if not self._api_key:
            logger.debug("Email skipped (mail API key not configured): {}", subject)
            return False

        body = {
            "sender": {"name": self._brand.name, "email": sender},
            "to": [{"email": to}],
            "subject": subject,
            "htmlContent": html,
        }
        headers = {"api-key": self._api_key, "Accept": "application/json"}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._api_url, json=body, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            msg = f"Mail API returned HTTP {e.response.status_code}"
            raise MailDeliveryError(msg, status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            msg = f"Mail API request failed: {e}"
            raise MailDeliveryError(msg) from e

        logger.info("Email '{}' sent to {}", subject, to)
        return True

    async def send_welcome(self, user: Recipient) -> bool:
        html = self.render("welcome.html", user=user, pending_review=user.role in ("pastor", "IT"))
        return await self.send(
            sender=self._sender_noreply,
            to=user.email,
            subject=f"Welcome to {self._brand.name}!",
            html=html,
        )

    async def send_admin_notification(self, user: Recipient) -> bool:
        """Tell the administrators a pastor or IT account awaits approval."""
        html = self.render("admin_notification.html", user=user)
        return await self.send(
            sender=self._sender_admin,
            to=self._admin_email,
            subject="New User Registration",
            html=html,
        )

    async def send_approval(self, user: Recipient) -> bool:
        html = self.render("approval.html", user=user)
        return await self.send(
            sender=self._sender_noreply,
            to=user.email,
            subject=f"Your {self._brand.name} account has been approved",
            html=html,
        )

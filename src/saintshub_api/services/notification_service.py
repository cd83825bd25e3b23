"""Best-effort side effects attached to a primary operation.

Welcome, registration-notice and approval emails, and the avatar upload
during signup, must never fail the request that triggered them.  Each is
awaited inline through ``dispatch_non_critical``, which logs and swallows
any failure.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from loguru import logger

from saintshub_api.lib.mailer import Mailer, Recipient
from saintshub_api.models.user import LEADERSHIP_ROLES, User


async def dispatch_non_critical(action: str, send: Callable[[], Awaitable[Any]]) -> bool:
    """Await a side effect, logging instead of raising on failure.

    Args:
        action: Short description for the log (``"welcome email to x@y"``).
        send: Zero-argument coroutine function performing the side effect.

    Returns:
        True if the side effect completed, False if it raised.
    """
    try:
        await send()
    except Exception:
        logger.opt(exception=True).warning("Non-critical action failed: {}", action)
        return False
    return True


def recipient_for(user: User) -> Recipient:
    return Recipient(first_name=user.first_name, last_name=user.last_name, email=user.email, role=user.role)


async def notify_signup(mailer: Mailer, user: User) -> None:
    """Send the welcome email and, for pastors and IT, the admin notice."""
    recipient = recipient_for(user)
    await dispatch_non_critical(f"welcome email to {user.email}", lambda: mailer.send_welcome(recipient))
    if user.role in LEADERSHIP_ROLES:
        await dispatch_non_critical(
            f"admin notification for {user.email} (role {user.role})",
            lambda: mailer.send_admin_notification(recipient),
        )


async def notify_approval(mailer: Mailer, user: User) -> None:
    recipient = recipient_for(user)
    await dispatch_non_critical(f"approval email to {user.email}", lambda: mailer.send_approval(recipient))

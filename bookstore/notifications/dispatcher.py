import logging

from bookstore.notifications.rules import NOTIFICATION_RULES
from bookstore.notifications.channels import Channel
from bookstore.notifications.email_handlers import send_user_email, send_admin_email
from bookstore.notifications.events import OrderEvent
from bookstore.services.email_service import Mailer, send_email

logger = logging.getLogger(__name__)


def dispatch_order_event(
    *,
    event: OrderEvent,
    user,
    send: Mailer = send_email,
    extra: dict | None = None,
    notify_user: bool = True,
    notify_admin: bool = True,
) -> bool:
    """
    Central notification dispatcher.

    Fire-and-forget: failures are logged, never raised, so the caller's
    already-committed work is never undone by a notification problem.
    Returns whether the user email went out.
    """

    rules = NOTIFICATION_RULES.get(event, {})
    extra = extra or {}
    user_sent = False

    # -------------------------
    # USER EMAIL
    # -------------------------
    if notify_user and rules.get(Channel.EMAIL_USER) and user:
        try:
            user_sent = bool(send_user_email(
                send,
                template=extra["user_template"],
                subject=extra["user_subject"],
                user=user,
                **extra.get("context", {}),
            ))
        except Exception:
            logger.exception(f"User email failed for {event.value}")

    # -------------------------
    # ADMIN EMAIL
    # -------------------------
    if notify_admin and rules.get(Channel.EMAIL_ADMIN) and "admin_template" in extra:
        try:
            send_admin_email(
                send,
                template=extra["admin_template"],
                subject=extra["admin_subject"],
                user=user,
                **extra.get("context", {}),
            )
        except Exception:
            logger.exception(f"Admin email failed for {event.value}")

    return user_sent

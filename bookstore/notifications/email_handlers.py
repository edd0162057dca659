from bookstore.config import settings
from bookstore.services.email_service import Mailer
from bookstore.utils.template import render_template


def send_user_email(send: Mailer, template, subject, user, **ctx) -> bool:
    html = render_template(template, user=user, store_name=settings.STORE_NAME, **ctx)
    return send(to=user.email, subject=subject, html=html)


def send_admin_email(send: Mailer, template, subject, **ctx) -> bool:
    if not settings.ADMIN_EMAILS:
        return False
    html = render_template(template, store_name=settings.STORE_NAME, **ctx)
    return send(to=settings.ADMIN_EMAILS, subject=subject, html=html)

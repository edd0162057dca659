import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from bookstore.errors import (
    InvalidPromotion,
    NotFound,
    PromotionEnded,
    PromotionNotStarted,
)
from bookstore.models.order import Order
from bookstore.models.promotion import Promotion
from bookstore.models.user import User
from bookstore.notifications import OrderEvent, dispatch_order_event
from bookstore.schemas.promotion_schemas import PromotionCreate
from bookstore.services.email_service import Mailer, send_email

logger = logging.getLogger(__name__)


def resolve_promotion(
    session: Session,
    title: Optional[str],
    now: Optional[datetime] = None,
) -> Optional[Promotion]:
    """
    Look up a promotion by title and check it can be used right now.

    Returns None when no title is given (no discount). The promotion is
    usable on the closed window [start_date, end_date].
    """
    if not title:
        return None

    promotion = session.exec(
        select(Promotion).where(Promotion.title == title)
    ).first()

    if not promotion:
        raise InvalidPromotion("Invalid promotion title")

    now = now or datetime.utcnow()

    if now < promotion.start_date:
        raise PromotionNotStarted(
            "Promotion cannot be used. Promotion hasn't started yet"
        )
    if now > promotion.end_date:
        raise PromotionEnded(
            "Promotion cannot be used. Promotion has already ended"
        )

    return promotion


# -------- Admin management --------

def create_promotion(session: Session, data: PromotionCreate) -> Promotion:
    existing = session.exec(
        select(Promotion).where(Promotion.title == data.title)
    ).first()
    if existing:
        raise InvalidPromotion(f"Promotion '{data.title}' already exists")

    promotion = Promotion(**data.model_dump())
    session.add(promotion)
    try:
        session.commit()
    except IntegrityError:
        # lost a race with another admin creating the same title
        session.rollback()
        raise InvalidPromotion(f"Promotion '{data.title}' already exists")
    session.refresh(promotion)

    logger.info(f"Created promotion {promotion.id} '{promotion.title}'")
    return promotion


def list_promotions(session: Session) -> List[Promotion]:
    return session.exec(
        select(Promotion).order_by(Promotion.start_date)
    ).all()


def get_promotion(session: Session, promotion_id: int) -> Promotion:
    promotion = session.get(Promotion, promotion_id)
    if not promotion:
        raise NotFound("Promotion not found")
    return promotion


def delete_promotion(session: Session, promotion_id: int) -> None:
    promotion = get_promotion(session, promotion_id)

    if promotion.is_sent:
        raise InvalidPromotion("A promotion that was already sent cannot be deleted")

    used = session.exec(
        select(Order).where(Order.promotion_id == promotion_id)
    ).first()
    if used:
        raise InvalidPromotion("A promotion used by an order cannot be deleted")

    session.delete(promotion)
    session.commit()
    logger.info(f"Deleted promotion {promotion_id}")


def send_promotion(
    session: Session,
    promotion_id: int,
    send: Mailer = send_email,
) -> int:
    """Email the promotion to every customer, then lock it as sent."""
    promotion = get_promotion(session, promotion_id)

    if promotion.is_sent:
        raise InvalidPromotion("Promotion was already sent")

    customers = session.exec(
        select(User).where(User.role == "user", User.can_login == True)  # noqa: E712
    ).all()

    delivered = 0
    for customer in customers:
        if dispatch_order_event(
            event=OrderEvent.PROMOTION_ANNOUNCED,
            user=customer,
            send=send,
            extra={
                "user_template": "user_emails/promotion.html",
                "user_subject": f"New promotion: {promotion.title}",
                "context": {"promotion": promotion},
            },
            notify_admin=False,
        ):
            delivered += 1

    promotion.is_sent = True
    session.add(promotion)
    session.commit()

    logger.info(
        f"Promotion {promotion.id} sent to {delivered}/{len(customers)} customers"
    )
    return delivered

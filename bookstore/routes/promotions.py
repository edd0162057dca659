from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from bookstore.database import get_session
from bookstore.dependencies.admin import require_admin
from bookstore.models.promotion import Promotion
from bookstore.models.user import User
from bookstore.schemas.promotion_schemas import PromotionCreate, PromotionResponse
from bookstore.services.email_service import Mailer, get_mailer
from bookstore.services import promotion_service

router = APIRouter()


def _to_response(promotion: Promotion, now: datetime) -> PromotionResponse:
    return PromotionResponse(
        id=promotion.id,
        title=promotion.title,
        start_date=promotion.start_date,
        end_date=promotion.end_date,
        discount=promotion.discount,
        is_sent=promotion.is_sent,
        is_active=promotion.is_active(now),
    )


@router.post("", response_model=PromotionResponse, status_code=201)
def create_promotion(
    data: PromotionCreate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    promotion = promotion_service.create_promotion(session, data)
    return _to_response(promotion, datetime.utcnow())


@router.get("", response_model=List[PromotionResponse])
def list_promotions(
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    now = datetime.utcnow()
    return [_to_response(p, now) for p in promotion_service.list_promotions(session)]


@router.delete("/{promotion_id}")
def delete_promotion(
    promotion_id: int,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    promotion_service.delete_promotion(session, promotion_id)
    return {"message": "Promotion deleted"}


@router.post("/{promotion_id}/send")
def send_promotion(
    promotion_id: int,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
    send: Mailer = Depends(get_mailer),
):
    delivered = promotion_service.send_promotion(session, promotion_id, send=send)
    return {"message": "Promotion sent", "delivered": delivered}

from fastapi import APIRouter, Depends
from sqlmodel import Session

from bookstore.database import get_session
from bookstore.models.user import User
from bookstore.schemas.checkout_schemas import CheckoutRequest, OrderResponse
from bookstore.services.checkout_service import checkout
from bookstore.services.email_service import Mailer, get_mailer
from bookstore.services.order_service import build_order_response
from bookstore.utils.token import get_current_user

router = APIRouter()


# Creates a new order from the customer's cart and empties the cart
@router.post("", response_model=OrderResponse)
def place_order(
    data: CheckoutRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    send: Mailer = Depends(get_mailer),
):
    order = checkout(session, current_user.id, data, send=send)
    return build_order_response(session, order)

from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from bookstore.database import get_session
from bookstore.dependencies.admin import require_admin
from bookstore.models.user import User
from bookstore.schemas.checkout_schemas import OrderResponse
from bookstore.services.order_service import get_order, list_orders
from bookstore.utils.token import get_current_user

router = APIRouter()
admin_router = APIRouter()


# Customer view of their own orders
@router.get("", response_model=List[OrderResponse])
def my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return list_orders(session, user_id=current_user.id)


@router.get("/{order_id}", response_model=OrderResponse)
def my_order(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return get_order(session, current_user.id, order_id)


# Admin view of every order
@admin_router.get("", response_model=List[OrderResponse])
def all_orders(
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    return list_orders(session)

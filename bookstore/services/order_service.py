import logging
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import delete, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from bookstore.errors import CartChanged, NotFound, PersistenceFailure
from bookstore.models.cart import Cart, CartItem
from bookstore.models.order import Order
from bookstore.models.order_item import OrderItem
from bookstore.models.promotion import Promotion
from bookstore.schemas.checkout_schemas import (
    OrderLineItem,
    OrderResponse,
    OrderTotals,
    PricedLineItem,
    PromotionSummary,
)

logger = logging.getLogger(__name__)


def record_order(
    session: Session,
    *,
    cart: Cart,
    cart_version: int,
    cart_item_ids: Sequence[int],
    items: Sequence[PricedLineItem],
    totals: OrderTotals,
    payment_id: str,
    promotion: Optional[Promotion] = None,
) -> Order:
    """
    Persist the order and remove the ordered lines from the cart as one
    transaction.

    ``cart_version`` and ``cart_item_ids`` describe the snapshot the order
    was priced from. The cart version is bumped with a conditional update,
    so any change to the cart since the snapshot (another checkout, an
    added book) fails with CartChanged. Only the snapshot lines are
    deleted. Any database error rolls back both the order and the cart
    clear.
    """
    cart_id = cart.id
    expected_version = cart_version

    try:
        order = Order(
            user_id=cart.user_id,
            promotion_id=promotion.id if promotion else None,
            payment_id=payment_id,
            subtotal=totals.subtotal,
            tax=totals.tax,
            delivery=totals.delivery,
            total=totals.total,
        )
        session.add(order)
        session.flush()

        # Snapshot of the cart at checkout time
        for item in items:
            session.add(
                OrderItem(
                    order_id=order.id,
                    book_id=item.book_id,
                    book_title=item.title,
                    price=item.unit_price,
                    quantity=item.quantity,
                )
            )

        claimed = session.execute(
            update(Cart)
            .where(Cart.id == cart_id, Cart.version == expected_version)
            .values(version=expected_version + 1, updated_at=datetime.utcnow())
        )
        if claimed.rowcount != 1:
            raise CartChanged("Cart changed during checkout, please retry")

        session.execute(
            delete(CartItem).where(
                CartItem.cart_id == cart_id,
                CartItem.id.in_(list(cart_item_ids)),
            )
        )

        session.commit()

    except CartChanged:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Failed to record order for cart {cart_id}: {e}")
        raise PersistenceFailure("Could not save the order, your cart was left unchanged")

    session.refresh(order)
    logger.info(f"Recorded order {order.id} for user {order.user_id}, cart {cart_id} cleared")
    return order


def find_order_by_payment(session: Session, user_id: int, payment_id: str) -> Optional[Order]:
    return session.exec(
        select(Order).where(Order.user_id == user_id, Order.payment_id == payment_id)
    ).first()


def build_order_response(session: Session, order: Order) -> OrderResponse:
    items = session.exec(
        select(OrderItem).where(OrderItem.order_id == order.id).order_by(OrderItem.id)
    ).all()

    promotion = None
    if order.promotion_id:
        promo = session.get(Promotion, order.promotion_id)
        if promo:
            promotion = PromotionSummary(id=promo.id, title=promo.title, discount=promo.discount)

    return OrderResponse(
        order_id=order.id,
        payment_id=order.payment_id,
        subtotal=order.subtotal,
        tax=order.tax,
        delivery=order.delivery,
        total=order.total,
        promotion=promotion,
        items=[
            OrderLineItem(
                book_id=i.book_id,
                book_title=i.book_title,
                price=i.price,
                quantity=i.quantity,
                line_total=i.price * i.quantity,
            )
            for i in items
        ],
        created_at=order.created_at,
    )


def list_orders(session: Session, user_id: Optional[int] = None) -> List[OrderResponse]:
    query = select(Order).order_by(Order.created_at.desc(), Order.id.desc())
    if user_id is not None:
        query = query.where(Order.user_id == user_id)

    return [build_order_response(session, order) for order in session.exec(query).all()]


def get_order(session: Session, user_id: int, order_id: int) -> OrderResponse:
    order = session.get(Order, order_id)

    if not order or order.user_id != user_id:
        raise NotFound("Order not found")

    return build_order_response(session, order)

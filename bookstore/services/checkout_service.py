"""
Checkout: turn a customer's cart into a priced, persisted order.

    cart loaded -> books resolved -> promotion resolved -> priced
        -> order persisted (cart cleared) -> notification sent

Any failure before the order is persisted leaves the database untouched.
The notification is best-effort and never undoes the order.
"""

import logging
import threading
import weakref
from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from bookstore.errors import EmptyCart, NotFound
from bookstore.models.order import Order
from bookstore.models.promotion import Promotion
from bookstore.models.user import User
from bookstore.notifications import OrderEvent, dispatch_order_event
from bookstore.schemas.checkout_schemas import CheckoutRequest
from bookstore.services.cart_service import cart_items, find_cart
from bookstore.services.catalog_service import resolve_line_items
from bookstore.services.email_service import Mailer, send_email
from bookstore.services.order_service import find_order_by_payment, record_order
from bookstore.services.pricing_service import compute_totals
from bookstore.services.promotion_service import resolve_promotion

logger = logging.getLogger(__name__)

# entries go away once no checkout holds or waits on the lock
_checkout_locks: "weakref.WeakValueDictionary[int, threading.Lock]" = weakref.WeakValueDictionary()
_locks_guard = threading.Lock()


def _customer_lock(user_id: int) -> threading.Lock:
    with _locks_guard:
        lock = _checkout_locks.get(user_id)
        if lock is None:
            lock = threading.Lock()
            _checkout_locks[user_id] = lock
        return lock


def checkout(
    session: Session,
    user_id: int,
    request: CheckoutRequest,
    send: Mailer = send_email,
    now: Optional[datetime] = None,
) -> Order:
    """Place an order for ``user_id``; one checkout per customer at a time."""
    with _customer_lock(user_id):
        order, created = _place_order(session, user_id, request, now)

    if created:
        _notify_customer(session, user_id, order, send)
    return order


def _place_order(
    session: Session,
    user_id: int,
    request: CheckoutRequest,
    now: Optional[datetime],
) -> Tuple[Order, bool]:
    # Replayed request for an order that already went through
    existing = find_order_by_payment(session, user_id, request.payment_reference)
    if existing:
        logger.info(
            f"Payment {request.payment_reference} already has order {existing.id}, returning it"
        )
        return existing, False

    cart = find_cart(session, user_id)
    if not cart:
        raise NotFound("Cart not found")

    # later cart changes must not leak into this order
    cart_version = cart.version
    lines = cart_items(session, cart)
    cart_item_ids = [item.id for item in lines]
    snapshot = [(item.book_id, item.quantity) for item in lines]
    items = resolve_line_items(session, snapshot)
    if not items:
        raise EmptyCart()

    promotion = resolve_promotion(session, request.promotion_title, now=now)
    discount = promotion.discount if promotion else 0.0

    totals = compute_totals(items, discount)
    logger.info(
        f"Checkout for user {user_id}: {len(items)} items, "
        f"discount {discount}, total {totals.total:.2f}"
    )

    order = record_order(
        session,
        cart=cart,
        cart_version=cart_version,
        cart_item_ids=cart_item_ids,
        items=items,
        totals=totals,
        payment_id=request.payment_reference,
        promotion=promotion,
    )
    return order, True


def _notify_customer(session: Session, user_id: int, order: Order, send: Mailer) -> None:
    # The order is committed by now; nothing here may fail the checkout
    try:
        user = session.get(User, user_id)
        if not user:
            logger.warning(f"No profile for user {user_id}, skipping confirmation for order {order.id}")
            return

        promotion = session.get(Promotion, order.promotion_id) if order.promotion_id else None

        dispatch_order_event(
            event=OrderEvent.ORDER_PLACED,
            user=user,
            send=send,
            extra={
                "user_template": "user_emails/order_confirmation.html",
                "user_subject": "Thank you for your purchase",
                "admin_template": "admin_emails/new_order.html",
                "admin_subject": f"New Order Received #{order.id}",
                "context": {
                    "order": order,
                    "items": order.items,
                    "promotion": promotion,
                },
            },
        )
    except SQLAlchemyError:
        session.rollback()
        logger.exception(f"Could not load details to notify about order {order.id}")

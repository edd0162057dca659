import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from bookstore.errors import NotFound
from bookstore.models.book import Book
from bookstore.models.cart import Cart, CartItem

logger = logging.getLogger(__name__)


def find_cart(session: Session, user_id: int) -> Optional[Cart]:
    return session.exec(select(Cart).where(Cart.user_id == user_id)).first()


def get_or_create_cart(session: Session, user_id: int) -> Cart:
    """Return the customer's single cart, creating it on first use."""
    cart = find_cart(session, user_id)
    if cart:
        return cart

    cart = Cart(user_id=user_id)
    session.add(cart)
    try:
        session.commit()
    except IntegrityError:
        # unique user_id: a concurrent request created it first
        session.rollback()
        return find_cart(session, user_id)

    session.refresh(cart)
    logger.info(f"Created cart {cart.id} for user {user_id}")
    return cart


def add_to_cart(session: Session, user_id: int, book_id: int, quantity: int) -> CartItem:
    book = session.get(Book, book_id)
    if not book:
        raise NotFound("Book not found")

    cart = get_or_create_cart(session, user_id)

    existing_item = session.exec(
        select(CartItem).where(
            CartItem.cart_id == cart.id,
            CartItem.book_id == book_id
        )
    ).first()

    if existing_item:
        existing_item.quantity += quantity
        item = existing_item
    else:
        item = CartItem(cart_id=cart.id, book_id=book_id, quantity=quantity)

    # invalidates any checkout snapshot taken before this change
    cart.version += 1
    cart.updated_at = datetime.utcnow()
    session.add(cart)
    session.add(item)
    session.commit()
    session.refresh(item)
    return item


def cart_items(session: Session, cart: Cart):
    return session.exec(
        select(CartItem)
        .where(CartItem.cart_id == cart.id)
        .order_by(CartItem.id)
    ).all()

from fastapi import APIRouter, Depends
from sqlmodel import Session

from bookstore.database import get_session
from bookstore.models.book import Book
from bookstore.models.user import User
from bookstore.schemas.cart_schemas import CartAddRequest, CartLine, CartResponse
from bookstore.services.cart_service import add_to_cart, cart_items, get_or_create_cart
from bookstore.utils.token import get_current_user

router = APIRouter()


# View Cart

@router.get("", response_model=CartResponse)
def get_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    cart = get_or_create_cart(session, current_user.id)

    lines = []
    subtotal = 0

    for item in cart_items(session, cart):
        book = session.get(Book, item.book_id)
        if not book:
            continue

        line_total = book.sell_price * item.quantity
        subtotal += line_total

        lines.append(CartLine(
            item_id=item.id,
            book_id=book.id,
            book_title=book.title,
            price=book.sell_price,
            quantity=item.quantity,
            total=line_total,
        ))

    return CartResponse(items=lines, subtotal=subtotal)


# Add to Cart

@router.post("/add")
def add_item(
    data: CartAddRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    item = add_to_cart(session, current_user.id, data.book_id, data.quantity)
    return {"message": "Added to cart", "item_id": item.id, "quantity": item.quantity}

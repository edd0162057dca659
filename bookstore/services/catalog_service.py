import logging
from typing import Iterable, List, Tuple

from sqlmodel import Session, select

from bookstore.errors import NotFound
from bookstore.models.book import Book
from bookstore.schemas.checkout_schemas import PricedLineItem

logger = logging.getLogger(__name__)


def resolve_line_items(
    session: Session,
    line_items: Iterable[Tuple[int, int]],
) -> List[PricedLineItem]:
    """
    Expand (book_id, quantity) pairs into priced line items.

    Output order mirrors input order. Every reference must resolve;
    a missing book aborts with NotFound instead of being skipped.
    """
    line_items = list(line_items)
    if not line_items:
        return []

    book_ids = {book_id for book_id, _ in line_items}
    books = session.exec(select(Book).where(Book.id.in_(book_ids))).all()
    books_by_id = {book.id: book for book in books}

    priced = []
    for book_id, quantity in line_items:
        book = books_by_id.get(book_id)
        if book is None:
            logger.warning(f"Book {book_id} referenced by cart no longer exists")
            raise NotFound(f"Book {book_id} not found")

        priced.append(
            PricedLineItem(
                book_id=book.id,
                title=book.title,
                unit_price=book.sell_price,
                quantity=quantity,
            )
        )

    return priced

import pytest

from bookstore.errors import EmptyCart
from bookstore.schemas.checkout_schemas import PricedLineItem
from bookstore.services.pricing_service import compute_totals


def _item(price, quantity, book_id=1):
    return PricedLineItem(book_id=book_id, title=f"Book {book_id}", unit_price=price, quantity=quantity)


def test_totals_without_discount():
    totals = compute_totals([_item(20.00, 2)])

    assert totals.subtotal == pytest.approx(40.00)
    assert totals.tax == pytest.approx(3.20)
    assert totals.delivery == pytest.approx(12.00)
    assert totals.total == pytest.approx(55.20)


def test_totals_with_discount():
    totals = compute_totals([_item(20.00, 2)], discount=0.20)

    assert totals.subtotal == pytest.approx(32.00)
    assert totals.tax == pytest.approx(2.56)
    assert totals.delivery == pytest.approx(12.00)
    assert totals.total == pytest.approx(46.56)


@pytest.mark.parametrize("lines", [
    [(9.99, 1)],
    [(12.50, 3), (7.25, 2)],
    [(0.0, 4), (100.0, 1), (3.33, 7)],
])
def test_undiscounted_total_is_gross_plus_delivery_plus_tax(lines):
    items = [_item(price, qty, book_id=i) for i, (price, qty) in enumerate(lines, start=1)]
    gross = sum(price * qty for price, qty in lines)

    totals = compute_totals(items)

    assert totals.total == pytest.approx(gross + 12.00 + 0.08 * gross)
    assert totals.total == pytest.approx(totals.subtotal + totals.delivery + totals.tax)


def test_values_are_not_rounded():
    totals = compute_totals([_item(3.33, 1)])

    assert totals.tax == pytest.approx(0.08 * 3.33)
    assert totals.tax != round(totals.tax, 2)


def test_full_discount_leaves_only_delivery():
    totals = compute_totals([_item(15.00, 2)], discount=1.0)

    assert totals.subtotal == 0
    assert totals.tax == 0
    assert totals.total == pytest.approx(12.00)


def test_empty_items_raise_empty_cart():
    with pytest.raises(EmptyCart):
        compute_totals([])


def test_discount_out_of_range_is_rejected():
    with pytest.raises(ValueError):
        compute_totals([_item(10.00, 1)], discount=1.5)


def test_rates_can_be_overridden():
    totals = compute_totals([_item(10.00, 1)], tax_rate=0.0, delivery_fee=0.0)

    assert totals.total == pytest.approx(10.00)

from typing import Optional, Sequence

from bookstore.config import settings
from bookstore.errors import EmptyCart
from bookstore.schemas.checkout_schemas import OrderTotals, PricedLineItem


def compute_totals(
    items: Sequence[PricedLineItem],
    discount: float = 0.0,
    *,
    tax_rate: Optional[float] = None,
    delivery_fee: Optional[float] = None,
) -> OrderTotals:
    """
    subtotal = (1 - discount) * sum(quantity * unit_price)
    tax      = tax_rate * subtotal
    total    = subtotal + delivery + tax

    Values are left unrounded; rounding is a display concern.
    """
    if not items:
        raise EmptyCart()

    if not 0 <= discount <= 1:
        raise ValueError(f"Discount must be between 0 and 1, got {discount}")

    tax_rate = settings.TAX_RATE if tax_rate is None else tax_rate
    delivery = settings.DELIVERY_FEE if delivery_fee is None else delivery_fee

    gross = sum(item.quantity * item.unit_price for item in items)
    subtotal = (1 - discount) * gross
    tax = tax_rate * subtotal
    total = subtotal + delivery + tax

    return OrderTotals(
        subtotal=subtotal,
        tax=tax,
        delivery=delivery,
        total=total,
    )

# bookstore/schemas/checkout_schemas.py
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class CheckoutRequest(BaseModel):
    promotion_title: Optional[str] = None
    payment_reference: str = Field(min_length=1)


class PricedLineItem(BaseModel):
    book_id: int
    title: str
    unit_price: float = Field(ge=0)   # sell price per copy at checkout time
    quantity: int

    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_price


class OrderTotals(BaseModel):
    subtotal: float       # discounted sum of line totals
    tax: float            # tax rate * subtotal
    delivery: float       # flat fee
    total: float          # subtotal + delivery + tax


class OrderLineItem(BaseModel):
    book_id: int
    book_title: str
    price: float
    quantity: int
    line_total: float


class PromotionSummary(BaseModel):
    id: int
    title: str
    discount: float


class OrderResponse(BaseModel):
    order_id: int
    payment_id: str
    subtotal: float
    tax: float
    delivery: float
    total: float
    promotion: Optional[PromotionSummary] = None
    items: List[OrderLineItem]
    created_at: datetime

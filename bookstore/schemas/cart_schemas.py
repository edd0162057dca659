from pydantic import BaseModel, Field
from typing import List


class CartAddRequest(BaseModel):
    book_id: int
    quantity: int = Field(default=1, ge=1)


class CartLine(BaseModel):
    item_id: int
    book_id: int
    book_title: str
    price: float
    quantity: int
    total: float


class CartResponse(BaseModel):
    items: List[CartLine]
    subtotal: float

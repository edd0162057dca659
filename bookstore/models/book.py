from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class Book(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    author: str = ""
    isbn: Optional[str] = None

    #Shop Details
    price: float
    discount_price: Optional[float] = None
    offer_price: Optional[float] = None
    stock: Optional[int] = None

    #timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def sell_price(self) -> float:
        # offer > discount > regular
        return self.offer_price or self.discount_price or self.price

    @property
    def in_stock(self) -> bool:
        return self.stock is not None and self.stock > 0

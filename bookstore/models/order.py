from sqlmodel import SQLModel, Field, Relationship
from typing import List, Optional
from datetime import datetime

from bookstore.models.order_item import OrderItem


class Order(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    promotion_id: Optional[int] = Field(default=None, foreign_key="promotion.id")
    payment_id: str = Field(index=True)

    subtotal: float
    tax: float
    delivery: float
    total: float

    created_at: datetime = Field(default_factory=datetime.utcnow)

    items: List["OrderItem"] = Relationship(back_populates="order")

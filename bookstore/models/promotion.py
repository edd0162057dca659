from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class Promotion(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(unique=True, index=True)

    start_date: datetime
    end_date: datetime
    discount: float  # fraction, 0 < discount <= 1

    is_sent: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    def is_active(self, now: datetime) -> bool:
        return self.start_date <= now <= self.end_date

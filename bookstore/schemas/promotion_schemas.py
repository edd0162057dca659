from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


def _as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class PromotionCreate(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    start_date: datetime
    end_date: datetime
    discount: float = Field(ge=0.01, le=1.00)

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str):
        value = value.strip()
        if not value:
            raise ValueError("Title must be between 1 and 100 characters")
        return value

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value: datetime):
        return _as_naive_utc(value)

    @model_validator(mode="after")
    def validate_window(self):
        if self.start_date.date() < datetime.utcnow().date():
            raise ValueError("Start date cannot be in the past")
        if self.end_date < self.start_date:
            raise ValueError("End date must be on or after the start date")
        return self


class PromotionResponse(BaseModel):
    id: int
    title: str
    start_date: datetime
    end_date: datetime
    discount: float
    is_sent: bool
    is_active: Optional[bool] = None

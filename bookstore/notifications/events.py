from enum import Enum


class OrderEvent(str, Enum):
    ORDER_PLACED = "order_placed"
    PROMOTION_ANNOUNCED = "promotion_announced"

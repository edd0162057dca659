from .events import OrderEvent
from .dispatcher import dispatch_order_event

__all__ = [
    "OrderEvent",
    "dispatch_order_event",
]

"""
Order models module.

All models are exported from this module.
"""
from .order import Order
from .order_item import OrderItem
from .status_history import OrderStatusHistory

__all__ = [
    'Order',
    'OrderItem',
    'OrderStatusHistory',
]

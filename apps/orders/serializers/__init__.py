"""
Order serializers module.

All serializers are exported from this module.
"""
from .order_serializers import (
    OrderItemSerializer, OrderStatusHistorySerializer, OrderSerializer, OrderListSerializer,
    AdminOrderSerializer, AdminOrderDetailSerializer, OrderCreateSerializer,
)
from .order_action_serializers import OrderStatusUpdateSerializer, BulkStatusUpdateSerializer

__all__ = [
    'OrderItemSerializer',
    'OrderStatusHistorySerializer',
    'OrderSerializer',
    'OrderListSerializer',
    'AdminOrderSerializer',
    'AdminOrderDetailSerializer',
    'OrderCreateSerializer',
    'OrderStatusUpdateSerializer',
    'BulkStatusUpdateSerializer',
]

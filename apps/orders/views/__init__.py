"""
Order views module.

All views are exported from this module.
"""
from .order_views import OrderListCreateView, OrderDetailView
from .admin_order_views import (
    AdminOrderListView, AdminOrderDetailView, AdminOrderStatusView, AdminBulkStatusView,
)

__all__ = [
    'OrderListCreateView',
    'OrderDetailView',
    'AdminOrderListView',
    'AdminOrderDetailView',
    'AdminOrderStatusView',
    'AdminBulkStatusView',
]

"""
Order services module.

All services are exported from this module.
"""
from .pricing import PricingCalculator, PriceBreakdown
from .order_service import OrderService
from .status_service import (
    OrderStatusService, TransitionResult, TRANSITIONS, allowed_transitions, can_transition,
)
from .admin_query_service import AdminOrderQueryService

__all__ = [
    'PricingCalculator',
    'PriceBreakdown',
    'OrderService',
    'OrderStatusService',
    'TransitionResult',
    'TRANSITIONS',
    'allowed_transitions',
    'can_transition',
    'AdminOrderQueryService',
]

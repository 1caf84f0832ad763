"""
Payment models module.

All models are exported from this module.
"""
from .payment import Payment
from .cod_tracking import CODTracking
from .webhook_event import WebhookEvent

__all__ = [
    'Payment',
    'CODTracking',
    'WebhookEvent',
]

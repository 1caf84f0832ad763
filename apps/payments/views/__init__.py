"""
Payment views module.

All views are exported from this module.
"""
from .gateway_views import CreateGatewayPaymentView, VerifyGatewayPaymentView
from .webhook_views import gateway_webhook
from .cod_views import CODConfirmView, CODDeliveryConfirmView, CODTrackingView, CODPendingView
from .status_views import PaymentStatusView

__all__ = [
    'CreateGatewayPaymentView',
    'VerifyGatewayPaymentView',
    'gateway_webhook',
    'CODConfirmView',
    'CODDeliveryConfirmView',
    'CODTrackingView',
    'CODPendingView',
    'PaymentStatusView',
]

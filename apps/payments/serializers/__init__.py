"""
Payment serializers module.

All serializers are exported from this module.
"""
from .payment_serializers import CreateGatewayPaymentSerializer, VerifyGatewayPaymentSerializer
from .cod_serializers import CODConfirmSerializer, CODDeliveryConfirmSerializer

__all__ = [
    'CreateGatewayPaymentSerializer',
    'VerifyGatewayPaymentSerializer',
    'CODConfirmSerializer',
    'CODDeliveryConfirmSerializer',
]

"""
Payment services module.

All services are exported from this module.
"""
from .gateway_client import (
    GatewayClient, RazorpayGatewayClient, build_gateway_client,
    compute_signature, signatures_match, to_minor_units, from_minor_units, generate_receipt_id,
)
from .payment_service import GatewayPaymentService, payment_snapshot
from .webhook_service import WebhookService, WebhookEventType, HANDLERS
from .cod_service import CODService
from .status_service import PaymentStatusService

__all__ = [
    'GatewayClient',
    'RazorpayGatewayClient',
    'build_gateway_client',
    'compute_signature',
    'signatures_match',
    'to_minor_units',
    'from_minor_units',
    'generate_receipt_id',
    'GatewayPaymentService',
    'payment_snapshot',
    'WebhookService',
    'WebhookEventType',
    'HANDLERS',
    'CODService',
    'PaymentStatusService',
]

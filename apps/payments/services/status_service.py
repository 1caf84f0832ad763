"""
Unified payment status view for an order.
"""
import logging
from typing import Dict, Optional

from apps.common.exceptions import GatewayError, OrderNotFound
from apps.orders.models import Order
from .cod_service import tracking_as_dict
from .gateway_client import GatewayClient
from .payment_service import payment_snapshot

logger = logging.getLogger(__name__)


class PaymentStatusService:

    def __init__(self, gateway: Optional[GatewayClient] = None):
        self.gateway = gateway

    def get_status(self, user, order_id) -> Dict:
        """Order and payment state, a live gateway snapshot when available, and COD details"""
        order = (
            Order.objects.select_related('payment', 'cod_tracking__confirmed_by')
            .filter(id=order_id, user=user)
            .first()
        )
        if order is None:
            raise OrderNotFound()

        payment = getattr(order, 'payment', None)
        data = {
            'order_id': order.id,
            'order_number': order.order_number,
            'order_status': order.status,
            'payment_method': order.payment_method,
            'payment_status': order.payment_status,
            'total_amount': str(order.total_amount),
            'payment': None,
            'gateway_status': None,
            'cod_details': None,
        }

        if payment is not None:
            data['payment'] = {
                'payment_status': payment.payment_status,
                'amount': str(payment.amount),
                'currency': payment.currency,
                'gateway_order_id': payment.gateway_order_id,
                'gateway_payment_id': payment.gateway_payment_id,
                'transaction_id': payment.transaction_id,
                'updated_at': payment.updated_at,
            }
            if self.gateway is not None and payment.gateway_payment_id:
                try:
                    data['gateway_status'] = payment_snapshot(self.gateway.fetch_payment(payment.gateway_payment_id))
                except GatewayError as e:
                    logger.warning(f"Live gateway status unavailable for order {order.order_number}: {e.message}")

        tracking = getattr(order, 'cod_tracking', None)
        if tracking is not None:
            data['cod_details'] = tracking_as_dict(tracking)

        return data

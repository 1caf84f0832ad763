"""
Prepaid payment flow: create a gateway payment intent for an order and
verify the proof of payment returned by the checkout widget.
"""
import logging
from datetime import datetime, timezone as dt_timezone
from typing import Dict, Optional

from django.conf import settings
from django.db import transaction

from apps.common.exceptions import (
    AmountMismatch, DomainConflict, GatewayError, OrderNotFound, PaymentNotFound,
    PaymentNotPending, SignatureVerificationFailed,
)
from apps.orders.models import Order
from apps.orders.services import OrderStatusService
from ..models import Payment
from .gateway_client import GatewayClient, from_minor_units, generate_receipt_id, to_minor_units
from .settlement import complete_payment, fail_payment, lock_order_and_payment

logger = logging.getLogger(__name__)


def payment_snapshot(gateway_payment: Optional[Dict]) -> Optional[Dict]:
    """Reduce a gateway payment record to the fields shown to the customer"""
    if not gateway_payment:
        return None
    created = gateway_payment.get('created_at')
    return {
        'id': gateway_payment.get('id'),
        'amount': str(from_minor_units(gateway_payment.get('amount') or 0)),
        'currency': gateway_payment.get('currency'),
        'status': gateway_payment.get('status'),
        'method': gateway_payment.get('method'),
        'created_at': (
            datetime.fromtimestamp(created, tz=dt_timezone.utc).isoformat() if created else None
        ),
    }


class GatewayPaymentService:
    """Creates and verifies gateway payments using an injected gateway client"""

    def __init__(self, gateway: GatewayClient):
        self.gateway = gateway

    def create_intent(self, user, order_id, amount, currency=None) -> Dict:
        """
        Create a remote payment intent for the caller's pending order.

        ``amount`` is the amount the client believes it owes; it must equal the
        order total to the minor unit.
        """
        currency = currency or settings.PAYMENT_GATEWAY['CURRENCY']

        order = Order.objects.filter(id=order_id, user=user).select_related('payment').first()
        if order is None:
            raise OrderNotFound()
        if order.payment_method != Order.PaymentMethod.GATEWAY:
            raise DomainConflict('Order is not set up for online payment')
        if order.payment_status != Order.PaymentStatus.PENDING:
            raise PaymentNotPending('Order is not pending payment')

        amount_minor = to_minor_units(amount)
        if amount_minor != to_minor_units(order.total_amount):
            raise AmountMismatch(order.total_amount, amount)

        receipt = generate_receipt_id(order.order_number)
        remote = self.gateway.create_order(
            amount_minor=amount_minor,
            currency=currency,
            receipt=receipt,
            notes={
                'order_id': str(order.id),
                'order_number': order.order_number,
                'user_id': str(user.id),
            },
        )

        with transaction.atomic():
            order, payment = lock_order_and_payment(order.id, user=user)
            if payment is None:
                raise PaymentNotFound()
            updated = Payment.objects.filter(
                pk=payment.pk, payment_status=Payment.Status.PENDING
            ).update(gateway_order_id=remote['id'], currency=currency)
            if not updated:
                raise PaymentNotPending('Order is not pending payment')

        logger.info(f"Gateway order {remote['id']} created for order {order.order_number}")
        return {
            'gateway_order_id': remote['id'],
            'amount': remote.get('amount', amount_minor),
            'currency': remote.get('currency', currency),
            'receipt': remote.get('receipt', receipt),
            'key_id': self.gateway.key_id,
            'order': {
                'id': order.id,
                'order_number': order.order_number,
                'total_amount': str(order.total_amount),
            },
        }

    def verify_payment(self, user, order_id, gateway_order_id, gateway_payment_id, signature) -> Dict:
        """
        Verify the checkout signature and settle the payment.

        A bad signature marks the payment failed (committed) and raises
        SignatureVerificationFailed. Repeating a successful verification is a
        no-op that returns the already settled order. A payment already
        settled by webhook still moves a placed order to processing.
        """
        payment = Payment.objects.filter(
            gateway_order_id=gateway_order_id, order_id=order_id, order__user=user
        ).first()
        if payment is None:
            raise OrderNotFound('Order not found for this payment')

        if not self.gateway.verify_payment_signature(gateway_order_id, gateway_payment_id, signature):
            with transaction.atomic():
                order, locked_payment = lock_order_and_payment(payment.order_id)
                fail_payment(
                    order, locked_payment, gateway_payment_id=gateway_payment_id,
                    signature=signature, source='verification', reason='signature mismatch',
                )
            raise SignatureVerificationFailed(order_id=payment.order_id, gateway_order_id=gateway_order_id)

        gateway_payment = None
        try:
            gateway_payment = self.gateway.fetch_payment(gateway_payment_id)
        except GatewayError as e:
            logger.warning(f"Could not fetch gateway payment {gateway_payment_id} for audit: {e.message}")

        with transaction.atomic():
            order, locked_payment = lock_order_and_payment(payment.order_id)
            if locked_payment.payment_status == Payment.Status.COMPLETED:
                already_processed = True
                # Settled by payment.captured first; still advance a placed order
                if order.status == Order.Status.PLACED:
                    OrderStatusService.apply_transition(
                        order, Order.Status.PROCESSING, actor=user,
                        notes=f'Payment confirmed ({locked_payment.transaction_id})', source='payment',
                    )
            elif locked_payment.payment_status != Payment.Status.PENDING:
                raise PaymentNotPending(f'Payment is already {locked_payment.payment_status}')
            else:
                complete_payment(
                    order, locked_payment, gateway_payment_id=gateway_payment_id,
                    signature=signature, actor=user, source='payment',
                )
                already_processed = False

        return {
            'order': order,
            'already_processed': already_processed,
            'payment_details': payment_snapshot(gateway_payment),
        }

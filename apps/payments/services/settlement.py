"""
Compare-and-set payment settlement shared by client verification and
webhook reconciliation.

Both entry points lock the order row and then the payment row (always in
that order) and apply the change only while the payment is still
``pending``. Whichever path gets there first settles the payment; the
other observes the settled state and does nothing.
"""
import logging

from django.utils import timezone

from apps.common.notifications import NotificationService
from apps.orders.models import Order
from apps.orders.services import OrderStatusService
from ..models import Payment

logger = logging.getLogger(__name__)


def lock_order_and_payment(order_id, user=None):
    """Row-lock an order and its payment. Must run inside ``transaction.atomic``."""
    order = OrderStatusService.lock_order(order_id, user=user)
    payment = Payment.objects.select_for_update().filter(order=order).first()
    return order, payment


def complete_payment(order: Order, payment: Payment, gateway_payment_id=None, signature=None,
                     transaction_id=None, actor=None, source='payment', advance_status=True) -> bool:
    """
    Settle a locked pending payment as completed and mark the order paid.
    With ``advance_status`` a ``placed`` order also moves to ``processing``.
    Returns False when the payment was already settled.
    """
    now = timezone.now()
    fields = {'payment_status': Payment.Status.COMPLETED, 'updated_at': now}
    if gateway_payment_id:
        fields['gateway_payment_id'] = gateway_payment_id
        fields['transaction_id'] = transaction_id or gateway_payment_id
    elif transaction_id:
        fields['transaction_id'] = transaction_id
    if signature:
        fields['gateway_signature'] = signature

    updated = Payment.objects.filter(pk=payment.pk, payment_status=Payment.Status.PENDING).update(**fields)
    if not updated:
        logger.info(
            f"Payment for order {order.order_number} already {payment.payment_status}; "
            f"{source} completion ignored"
        )
        return False

    payment.refresh_from_db()
    order.payment_status = Order.PaymentStatus.PAID

    if advance_status and order.status == Order.Status.PLACED:
        OrderStatusService.apply_transition(
            order, Order.Status.PROCESSING, actor=actor,
            notes=f'Payment confirmed ({payment.transaction_id})', source=source,
        )
    else:
        order.append_note(f'Payment completed via {source} ({payment.transaction_id})', now)
        order.save(update_fields=['payment_status', 'notes', 'updated_at'])

    logger.info(f"Payment completed for order {order.order_number} via {source}")
    NotificationService.payment_confirmation(order, payment)
    return True


def fail_payment(order: Order, payment: Payment, gateway_payment_id=None, signature=None,
                 source='payment', reason='') -> bool:
    """Mark a locked pending payment and its order as failed. Returns False if already settled."""
    now = timezone.now()
    fields = {'payment_status': Payment.Status.FAILED, 'updated_at': now}
    if gateway_payment_id:
        fields['gateway_payment_id'] = gateway_payment_id
    if signature:
        fields['gateway_signature'] = signature

    updated = Payment.objects.filter(pk=payment.pk, payment_status=Payment.Status.PENDING).update(**fields)
    if not updated:
        logger.info(
            f"Payment for order {order.order_number} already {payment.payment_status}; "
            f"{source} failure ignored"
        )
        return False

    order.payment_status = Order.PaymentStatus.FAILED
    order.append_note(f'Payment failed via {source}' + (f': {reason}' if reason else ''), now)
    order.save(update_fields=['payment_status', 'notes', 'updated_at'])

    logger.warning(f"Payment failed for order {order.order_number} via {source}")
    return True

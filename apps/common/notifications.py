"""
Customer e-mail notifications.

Every message is scheduled with ``transaction.on_commit`` so nothing is sent
for a rolled back unit of work, and every send failure is logged and
swallowed: a notification can never undo or fail a committed state change.
"""
import logging

from django.conf import settings
from django.core.mail import send_mail
from django.db import transaction

logger = logging.getLogger(__name__)


class NotificationService:
    """Sends order lifecycle e-mails after the surrounding transaction commits"""

    @staticmethod
    def _deliver(recipient: str, subject: str, body: str, kind: str) -> bool:
        if not recipient:
            logger.info(f"Skipping {kind} notification: recipient has no e-mail address")
            return False
        try:
            send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [recipient], fail_silently=False)
            logger.info(f"{kind} notification sent to {recipient}")
            return True
        except Exception as e:
            logger.error(f"Failed to send {kind} notification to {recipient}: {e}", exc_info=True)
            return False

    @classmethod
    def _schedule(cls, recipient, subject, body, kind):
        transaction.on_commit(lambda: cls._deliver(recipient, subject, body, kind))

    @classmethod
    def order_confirmation(cls, order):
        lines = [
            f"Thank you for your order {order.order_number}.",
            '',
            *[f"- {item.product_name} x {item.quantity}: {item.total_price}" for item in order.items.all()],
            '',
            f"Subtotal: {order.subtotal_amount}",
            f"Discount: {order.discount_amount}",
            f"Shipping: {order.shipping_amount}",
            f"Tax: {order.tax_amount}",
            f"Total: {order.total_amount}",
            f"Payment method: {order.get_payment_method_display()}",
        ]
        cls._schedule(order.user.email, f"Order confirmation - {order.order_number}",
                      '\n'.join(lines), 'order_confirmation')

    @classmethod
    def order_status_changed(cls, order, previous_status, notes=''):
        body = (
            f"Your order {order.order_number} moved from {previous_status} to {order.status}."
            + (f"\n\n{notes}" if notes else '')
        )
        cls._schedule(order.user.email, f"Order {order.order_number} is now {order.get_status_display()}",
                      body, 'order_status')

    @classmethod
    def payment_confirmation(cls, order, payment):
        body = (
            f"We received your payment of {payment.amount} for order {order.order_number}.\n"
            f"Reference: {payment.transaction_id}"
        )
        cls._schedule(order.user.email, f"Payment received - {order.order_number}", body, 'payment_confirmation')

    @classmethod
    def cod_delivery_confirmation(cls, order, tracking):
        body = (
            f"Order {order.order_number} was delivered and {tracking.collection_amount} was collected in cash."
        )
        cls._schedule(order.user.email, f"Delivered - {order.order_number}", body, 'cod_delivery')

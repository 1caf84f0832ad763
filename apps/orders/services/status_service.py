"""
Order state machine.

The transition table is the single source of truth for which status moves
are legal. ``OrderStatusService.apply_transition`` is the only code path that
writes ``Order.status``; it applies the side effects of the move (stock
restoration, payment status sync, COD collection) together with the status
write, and appends both a history row and a note line.
"""
import logging
from dataclasses import dataclass, asdict
from typing import FrozenSet, Iterable, List, Optional

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from apps.common.exceptions import InvalidStatusTransition, OrderNotFound, ServiceError
from apps.common.notifications import NotificationService
from apps.products.services import InventoryLedger
from ..models import Order, OrderStatusHistory

logger = logging.getLogger(__name__)

Status = Order.Status

TRANSITIONS = {
    Status.PLACED: frozenset({Status.PROCESSING, Status.CANCELLED}),
    Status.PROCESSING: frozenset({Status.SHIPPED, Status.CANCELLED}),
    Status.SHIPPED: frozenset({Status.OUT_FOR_DELIVERY, Status.DELIVERED}),
    Status.OUT_FOR_DELIVERY: frozenset({Status.DELIVERED}),
    Status.DELIVERED: frozenset(),
    Status.CANCELLED: frozenset(),
}


def allowed_transitions(current: str) -> FrozenSet[str]:
    return TRANSITIONS.get(current, frozenset())


def can_transition(current: str, target: str) -> bool:
    return target in allowed_transitions(current)


@dataclass
class TransitionResult:
    order_id: int
    success: bool
    order_number: Optional[str] = None
    previous_status: Optional[str] = None
    new_status: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    def as_dict(self):
        return {key: value for key, value in asdict(self).items() if value is not None}


def _actor_label(actor) -> str:
    if actor is None:
        return 'system'
    return getattr(actor, 'email', '') or getattr(actor, 'username', '') or f"user {actor.pk}"


class OrderStatusService:
    """Service class for order status transitions"""

    @staticmethod
    def lock_order(order_id, user=None) -> Order:
        """
        Re-read an order with a row lock. ``user`` restricts the lookup to that
        owner. Must run inside ``transaction.atomic``.
        """
        queryset = Order.objects.select_for_update().filter(id=order_id)
        if user is not None:
            queryset = queryset.filter(user=user)
        order = queryset.first()
        if order is None:
            raise OrderNotFound()
        return order

    @staticmethod
    def apply_transition(order: Order, target: str, actor=None, notes: str = '',
                         source: str = 'admin') -> Order:
        """
        Move a locked order to ``target``. Raises InvalidStatusTransition and
        leaves the order untouched if the move is not in the table.
        """
        current = order.status
        if not can_transition(current, target):
            raise InvalidStatusTransition(current, target, allowed_transitions(current))

        now = timezone.now()
        order.status = target

        if target == Status.DELIVERED:
            OrderStatusService._on_delivered(order, now)
        elif target == Status.CANCELLED:
            OrderStatusService._on_cancelled(order, now)

        note = f"Status changed from {current} to {target} by {_actor_label(actor)}"
        if notes:
            note = f"{note}: {notes}"
        order.append_note(note, now)
        order.save(update_fields=['status', 'payment_status', 'notes', 'updated_at'])

        OrderStatusHistory.objects.create(
            order=order,
            previous_status=current,
            new_status=target,
            changed_by=actor if getattr(actor, 'pk', None) else None,
            source=source,
            notes=notes or '',
        )

        logger.info(f"Order {order.order_number} moved {current} -> {target} ({source})")
        NotificationService.order_status_changed(order, current, notes)
        return order

    @staticmethod
    def _on_delivered(order: Order, now) -> None:
        if not order.is_cod:
            return
        from apps.payments.models import Payment, CODTracking

        order.payment_status = Order.PaymentStatus.PAID
        Payment.objects.filter(order=order).exclude(
            payment_status=Payment.Status.COMPLETED
        ).update(payment_status=Payment.Status.COMPLETED, updated_at=now)
        CODTracking.objects.filter(order=order).exclude(
            status=CODTracking.Status.COLLECTED
        ).update(
            status=CODTracking.Status.COLLECTED,
            collection_amount=F('cod_amount'),
            delivery_confirmed_at=now,
            updated_at=now,
        )

    @staticmethod
    def _on_cancelled(order: Order, now) -> None:
        from apps.payments.models import Payment

        InventoryLedger.restore_order(order)

        refunded = Payment.objects.filter(order=order).exclude(
            payment_status=Payment.Status.COMPLETED
        ).update(payment_status=Payment.Status.REFUNDED, updated_at=now)

        if refunded or order.payment_status != Order.PaymentStatus.PAID:
            order.payment_status = Order.PaymentStatus.REFUNDED
        else:
            # TODO: issue the gateway refund automatically once refund API access is provisioned
            order.append_note('Cancelled after payment was captured; manual refund required', now)

    @staticmethod
    def update_status(order_id, target: str, actor=None, notes: str = '', source: str = 'admin') -> Order:
        """Transition a single order in its own transaction."""
        with transaction.atomic():
            order = OrderStatusService.lock_order(order_id)
            return OrderStatusService.apply_transition(order, target, actor=actor, notes=notes, source=source)

    @staticmethod
    def bulk_update_status(order_ids: Iterable, target: str, actor=None, notes: str = '') -> List[TransitionResult]:
        """
        Apply the same transition to many orders. Each order runs in its own
        savepoint so one bad order does not undo the others.
        """
        results = []
        with transaction.atomic():
            for order_id in order_ids:
                try:
                    with transaction.atomic():
                        order = OrderStatusService.lock_order(order_id)
                        previous = order.status
                        OrderStatusService.apply_transition(order, target, actor=actor, notes=notes)
                    results.append(TransitionResult(
                        order_id=order_id,
                        success=True,
                        order_number=order.order_number,
                        previous_status=previous,
                        new_status=target,
                    ))
                except ServiceError as e:
                    logger.info(f"Bulk status update skipped order {order_id}: {e.message}")
                    results.append(TransitionResult(
                        order_id=order_id,
                        success=False,
                        error=e.message,
                        error_code=e.default_code,
                    ))

        succeeded = sum(1 for result in results if result.success)
        logger.info(f"Bulk status update to {target}: {succeeded}/{len(results)} orders updated")
        return results

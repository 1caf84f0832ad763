"""
Cash-on-delivery workflow: confirmation at checkout, delivery attempts and
cash collection at the door.
"""
import logging
import time
from decimal import Decimal, InvalidOperation
from typing import Dict

from django.conf import settings
from django.db import transaction
from django.db.models import Case, IntegerField, Sum, Value, When
from django.utils import timezone

from apps.common.exceptions import (
    CODNotEligible, CollectionAmountMismatch, DomainConflict, ResourceNotFound, ValidationFailed,
)
from apps.common.notifications import NotificationService
from apps.common.utils import quantize_money
from apps.orders.models import Order
from apps.orders.services import OrderStatusService
from ..models import CODTracking, Payment
from .settlement import complete_payment, lock_order_and_payment

logger = logging.getLogger(__name__)

AWAITING_COLLECTION = (Order.Status.PROCESSING, Order.Status.SHIPPED, Order.Status.OUT_FOR_DELIVERY)


def _millis() -> int:
    return int(time.time() * 1000)


def tracking_as_dict(tracking: CODTracking) -> Dict:
    return {
        'status': tracking.status,
        'cod_amount': str(tracking.cod_amount),
        'delivery_instructions': tracking.delivery_instructions,
        'delivery_attempt_count': tracking.delivery_attempt_count,
        'last_delivery_attempt': tracking.last_delivery_attempt,
        'collection_amount': str(tracking.collection_amount) if tracking.collection_amount is not None else None,
        'delivery_confirmed_at': tracking.delivery_confirmed_at,
        'delivery_person_name': tracking.delivery_person_name,
        'delivery_person_phone': tracking.delivery_person_phone,
        'delivery_notes': tracking.delivery_notes,
        'confirmed_by': tracking.confirmed_by.email if tracking.confirmed_by_id else None,
    }


class CODService:
    """Service class for cash-on-delivery orders"""

    @staticmethod
    def check_eligibility(order: Order) -> None:
        """Raise CODNotEligible unless the order can be paid in cash"""
        rules = settings.SETTLEMENT
        if order.total_amount > rules['COD_MAX_AMOUNT']:
            raise CODNotEligible(
                f"COD orders are limited to ₹{rules['COD_MAX_AMOUNT']}. "
                f"Please use online payment for higher amounts.",
                max_amount=rules['COD_MAX_AMOUNT'], total_amount=order.total_amount,
            )

        region = (order.shipping_address.state or '').strip()
        serviceable = {name.strip().lower() for name in rules['COD_SERVICEABLE_REGIONS']}
        if region.lower() not in serviceable:
            raise CODNotEligible(
                f"COD is not available in {region}. Please use online payment.",
                region=region,
            )

    @staticmethod
    def confirm(user, order_id, delivery_instructions: str = '') -> Dict:
        """Confirm a placed COD order and open its collection record"""
        with transaction.atomic():
            order, payment = lock_order_and_payment(order_id, user=user)
            if not order.is_cod or order.payment_status != Order.PaymentStatus.PENDING:
                raise CODNotEligible('Order is not eligible for COD processing')

            CODService.check_eligibility(order)

            OrderStatusService.apply_transition(
                order, Order.Status.PROCESSING, actor=user, source='cod',
                notes=f"COD order confirmed - Delivery instructions: {delivery_instructions or 'None'}",
            )

            if payment is not None:
                Payment.objects.filter(pk=payment.pk).update(
                    transaction_id=f"COD_{order.order_number}_{_millis()}",
                    updated_at=timezone.now(),
                )

            tracking, _ = CODTracking.objects.update_or_create(
                order=order,
                defaults={
                    'cod_amount': order.total_amount,
                    'delivery_instructions': delivery_instructions or '',
                    'status': CODTracking.Status.CONFIRMED,
                },
            )

        address = order.shipping_address
        logger.info(f"COD order confirmed: {order.order_number}, amount {order.total_amount}")
        return {
            'order': order,
            'cod_details': {
                'amount_to_collect': str(tracking.cod_amount),
                'delivery_instructions': tracking.delivery_instructions,
                'collection_status': tracking.status,
                'delivery_location': f"{address.city}, {address.state} {address.postal_code}",
                'contact_phone': address.phone,
            },
        }

    @staticmethod
    def confirm_delivery(admin, order_id, payment_collected: bool, collection_amount=None,
                         delivery_person_name: str = '', delivery_person_phone: str = '',
                         delivery_notes: str = '') -> Dict:
        """
        Record a delivery visit. A collected payment delivers the order and
        settles the payment; otherwise the attempt is counted and the order
        stays where it is.
        """
        with transaction.atomic():
            order, payment = lock_order_and_payment(order_id)
            if not order.is_cod:
                raise CODNotEligible('Order is not a cash on delivery order')
            if order.status not in (Order.Status.SHIPPED, Order.Status.OUT_FOR_DELIVERY):
                raise DomainConflict(
                    f'Order must be shipped or out for delivery, current status is {order.status}'
                )

            tracking = CODTracking.objects.select_for_update().filter(order=order).first()
            if tracking is None:
                tracking = CODTracking.objects.create(order=order, cod_amount=order.total_amount)

            now = timezone.now()
            agent = f"{delivery_person_name} ({delivery_person_phone})"
            tracking.delivery_person_name = delivery_person_name
            tracking.delivery_person_phone = delivery_person_phone
            tracking.delivery_notes = delivery_notes or ''
            tracking.confirmed_by = admin

            if payment_collected:
                try:
                    collected = quantize_money(collection_amount)
                except (InvalidOperation, TypeError, ValueError):
                    raise ValidationFailed(
                        'Collection amount is required when payment is collected',
                        errors={'collection_amount': ['A valid amount is required']},
                    )
                if abs(collected - tracking.cod_amount) > settings.SETTLEMENT['COLLECTION_TOLERANCE']:
                    raise CollectionAmountMismatch(tracking.cod_amount, collected)

                tracking.status = CODTracking.Status.COLLECTED
                tracking.collection_amount = collected
                tracking.delivery_confirmed_at = now
                tracking.save()

                if payment is not None:
                    base = payment.transaction_id or f"COD_{order.order_number}"
                    complete_payment(
                        order, payment, transaction_id=f"{base}_COLLECTED_{_millis()}",
                        actor=admin, source='cod', advance_status=False,
                    )

                note = f"COD payment of ₹{collected} collected by {agent}"
                if delivery_notes:
                    note = f"{note}. Notes: {delivery_notes}"
                OrderStatusService.apply_transition(
                    order, Order.Status.DELIVERED, actor=admin, notes=note, source='cod',
                )
                NotificationService.cod_delivery_confirmation(order, tracking)
                message = 'COD delivery confirmed and payment collected'
            else:
                tracking.status = CODTracking.Status.DELIVERY_ATTEMPTED
                tracking.delivery_attempt_count += 1
                tracking.last_delivery_attempt = now
                tracking.save()

                note = f"Delivery attempted by {agent} - payment not collected"
                if delivery_notes:
                    note = f"{note}. Notes: {delivery_notes}"
                order.append_note(note, now)
                order.save(update_fields=['notes', 'updated_at'])
                message = 'Delivery attempt recorded'

        logger.info(f"COD delivery update for {order.order_number}: {tracking.status}")
        return {'order': order, 'tracking': tracking_as_dict(tracking), 'message': message}

    @staticmethod
    def get_tracking(order_id) -> Dict:
        tracking = (
            CODTracking.objects.select_related('order', 'order__user', 'order__shipping_address', 'confirmed_by')
            .filter(order_id=order_id)
            .first()
        )
        if tracking is None:
            raise ResourceNotFound('COD tracking not found for this order')
        order = tracking.order
        return {
            'order': {
                'id': order.id,
                'order_number': order.order_number,
                'status': order.status,
                'payment_status': order.payment_status,
                'total_amount': str(order.total_amount),
                'customer_email': order.user.email,
                'shipping_address': order.shipping_address.as_dict(),
            },
            'tracking': tracking_as_dict(tracking),
        }

    @staticmethod
    def pending_collections():
        """
        COD orders still awaiting cash, previously attempted deliveries first,
        with a summary of what is outstanding
        """
        queryset = (
            Order.objects.filter(
                payment_method=Order.PaymentMethod.COD,
                payment_status=Order.PaymentStatus.PENDING,
                status__in=AWAITING_COLLECTION,
            )
            .select_related('user', 'shipping_address', 'cod_tracking')
            .annotate(attempted_first=Case(
                When(cod_tracking__status=CODTracking.Status.DELIVERY_ATTEMPTED, then=Value(0)),
                default=Value(1),
                output_field=IntegerField(),
            ))
            .order_by('attempted_first', 'created_at')
        )
        totals = queryset.aggregate(amount=Sum('total_amount'))
        summary = {
            'total_orders': queryset.count(),
            'total_amount_to_collect': str(quantize_money(totals['amount'] or 0)),
            'delivery_attempted': queryset.filter(
                cod_tracking__status=CODTracking.Status.DELIVERY_ATTEMPTED
            ).count(),
        }
        return queryset, summary

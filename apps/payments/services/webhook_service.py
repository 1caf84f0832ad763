"""
Gateway webhook reconciliation.

Events are authenticated with an HMAC over the raw body, deduplicated by
event id, and dispatched through a handler table. Each handler runs in the
same transaction as the dedup record, so an event is either fully applied
and remembered, or neither.
"""
import enum
import hashlib
import json
import logging
from typing import Dict, Optional

from django.conf import settings
from django.db import IntegrityError, transaction

from apps.common.exceptions import InvalidSignature, ValidationFailed
from apps.orders.models import Order
from apps.orders.services import OrderStatusService
from ..models import Payment, WebhookEvent
from .gateway_client import compute_signature, signatures_match
from .settlement import complete_payment, fail_payment, lock_order_and_payment

logger = logging.getLogger(__name__)


class WebhookEventType(str, enum.Enum):
    PAYMENT_CAPTURED = 'payment.captured'
    PAYMENT_FAILED = 'payment.failed'
    ORDER_PAID = 'order.paid'


class Outcome:
    APPLIED = 'applied'
    NOOP = 'noop'
    UNMATCHED = 'unmatched'
    IGNORED = 'ignored'
    DUPLICATE = 'duplicate'


def _entity(payload: Dict, kind: str) -> Dict:
    return ((payload.get('payload') or {}).get(kind) or {}).get('entity') or {}


def _find_payment(gateway_payment_id=None, gateway_order_id=None) -> Optional[Payment]:
    payment = None
    if gateway_payment_id:
        payment = Payment.objects.filter(gateway_payment_id=gateway_payment_id).first()
    if payment is None and gateway_order_id:
        payment = Payment.objects.filter(gateway_order_id=gateway_order_id).first()
    return payment


def handle_payment_captured(payload: Dict) -> str:
    entity = _entity(payload, 'payment')
    payment = _find_payment(entity.get('id'), entity.get('order_id'))
    if payment is None:
        logger.warning(f"payment.captured for unknown payment {entity.get('id')}")
        return Outcome.UNMATCHED

    order, payment = lock_order_and_payment(payment.order_id)
    applied = complete_payment(
        order, payment, gateway_payment_id=entity.get('id'), source='webhook', advance_status=False,
    )
    return Outcome.APPLIED if applied else Outcome.NOOP


def handle_payment_failed(payload: Dict) -> str:
    entity = _entity(payload, 'payment')
    payment = _find_payment(entity.get('id'), entity.get('order_id'))
    if payment is None:
        logger.warning(f"payment.failed for unknown payment {entity.get('id')}")
        return Outcome.UNMATCHED

    order, payment = lock_order_and_payment(payment.order_id)
    applied = fail_payment(
        order, payment, gateway_payment_id=entity.get('id'), source='webhook',
        reason=entity.get('error_description') or '',
    )
    return Outcome.APPLIED if applied else Outcome.NOOP


def handle_order_paid(payload: Dict) -> str:
    entity = _entity(payload, 'order')
    payment = _find_payment(gateway_order_id=entity.get('id'))
    if payment is None:
        logger.warning(f"order.paid for unknown gateway order {entity.get('id')}")
        return Outcome.UNMATCHED

    order, payment = lock_order_and_payment(payment.order_id)
    if complete_payment(order, payment, source='webhook', advance_status=True):
        return Outcome.APPLIED

    # Payment settled earlier (e.g. by payment.captured); still advance a placed order
    if payment.payment_status == Payment.Status.COMPLETED and order.status == Order.Status.PLACED:
        OrderStatusService.apply_transition(
            order, Order.Status.PROCESSING, notes='Gateway order paid', source='webhook',
        )
        return Outcome.APPLIED
    return Outcome.NOOP


HANDLERS = {
    WebhookEventType.PAYMENT_CAPTURED: handle_payment_captured,
    WebhookEventType.PAYMENT_FAILED: handle_payment_failed,
    WebhookEventType.ORDER_PAID: handle_order_paid,
}


class WebhookService:
    """Authenticates and applies gateway webhook deliveries"""

    @staticmethod
    def verify_signature(raw_body: bytes, signature: Optional[str]) -> bool:
        secret = settings.PAYMENT_GATEWAY['WEBHOOK_SECRET']
        if not secret:
            logger.error("Webhook secret is not configured; rejecting delivery")
            return False
        return signatures_match(compute_signature(secret, raw_body), signature)

    @staticmethod
    def handle(raw_body: bytes, signature: Optional[str], event_id: Optional[str] = None,
               request_ip: Optional[str] = None) -> Dict:
        if not WebhookService.verify_signature(raw_body, signature):
            raise InvalidSignature(request_ip=request_ip)

        try:
            payload = json.loads(raw_body.decode('utf-8'))
        except (UnicodeDecodeError, ValueError):
            raise ValidationFailed('Malformed webhook payload')
        if not isinstance(payload, dict):
            raise ValidationFailed('Malformed webhook payload')

        event_name = payload.get('event')
        try:
            event_type = WebhookEventType(event_name)
        except ValueError:
            logger.info(f"Ignoring unhandled webhook event: {event_name}")
            return {'status': 'ok', 'event': event_name, 'outcome': Outcome.IGNORED}

        event_key = event_id or hashlib.sha256(raw_body).hexdigest()
        payment_entity = _entity(payload, 'payment')
        order_entity = _entity(payload, 'order')

        with transaction.atomic():
            try:
                with transaction.atomic():
                    record = WebhookEvent.objects.create(
                        event_id=event_key,
                        event_type=event_type.value,
                        gateway_order_id=payment_entity.get('order_id') or order_entity.get('id') or '',
                        gateway_payment_id=payment_entity.get('id') or '',
                        outcome='processing',
                        payload=payload,
                        request_ip=request_ip,
                    )
            except IntegrityError:
                logger.info(f"Duplicate webhook {event_type.value} {event_key} acknowledged")
                return {'status': 'ok', 'event': event_type.value, 'outcome': Outcome.DUPLICATE}

            outcome = HANDLERS[event_type](payload)
            record.outcome = outcome
            record.save(update_fields=['outcome'])

        logger.info(f"Webhook {event_type.value} {event_key}: {outcome}")
        return {'status': 'ok', 'event': event_type.value, 'outcome': outcome}

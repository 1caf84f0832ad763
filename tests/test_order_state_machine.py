"""
Tests for order status transitions and their side effects.
"""
from decimal import Decimal

from django.test import TestCase

from apps.common.exceptions import InvalidStatusTransition, OrderNotFound
from apps.orders.models import Order, OrderStatusHistory
from apps.orders.services import OrderStatusService, TRANSITIONS, can_transition
from apps.payments.models import CODTracking, Payment
from tests.factories import AddressFactory, AdminUserFactory, ProductFactory, UserFactory, place_order

Status = Order.Status


class TransitionTableTest(TestCase):

    def test_forward_path(self):
        self.assertTrue(can_transition(Status.PLACED, Status.PROCESSING))
        self.assertTrue(can_transition(Status.PROCESSING, Status.SHIPPED))
        self.assertTrue(can_transition(Status.SHIPPED, Status.OUT_FOR_DELIVERY))
        self.assertTrue(can_transition(Status.SHIPPED, Status.DELIVERED))
        self.assertTrue(can_transition(Status.OUT_FOR_DELIVERY, Status.DELIVERED))

    def test_cancellation_only_before_shipping(self):
        self.assertTrue(can_transition(Status.PLACED, Status.CANCELLED))
        self.assertTrue(can_transition(Status.PROCESSING, Status.CANCELLED))
        self.assertFalse(can_transition(Status.SHIPPED, Status.CANCELLED))
        self.assertFalse(can_transition(Status.OUT_FOR_DELIVERY, Status.CANCELLED))

    def test_terminal_states(self):
        self.assertEqual(TRANSITIONS[Status.DELIVERED], frozenset())
        self.assertEqual(TRANSITIONS[Status.CANCELLED], frozenset())

    def test_no_self_transitions(self):
        for status in Status.values:
            self.assertFalse(can_transition(status, status))


class OrderStatusServiceTest(TestCase):

    def setUp(self):
        self.admin = AdminUserFactory()
        self.user = UserFactory()
        self.address = AddressFactory(user=self.user)
        self.product = ProductFactory(price=Decimal('250.00'), stock_quantity=10)

    def _order(self, quantity=2, payment_method='gateway'):
        return place_order(self.user, self.address, [(self.product, quantity)], payment_method=payment_method)

    def _advance(self, order, *statuses):
        for status in statuses:
            OrderStatusService.update_status(order.id, status, actor=self.admin)

    def test_valid_transition_records_history_and_note(self):
        order = self._order()

        updated = OrderStatusService.update_status(order.id, Status.PROCESSING, actor=self.admin, notes='Packed')

        self.assertEqual(updated.status, Status.PROCESSING)
        history = OrderStatusHistory.objects.filter(order=order).last()
        self.assertEqual(history.previous_status, Status.PLACED)
        self.assertEqual(history.new_status, Status.PROCESSING)
        self.assertEqual(history.changed_by, self.admin)
        self.assertEqual(history.notes, 'Packed')
        order.refresh_from_db()
        self.assertIn('Status changed from placed to processing', order.notes)

    def test_invalid_transition_leaves_order_unchanged(self):
        order = self._order()
        notes_before = Order.objects.get(pk=order.pk).notes

        with self.assertRaises(InvalidStatusTransition) as ctx:
            OrderStatusService.update_status(order.id, Status.DELIVERED, actor=self.admin)

        self.assertIn('Invalid status transition from placed to delivered', ctx.exception.message)
        self.assertEqual(ctx.exception.allowed, ['cancelled', 'processing'])
        order.refresh_from_db()
        self.assertEqual(order.status, Status.PLACED)
        self.assertEqual(order.notes, notes_before)
        self.assertEqual(OrderStatusHistory.objects.filter(order=order).count(), 1)

    def test_unknown_order(self):
        with self.assertRaises(OrderNotFound):
            OrderStatusService.update_status(424242, Status.PROCESSING)

    def test_cancel_restores_stock_and_refunds_pending_payment(self):
        order = self._order(quantity=2)
        self._advance(order, Status.PROCESSING)

        OrderStatusService.update_status(order.id, Status.CANCELLED, actor=self.admin)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 10)
        order.refresh_from_db()
        self.assertEqual(order.payment_status, Order.PaymentStatus.REFUNDED)
        self.assertEqual(Payment.objects.get(order=order).payment_status, Payment.Status.REFUNDED)

    def test_cancel_after_capture_flags_manual_refund(self):
        order = self._order()
        Payment.objects.filter(order=order).update(payment_status=Payment.Status.COMPLETED)
        Order.objects.filter(pk=order.pk).update(payment_status=Order.PaymentStatus.PAID)

        OrderStatusService.update_status(order.id, Status.CANCELLED, actor=self.admin)

        order.refresh_from_db()
        self.assertEqual(order.status, Status.CANCELLED)
        self.assertEqual(order.payment_status, Order.PaymentStatus.PAID)
        self.assertIn('manual refund required', order.notes)
        self.assertEqual(Payment.objects.get(order=order).payment_status, Payment.Status.COMPLETED)

    def test_cancelled_is_terminal(self):
        order = self._order()
        self._advance(order, Status.CANCELLED)

        with self.assertRaises(InvalidStatusTransition):
            OrderStatusService.update_status(order.id, Status.PROCESSING, actor=self.admin)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 10)

    def test_delivering_cod_order_settles_payment(self):
        order = self._order(payment_method='cod')
        CODTracking.objects.create(order=order, cod_amount=order.total_amount)

        self._advance(order, Status.PROCESSING, Status.SHIPPED, Status.DELIVERED)

        order.refresh_from_db()
        self.assertEqual(order.payment_status, Order.PaymentStatus.PAID)
        self.assertEqual(Payment.objects.get(order=order).payment_status, Payment.Status.COMPLETED)
        tracking = CODTracking.objects.get(order=order)
        self.assertEqual(tracking.status, CODTracking.Status.COLLECTED)
        self.assertEqual(tracking.collection_amount, order.total_amount)

    def test_delivering_prepaid_order_leaves_payment_alone(self):
        order = self._order()

        self._advance(order, Status.PROCESSING, Status.SHIPPED, Status.DELIVERED)

        order.refresh_from_db()
        self.assertEqual(order.payment_status, Order.PaymentStatus.PENDING)


class BulkStatusUpdateTest(TestCase):

    def setUp(self):
        self.admin = AdminUserFactory()
        user = UserFactory()
        address = AddressFactory(user=user)
        product = ProductFactory(stock_quantity=20)
        self.orders = [place_order(user, address, [(product, 1)]) for _ in range(3)]

    def test_each_order_succeeds_or_fails_alone(self):
        OrderStatusService.update_status(self.orders[1].id, Status.CANCELLED, actor=self.admin)
        ids = [order.id for order in self.orders] + [999999]

        results = OrderStatusService.bulk_update_status(ids, Status.PROCESSING, actor=self.admin)

        self.assertEqual([result.success for result in results], [True, False, True, False])
        self.assertEqual(results[1].error_code, 'invalid_status_transition')
        self.assertEqual(results[3].error_code, 'order_not_found')
        self.assertEqual(results[0].as_dict()['previous_status'], Status.PLACED)
        self.assertNotIn('error', results[0].as_dict())

        statuses = list(Order.objects.filter(id__in=ids).order_by('id').values_list('status', flat=True))
        self.assertEqual(statuses, [Status.PROCESSING, Status.CANCELLED, Status.PROCESSING])

"""
Tests for the cash-on-delivery workflow.
"""
from decimal import Decimal

from django.core import mail
from django.test import TestCase

from apps.common.exceptions import (
    CODNotEligible, CollectionAmountMismatch, DomainConflict, OrderNotFound, ResourceNotFound,
)
from apps.orders.models import Order
from apps.orders.services import OrderStatusService
from apps.payments.models import CODTracking, Payment
from apps.payments.services import CODService
from tests.factories import AddressFactory, AdminUserFactory, ProductFactory, UserFactory, place_order


class CODTestMixin:

    def setUp(self):
        self.user = UserFactory()
        self.admin = AdminUserFactory()
        self.address = AddressFactory(user=self.user, state='Maharashtra')
        self.product = ProductFactory(price=Decimal('600.00'), stock_quantity=10)

    def cod_order(self, product=None, quantity=2, address=None):
        return place_order(
            self.user, address or self.address, [(product or self.product, quantity)], payment_method='cod'
        )

    def shipped_order(self):
        order = self.cod_order()
        CODService.confirm(self.user, order.id, 'Call before delivery')
        OrderStatusService.update_status(order.id, Order.Status.SHIPPED, actor=self.admin)
        return Order.objects.get(pk=order.pk)


class CODConfirmTest(CODTestMixin, TestCase):

    def test_confirm_moves_order_to_processing(self):
        order = self.cod_order()

        result = CODService.confirm(self.user, order.id, 'Leave at the gate')

        self.assertEqual(result['order'].status, Order.Status.PROCESSING)
        self.assertEqual(result['cod_details']['amount_to_collect'], '1416.00')
        self.assertEqual(result['cod_details']['collection_status'], CODTracking.Status.CONFIRMED)
        self.assertEqual(result['cod_details']['delivery_location'], 'Mumbai, Maharashtra 400001')

        order.refresh_from_db()
        self.assertEqual(order.payment_status, Order.PaymentStatus.PENDING)
        self.assertIn('COD order confirmed - Delivery instructions: Leave at the gate', order.notes)
        payment = Payment.objects.get(order=order)
        self.assertTrue(payment.transaction_id.startswith(f"COD_{order.order_number}_"))
        self.assertEqual(CODTracking.objects.get(order=order).cod_amount, Decimal('1416.00'))

    def test_amount_over_limit_is_not_eligible(self):
        pricey = ProductFactory(price=Decimal('5000.00'), stock_quantity=5)
        order = self.cod_order(product=pricey, quantity=1)

        with self.assertRaises(CODNotEligible) as ctx:
            CODService.confirm(self.user, order.id)

        self.assertIn('5000', ctx.exception.message)
        order.refresh_from_db()
        self.assertEqual(order.status, Order.Status.PLACED)
        self.assertFalse(CODTracking.objects.filter(order=order).exists())

    def test_unserviceable_region_is_not_eligible(self):
        kerala = AddressFactory(user=self.user, state='Kerala')
        order = self.cod_order(address=kerala)

        with self.assertRaises(CODNotEligible) as ctx:
            CODService.confirm(self.user, order.id)

        self.assertIn('Kerala', ctx.exception.message)
        self.assertEqual(Order.objects.get(pk=order.pk).status, Order.Status.PLACED)

    def test_region_match_ignores_case(self):
        lower = AddressFactory(user=self.user, state='tamil nadu')
        order = self.cod_order(address=lower)

        result = CODService.confirm(self.user, order.id)

        self.assertEqual(result['order'].status, Order.Status.PROCESSING)

    def test_prepaid_order_cannot_be_confirmed(self):
        order = place_order(self.user, self.address, [(self.product, 1)], payment_method='gateway')

        with self.assertRaises(CODNotEligible):
            CODService.confirm(self.user, order.id)

    def test_only_owner_can_confirm(self):
        order = self.cod_order()

        with self.assertRaises(OrderNotFound):
            CODService.confirm(UserFactory(), order.id)


class CODDeliveryTest(CODTestMixin, TestCase):

    def test_collected_delivery_settles_order(self):
        order = self.shipped_order()

        with self.captureOnCommitCallbacks(execute=True):
            result = CODService.confirm_delivery(
                self.admin, order.id, True, collection_amount=Decimal('1416.00'),
                delivery_person_name='Ravi', delivery_person_phone='9000000000',
            )

        self.assertEqual(result['message'], 'COD delivery confirmed and payment collected')
        order.refresh_from_db()
        self.assertEqual(order.status, Order.Status.DELIVERED)
        self.assertEqual(order.payment_status, Order.PaymentStatus.PAID)
        self.assertIn('COD payment of ₹1416.00 collected by Ravi (9000000000)', order.notes)

        payment = Payment.objects.get(order=order)
        self.assertEqual(payment.payment_status, Payment.Status.COMPLETED)
        self.assertIn('_COLLECTED_', payment.transaction_id)

        tracking = CODTracking.objects.get(order=order)
        self.assertEqual(tracking.status, CODTracking.Status.COLLECTED)
        self.assertEqual(tracking.collection_amount, Decimal('1416.00'))
        self.assertEqual(tracking.confirmed_by, self.admin)
        self.assertIsNotNone(tracking.delivery_confirmed_at)
        self.assertTrue(any(message.subject.startswith('Delivered') for message in mail.outbox))

    def test_collection_within_tolerance(self):
        order = self.shipped_order()

        CODService.confirm_delivery(
            self.admin, order.id, True, collection_amount=Decimal('1415.99'),
            delivery_person_name='Ravi', delivery_person_phone='9000000000',
        )

        self.assertEqual(Order.objects.get(pk=order.pk).status, Order.Status.DELIVERED)

    def test_collection_mismatch_changes_nothing(self):
        order = self.shipped_order()

        with self.assertRaises(CollectionAmountMismatch):
            CODService.confirm_delivery(
                self.admin, order.id, True, collection_amount=Decimal('1400.00'),
                delivery_person_name='Ravi', delivery_person_phone='9000000000',
            )

        order.refresh_from_db()
        self.assertEqual(order.status, Order.Status.SHIPPED)
        self.assertEqual(order.payment_status, Order.PaymentStatus.PENDING)
        self.assertEqual(CODTracking.objects.get(order=order).status, CODTracking.Status.CONFIRMED)

    def test_failed_attempt_is_counted(self):
        order = self.shipped_order()

        for _ in range(2):
            result = CODService.confirm_delivery(
                self.admin, order.id, False, delivery_person_name='Ravi',
                delivery_person_phone='9000000000', delivery_notes='Customer not home',
            )

        self.assertEqual(result['message'], 'Delivery attempt recorded')
        self.assertEqual(result['tracking']['delivery_attempt_count'], 2)
        order.refresh_from_db()
        self.assertEqual(order.status, Order.Status.SHIPPED)
        self.assertEqual(order.payment_status, Order.PaymentStatus.PENDING)
        self.assertIn('payment not collected. Notes: Customer not home', order.notes)

    def test_delivery_requires_shipped_order(self):
        order = self.cod_order()
        CODService.confirm(self.user, order.id)

        with self.assertRaises(DomainConflict):
            CODService.confirm_delivery(
                self.admin, order.id, True, collection_amount=order.total_amount,
                delivery_person_name='Ravi', delivery_person_phone='9000000000',
            )

    def test_delivery_creates_missing_tracking(self):
        order = self.cod_order()
        OrderStatusService.update_status(order.id, Order.Status.PROCESSING, actor=self.admin)
        OrderStatusService.update_status(order.id, Order.Status.SHIPPED, actor=self.admin)

        CODService.confirm_delivery(
            self.admin, order.id, False, delivery_person_name='Ravi', delivery_person_phone='9000000000',
        )

        tracking = CODTracking.objects.get(order=order)
        self.assertEqual(tracking.cod_amount, order.total_amount)
        self.assertEqual(tracking.delivery_attempt_count, 1)


class CODQueryTest(CODTestMixin, TestCase):

    def test_tracking_lookup(self):
        order = self.shipped_order()

        data = CODService.get_tracking(order.id)

        self.assertEqual(data['order']['order_number'], order.order_number)
        self.assertEqual(data['order']['customer_email'], self.user.email)
        self.assertEqual(data['tracking']['delivery_instructions'], 'Call before delivery')

    def test_tracking_missing(self):
        order = self.cod_order()

        with self.assertRaises(ResourceNotFound):
            CODService.get_tracking(order.id)

    def test_pending_collections_lists_attempted_first(self):
        waiting = self.shipped_order()
        attempted = self.shipped_order()
        CODService.confirm_delivery(
            self.admin, attempted.id, False, delivery_person_name='Ravi', delivery_person_phone='9000000000',
        )
        delivered = self.shipped_order()
        CODService.confirm_delivery(
            self.admin, delivered.id, True, collection_amount=delivered.total_amount,
            delivery_person_name='Ravi', delivery_person_phone='9000000000',
        )

        queryset, summary = CODService.pending_collections()

        self.assertEqual([order.id for order in queryset], [attempted.id, waiting.id])
        self.assertEqual(summary['total_orders'], 2)
        self.assertEqual(summary['delivery_attempted'], 1)
        self.assertEqual(summary['total_amount_to_collect'], '2832.00')

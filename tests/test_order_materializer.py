"""
Tests for turning a cart into a priced, persisted order.
"""
from decimal import Decimal

from django.core import mail
from django.test import TestCase
from hypothesis import given, settings, strategies as st
from hypothesis.extra.django import TestCase as HypothesisTestCase

from apps.common.exceptions import (
    AddressNotFound, InsufficientStock, InvalidCoupon, MinimumAmountNotMet, ProductUnavailable,
)
from apps.orders.models import Order, OrderStatusHistory
from apps.orders.services import OrderService, PricingCalculator
from apps.payments.models import Payment
from tests.factories import AddressFactory, CouponFactory, ProductFactory, UserFactory, place_order


class PricingCalculatorTest(TestCase):

    def test_shipping_charged_below_threshold(self):
        prices = PricingCalculator.quote(Decimal('499.99'))
        self.assertEqual(prices.shipping, Decimal('50.00'))

    def test_free_shipping_at_threshold(self):
        prices = PricingCalculator.quote(Decimal('500.00'))
        self.assertEqual(prices.shipping, Decimal('0.00'))

    def test_tax_applies_after_discount_and_shipping(self):
        prices = PricingCalculator.quote(Decimal('400.00'), Decimal('50.00'))

        self.assertEqual(prices.shipping, Decimal('50.00'))
        self.assertEqual(prices.tax, Decimal('72.00'))
        self.assertEqual(prices.total, Decimal('472.00'))


class OrderCreationTest(TestCase):

    def setUp(self):
        self.user = UserFactory()
        self.address = AddressFactory(user=self.user)
        self.product = ProductFactory(name='Kumkumadi Oil', price=Decimal('600.00'), stock_quantity=10)

    def test_prices_and_persists_order(self):
        order = place_order(self.user, self.address, [(self.product, 2)])

        self.assertTrue(order.order_number.startswith('RC'))
        self.assertEqual(order.status, Order.Status.PLACED)
        self.assertEqual(order.payment_status, Order.PaymentStatus.PENDING)
        self.assertEqual(order.subtotal_amount, Decimal('1200.00'))
        self.assertEqual(order.shipping_amount, Decimal('0.00'))
        self.assertEqual(order.tax_amount, Decimal('216.00'))
        self.assertEqual(order.total_amount, Decimal('1416.00'))

        item = order.items.get()
        self.assertEqual(item.product_name, 'Kumkumadi Oil')
        self.assertEqual(item.unit_price, Decimal('600.00'))
        self.assertEqual(item.total_price, Decimal('1200.00'))

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 8)

    def test_creates_pending_payment_and_history(self):
        order = place_order(self.user, self.address, [(self.product, 1)])

        payment = Payment.objects.get(order=order)
        self.assertEqual(payment.payment_status, Payment.Status.PENDING)
        self.assertEqual(payment.amount, order.total_amount)
        self.assertEqual(payment.currency, 'INR')

        history = OrderStatusHistory.objects.get(order=order)
        self.assertEqual(history.previous_status, '')
        self.assertEqual(history.new_status, Order.Status.PLACED)

    def test_applies_coupon_and_consumes_a_use(self):
        coupon = CouponFactory(code='SAVE50', discount_type='fixed', discount_value=Decimal('50.00'),
                               minimum_amount=Decimal('300.00'), usage_limit=200)

        order = place_order(self.user, self.address, [(self.product, 2)], coupon_code='save50')

        self.assertEqual(order.coupon_code, 'SAVE50')
        self.assertEqual(order.discount_amount, Decimal('50.00'))
        self.assertEqual(order.tax_amount, Decimal('207.00'))
        self.assertEqual(order.total_amount, Decimal('1357.00'))
        coupon.refresh_from_db()
        self.assertEqual(coupon.used_count, 1)

    def test_duplicate_lines_are_merged(self):
        order = place_order(self.user, self.address, [(self.product, 1), (self.product, 2)])

        item = order.items.get()
        self.assertEqual(item.quantity, 3)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 7)

    def test_insufficient_stock_writes_nothing(self):
        coupon = CouponFactory(code='SAVE50', discount_type='fixed', discount_value=Decimal('50.00'))
        other = ProductFactory(stock_quantity=1)

        with self.assertRaises(InsufficientStock):
            place_order(self.user, self.address, [(self.product, 2), (other, 5)], coupon_code='SAVE50')

        self.product.refresh_from_db()
        coupon.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 10)
        self.assertEqual(coupon.used_count, 0)
        self.assertFalse(Order.objects.exists())
        self.assertFalse(Payment.objects.exists())

    def test_invalid_coupon_writes_nothing(self):
        with self.assertRaises(InvalidCoupon):
            place_order(self.user, self.address, [(self.product, 2)], coupon_code='BOGUS')

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 10)
        self.assertFalse(Order.objects.exists())

    def test_coupon_minimum_checked_against_subtotal(self):
        CouponFactory(code='BIGSPEND', discount_type='fixed', discount_value=Decimal('100.00'),
                      minimum_amount=Decimal('1000.00'))

        with self.assertRaises(MinimumAmountNotMet):
            place_order(self.user, self.address, [(self.product, 1)], coupon_code='BIGSPEND')

    def test_inactive_product_is_rejected(self):
        retired = ProductFactory(is_active=False)

        with self.assertRaises(ProductUnavailable):
            place_order(self.user, self.address, [(retired, 1)])

    def test_address_must_belong_to_caller(self):
        stranger_address = AddressFactory()

        with self.assertRaises(AddressNotFound):
            place_order(self.user, stranger_address, [(self.product, 1)])

    def test_confirmation_mail_sent_after_commit(self):
        with self.captureOnCommitCallbacks(execute=True):
            order = place_order(self.user, self.address, [(self.product, 1)])

        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(order.order_number, mail.outbox[0].subject)
        self.assertEqual(mail.outbox[0].to, [self.user.email])

    def test_order_numbers_are_unique(self):
        numbers = {OrderService.generate_order_number() for _ in range(50)}
        self.assertGreater(len(numbers), 1)


class OrderTotalPropertyTest(HypothesisTestCase):
    """total = subtotal - discount + shipping + tax for any cart."""

    @given(
        price=st.decimals(min_value=Decimal('0.01'), max_value=Decimal('9999.99'), places=2),
        quantity=st.integers(min_value=1, max_value=20),
        fixed_discount=st.one_of(st.none(), st.decimals(min_value=Decimal('1'), max_value=Decimal('500'), places=2)),
    )
    @settings(max_examples=30, deadline=None)
    def test_total_invariant(self, price, quantity, fixed_discount):
        user = UserFactory()
        address = AddressFactory(user=user)
        product = ProductFactory(price=price, stock_quantity=quantity)
        coupon_code = None
        if fixed_discount is not None:
            coupon_code = CouponFactory(discount_type='fixed', discount_value=fixed_discount).code

        order = place_order(user, address, [(product, quantity)], coupon_code=coupon_code)

        self.assertEqual(
            order.total_amount,
            order.subtotal_amount - order.discount_amount + order.shipping_amount + order.tax_amount,
        )
        self.assertGreaterEqual(order.discount_amount, Decimal('0'))
        self.assertLessEqual(order.discount_amount, order.subtotal_amount)
        product.refresh_from_db()
        self.assertEqual(product.stock_quantity, 0)

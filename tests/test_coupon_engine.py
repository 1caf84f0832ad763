"""
Tests for coupon validation, discount calculation and redemption.
"""
from datetime import timedelta
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from hypothesis import given, settings, strategies as st
from hypothesis.extra.django import TestCase as HypothesisTestCase

from apps.common.exceptions import CouponLimitExceeded, InvalidCoupon, MinimumAmountNotMet
from apps.coupons.models import Coupon
from apps.coupons.services import CouponService
from tests.factories import CouponFactory


class CouponValidationTest(TestCase):

    def test_fixed_coupon_grants_its_value(self):
        CouponFactory(code='SAVE50', discount_type='fixed', discount_value=Decimal('50.00'),
                      minimum_amount=Decimal('300.00'))

        quote = CouponService.validate('SAVE50', Decimal('400.00'))

        self.assertEqual(quote.code, 'SAVE50')
        self.assertEqual(quote.discount, Decimal('50.00'))

    def test_code_lookup_is_case_insensitive(self):
        CouponFactory(code='WELCOME10', discount_value=Decimal('10.00'))

        quote = CouponService.validate('  welcome10 ', Decimal('1000.00'))

        self.assertEqual(quote.discount, Decimal('100.00'))

    def test_percentage_discount_is_capped(self):
        CouponFactory(code='MEGA25', discount_value=Decimal('25.00'), maximum_discount=Decimal('500.00'))

        quote = CouponService.validate('MEGA25', Decimal('4000.00'))

        self.assertEqual(quote.discount, Decimal('500.00'))

    def test_unknown_code_is_rejected(self):
        with self.assertRaises(InvalidCoupon) as ctx:
            CouponService.validate('NOPE', Decimal('100.00'))
        self.assertEqual(ctx.exception.message, 'Invalid coupon code')

    def test_inactive_coupon_is_rejected(self):
        CouponFactory(code='OFF', is_active=False)

        with self.assertRaises(InvalidCoupon):
            CouponService.validate('OFF', Decimal('100.00'))

    def test_not_yet_active_coupon_is_rejected(self):
        CouponFactory(code='LATER', valid_from=timezone.now() + timedelta(days=2))

        with self.assertRaises(InvalidCoupon) as ctx:
            CouponService.validate('LATER', Decimal('100.00'))
        self.assertEqual(ctx.exception.message, 'Coupon is not yet active')

    def test_expired_coupon_is_rejected(self):
        CouponFactory(code='OLD', valid_from=timezone.now() - timedelta(days=10),
                      valid_until=timezone.now() - timedelta(days=1))

        with self.assertRaises(InvalidCoupon) as ctx:
            CouponService.validate('OLD', Decimal('100.00'))
        self.assertEqual(ctx.exception.message, 'Coupon has expired')

    def test_exhausted_coupon_is_rejected(self):
        CouponFactory(code='USED', usage_limit=5, used_count=5)

        with self.assertRaises(CouponLimitExceeded):
            CouponService.validate('USED', Decimal('100.00'))

    def test_minimum_amount_is_enforced(self):
        CouponFactory(code='SAVE50', discount_type='fixed', discount_value=Decimal('50.00'),
                      minimum_amount=Decimal('300.00'))

        with self.assertRaises(MinimumAmountNotMet) as ctx:
            CouponService.validate('SAVE50', Decimal('299.99'))
        self.assertIn('300.00', ctx.exception.message)

    def test_validation_does_not_consume_a_use(self):
        coupon = CouponFactory(code='PEEK', usage_limit=1)

        CouponService.validate('PEEK', Decimal('100.00'))
        CouponService.validate('PEEK', Decimal('100.00'))

        coupon.refresh_from_db()
        self.assertEqual(coupon.used_count, 0)


class CouponRedemptionTest(TestCase):

    def test_redeem_increments_usage(self):
        coupon = CouponFactory(code='ONCE', usage_limit=2)

        CouponService.redeem(coupon)

        coupon.refresh_from_db()
        self.assertEqual(coupon.used_count, 1)

    def test_redeem_never_exceeds_limit(self):
        coupon = CouponFactory(code='LAST', usage_limit=1, used_count=1)

        with self.assertRaises(CouponLimitExceeded):
            CouponService.redeem(coupon)

        coupon.refresh_from_db()
        self.assertEqual(coupon.used_count, 1)

    def test_unlimited_coupon_keeps_counting(self):
        coupon = CouponFactory(code='FOREVER', usage_limit=None, used_count=999)

        CouponService.redeem(coupon)

        coupon.refresh_from_db()
        self.assertEqual(coupon.used_count, 1000)

    def test_code_is_stored_upper_case(self):
        coupon = Coupon.objects.create(
            code='lower', discount_type='fixed', discount_value=Decimal('10.00'),
            valid_from=timezone.now(), valid_until=timezone.now() + timedelta(days=1),
        )
        self.assertEqual(coupon.code, 'LOWER')


class DiscountPropertyTest(HypothesisTestCase):
    """The discount is never negative and never exceeds the subtotal."""

    @given(
        discount_type=st.sampled_from(['percentage', 'fixed']),
        value=st.decimals(min_value=Decimal('0.01'), max_value=Decimal('5000'), places=2),
        cap=st.one_of(st.none(), st.decimals(min_value=Decimal('1'), max_value=Decimal('1000'), places=2)),
        subtotal=st.decimals(min_value=Decimal('0.00'), max_value=Decimal('100000'), places=2),
    )
    @settings(max_examples=100, deadline=None)
    def test_discount_bounds(self, discount_type, value, cap, subtotal):
        if discount_type == 'percentage':
            value = min(value, Decimal('100.00'))
        coupon = Coupon(code='PROP', discount_type=discount_type, discount_value=value, maximum_discount=cap)

        discount = CouponService.calculate_discount(coupon, subtotal)

        self.assertGreaterEqual(discount, Decimal('0'))
        self.assertLessEqual(discount, subtotal)
        self.assertEqual(discount, discount.quantize(Decimal('0.01')))
        if discount_type == 'percentage' and cap is not None:
            self.assertLessEqual(discount, cap)


class SeedCouponsCommandTest(TestCase):

    def test_creates_sample_coupons_once(self):
        out = StringIO()
        call_command('seed_coupons', stdout=out)
        call_command('seed_coupons', stdout=out)

        self.assertEqual(
            set(Coupon.objects.values_list('code', flat=True)),
            {'WELCOME10', 'SAVE50', 'BEAUTY20', 'FLAT100', 'MEGA25'},
        )
        self.assertIn('(0 created)', out.getvalue())

    def test_reset_clears_usage(self):
        call_command('seed_coupons', stdout=StringIO())
        Coupon.objects.filter(code='SAVE50').update(used_count=7)

        call_command('seed_coupons', '--reset', stdout=StringIO())

        self.assertEqual(Coupon.objects.get(code='SAVE50').used_count, 0)

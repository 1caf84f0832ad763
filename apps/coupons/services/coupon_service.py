"""
Coupon engine: validates promotional codes and computes discounts.

Validation has no side effects. The usage counter is only touched by
``CouponService.redeem`` which the order materializer calls from inside its
own transaction, so a rolled back order never consumes a coupon use.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db.models import F, Q
from django.utils import timezone

from apps.common.exceptions import InvalidCoupon, CouponLimitExceeded, MinimumAmountNotMet
from apps.common.utils import quantize_money
from ..models import Coupon

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CouponQuote:
    coupon: Coupon
    discount: Decimal

    @property
    def code(self) -> str:
        return self.coupon.code

    def as_dict(self):
        return {
            'code': self.coupon.code,
            'description': self.coupon.description,
            'discount_type': self.coupon.discount_type,
            'discount_value': str(self.coupon.discount_value),
            'discount_amount': str(self.discount),
        }


class CouponService:
    """Service class for coupon validation and redemption"""

    @staticmethod
    def calculate_discount(coupon: Coupon, subtotal: Decimal) -> Decimal:
        subtotal = Decimal(subtotal)
        if coupon.discount_type == Coupon.DiscountType.PERCENTAGE:
            discount = subtotal * coupon.discount_value / Decimal('100')
            if coupon.maximum_discount is not None:
                discount = min(discount, coupon.maximum_discount)
        else:
            discount = coupon.discount_value
        # Never discount more than the order is worth
        return quantize_money(max(min(discount, subtotal), Decimal('0')))

    @staticmethod
    def validate(code: str, subtotal: Decimal, now=None, for_update: bool = False) -> CouponQuote:
        """
        Check ``code`` against ``subtotal`` and return the discount it grants.

        Raises InvalidCoupon, CouponLimitExceeded or MinimumAmountNotMet.
        ``for_update`` locks the coupon row and must only be used inside a transaction.
        """
        now = now or timezone.now()
        normalized = (code or '').strip().upper()
        queryset = Coupon.objects.select_for_update() if for_update else Coupon.objects

        coupon = queryset.filter(code=normalized, is_active=True).first()
        if coupon is None:
            raise InvalidCoupon('Invalid coupon code', coupon_code=normalized)

        if coupon.valid_from and now < coupon.valid_from:
            raise InvalidCoupon('Coupon is not yet active', coupon_code=normalized)

        if coupon.valid_until and now > coupon.valid_until:
            raise InvalidCoupon('Coupon has expired', coupon_code=normalized)

        if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
            raise CouponLimitExceeded(coupon_code=normalized, usage_limit=coupon.usage_limit)

        if Decimal(subtotal) < coupon.minimum_amount:
            raise MinimumAmountNotMet(
                f'Minimum order amount of ₹{coupon.minimum_amount} required for this coupon',
                coupon_code=normalized, minimum_amount=coupon.minimum_amount,
            )

        discount = CouponService.calculate_discount(coupon, subtotal)
        return CouponQuote(coupon=coupon, discount=discount)

    @staticmethod
    def redeem(coupon: Coupon) -> None:
        """
        Consume one use of ``coupon``. The increment is conditional on the cap
        so concurrent redemptions cannot push ``used_count`` past ``usage_limit``.
        """
        updated = Coupon.objects.filter(
            Q(usage_limit__isnull=True) | Q(used_count__lt=F('usage_limit')),
            id=coupon.id,
        ).update(used_count=F('used_count') + 1)

        if updated == 0:
            raise CouponLimitExceeded(coupon_code=coupon.code, usage_limit=coupon.usage_limit)

        logger.info(f"Coupon {coupon.code} redeemed")


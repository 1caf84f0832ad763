"""
Coupon services module.
"""
from .coupon_service import CouponService, CouponQuote

__all__ = [
    'CouponService',
    'CouponQuote',
]

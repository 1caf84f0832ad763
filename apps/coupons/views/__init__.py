"""
Coupon views module.
"""
from .coupon_views import ValidateCouponView

__all__ = [
    'ValidateCouponView',
]

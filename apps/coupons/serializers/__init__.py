"""
Coupon serializers module.
"""
from .coupon_serializers import CouponValidateSerializer

__all__ = [
    'CouponValidateSerializer',
]

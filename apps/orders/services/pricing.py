"""
Order pricing rules: flat shipping waived at a subtotal threshold and a flat
tax rate on the discounted, shipped amount.
"""
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings

from apps.common.utils import quantize_money

ZERO = Decimal('0.00')


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    discount: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal


class PricingCalculator:

    @staticmethod
    def shipping_for(subtotal: Decimal) -> Decimal:
        rules = settings.SETTLEMENT
        if subtotal >= rules['FREE_SHIPPING_THRESHOLD']:
            return ZERO
        return quantize_money(rules['SHIPPING_FLAT_FEE'])

    @staticmethod
    def quote(subtotal: Decimal, discount: Decimal = ZERO) -> PriceBreakdown:
        subtotal = quantize_money(subtotal)
        discount = quantize_money(discount)
        shipping = PricingCalculator.shipping_for(subtotal)
        tax = quantize_money((subtotal - discount + shipping) * settings.SETTLEMENT['TAX_RATE'])
        total = subtotal - discount + shipping + tax
        return PriceBreakdown(subtotal=subtotal, discount=discount, shipping=shipping, tax=tax, total=total)

"""
Core order service: materializes a cart into a priced order, and serves the
customer's own order list and detail.
"""
import logging
import secrets
import time
from collections import OrderedDict
from decimal import Decimal
from typing import Dict, List

from django.conf import settings
from django.db import IntegrityError, transaction

from apps.common.exceptions import (
    AddressNotFound, InsufficientStock, OrderNotFound, ProductUnavailable, TransactionalFailure,
)
from apps.common.notifications import NotificationService
from apps.common.utils import quantize_money
from apps.coupons.services import CouponService
from apps.products.services import InventoryLedger
from apps.users.models import Address
from ..models import Order, OrderItem, OrderStatusHistory
from .pricing import PricingCalculator

logger = logging.getLogger(__name__)

ORDER_NUMBER_ATTEMPTS = 3


class OrderService:
    """Service class for core order business logic"""

    @staticmethod
    def generate_order_number() -> str:
        """Prefix, epoch milliseconds and a three digit random suffix"""
        prefix = settings.SETTLEMENT['ORDER_NUMBER_PREFIX']
        return f"{prefix}{int(time.time() * 1000)}{secrets.randbelow(1000):03d}"

    @staticmethod
    def merge_items(items: List[Dict]) -> "OrderedDict[int, int]":
        """Collapse repeated products into one line, keeping first-seen order."""
        merged = OrderedDict()
        for item in items:
            product_id = int(item['product_id'])
            merged[product_id] = merged.get(product_id, 0) + int(item['quantity'])
        return merged

    @staticmethod
    def _insert_order(**fields) -> Order:
        # Uniqueness is enforced by the order_number constraint; retry on collision
        for attempt in range(1, ORDER_NUMBER_ATTEMPTS + 1):
            order_number = OrderService.generate_order_number()
            try:
                with transaction.atomic():
                    return Order.objects.create(order_number=order_number, **fields)
            except IntegrityError:
                logger.warning(f"Order number collision on {order_number} (attempt {attempt})")
        raise TransactionalFailure('Could not allocate a unique order number')

    @staticmethod
    def create_order(user, data: Dict) -> Order:
        """
        Create an order with its items and pending payment in one transaction.

        ``data`` holds ``items`` (product_id, quantity), ``shipping_address_id``,
        ``payment_method`` and optionally ``coupon_code`` and ``notes``.
        Raises AddressNotFound, ProductUnavailable, InsufficientStock or one of
        the coupon errors; nothing is written when any of them is raised.
        """
        from apps.payments.models import Payment

        lines = OrderService.merge_items(data['items'])
        coupon_code = (data.get('coupon_code') or '').strip()

        with transaction.atomic():
            address = Address.objects.filter(id=data['shipping_address_id'], user=user).first()
            if address is None:
                raise AddressNotFound()

            products = InventoryLedger.lock_products(lines.keys())

            subtotal = Decimal('0.00')
            priced_lines = []
            for product_id, quantity in lines.items():
                product = products[product_id]
                if not product.is_active:
                    raise ProductUnavailable(f"Product {product.name} is not available", product_id=product_id)
                if product.stock_quantity < quantity:
                    raise InsufficientStock(product.name, product.stock_quantity, quantity)

                line_total = quantize_money(product.price * quantity)
                subtotal += line_total
                priced_lines.append((product, quantity, product.price, line_total))

            quote = None
            if coupon_code:
                quote = CouponService.validate(coupon_code, subtotal, for_update=True)

            prices = PricingCalculator.quote(subtotal, quote.discount if quote else Decimal('0.00'))

            order = OrderService._insert_order(
                user=user,
                status=Order.Status.PLACED,
                subtotal_amount=prices.subtotal,
                discount_amount=prices.discount,
                shipping_amount=prices.shipping,
                tax_amount=prices.tax,
                total_amount=prices.total,
                coupon_code=quote.code if quote else None,
                shipping_address=address,
                payment_method=data['payment_method'],
                payment_status=Order.PaymentStatus.PENDING,
                notes=data.get('notes') or '',
            )

            OrderItem.objects.bulk_create([
                OrderItem(
                    order=order,
                    product=product,
                    product_name=product.name,
                    quantity=quantity,
                    unit_price=unit_price,
                    total_price=line_total,
                )
                for product, quantity, unit_price, line_total in priced_lines
            ])

            for product, quantity, _, _ in priced_lines:
                InventoryLedger.reserve(product, quantity)

            if quote:
                CouponService.redeem(quote.coupon)

            Payment.objects.create(
                order=order,
                payment_method=order.payment_method,
                payment_status=Payment.Status.PENDING,
                amount=order.total_amount,
                currency=settings.PAYMENT_GATEWAY['CURRENCY'],
            )

            OrderStatusHistory.objects.create(
                order=order,
                previous_status='',
                new_status=Order.Status.PLACED,
                changed_by=user,
                source='customer',
                notes='Order placed',
            )

            NotificationService.order_confirmation(order)

        logger.info(
            f"Order {order.order_number} created for user {user.id}: "
            f"total {order.total_amount} via {order.payment_method}"
        )
        return order

    @staticmethod
    def get_user_orders(user, filters: Dict):
        """Caller's own orders, newest first, optionally filtered by status"""
        queryset = Order.objects.filter(user=user).prefetch_related('items')

        status = filters.get('status')
        if status:
            queryset = queryset.filter(status=status)

        payment_status = filters.get('payment_status')
        if payment_status:
            queryset = queryset.filter(payment_status=payment_status)

        return queryset.order_by('-created_at')

    @staticmethod
    def get_order_detail(user, order_id) -> Order:
        order = (
            Order.objects.select_related('shipping_address', 'payment')
            .prefetch_related('items', 'status_history')
            .filter(id=order_id, user=user)
            .first()
        )
        if order is None:
            raise OrderNotFound()
        return order

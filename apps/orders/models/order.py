from decimal import Decimal

from django.db import models
from django.conf import settings


class Order(models.Model):
    """Priced customer order. Status changes go through OrderStatusService only."""

    class Status(models.TextChoices):
        PLACED = 'placed', 'Placed'
        PROCESSING = 'processing', 'Processing'
        SHIPPED = 'shipped', 'Shipped'
        OUT_FOR_DELIVERY = 'out_for_delivery', 'Out for delivery'
        DELIVERED = 'delivered', 'Delivered'
        CANCELLED = 'cancelled', 'Cancelled'

    class PaymentMethod(models.TextChoices):
        GATEWAY = 'gateway', 'Online payment'
        COD = 'cod', 'Cash on delivery'

    class PaymentStatus(models.TextChoices):
        PENDING = 'pending', 'Pending'
        PAID = 'paid', 'Paid'
        FAILED = 'failed', 'Failed'
        REFUNDED = 'refunded', 'Refunded'

    order_number = models.CharField(max_length=32, unique=True, help_text="Human readable order number")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='orders')
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PLACED)

    subtotal_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    shipping_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    tax_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)

    coupon_code = models.CharField(max_length=50, null=True, blank=True)
    shipping_address = models.ForeignKey(
        'users.Address', on_delete=models.PROTECT, related_name='orders'
    )
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    payment_status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING
    )
    notes = models.TextField(blank=True, default='', help_text="Append-only audit trail")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'created_at']),
            models.Index(fields=['status']),
            models.Index(fields=['payment_status']),
            models.Index(fields=['payment_method', 'status']),
        ]

    def __str__(self):
        return f"Order {self.order_number}"

    @property
    def is_cod(self) -> bool:
        return self.payment_method == self.PaymentMethod.COD

    def append_note(self, text: str, timestamp) -> None:
        line = f"[{timestamp.isoformat()}] {text}"
        self.notes = f"{self.notes}\n{line}" if self.notes else line

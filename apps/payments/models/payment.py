from django.db import models


class Payment(models.Model):
    """Settlement record for an order, one per order"""

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        COMPLETED = 'completed', 'Completed'
        FAILED = 'failed', 'Failed'
        REFUNDED = 'refunded', 'Refunded'

    order = models.OneToOneField('orders.Order', on_delete=models.CASCADE, related_name='payment')
    payment_method = models.CharField(max_length=20, help_text="Mirrors Order.payment_method")
    payment_status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default='INR')

    # Gateway correlation identifiers
    gateway_order_id = models.CharField(max_length=100, null=True, blank=True, unique=True)
    gateway_payment_id = models.CharField(max_length=100, null=True, blank=True)
    gateway_signature = models.CharField(max_length=255, null=True, blank=True)
    transaction_id = models.CharField(max_length=200, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'payments'
        indexes = [
            models.Index(fields=['gateway_payment_id']),
            models.Index(fields=['payment_status']),
        ]

    def __str__(self):
        return f"Payment {self.id} for order {self.order_id} ({self.payment_status})"

    @property
    def is_settled(self) -> bool:
        return self.payment_status != self.Status.PENDING

from django.db import models
from django.conf import settings


class CODTracking(models.Model):
    """Cash-on-delivery confirmation, delivery attempts and collection"""

    class Status(models.TextChoices):
        CONFIRMED = 'confirmed', 'Confirmed'
        DELIVERY_ATTEMPTED = 'delivery_attempted', 'Delivery attempted'
        COLLECTED = 'collected', 'Collected'

    order = models.OneToOneField('orders.Order', on_delete=models.CASCADE, related_name='cod_tracking')
    cod_amount = models.DecimalField(max_digits=10, decimal_places=2, help_text="Order total at confirmation")
    delivery_instructions = models.TextField(blank=True, default='')
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.CONFIRMED)
    delivery_attempt_count = models.PositiveIntegerField(default=0)
    last_delivery_attempt = models.DateTimeField(null=True, blank=True)
    collection_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    delivery_confirmed_at = models.DateTimeField(null=True, blank=True)
    delivery_person_name = models.CharField(max_length=100, blank=True, default='')
    delivery_person_phone = models.CharField(max_length=20, blank=True, default='')
    delivery_notes = models.TextField(blank=True, default='')
    confirmed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='cod_confirmations', help_text="Admin who confirmed delivery"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'cod_tracking'
        indexes = [
            models.Index(fields=['status']),
        ]

    def __str__(self):
        return f"COD {self.order_id} ({self.status})"

from django.db import models
from django.conf import settings


class OrderStatusHistory(models.Model):
    """Append-only log of status transitions"""
    order = models.ForeignKey('Order', on_delete=models.CASCADE, related_name='status_history')
    previous_status = models.CharField(max_length=20)
    new_status = models.CharField(max_length=20)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='order_status_changes'
    )
    source = models.CharField(
        max_length=30, default='admin',
        help_text="What triggered the change: admin, customer, payment, webhook, cod"
    )
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'order_status_history'
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['order', 'created_at']),
        ]

    def __str__(self):
        return f"{self.order_id}: {self.previous_status} -> {self.new_status}"

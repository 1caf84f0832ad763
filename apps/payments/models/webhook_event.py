from django.db import models


class WebhookEvent(models.Model):
    """
    Processed gateway webhook deliveries.

    A row is written in the same transaction as the event's effect, so a
    redelivered event with the same id is recognised and acknowledged
    without being applied twice.
    """
    event_id = models.CharField(max_length=100, unique=True, help_text="Gateway event id or body digest")
    event_type = models.CharField(max_length=50)
    gateway_order_id = models.CharField(max_length=100, blank=True, default='')
    gateway_payment_id = models.CharField(max_length=100, blank=True, default='')
    outcome = models.CharField(max_length=30, help_text="applied, noop, unmatched or ignored")
    payload = models.JSONField(default=dict)
    request_ip = models.GenericIPAddressField(null=True, blank=True)
    received_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'payment_webhook_events'
        ordering = ['-received_at']
        indexes = [
            models.Index(fields=['event_type']),
            models.Index(fields=['gateway_payment_id']),
            models.Index(fields=['received_at']),
        ]

    def __str__(self):
        return f"{self.event_type} {self.event_id} ({self.outcome})"

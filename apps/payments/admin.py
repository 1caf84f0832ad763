from django.contrib import admin
from .models import Payment, CODTracking, WebhookEvent


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = [
        'order', 'payment_method', 'payment_status', 'amount', 'currency',
        'gateway_order_id', 'gateway_payment_id', 'updated_at'
    ]
    list_filter = ['payment_method', 'payment_status']
    search_fields = ['order__order_number', 'gateway_order_id', 'gateway_payment_id', 'transaction_id']
    readonly_fields = [field.name for field in Payment._meta.fields]


@admin.register(CODTracking)
class CODTrackingAdmin(admin.ModelAdmin):
    list_display = [
        'order', 'status', 'cod_amount', 'collection_amount',
        'delivery_attempt_count', 'delivery_person_name', 'delivery_confirmed_at'
    ]
    list_filter = ['status']
    search_fields = ['order__order_number', 'delivery_person_name']
    readonly_fields = [field.name for field in CODTracking._meta.fields]


@admin.register(WebhookEvent)
class WebhookEventAdmin(admin.ModelAdmin):
    list_display = ['event_id', 'event_type', 'outcome', 'gateway_order_id', 'gateway_payment_id', 'received_at']
    list_filter = ['event_type', 'outcome']
    search_fields = ['event_id', 'gateway_order_id', 'gateway_payment_id']
    readonly_fields = [field.name for field in WebhookEvent._meta.fields]

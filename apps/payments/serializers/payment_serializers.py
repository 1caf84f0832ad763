"""
Request serializers for payment endpoints.
"""
from decimal import Decimal

from rest_framework import serializers


class CreateGatewayPaymentSerializer(serializers.Serializer):
    order_id = serializers.IntegerField(min_value=1)
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    currency = serializers.CharField(max_length=3, required=False, allow_blank=True)


class VerifyGatewayPaymentSerializer(serializers.Serializer):
    order_id = serializers.IntegerField(min_value=1)
    gateway_order_id = serializers.CharField(max_length=100)
    gateway_payment_id = serializers.CharField(max_length=100)
    signature = serializers.CharField(max_length=255)

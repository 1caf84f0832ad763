"""
Serializers for admin status actions.
"""
from rest_framework import serializers

from ..models import Order


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.Status.choices)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True, default='')


class BulkStatusUpdateSerializer(serializers.Serializer):
    order_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1), allow_empty=False, max_length=100
    )
    status = serializers.ChoiceField(choices=Order.Status.choices)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True, default='')

from decimal import Decimal

from rest_framework import serializers


class CODConfirmSerializer(serializers.Serializer):
    order_id = serializers.IntegerField(min_value=1)
    delivery_instructions = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')


class CODDeliveryConfirmSerializer(serializers.Serializer):
    order_id = serializers.IntegerField(min_value=1)
    payment_collected = serializers.BooleanField()
    collection_amount = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True
    )
    delivery_person_name = serializers.CharField(max_length=100)
    delivery_person_phone = serializers.CharField(max_length=20)
    delivery_notes = serializers.CharField(max_length=1000, required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if attrs['payment_collected'] and attrs.get('collection_amount') is None:
            raise serializers.ValidationError(
                {'collection_amount': 'Required when payment_collected is true'}
            )
        return attrs

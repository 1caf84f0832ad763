"""
Order serializers for list, detail, and create operations.
"""
from rest_framework import serializers

from ..models import Order, OrderItem, OrderStatusHistory


class OrderItemSerializer(serializers.ModelSerializer):
    """Serializer for order items"""

    class Meta:
        model = OrderItem
        fields = ['id', 'product', 'product_name', 'quantity', 'unit_price', 'total_price']


class OrderStatusHistorySerializer(serializers.ModelSerializer):
    changed_by = serializers.SerializerMethodField()

    class Meta:
        model = OrderStatusHistory
        fields = ['previous_status', 'new_status', 'changed_by', 'source', 'notes', 'created_at']

    def get_changed_by(self, obj):
        return obj.changed_by.email if obj.changed_by else None


def _payment_summary(order):
    payment = getattr(order, 'payment', None)
    if payment is None:
        return None
    return {
        'payment_status': payment.payment_status,
        'amount': str(payment.amount),
        'currency': payment.currency,
        'gateway_order_id': payment.gateway_order_id,
        'gateway_payment_id': payment.gateway_payment_id,
        'transaction_id': payment.transaction_id,
    }


class OrderSerializer(serializers.ModelSerializer):
    """Full order representation for the order owner"""

    items = OrderItemSerializer(many=True, read_only=True)
    shipping_address = serializers.SerializerMethodField()
    payment = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'status', 'payment_method', 'payment_status',
            'subtotal_amount', 'discount_amount', 'shipping_amount', 'tax_amount', 'total_amount',
            'coupon_code', 'shipping_address', 'notes', 'items', 'payment',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_shipping_address(self, obj):
        return obj.shipping_address.as_dict()

    def get_payment(self, obj):
        return _payment_summary(obj)


class OrderListSerializer(serializers.ModelSerializer):
    """Compact order representation for lists"""

    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'status', 'payment_method', 'payment_status',
            'total_amount', 'item_count', 'created_at',
        ]

    def get_item_count(self, obj):
        return sum(item.quantity for item in obj.items.all())


class AdminOrderSerializer(OrderListSerializer):
    """Order list row for admins, with the customer attached"""

    customer_email = serializers.EmailField(source='user.email', read_only=True)
    customer_name = serializers.CharField(source='user.full_name', read_only=True)

    class Meta(OrderListSerializer.Meta):
        fields = OrderListSerializer.Meta.fields + [
            'customer_email', 'customer_name', 'subtotal_amount', 'discount_amount',
            'shipping_amount', 'tax_amount', 'coupon_code', 'updated_at',
        ]


class AdminOrderDetailSerializer(OrderSerializer):
    customer_email = serializers.EmailField(source='user.email', read_only=True)
    customer_name = serializers.CharField(source='user.full_name', read_only=True)
    status_history = OrderStatusHistorySerializer(many=True, read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ['customer_email', 'customer_name', 'status_history']
        read_only_fields = fields


class OrderItemInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1, max_value=1000)


class OrderCreateSerializer(serializers.Serializer):
    """Validates the cart submitted for order creation"""

    items = OrderItemInputSerializer(many=True, allow_empty=False)
    shipping_address_id = serializers.IntegerField(min_value=1)
    payment_method = serializers.ChoiceField(choices=Order.PaymentMethod.choices)
    coupon_code = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True, allow_null=True)

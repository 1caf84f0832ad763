"""
Order creation and query views.
"""
import logging

from rest_framework import status
from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated

from apps.common.exceptions import ValidationFailed
from apps.common.utils import success_response, page_params, paginate
from ..serializers import OrderSerializer, OrderCreateSerializer, OrderListSerializer
from ..services import OrderService

logger = logging.getLogger(__name__)


class OrderListCreateView(APIView):
    """Place an order, or list the caller's orders"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        filters = {
            'status': request.GET.get('status', ''),
            'payment_status': request.GET.get('payment_status', ''),
        }
        page, page_size = page_params(request)
        orders, page_info = paginate(OrderService.get_user_orders(request.user, filters), page, page_size)

        return success_response({
            'list': OrderListSerializer(orders, many=True).data,
            'page': page_info,
        }, 'Orders retrieved successfully')

    def post(self, request):
        serializer = OrderCreateSerializer(data=request.data)
        if not serializer.is_valid():
            logger.info(f"Order creation rejected for user {request.user.id}: {serializer.errors}")
            raise ValidationFailed('Invalid order data', errors=serializer.errors)

        order = OrderService.create_order(request.user, serializer.validated_data)
        order = OrderService.get_order_detail(request.user, order.id)

        return success_response(
            OrderSerializer(order).data,
            'Order created successfully',
            status_code=status.HTTP_201_CREATED,
        )


class OrderDetailView(APIView):
    """Single order owned by the caller"""
    permission_classes = [IsAuthenticated]

    def get(self, request, order_id):
        order = OrderService.get_order_detail(request.user, order_id)
        return success_response(OrderSerializer(order).data, 'Order retrieved successfully')

"""
Admin order management views.
"""
from rest_framework.views import APIView

from apps.common.exceptions import ValidationFailed
from apps.common.permissions import IsAdminRole
from apps.common.utils import success_response, page_params, paginate
from ..serializers import (
    AdminOrderSerializer, AdminOrderDetailSerializer,
    OrderStatusUpdateSerializer, BulkStatusUpdateSerializer,
)
from ..services import AdminOrderQueryService, OrderStatusService

FILTER_PARAMS = (
    'status', 'payment_method', 'payment_status', 'order_number', 'customer_email', 'search',
    'start_date', 'end_date', 'min_amount', 'max_amount', 'sort_by', 'sort_order',
)


class AdminOrderListView(APIView):
    """Filterable, sortable order list with aggregate statistics"""
    permission_classes = [IsAdminRole]

    def get(self, request):
        params = {key: request.GET.get(key, '') for key in FILTER_PARAMS}
        queryset, stats = AdminOrderQueryService.search(params)

        page, page_size = page_params(request)
        orders, page_info = paginate(queryset, page, page_size)

        return success_response({
            'list': AdminOrderSerializer(orders, many=True).data,
            'page': page_info,
            'statistics': stats,
        }, 'Orders retrieved successfully')


class AdminOrderDetailView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request, order_id):
        detail = AdminOrderQueryService.get_detail(order_id)
        data = AdminOrderDetailSerializer(detail['order']).data
        data['customer_stats'] = detail['customer_stats']
        return success_response(data, 'Order retrieved successfully')


class AdminOrderStatusView(APIView):
    """Move one order to a new status"""
    permission_classes = [IsAdminRole]

    def put(self, request, order_id):
        serializer = OrderStatusUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            raise ValidationFailed('Invalid status update', errors=serializer.errors)

        order = OrderStatusService.update_status(
            order_id,
            serializer.validated_data['status'],
            actor=request.user,
            notes=serializer.validated_data['notes'],
        )
        return success_response({
            'id': order.id,
            'order_number': order.order_number,
            'status': order.status,
            'payment_status': order.payment_status,
        }, 'Order status updated successfully')


class AdminBulkStatusView(APIView):
    """Move many orders to the same status, reporting per-order outcomes"""
    permission_classes = [IsAdminRole]

    def put(self, request):
        serializer = BulkStatusUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            raise ValidationFailed('Invalid bulk status update', errors=serializer.errors)

        results = OrderStatusService.bulk_update_status(
            serializer.validated_data['order_ids'],
            serializer.validated_data['status'],
            actor=request.user,
            notes=serializer.validated_data['notes'],
        )
        succeeded = sum(1 for result in results if result.success)
        return success_response({
            'results': [result.as_dict() for result in results],
            'summary': {
                'total': len(results),
                'succeeded': succeeded,
                'failed': len(results) - succeeded,
            },
        }, f'{succeeded} of {len(results)} orders updated')

"""
Cash-on-delivery endpoints.
"""
from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated

from apps.common.exceptions import ValidationFailed
from apps.common.permissions import IsAdminRole
from apps.common.utils import success_response, page_params, paginate
from ..serializers import CODConfirmSerializer, CODDeliveryConfirmSerializer
from ..services import CODService


class CODConfirmView(APIView):
    """Confirm a placed order for cash on delivery"""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = CODConfirmSerializer(data=request.data)
        if not serializer.is_valid():
            raise ValidationFailed('Invalid COD request', errors=serializer.errors)

        result = CODService.confirm(
            request.user,
            serializer.validated_data['order_id'],
            serializer.validated_data['delivery_instructions'],
        )
        order = result['order']
        return success_response({
            'order': {
                'id': order.id,
                'order_number': order.order_number,
                'status': order.status,
                'payment_status': order.payment_status,
                'payment_method': order.payment_method,
                'total_amount': str(order.total_amount),
                'cod_details': result['cod_details'],
            },
        }, 'Cash on Delivery order confirmed successfully')


class CODDeliveryConfirmView(APIView):
    """Record a delivery visit and, when paid, the cash collected"""
    permission_classes = [IsAdminRole]

    def post(self, request):
        serializer = CODDeliveryConfirmSerializer(data=request.data)
        if not serializer.is_valid():
            raise ValidationFailed('Invalid delivery confirmation', errors=serializer.errors)

        data = serializer.validated_data
        result = CODService.confirm_delivery(
            request.user,
            data['order_id'],
            data['payment_collected'],
            collection_amount=data.get('collection_amount'),
            delivery_person_name=data['delivery_person_name'],
            delivery_person_phone=data['delivery_person_phone'],
            delivery_notes=data['delivery_notes'],
        )
        order = result['order']
        return success_response({
            'order': {
                'id': order.id,
                'order_number': order.order_number,
                'status': order.status,
                'payment_status': order.payment_status,
            },
            'tracking': result['tracking'],
        }, result['message'])


class CODTrackingView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request, order_id):
        return success_response(CODService.get_tracking(order_id), 'COD tracking retrieved successfully')


class CODPendingView(APIView):
    """COD orders still waiting for cash collection"""
    permission_classes = [IsAdminRole]

    def get(self, request):
        queryset, summary = CODService.pending_collections()
        page, page_size = page_params(request)
        orders, page_info = paginate(queryset, page, page_size)

        rows = []
        for order in orders:
            tracking = getattr(order, 'cod_tracking', None)
            rows.append({
                'id': order.id,
                'order_number': order.order_number,
                'status': order.status,
                'total_amount': str(order.total_amount),
                'customer_email': order.user.email,
                'city': order.shipping_address.city,
                'state': order.shipping_address.state,
                'cod_status': tracking.status if tracking else None,
                'delivery_attempt_count': tracking.delivery_attempt_count if tracking else 0,
                'created_at': order.created_at,
            })

        return success_response({'list': rows, 'page': page_info, 'summary': summary},
                                'Pending COD collections retrieved successfully')

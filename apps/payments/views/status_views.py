from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated

from apps.common.utils import success_response
from ..services import PaymentStatusService, build_gateway_client


class PaymentStatusView(APIView):
    """Payment and COD status for one of the caller's orders"""
    permission_classes = [IsAuthenticated]

    def get(self, request, order_id):
        service = PaymentStatusService(build_gateway_client())
        return success_response(service.get_status(request.user, order_id), 'Payment status retrieved successfully')

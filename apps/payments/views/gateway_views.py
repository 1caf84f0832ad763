"""
Online payment endpoints: create a gateway intent, verify the checkout result.
"""
import logging

from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated

from apps.common.exceptions import ValidationFailed
from apps.common.utils import success_response
from apps.orders.serializers import OrderSerializer
from ..serializers import CreateGatewayPaymentSerializer, VerifyGatewayPaymentSerializer
from ..services import GatewayPaymentService, build_gateway_client

logger = logging.getLogger(__name__)


class CreateGatewayPaymentView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = CreateGatewayPaymentSerializer(data=request.data)
        if not serializer.is_valid():
            raise ValidationFailed('Invalid payment request', errors=serializer.errors)

        data = serializer.validated_data
        service = GatewayPaymentService(build_gateway_client())
        intent = service.create_intent(
            request.user, data['order_id'], data['amount'], data.get('currency') or None
        )
        return success_response(intent, 'Payment order created successfully')


class VerifyGatewayPaymentView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = VerifyGatewayPaymentSerializer(data=request.data)
        if not serializer.is_valid():
            raise ValidationFailed('Invalid verification request', errors=serializer.errors)

        data = serializer.validated_data
        service = GatewayPaymentService(build_gateway_client())
        result = service.verify_payment(
            request.user,
            data['order_id'],
            data['gateway_order_id'],
            data['gateway_payment_id'],
            data['signature'],
        )
        message = 'Payment already verified' if result['already_processed'] else 'Payment verified successfully'
        return success_response({
            'order': OrderSerializer(result['order']).data,
            'payment_details': result['payment_details'],
            'already_processed': result['already_processed'],
        }, message)

"""
Coupon preview endpoint.
"""
from rest_framework.views import APIView
from rest_framework.permissions import IsAuthenticated

from apps.common.exceptions import ValidationFailed
from apps.common.utils import success_response
from ..serializers import CouponValidateSerializer
from ..services import CouponService


class ValidateCouponView(APIView):
    """Preview the discount a coupon grants for a cart subtotal without redeeming it"""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = CouponValidateSerializer(data=request.data)
        if not serializer.is_valid():
            raise ValidationFailed('Invalid coupon request', errors=serializer.errors)

        quote = CouponService.validate(
            serializer.validated_data['code'],
            serializer.validated_data['subtotal'],
        )
        return success_response(quote.as_dict(), 'Coupon is valid')

"""
Gateway webhook endpoint.
"""
import logging

from django.conf import settings
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from apps.common.utils import get_client_ip
from ..services import WebhookService

logger = logging.getLogger(__name__)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def gateway_webhook(request):
    """Signed server-to-server event notifications from the payment gateway"""
    config = settings.PAYMENT_GATEWAY
    result = WebhookService.handle(
        request.body,
        request.headers.get(config['WEBHOOK_SIGNATURE_HEADER']),
        event_id=request.headers.get(config['WEBHOOK_EVENT_ID_HEADER']),
        request_ip=get_client_ip(request) or None,
    )
    return Response(result, status=200)

"""
Error handling middleware for the API surface
"""
import logging

from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

from .utils import get_client_ip

logger = logging.getLogger(__name__)


class ErrorHandlingMiddleware(MiddlewareMixin):
    """
    Renders unhandled exceptions on API paths as the standard error envelope
    without exposing internal details.
    """

    def process_exception(self, request, exception):
        logger.error(
            f"Unhandled exception in {request.method} {request.path} from {get_client_ip(request)}: {exception}",
            exc_info=True
        )

        if request.path.startswith('/api/'):
            return JsonResponse({
                'code': 500,
                'msg': 'Internal server error',
                'error_code': 'transactional_failure',
            }, status=500)

        return None  # Let Django handle non-API errors normally

"""
Domain error taxonomy and the DRF exception handler that renders it.

Every service failure is an ``APIException`` subclass so that raising it
inside ``transaction.atomic`` rolls the unit of work back and the view layer
still produces the standard ``{code, msg, errors}`` envelope.
"""
import logging
from decimal import Decimal

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)
security_logger = logging.getLogger('security')


class ServiceError(APIException):
    """Base class for all settlement errors."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be processed'
    default_code = 'service_error'

    def __init__(self, detail=None, code=None, **extra):
        super().__init__(detail=detail, code=code)
        self.extra = extra

    @property
    def message(self) -> str:
        return str(self.detail)


class ValidationFailed(ServiceError):
    default_detail = 'Validation failed'
    default_code = 'validation_error'

    def __init__(self, detail=None, errors=None):
        super().__init__(detail=detail)
        self.errors = errors or {}


class DomainConflict(ServiceError):
    default_detail = 'Request conflicts with the current state'
    default_code = 'domain_conflict'


class InsufficientStock(DomainConflict):
    default_code = 'insufficient_stock'

    def __init__(self, product_name, available, requested):
        super().__init__(
            f'Insufficient stock for {product_name}. Available: {available}, Requested: {requested}',
            product=product_name, available=available, requested=requested,
        )


class ProductUnavailable(DomainConflict):
    default_code = 'product_unavailable'


class InvalidCoupon(DomainConflict):
    default_detail = 'Invalid coupon code'
    default_code = 'invalid_coupon'


class CouponLimitExceeded(InvalidCoupon):
    default_detail = 'Coupon usage limit exceeded'
    default_code = 'coupon_limit_exceeded'


class MinimumAmountNotMet(InvalidCoupon):
    default_code = 'minimum_amount_not_met'


class InvalidStatusTransition(DomainConflict):
    default_code = 'invalid_status_transition'

    def __init__(self, current, target, allowed):
        allowed = sorted(allowed)
        valid = ', '.join(allowed) if allowed else 'none'
        super().__init__(
            f'Invalid status transition from {current} to {target}. Valid transitions: {valid}',
            current_status=current, requested_status=target, valid_transitions=allowed,
        )
        self.allowed = allowed


class AmountMismatch(DomainConflict):
    default_code = 'amount_mismatch'

    def __init__(self, expected, received):
        super().__init__(
            'Payment amount does not match order total',
            expected=str(expected), received=str(received),
        )


class PaymentNotPending(DomainConflict):
    default_detail = 'Payment is not pending'
    default_code = 'payment_not_pending'


class CODNotEligible(DomainConflict):
    default_detail = 'Order is not eligible for cash on delivery'
    default_code = 'cod_not_eligible'


class CollectionAmountMismatch(DomainConflict):
    default_code = 'collection_amount_mismatch'

    def __init__(self, expected, collected):
        super().__init__(
            f'Collection amount mismatch. Expected: {expected}, Collected: {collected}',
            expected=str(expected), collected=str(collected),
        )


class SecurityViolation(ServiceError):
    """Signature or authenticity failure. Always written to the security log."""
    default_detail = 'Security check failed'
    default_code = 'security_violation'

    def __init__(self, detail=None, **context):
        super().__init__(detail=detail, **context)
        security_logger.warning(f"{self.default_code}: {self.detail} {context}")


class SignatureVerificationFailed(SecurityViolation):
    default_detail = 'Payment signature verification failed'
    default_code = 'signature_verification_failed'


class InvalidSignature(SecurityViolation):
    default_detail = 'Invalid webhook signature'
    default_code = 'invalid_signature'


class ResourceNotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found'
    default_code = 'not_found'


class OrderNotFound(ResourceNotFound):
    default_detail = 'Order not found'
    default_code = 'order_not_found'


class AddressNotFound(ResourceNotFound):
    default_detail = 'Shipping address not found'
    default_code = 'address_not_found'


class PaymentNotFound(ResourceNotFound):
    default_detail = 'Payment record not found'
    default_code = 'payment_not_found'


class GatewayError(ServiceError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'Payment gateway request failed'
    default_code = 'gateway_error'


class TransactionalFailure(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Internal server error'
    default_code = 'transactional_failure'


def _jsonable(value):
    if isinstance(value, Decimal):
        return str(value)
    return value


def custom_exception_handler(exc, context):
    """
    Custom exception handler that returns consistent error responses
    """
    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is None:
        return None

    if response.status_code >= 500:
        logger.error(f"API Exception: {exc}", exc_info=True)
    else:
        logger.info(f"API Exception: {exc}")

    custom_response_data = {
        'code': response.status_code,
        'msg': 'An error occurred',
        'errors': response.data,
    }

    if isinstance(exc, ServiceError):
        custom_response_data['msg'] = exc.message
        custom_response_data['error_code'] = exc.default_code
        custom_response_data['errors'] = getattr(exc, 'errors', None) or {
            key: _jsonable(value) for key, value in exc.extra.items()
        }
    elif response.status_code == status.HTTP_400_BAD_REQUEST:
        custom_response_data['msg'] = 'Validation error'
    elif response.status_code == status.HTTP_401_UNAUTHORIZED:
        custom_response_data['msg'] = 'Authentication required'
    elif response.status_code == status.HTTP_403_FORBIDDEN:
        custom_response_data['msg'] = 'Permission denied'
    elif response.status_code == status.HTTP_404_NOT_FOUND:
        custom_response_data['msg'] = 'Resource not found'
    elif response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        custom_response_data['msg'] = 'Method not allowed'

    if response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
        custom_response_data['msg'] = 'Internal server error'
        # Don't expose internal errors to non-staff callers
        request = context.get('request')
        if request is None or not getattr(request.user, 'is_staff', False):
            custom_response_data['errors'] = {'detail': 'Internal server error'}

    response.data = custom_response_data
    return response

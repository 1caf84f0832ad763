"""
Common utility functions for API responses and money handling
"""
from decimal import Decimal, ROUND_HALF_UP

from rest_framework.response import Response
from rest_framework import status

TWO_PLACES = Decimal('0.01')


def quantize_money(value) -> Decimal:
    """Round a monetary value to two decimal places, half up."""
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def get_client_ip(request) -> str:
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', '')


def success_response(data=None, message="Success", status_code=status.HTTP_200_OK):
    """
    Standard success response format
    """
    response_data = {
        "code": status_code,
        "msg": message,
        "data": data
    }
    return Response(response_data, status=status_code)


def page_params(request, default_size=20, max_size=100):
    """Read ``page``/``page_size`` query params, clamped to sane bounds."""
    try:
        page = max(int(request.GET.get('page', 1)), 1)
    except (TypeError, ValueError):
        page = 1
    try:
        page_size = min(max(int(request.GET.get('page_size', default_size)), 1), max_size)
    except (TypeError, ValueError):
        page_size = default_size
    return page, page_size


def paginate(queryset, page, page_size):
    """
    Slice a queryset and return ``(items, page_info)`` in the list envelope shape
    """
    from django.core.paginator import Paginator, EmptyPage

    paginator = Paginator(queryset, page_size)
    try:
        current = paginator.page(page)
    except EmptyPage:
        current = paginator.page(paginator.num_pages or 1)
    return list(current.object_list), {
        "page": current.number,
        "pageSize": page_size,
        "total": paginator.count,
        "totalPages": paginator.num_pages,
    }

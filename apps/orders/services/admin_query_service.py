"""
Admin order search with aggregate statistics.
"""
from datetime import datetime, time as dt_time
from decimal import Decimal, InvalidOperation
from typing import Dict

from django.db.models import Avg, Count, Q, Sum
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from apps.common.exceptions import OrderNotFound, ValidationFailed
from apps.common.utils import quantize_money
from ..models import Order

SORTABLE_FIELDS = ('created_at', 'updated_at', 'order_number', 'status', 'total_amount')


def _parse_boundary(value: str, end_of_day: bool):
    parsed = parse_datetime(value)
    if parsed is None:
        day = parse_date(value)
        if day is None:
            raise ValidationFailed('Invalid date filter', errors={'date': [f"Unrecognised date '{value}'"]})
        parsed = datetime.combine(day, dt_time.max if end_of_day else dt_time.min)
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def _parse_amount(value: str, field: str) -> Decimal:
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError):
        amount = None
    if amount is None or not amount.is_finite():
        raise ValidationFailed('Invalid amount filter', errors={field: ['Must be a number']})
    return amount


class AdminOrderQueryService:
    """Filtering, sorting and statistics for the admin order list"""

    @staticmethod
    def filter_queryset(params: Dict):
        queryset = Order.objects.select_related('user', 'shipping_address', 'payment')

        for field in ('status', 'payment_method', 'payment_status'):
            value = params.get(field)
            if value:
                queryset = queryset.filter(**{field: value})

        if params.get('order_number'):
            queryset = queryset.filter(order_number__icontains=params['order_number'])

        if params.get('customer_email'):
            queryset = queryset.filter(user__email__icontains=params['customer_email'])

        search = params.get('search')
        if search:
            queryset = queryset.filter(
                Q(order_number__icontains=search)
                | Q(user__email__icontains=search)
                | Q(user__first_name__icontains=search)
                | Q(user__last_name__icontains=search)
            )

        if params.get('start_date'):
            queryset = queryset.filter(created_at__gte=_parse_boundary(params['start_date'], end_of_day=False))
        if params.get('end_date'):
            queryset = queryset.filter(created_at__lte=_parse_boundary(params['end_date'], end_of_day=True))

        if params.get('min_amount'):
            queryset = queryset.filter(total_amount__gte=_parse_amount(params['min_amount'], 'min_amount'))
        if params.get('max_amount'):
            queryset = queryset.filter(total_amount__lte=_parse_amount(params['max_amount'], 'max_amount'))

        return queryset

    @staticmethod
    def sort_queryset(queryset, sort_by: str = None, sort_order: str = None):
        field = sort_by if sort_by in SORTABLE_FIELDS else 'created_at'
        prefix = '' if (sort_order or '').lower() == 'asc' else '-'
        return queryset.order_by(f"{prefix}{field}", f"{prefix}id")

    @staticmethod
    def statistics(queryset) -> Dict:
        totals = queryset.aggregate(
            total_orders=Count('id'),
            pending_payments=Count('id', filter=Q(payment_status=Order.PaymentStatus.PENDING)),
            total_revenue=Sum('total_amount', filter=Q(payment_status=Order.PaymentStatus.PAID)),
            average_order_value=Avg('total_amount'),
        )
        breakdown = {status: 0 for status in Order.Status.values}
        for row in queryset.order_by().values('status').annotate(count=Count('id')):
            breakdown[row['status']] = row['count']

        return {
            'total_orders': totals['total_orders'],
            'status_breakdown': breakdown,
            'pending_payments': totals['pending_payments'],
            'total_revenue': str(quantize_money(totals['total_revenue'] or 0)),
            'average_order_value': str(quantize_money(totals['average_order_value'] or 0)),
        }

    @staticmethod
    def search(params: Dict):
        """Return ``(sorted_queryset, statistics)`` for the given query params"""
        queryset = AdminOrderQueryService.filter_queryset(params)
        stats = AdminOrderQueryService.statistics(queryset)
        return AdminOrderQueryService.sort_queryset(queryset, params.get('sort_by'), params.get('sort_order')), stats

    @staticmethod
    def get_detail(order_id) -> Dict:
        """Order with its history and a summary of the customer's order activity"""
        order = (
            Order.objects.select_related('user', 'shipping_address', 'payment')
            .prefetch_related('items', 'status_history__changed_by')
            .filter(id=order_id)
            .first()
        )
        if order is None:
            raise OrderNotFound()

        customer_orders = Order.objects.filter(user=order.user)
        customer = customer_orders.aggregate(
            total_orders=Count('id'),
            total_spent=Sum('total_amount', filter=Q(payment_status=Order.PaymentStatus.PAID)),
        )
        return {
            'order': order,
            'customer_stats': {
                'total_orders': customer['total_orders'],
                'total_spent': str(quantize_money(customer['total_spent'] or 0)),
            },
        }

from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.coupons.models import Coupon

# code, description, type, value, minimum, maximum discount, usage limit, days valid
SAMPLE_COUPONS = [
    ('WELCOME10', '10% off for new customers', 'percentage', '10.00', '100.00', '500.00', 100, 30),
    ('SAVE50', 'Flat ₹50 off on orders above ₹300', 'fixed', '50.00', '300.00', None, 200, 60),
    ('BEAUTY20', '20% off on all beauty products', 'percentage', '20.00', '200.00', '1000.00', 50, 45),
    ('FLAT100', 'Flat ₹100 off on orders above ₹500', 'fixed', '100.00', '500.00', None, 150, 90),
    ('MEGA25', '25% off - Limited time offer', 'percentage', '25.00', '400.00', '2000.00', 25, 15),
]


class Command(BaseCommand):
    help = 'Create the sample promotional coupons'

    def add_arguments(self, parser):
        parser.add_argument(
            '--reset',
            action='store_true',
            help='Reset usage counters and validity windows of existing sample coupons',
        )

    def handle(self, *args, **options):
        now = timezone.now()
        created_count = 0

        for code, description, discount_type, value, minimum, maximum, limit, days in SAMPLE_COUPONS:
            defaults = {
                'description': description,
                'discount_type': discount_type,
                'discount_value': Decimal(value),
                'minimum_amount': Decimal(minimum),
                'maximum_discount': Decimal(maximum) if maximum else None,
                'usage_limit': limit,
                'is_active': True,
                'valid_from': now,
                'valid_until': now + timedelta(days=days),
            }
            if options['reset']:
                defaults['used_count'] = 0
                coupon, created = Coupon.objects.update_or_create(code=code, defaults=defaults)
            else:
                coupon, created = Coupon.objects.get_or_create(code=code, defaults=defaults)

            if created:
                created_count += 1
                self.stdout.write(f'Created coupon {coupon.code}')

        self.stdout.write(
            self.style.SUCCESS(f'Sample coupons ready ({created_count} created)')
        )

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('orders', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('payment_method', models.CharField(help_text='Mirrors Order.payment_method', max_length=20)),
                ('payment_status', models.CharField(choices=[('pending', 'Pending'), ('completed', 'Completed'), ('failed', 'Failed'), ('refunded', 'Refunded')], default='pending', max_length=20)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10)),
                ('currency', models.CharField(default='INR', max_length=3)),
                ('gateway_order_id', models.CharField(blank=True, max_length=100, null=True, unique=True)),
                ('gateway_payment_id', models.CharField(blank=True, max_length=100, null=True)),
                ('gateway_signature', models.CharField(blank=True, max_length=255, null=True)),
                ('transaction_id', models.CharField(blank=True, max_length=200, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('order', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='payment', to='orders.order')),
            ],
            options={
                'db_table': 'payments',
                'indexes': [
                    models.Index(fields=['gateway_payment_id'], name='payments_gateway_e04247_idx'),
                    models.Index(fields=['payment_status'], name='payments_payment_bbdde9_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='CODTracking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('cod_amount', models.DecimalField(decimal_places=2, help_text='Order total at confirmation', max_digits=10)),
                ('delivery_instructions', models.TextField(blank=True, default='')),
                ('status', models.CharField(choices=[('confirmed', 'Confirmed'), ('delivery_attempted', 'Delivery attempted'), ('collected', 'Collected')], default='confirmed', max_length=20)),
                ('delivery_attempt_count', models.PositiveIntegerField(default=0)),
                ('last_delivery_attempt', models.DateTimeField(blank=True, null=True)),
                ('collection_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('delivery_confirmed_at', models.DateTimeField(blank=True, null=True)),
                ('delivery_person_name', models.CharField(blank=True, default='', max_length=100)),
                ('delivery_person_phone', models.CharField(blank=True, default='', max_length=20)),
                ('delivery_notes', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('confirmed_by', models.ForeignKey(blank=True, help_text='Admin who confirmed delivery', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='cod_confirmations', to=settings.AUTH_USER_MODEL)),
                ('order', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='cod_tracking', to='orders.order')),
            ],
            options={
                'db_table': 'cod_tracking',
                'indexes': [
                    models.Index(fields=['status'], name='cod_trackin_status_3a71ee_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='WebhookEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('event_id', models.CharField(help_text='Gateway event id or body digest', max_length=100, unique=True)),
                ('event_type', models.CharField(max_length=50)),
                ('gateway_order_id', models.CharField(blank=True, default='', max_length=100)),
                ('gateway_payment_id', models.CharField(blank=True, default='', max_length=100)),
                ('outcome', models.CharField(help_text='applied, noop, unmatched or ignored', max_length=30)),
                ('payload', models.JSONField(default=dict)),
                ('request_ip', models.GenericIPAddressField(blank=True, null=True)),
                ('received_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'payment_webhook_events',
                'ordering': ['-received_at'],
                'indexes': [
                    models.Index(fields=['event_type'], name='payment_web_event_t_722d77_idx'),
                    models.Index(fields=['gateway_payment_id'], name='payment_web_gateway_92f19d_idx'),
                    models.Index(fields=['received_at'], name='payment_web_receive_658b4b_idx'),
                ],
            },
        ),
    ]

# Generated manually for the TeamPay schema

from django.db import migrations, models
import django.core.validators
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('teams', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='SubscriptionPlan',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(help_text='Plan id sent by clients (e.g. free, pro-monthly)', max_length=50, unique=True, verbose_name='System code')),
                ('display_name', models.CharField(max_length=100, verbose_name='Display name')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('price', models.DecimalField(decimal_places=2, default=0, max_digits=10, verbose_name='Price')),
                ('currency', models.CharField(default='RUB', max_length=3, verbose_name='Currency')),
                ('duration_days', models.PositiveIntegerField(default=30, verbose_name='Duration (days)')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
            ],
            options={
                'verbose_name': 'Subscription plan',
                'verbose_name_plural': 'Subscription plans',
                'db_table': 'subscription_plans',
                'ordering': ['price'],
            },
        ),
        migrations.CreateModel(
            name='Coupon',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=50, unique=True, verbose_name='Code')),
                ('percent_off', models.PositiveSmallIntegerField(blank=True, null=True, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(100)], verbose_name='Percent off')),
                ('amount_off', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True, verbose_name='Amount off')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('valid_until', models.DateTimeField(blank=True, null=True, verbose_name='Valid until')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created at')),
            ],
            options={
                'verbose_name': 'Coupon',
                'verbose_name_plural': 'Coupons',
                'db_table': 'coupons',
            },
        ),
        migrations.CreateModel(
            name='Subscription',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(default='default', max_length=50, verbose_name='Name')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('active', 'Active'), ('cancelled', 'Cancelled'), ('expired', 'Expired')], default='pending', max_length=20, verbose_name='Status')),
                ('provider_id', models.CharField(blank=True, db_index=True, help_text='Payment that created (or last swapped) the subscription', max_length=255, verbose_name='YooKassa payment id')),
                ('payment_method_id', models.CharField(blank=True, help_text='Saved payment method for renewals and swaps', max_length=255, verbose_name='YooKassa payment method id')),
                ('current_period_start', models.DateTimeField(blank=True, null=True, verbose_name='Period start')),
                ('current_period_end', models.DateTimeField(blank=True, null=True, verbose_name='Period end')),
                ('ends_at', models.DateTimeField(blank=True, help_text='End of the grace period after cancellation', null=True, verbose_name='Ends at')),
                ('auto_renew', models.BooleanField(default=True, verbose_name='Auto renew')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('coupon', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='subscriptions', to='billing.coupon', verbose_name='Coupon')),
                ('plan', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='subscriptions', to='billing.subscriptionplan', verbose_name='Plan')),
                ('team', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='subscriptions', to='teams.team', verbose_name='Team')),
            ],
            options={
                'verbose_name': 'Subscription',
                'verbose_name_plural': 'Subscriptions',
                'db_table': 'subscriptions',
                'ordering': ['-created_at'],
            },
        ),
        migrations.AddConstraint(
            model_name='subscription',
            constraint=models.UniqueConstraint(condition=models.Q(('status', 'expired'), _negated=True), fields=('team',), name='one_live_subscription_per_team'),
        ),
        migrations.CreateModel(
            name='WebhookLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('event_id', models.CharField(max_length=255, unique=True, verbose_name='Idempotency key')),
                ('event_type', models.CharField(max_length=100, verbose_name='Event type')),
                ('payment_id', models.CharField(blank=True, db_index=True, max_length=255, verbose_name='Payment id')),
                ('status', models.CharField(choices=[('RECEIVED', 'Received'), ('PROCESSED', 'Processed'), ('IGNORED', 'Ignored')], default='RECEIVED', max_length=20, verbose_name='Status')),
                ('client_ip', models.GenericIPAddressField(blank=True, null=True, verbose_name='Client IP')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Received at')),
                ('processed_at', models.DateTimeField(blank=True, null=True, verbose_name='Processed at')),
            ],
            options={
                'verbose_name': 'Webhook log',
                'verbose_name_plural': 'Webhook logs',
                'db_table': 'billing_webhook_logs',
                'ordering': ['-created_at'],
            },
        ),
    ]

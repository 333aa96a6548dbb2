# Generated manually for the TeamPay schema

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    dependencies = [
        ('billing', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='subscription',
            name='pending_plan',
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='+', to='billing.subscriptionplan', verbose_name='Pending plan'),
        ),
        migrations.AddField(
            model_name='subscription',
            name='pending_provider_id',
            field=models.CharField(blank=True, db_index=True, help_text='Swap payment the webhook has not confirmed yet', max_length=255, verbose_name='Pending YooKassa payment id'),
        ),
        migrations.AddField(
            model_name='subscription',
            name='pending_since',
            field=models.DateTimeField(blank=True, null=True, verbose_name='Pending since'),
        ),
    ]

import django.db.models.deletion
import simple_history.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Item',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('sku', models.CharField(help_text='Stock Keeping Unit', max_length=100, unique=True)),
                ('name', models.CharField(help_text='Item name', max_length=255)),
                ('barcode', models.CharField(blank=True, help_text='Scannable barcode (EAN/UPC or internal)', max_length=100, null=True, unique=True)),
                ('description', models.TextField(blank=True, help_text='General description')),
                ('is_active', models.BooleanField(default=True, help_text='Inactive items are hidden from selections')),
            ],
            options={
                'ordering': ['sku'],
                'indexes': [
                    models.Index(fields=['name'], name='items_item_name_1c746e_idx'),
                    models.Index(fields=['is_active'], name='items_item_is_acti_391f0d_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='HistoricalItem',
            fields=[
                ('id', models.BigIntegerField(auto_created=True, blank=True, db_index=True, verbose_name='ID')),
                ('created_at', models.DateTimeField(blank=True, editable=False)),
                ('updated_at', models.DateTimeField(blank=True, editable=False)),
                ('sku', models.CharField(db_index=True, help_text='Stock Keeping Unit', max_length=100)),
                ('name', models.CharField(help_text='Item name', max_length=255)),
                ('barcode', models.CharField(blank=True, db_index=True, help_text='Scannable barcode (EAN/UPC or internal)', max_length=100, null=True)),
                ('description', models.TextField(blank=True, help_text='General description')),
                ('is_active', models.BooleanField(default=True, help_text='Inactive items are hidden from selections')),
                ('history_id', models.AutoField(primary_key=True, serialize=False)),
                ('history_date', models.DateTimeField(db_index=True)),
                ('history_change_reason', models.CharField(max_length=100, null=True)),
                ('history_type', models.CharField(choices=[('+', 'Created'), ('~', 'Changed'), ('-', 'Deleted')], max_length=1)),
                ('history_user', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'historical item',
                'verbose_name_plural': 'historical items',
                'ordering': ('-history_date', '-history_id'),
                'get_latest_by': ('history_date', 'history_id'),
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
    ]

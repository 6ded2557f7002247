import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('items', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Location',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('code', models.CharField(help_text="Short code (e.g., 'MAIN', 'STORE1')", max_length=20, unique=True)),
                ('name', models.CharField(help_text="Location name (e.g., 'Main Warehouse')", max_length=100)),
                ('is_active', models.BooleanField(default=True, help_text='Inactive locations are hidden from selections')),
                ('notes', models.TextField(blank=True, help_text='Notes about this location')),
            ],
            options={
                'ordering': ['code'],
                'indexes': [models.Index(fields=['is_active'], name='warehousing_is_acti_4eeb45_idx')],
            },
        ),
        migrations.CreateModel(
            name='Bin',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('code', models.CharField(help_text="Bin identifier (e.g., 'A-01-01')", max_length=50)),
                ('description', models.CharField(blank=True, max_length=255)),
                ('is_active', models.BooleanField(default=True, help_text='Inactive bins are hidden from selections')),
                ('location', models.ForeignKey(help_text='Location this bin is in', on_delete=django.db.models.deletion.CASCADE, related_name='bins', to='warehousing.location')),
            ],
            options={
                'ordering': ['location', 'code'],
                'indexes': [models.Index(fields=['location', 'is_active'], name='warehousing_locatio_4199a3_idx')],
                'unique_together': {('location', 'code')},
            },
        ),
        migrations.CreateModel(
            name='StockLevel',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('quantity', models.DecimalField(decimal_places=4, default=0, help_text='Quantity on hand', max_digits=14)),
                ('bin', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='stock_levels', to='warehousing.bin')),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_levels', to='items.item')),
                ('location', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_levels', to='warehousing.location')),
            ],
            options={
                'indexes': [
                    models.Index(fields=['item', 'location'], name='warehousing_item_id_a0a9dc_idx'),
                    models.Index(fields=['bin'], name='warehousing_bin_id_99ad00_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('quantity__gte', 0)), name='stock_level_qty_non_negative'),
                ],
                'unique_together': {('item', 'location', 'bin')},
            },
        ),
        migrations.CreateModel(
            name='InventoryAdjustment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('idempotency_key', models.CharField(help_text="Caller-supplied key identifying this adjustment (e.g., 'stock-count:12:line:40')", max_length=200, unique=True)),
                ('delta', models.DecimalField(decimal_places=4, help_text='Signed quantity change (positive = stock found, negative = stock lost)', max_digits=14)),
                ('quantity_after', models.DecimalField(decimal_places=4, help_text='On-hand quantity after this adjustment', max_digits=14)),
                ('reference', models.CharField(blank=True, help_text="Reference (e.g., 'SC-2026-0004 approval')", max_length=200)),
                ('bin', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='inventory_adjustments', to='warehousing.bin')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='inventory_adjustments', to=settings.AUTH_USER_MODEL)),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='inventory_adjustments', to='items.item')),
                ('location', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='inventory_adjustments', to='warehousing.location')),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['item', 'created_at'], name='warehousing_item_id_bc2c5b_idx')],
            },
        ),
    ]

import django.db.models.deletion
import simple_history.models
from django.conf import settings
from django.db import migrations, models


STATUS_CHOICES = [
    ('draft', 'Draft'),
    ('in_progress', 'In Progress'),
    ('submitted', 'Submitted'),
    ('approved', 'Approved'),
    ('rejected', 'Rejected'),
]
COUNT_TYPE_CHOICES = [('delivery', 'Delivery'), ('audit', 'Audit')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('items', '0001_initial'),
        ('warehousing', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='StockCount',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('stock_count_number', models.CharField(help_text='Stock count number (e.g., SC-2026-0001)', max_length=50, unique=True)),
                ('status', models.CharField(choices=STATUS_CHOICES, default='draft', max_length=20)),
                ('count_type', models.CharField(choices=COUNT_TYPE_CHOICES, default='audit', help_text="'delivery' checks received goods, 'audit' is a periodic check", max_length=20)),
                ('location_name', models.CharField(max_length=255)),
                ('bin_code', models.CharField(blank=True, max_length=100, null=True)),
                ('assigned_to_name', models.CharField(blank=True, max_length=255)),
                ('assigned_by_name', models.CharField(blank=True, max_length=255)),
                ('due_date', models.DateField(blank=True, null=True)),
                ('auto_generated', models.BooleanField(default=False, help_text='Created by the daily scheduler; may be claimed by any counter')),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('started_at', models.DateTimeField(blank=True, null=True)),
                ('submitted_at', models.DateTimeField(blank=True, null=True)),
                ('rejected_at', models.DateTimeField(blank=True, null=True)),
                ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approved_stock_counts', to=settings.AUTH_USER_MODEL)),
                ('assigned_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_stock_counts', to=settings.AUTH_USER_MODEL)),
                ('assigned_to', models.ForeignKey(blank=True, help_text='Counter responsible for this count', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_stock_counts', to=settings.AUTH_USER_MODEL)),
                ('bin', models.ForeignKey(blank=True, help_text='Bin being counted (blank = whole location)', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='stock_counts', to='warehousing.bin')),
                ('location', models.ForeignKey(help_text='Location being counted', on_delete=django.db.models.deletion.PROTECT, related_name='stock_counts', to='warehousing.location')),
            ],
            options={
                'ordering': ['-created_at', '-id'],
                'permissions': [('approve_stockcount', 'Can approve or reject stock counts')],
                'indexes': [
                    models.Index(fields=['status'], name='stock_count_status_c670f5_idx'),
                    models.Index(fields=['assigned_to', 'status'], name='stock_count_assigne_97e208_idx'),
                    models.Index(fields=['location', 'status'], name='stock_count_locatio_0a4141_idx'),
                    models.Index(fields=['due_date', 'status'], name='stock_count_due_dat_36fa19_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StockCountItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('item_name', models.CharField(max_length=255)),
                ('sku', models.CharField(blank=True, max_length=100)),
                ('bin_code', models.CharField(blank=True, max_length=100, null=True)),
                ('expected_quantity', models.DecimalField(decimal_places=4, default=0, help_text='System quantity when the count was created', max_digits=14)),
                ('counted_quantity', models.DecimalField(blank=True, decimal_places=4, help_text='Quantity counted (blank = not counted yet)', max_digits=14, null=True)),
                ('variance', models.DecimalField(blank=True, decimal_places=4, help_text='counted - expected (positive = surplus, negative = shortage)', max_digits=14, null=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('counted', 'Counted'), ('mismatch', 'Mismatch')], default='pending', max_length=20)),
                ('counted_at', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('bin', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='stock_count_items', to='warehousing.bin')),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_count_items', to='items.item')),
                ('stock_count', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='stock_counts.stockcount')),
            ],
            options={
                'ordering': ['id'],
                'indexes': [models.Index(fields=['stock_count', 'status'], name='stock_count_stock_c_3b7b9a_idx')],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('expected_quantity__gte', 0)), name='stock_count_item_expected_non_negative'),
                    models.CheckConstraint(condition=models.Q(('counted_quantity__isnull', True), ('counted_quantity__gte', 0), _connector='OR'), name='stock_count_item_counted_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='HistoricalStockCount',
            fields=[
                ('id', models.BigIntegerField(auto_created=True, blank=True, db_index=True, verbose_name='ID')),
                ('created_at', models.DateTimeField(blank=True, editable=False)),
                ('updated_at', models.DateTimeField(blank=True, editable=False)),
                ('stock_count_number', models.CharField(db_index=True, help_text='Stock count number (e.g., SC-2026-0001)', max_length=50)),
                ('status', models.CharField(choices=STATUS_CHOICES, default='draft', max_length=20)),
                ('count_type', models.CharField(choices=COUNT_TYPE_CHOICES, default='audit', help_text="'delivery' checks received goods, 'audit' is a periodic check", max_length=20)),
                ('location_name', models.CharField(max_length=255)),
                ('bin_code', models.CharField(blank=True, max_length=100, null=True)),
                ('assigned_to_name', models.CharField(blank=True, max_length=255)),
                ('assigned_by_name', models.CharField(blank=True, max_length=255)),
                ('due_date', models.DateField(blank=True, null=True)),
                ('auto_generated', models.BooleanField(default=False, help_text='Created by the daily scheduler; may be claimed by any counter')),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('started_at', models.DateTimeField(blank=True, null=True)),
                ('submitted_at', models.DateTimeField(blank=True, null=True)),
                ('rejected_at', models.DateTimeField(blank=True, null=True)),
                ('history_id', models.AutoField(primary_key=True, serialize=False)),
                ('history_date', models.DateTimeField(db_index=True)),
                ('history_change_reason', models.CharField(max_length=100, null=True)),
                ('history_type', models.CharField(choices=[('+', 'Created'), ('~', 'Changed'), ('-', 'Deleted')], max_length=1)),
                ('approved_by', models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('assigned_by', models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('assigned_to', models.ForeignKey(blank=True, db_constraint=False, help_text='Counter responsible for this count', null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('bin', models.ForeignKey(blank=True, db_constraint=False, help_text='Bin being counted (blank = whole location)', null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name='+', to='warehousing.bin')),
                ('history_user', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('location', models.ForeignKey(blank=True, db_constraint=False, help_text='Location being counted', null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name='+', to='warehousing.location')),
            ],
            options={
                'verbose_name': 'historical stock count',
                'verbose_name_plural': 'historical stock counts',
                'ordering': ('-history_date', '-history_id'),
                'get_latest_by': ('history_date', 'history_id'),
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
    ]

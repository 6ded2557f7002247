import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('stock_counts', '0001_initial'),
        ('warehousing', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.AddField(
            model_name='stockcount',
            name='reviewed_by',
            field=models.ForeignKey(blank=True, help_text='Last user to approve or reject this count', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reviewed_stock_counts', to=settings.AUTH_USER_MODEL),
        ),
        migrations.AddField(
            model_name='stockcount',
            name='reviewed_by_name',
            field=models.CharField(blank=True, max_length=255),
        ),
        migrations.AddField(
            model_name='stockcount',
            name='review_round',
            field=models.PositiveIntegerField(default=1, help_text='Incremented on every recount; part of the adjustment keys'),
        ),
        migrations.AddField(
            model_name='historicalstockcount',
            name='reviewed_by',
            field=models.ForeignKey(blank=True, db_constraint=False, help_text='Last user to approve or reject this count', null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name='+', to=settings.AUTH_USER_MODEL),
        ),
        migrations.AddField(
            model_name='historicalstockcount',
            name='reviewed_by_name',
            field=models.CharField(blank=True, max_length=255),
        ),
        migrations.AddField(
            model_name='historicalstockcount',
            name='review_round',
            field=models.PositiveIntegerField(default=1, help_text='Incremented on every recount; part of the adjustment keys'),
        ),
        migrations.AddField(
            model_name='stockcountitem',
            name='applied_delta',
            field=models.DecimalField(blank=True, decimal_places=4, help_text='Adjustment posted to inventory for the current review round', max_digits=14, null=True),
        ),
        migrations.CreateModel(
            name='CountSchedule',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('monday', models.BooleanField(default=False)),
                ('tuesday', models.BooleanField(default=False)),
                ('wednesday', models.BooleanField(default=False)),
                ('thursday', models.BooleanField(default=False)),
                ('friday', models.BooleanField(default=False)),
                ('saturday', models.BooleanField(default=False)),
                ('sunday', models.BooleanField(default=False)),
                ('is_active', models.BooleanField(default=True)),
                ('location', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='count_schedule', to='warehousing.location')),
            ],
            options={
                'ordering': ['location__code'],
            },
        ),
        migrations.CreateModel(
            name='CountScheduleOverride',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('date', models.DateField()),
                ('skip', models.BooleanField(default=True, help_text='Skip counting on this date (holiday); untick to force a count')),
                ('reason', models.CharField(blank=True, max_length=255)),
                ('schedule', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='overrides', to='stock_counts.countschedule')),
            ],
            options={
                'ordering': ['date'],
                'unique_together': {('schedule', 'date')},
            },
        ),
    ]

import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='TradingQuarter',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('year', models.IntegerField()),
                ('quarter', models.PositiveSmallIntegerField(choices=[(1, 'Q1'), (2, 'Q2'), (3, 'Q3'), (4, 'Q4')])),
                ('completed', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='trading_quarters', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'trading_quarters',
                'ordering': ['year', 'quarter'],
                'indexes': [models.Index(fields=['user', 'year'], name='trading_q_user_year_idx')],
                'unique_together': {('user', 'year', 'quarter')},
            },
        ),
        migrations.CreateModel(
            name='TradingMonth',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('month_name', models.CharField(choices=[('Enero', 'Enero'), ('Febrero', 'Febrero'), ('Marzo', 'Marzo'), ('Abril', 'Abril'), ('Mayo', 'Mayo'), ('Junio', 'Junio'), ('Julio', 'Julio'), ('Agosto', 'Agosto'), ('Septiembre', 'Septiembre'), ('Octubre', 'Octubre'), ('Noviembre', 'Noviembre'), ('Diciembre', 'Diciembre')], max_length=20)),
                ('year', models.IntegerField()),
                ('notes', models.TextField(blank=True, default='')),
                ('completed', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('quarter', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='months', to='trading.tradingquarter')),
            ],
            options={
                'db_table': 'trading_months',
                'unique_together': {('quarter', 'month_name')},
            },
        ),
        migrations.CreateModel(
            name='Trade',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('trade_number', models.PositiveIntegerField()),
                ('trade_date', models.DateField(blank=True, null=True)),
                ('opened_at', models.DateTimeField(blank=True, null=True)),
                ('pair', models.CharField(blank=True, default='', max_length=30)),
                ('direction', models.CharField(choices=[('buy', 'Buy'), ('sell', 'Sell')], default='buy', max_length=10)),
                ('session', models.CharField(choices=[('london', 'London'), ('new_york', 'New York'), ('asian', 'Asian'), ('sydney', 'Sydney')], default='london', max_length=20)),
                ('risk_percent', models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('open', 'Open'), ('closed', 'Closed')], default='draft', max_length=10)),
                ('result', models.CharField(blank=True, choices=[('win', 'Win'), ('loss', 'Loss'), ('break_even', 'Break Even')], default='', max_length=20)),
                ('final_rr', models.CharField(blank=True, default='', max_length=30)),
                ('duration', models.CharField(blank=True, default='', max_length=30)),
                ('confluences', models.TextField(blank=True, default='')),
                ('notes', models.TextField(blank=True, default='')),
                ('image_ref', models.CharField(blank=True, default='', max_length=500)),
                ('link_before', models.CharField(blank=True, default='', max_length=500)),
                ('link_after', models.CharField(blank=True, default='', max_length=500)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('month', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='trades', to='trading.tradingmonth')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='trades', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'trades',
                'ordering': ['trade_number'],
                'indexes': [
                    models.Index(fields=['month', 'trade_number'], name='trades_month_number_idx'),
                    models.Index(fields=['user', 'status'], name='trades_user_status_idx'),
                ],
            },
        ),
    ]

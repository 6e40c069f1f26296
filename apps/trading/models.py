# apps/trading/models.py
from django.db import models
from django.conf import settings
import uuid

from .quarters import QUARTER_CHOICES, MONTH_CHOICES


class TradingQuarter(models.Model):
    """One fiscal quarter of the trading journal (created lazily on first access)"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='trading_quarters'
    )

    year = models.IntegerField()
    quarter = models.PositiveSmallIntegerField(choices=QUARTER_CHOICES)

    # true iff all three months are marked complete
    completed = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'trading_quarters'
        unique_together = ('user', 'year', 'quarter')
        indexes = [
            models.Index(fields=['user', 'year'], name='trading_q_user_year_idx'),
        ]
        ordering = ['year', 'quarter']

    def __str__(self):
        return f"{self.user.username} - {self.year} Q{self.quarter}"


class TradingMonth(models.Model):
    """
    One of the three calendar months of a quarter.
    Always pre-created in bulk by the bundle loader, never individually.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    quarter = models.ForeignKey(
        TradingQuarter,
        on_delete=models.CASCADE,
        related_name='months'
    )

    month_name = models.CharField(max_length=20, choices=MONTH_CHOICES)
    year = models.IntegerField()
    notes = models.TextField(blank=True, default='')
    completed = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'trading_months'
        unique_together = ('quarter', 'month_name')

    def __str__(self):
        return f"{self.month_name} {self.year}"


class Trade(models.Model):
    """One logged position"""

    DIRECTIONS = [
        ('buy', 'Buy'),
        ('sell', 'Sell'),
    ]

    SESSIONS = [
        ('london', 'London'),
        ('new_york', 'New York'),
        ('asian', 'Asian'),
        ('sydney', 'Sydney'),
    ]

    STATUSES = [
        ('draft', 'Draft'),
        ('open', 'Open'),
        ('closed', 'Closed'),
    ]

    RESULTS = [
        ('win', 'Win'),
        ('loss', 'Loss'),
        ('break_even', 'Break Even'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='trades'
    )
    month = models.ForeignKey(
        TradingMonth,
        on_delete=models.CASCADE,
        related_name='trades'
    )

    trade_number = models.PositiveIntegerField()

    trade_date = models.DateField(null=True, blank=True)
    opened_at = models.DateTimeField(null=True, blank=True)

    pair = models.CharField(max_length=30, blank=True, default='')
    direction = models.CharField(max_length=10, choices=DIRECTIONS, default='buy')
    session = models.CharField(max_length=20, choices=SESSIONS, default='london')

    # percentage of capital at risk, e.g. 0.25, 0.5, 1
    risk_percent = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)

    status = models.CharField(max_length=10, choices=STATUSES, default='draft')
    result = models.CharField(max_length=20, choices=RESULTS, blank=True, default='')

    # final risk:reward, e.g. "1:2"
    final_rr = models.CharField(max_length=30, blank=True, default='')
    duration = models.CharField(max_length=30, blank=True, default='')

    confluences = models.TextField(blank=True, default='')
    notes = models.TextField(blank=True, default='')

    image_ref = models.CharField(max_length=500, blank=True, default='')
    link_before = models.CharField(max_length=500, blank=True, default='')
    link_after = models.CharField(max_length=500, blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'trades'
        indexes = [
            models.Index(fields=['month', 'trade_number'], name='trades_month_number_idx'),
            models.Index(fields=['user', 'status'], name='trades_user_status_idx'),
        ]
        ordering = ['trade_number']

    def __str__(self):
        return f"{self.user.username} - #{self.trade_number} {self.pair} - {self.status}"

# apps/growth/models.py
from django.db import models
from django.conf import settings
import uuid

from apps.trading.quarters import QUARTER_CHOICES, MONTH_CHOICES


class GrowthAccount(models.Model):
    """One account snapshot for one month (at most one per year/quarter/month)"""

    PURPOSES = [
        ('practice', 'Práctica'),
        ('evaluation', 'Evaluación'),
        ('funded', 'Fondeada'),
        ('real', 'Real'),
    ]

    # cycle only applies to these
    PHASED_PURPOSES = ('practice', 'evaluation')

    CYCLES = [
        ('phase_1', 'Fase 1'),
        ('phase_2', 'Fase 2'),
        ('phase_3', 'Fase 3'),
    ]

    STATUSES = [
        ('in_progress', 'En progreso'),
        ('completed', 'Completado'),
        ('under_review', 'En observación'),
        ('failed', 'Fallido'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='growth_accounts'
    )

    account_name = models.CharField(max_length=100)
    broker = models.CharField(max_length=100, blank=True, default='')
    purpose = models.CharField(max_length=20, choices=PURPOSES, default='practice')

    year = models.IntegerField()
    quarter = models.PositiveSmallIntegerField(choices=QUARTER_CHOICES)
    month = models.CharField(max_length=20, choices=MONTH_CHOICES)

    initial_capital = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    monthly_gain = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    monthly_target = models.DecimalField(max_digits=14, decimal_places=2, default=0)

    # monthly average percentage, edited by hand
    monthly_average = models.DecimalField(max_digits=8, decimal_places=2, default=0)

    cycle = models.CharField(max_length=10, choices=CYCLES, null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUSES, default='in_progress')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'growth_accounts'
        indexes = [
            models.Index(fields=['user', 'year', 'quarter'], name='growth_user_year_q_idx'),
        ]
        ordering = ['-year', 'quarter']

    def __str__(self):
        return f"{self.user.username} - {self.account_name} {self.month} {self.year}"

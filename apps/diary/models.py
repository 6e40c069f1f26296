# apps/diary/models.py
from django.db import models
from django.conf import settings
import uuid

from apps.trading.quarters import QUARTER_CHOICES, MONTH_CHOICES

EMOJIS = [
    ('😟', 'Preocupado'),
    ('😐', 'Neutral'),
    ('😌', 'Tranquilo'),
    ('😤', 'Frustrado'),
    ('💪', 'Motivado'),
]

TAGS = [
    ('Pensamiento', '💭 Pensamiento'),
    ('Emoción', '😌 Emoción'),
    ('Error', '📉 Error'),
    ('Acierto', '📈 Acierto'),
    ('Aprendizaje', '🧠 Aprendizaje'),
    ('Libre', '📝 Libre'),
]


class DiaryQuarter(models.Model):
    """Diary container for one (year, quarter), created lazily"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='diary_quarters'
    )

    year = models.IntegerField()
    quarter = models.PositiveSmallIntegerField(choices=QUARTER_CHOICES)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'diary_quarters'
        unique_together = ('user', 'year', 'quarter')
        ordering = ['year', 'quarter']

    def __str__(self):
        return f"{self.user.username} - diary {self.year} Q{self.quarter}"


class DiaryNote(models.Model):

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    diary_quarter = models.ForeignKey(
        DiaryQuarter,
        on_delete=models.CASCADE,
        related_name='notes'
    )

    month_name = models.CharField(max_length=20, choices=MONTH_CHOICES)
    emoji = models.CharField(max_length=8, choices=EMOJIS, null=True, blank=True)

    # ordered list of tag ids
    tags = models.JSONField(default=list, blank=True)
    content = models.TextField(blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'diary_notes'
        indexes = [
            models.Index(fields=['diary_quarter', 'month_name'], name='diary_notes_quarter_month_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.month_name} - {self.content[:40]}"


class QuarterReflection(models.Model):
    """At most one per diary quarter"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    diary_quarter = models.OneToOneField(
        DiaryQuarter,
        on_delete=models.CASCADE,
        related_name='reflection'
    )

    emoji = models.CharField(max_length=8, choices=EMOJIS, null=True, blank=True)
    content = models.TextField(blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'quarter_reflections'

    def __str__(self):
        return f"Reflection {self.diary_quarter}"

# apps/diary/serializers.py
from rest_framework import serializers

from apps.trading.quarters import MONTH_NAMES

from .models import DiaryNote, QuarterReflection, TAGS, EMOJIS


class DiaryNoteSerializer(serializers.ModelSerializer):
    month = serializers.CharField(source='month_name', read_only=True)
    date = serializers.DateTimeField(source='created_at', read_only=True)
    emoji = serializers.ChoiceField(choices=EMOJIS, required=False, allow_null=True, allow_blank=True)
    tags = serializers.ListField(
        child=serializers.ChoiceField(choices=TAGS),
        required=False,
    )

    class Meta:
        model = DiaryNote
        fields = ['id', 'month', 'date', 'emoji', 'tags', 'content']
        read_only_fields = ['id']

    def validate_emoji(self, value):
        return value or None

    def validate_tags(self, value):
        # keep the first occurrence, in the order given
        return list(dict.fromkeys(value))


class DiaryNoteCreateSerializer(DiaryNoteSerializer):
    month = serializers.ChoiceField(source='month_name', choices=MONTH_NAMES)


class QuarterReflectionSerializer(serializers.ModelSerializer):
    emoji = serializers.ChoiceField(choices=EMOJIS, required=False, allow_null=True, allow_blank=True)

    class Meta:
        model = QuarterReflection
        fields = ['emoji', 'content', 'created_at']
        read_only_fields = ['created_at']

    def validate_emoji(self, value):
        return value or None

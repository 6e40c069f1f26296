# ===== apps/trading/serializers.py =====
from rest_framework import serializers

from .lifecycle import format_ui_date, format_ui_datetime
from .models import Trade, TradingMonth


def format_risk_percent(value):
    """Decimal risk as the client sees it ("" when not set, no trailing zeros)."""
    if value is None:
        return ""
    return format(value.normalize(), "f")


# ============================================================
# 1. TRADES
# ============================================================

class TradeSerializer(serializers.ModelSerializer):
    """
    Trade as the client sees it: dates in DD/MM/YYYY, risk as a string
    ("" when not set).
    """
    month_id = serializers.UUIDField(read_only=True)
    date = serializers.SerializerMethodField()
    opened_at = serializers.SerializerMethodField()
    risk_percent = serializers.SerializerMethodField()

    class Meta:
        model = Trade
        fields = [
            "id",
            "month_id",
            "trade_number",
            "date",
            "opened_at",
            "pair",
            "direction",
            "session",
            "risk_percent",
            "status",
            "result",
            "final_rr",
            "duration",
            "confluences",
            "notes",
            "image_ref",
            "link_before",
            "link_after",
        ]

    def get_date(self, obj):
        return format_ui_date(obj.trade_date)

    def get_opened_at(self, obj):
        return format_ui_datetime(obj.opened_at)

    def get_risk_percent(self, obj):
        return format_risk_percent(obj.risk_percent)


class TradeUpdateSerializer(serializers.Serializer):
    """Partial trade edit. Every field is optional."""

    date = serializers.CharField(required=False, allow_blank=True)
    pair = serializers.CharField(required=False, allow_blank=True, max_length=30)
    direction = serializers.ChoiceField(required=False, choices=Trade.DIRECTIONS)
    session = serializers.ChoiceField(required=False, choices=Trade.SESSIONS)
    risk_percent = serializers.CharField(required=False, allow_blank=True)
    result = serializers.ChoiceField(
        required=False, allow_blank=True, choices=Trade.RESULTS
    )
    final_rr = serializers.CharField(required=False, allow_blank=True, max_length=30)
    confluences = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    image_ref = serializers.CharField(required=False, allow_blank=True, max_length=500)
    link_before = serializers.CharField(required=False, allow_blank=True, max_length=500)
    link_after = serializers.CharField(required=False, allow_blank=True, max_length=500)


class TradeCloseSerializer(serializers.Serializer):
    result = serializers.ChoiceField(choices=Trade.RESULTS)
    final_rr = serializers.CharField(max_length=30)


# ============================================================
# 2. MONTHS
# ============================================================

class TradingMonthSerializer(serializers.ModelSerializer):
    month = serializers.CharField(source="month_name")

    class Meta:
        model = TradingMonth
        fields = ["id", "month", "year", "notes", "completed"]


class MonthPatchSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True)
    completed = serializers.BooleanField(required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Nothing to update")
        return attrs


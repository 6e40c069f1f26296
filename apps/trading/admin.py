# ===== apps/trading/admin.py =====
from django.contrib import admin
from .models import Trade, TradingMonth, TradingQuarter

@admin.register(TradingQuarter)
class TradingQuarterAdmin(admin.ModelAdmin):
    list_display = ['user', 'year', 'quarter', 'completed', 'updated_at']
    list_filter = ['year', 'quarter', 'completed']
    search_fields = ['user__username']
    raw_id_fields = ['user']
    readonly_fields = ['created_at', 'updated_at']

@admin.register(TradingMonth)
class TradingMonthAdmin(admin.ModelAdmin):
    list_display = ['quarter', 'month_name', 'year', 'completed']
    list_filter = ['year', 'month_name', 'completed']
    search_fields = ['quarter__user__username']
    raw_id_fields = ['quarter']
    readonly_fields = ['created_at', 'updated_at']

@admin.register(Trade)
class TradeAdmin(admin.ModelAdmin):
    list_display = ['user', 'trade_number', 'pair', 'direction', 'session', 'status', 'result', 'risk_percent', 'trade_date']
    list_filter = ['status', 'result', 'session', 'direction']
    search_fields = ['user__username', 'pair']
    raw_id_fields = ['user', 'month']
    readonly_fields = ['created_at', 'updated_at']

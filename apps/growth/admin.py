# ===== apps/growth/admin.py =====
from django.contrib import admin
from .models import GrowthAccount

@admin.register(GrowthAccount)
class GrowthAccountAdmin(admin.ModelAdmin):
    list_display = ['user', 'account_name', 'purpose', 'year', 'quarter', 'month', 'initial_capital', 'monthly_gain', 'status']
    list_filter = ['purpose', 'status', 'year', 'quarter']
    search_fields = ['user__username', 'account_name', 'broker']
    raw_id_fields = ['user']
    readonly_fields = ['created_at', 'updated_at']

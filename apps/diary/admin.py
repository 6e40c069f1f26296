# ===== apps/diary/admin.py =====
from django.contrib import admin
from .models import DiaryNote, DiaryQuarter, QuarterReflection

@admin.register(DiaryQuarter)
class DiaryQuarterAdmin(admin.ModelAdmin):
    list_display = ['user', 'year', 'quarter', 'created_at']
    list_filter = ['year', 'quarter']
    search_fields = ['user__username']
    raw_id_fields = ['user']

@admin.register(DiaryNote)
class DiaryNoteAdmin(admin.ModelAdmin):
    list_display = ['diary_quarter', 'month_name', 'emoji', 'created_at']
    list_filter = ['month_name', 'emoji']
    search_fields = ['content', 'diary_quarter__user__username']
    raw_id_fields = ['diary_quarter']
    readonly_fields = ['created_at', 'updated_at']

@admin.register(QuarterReflection)
class QuarterReflectionAdmin(admin.ModelAdmin):
    list_display = ['diary_quarter', 'emoji', 'created_at']
    raw_id_fields = ['diary_quarter']
    readonly_fields = ['created_at', 'updated_at']

# ===== apps/users/admin.py =====
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User, UserSettings

@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['username', 'email', 'is_staff', 'is_active', 'created_at']
    list_filter = ['is_staff', 'is_active', 'created_at']
    search_fields = ['username', 'email']
    ordering = ['-created_at']

@admin.register(UserSettings)
class UserSettingsAdmin(admin.ModelAdmin):
    list_display = ['user', 'display_name', 'onboarding_completed', 'dark_mode', 'updated_at']
    list_filter = ['onboarding_completed', 'dark_mode']
    search_fields = ['user__username', 'display_name']
    raw_id_fields = ['user']

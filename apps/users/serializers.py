# ===== apps/users/serializers.py =====
from rest_framework import serializers
from django.conf import settings as django_settings
from django.contrib.auth import get_user_model
from .models import UserSettings

User = get_user_model()


def display_name_for(user, user_settings=None):
    """Stored display name, else email, else username, else the configured default"""
    if user_settings is not None and user_settings.display_name:
        return user_settings.display_name
    return user.email or user.username or django_settings.JOURNAL_DEFAULT_DISPLAY_NAME


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'is_staff', 'created_at']
        read_only_fields = ['id', 'created_at']


class UserRegisterSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=150)
    password = serializers.CharField(write_only=True, min_length=6)
    email = serializers.EmailField(required=False, allow_blank=True)
    display_name = serializers.CharField(max_length=150, required=False, allow_blank=True)

    def validate_username(self, value):
        if User.objects.filter(username=value).exists():
            raise serializers.ValidationError('Username already exists')
        return value

    def validate_email(self, value):
        if value and User.objects.filter(email=value).exists():
            raise serializers.ValidationError('Email already registered')
        return value or None


class UserLoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(write_only=True)


class UserSettingsSerializer(serializers.ModelSerializer):
    display_name = serializers.CharField(max_length=150, required=False, allow_blank=True)

    class Meta:
        model = UserSettings
        fields = ['display_name', 'onboarding_completed', 'dark_mode']

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['display_name'] = display_name_for(instance.user, instance)
        return data

# ===== apps/users/views.py =====
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.authtoken.models import Token
from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.models import update_last_login
from django.db import IntegrityError, transaction
from .models import UserSettings
from .serializers import (
    UserSerializer, UserRegisterSerializer, UserLoginSerializer,
    UserSettingsSerializer
)
import logging

logger = logging.getLogger(__name__)
User = get_user_model()


def _settings_for(user):
    user_settings, _ = UserSettings.objects.get_or_create(user=user)
    return user_settings


def _session_payload(user, token):
    """What the client keeps after register/login"""
    return {
        'success': True,
        'user_id': str(user.id),
        'username': user.username,
        'email': user.email,
        'is_admin': user.is_staff,
        'token': token.key,
        'settings': UserSettingsSerializer(_settings_for(user)).data,
    }


# ============================================================
# AUTH
# ============================================================

@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Register a journal user with its settings row and token"""
    serializer = UserRegisterSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        with transaction.atomic():
            user = User.objects.create_user(
                username=data['username'],
                password=data['password'],
                email=data.get('email'),
            )
            UserSettings.objects.create(
                user=user,
                display_name=data.get('display_name', ''),
            )
            token, _ = Token.objects.get_or_create(user=user)
    except IntegrityError as e:
        logger.warning(f"Registration conflict for {data['username']}: {e}")
        return Response({'detail': 'Username or email already exists'}, status=status.HTTP_400_BAD_REQUEST)

    logger.info(f"Registered journal user {user.username}")
    return Response(_session_payload(user, token), status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    serializer = UserLoginSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    user = authenticate(
        username=serializer.validated_data['username'],
        password=serializer.validated_data['password']
    )

    # inactive users are rejected by the default backend too
    if not user or not user.is_active:
        return Response({'detail': 'Invalid credentials'}, status=status.HTTP_401_UNAUTHORIZED)

    update_last_login(None, user)
    token, _ = Token.objects.get_or_create(user=user)
    return Response(_session_payload(user, token))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout(request):
    """Drop the token; every socket using it is refused from now on"""
    deleted, _ = Token.objects.filter(user=request.user).delete()
    if not deleted:
        logger.warning(f"Logout without token for {request.user}")
    return Response({'success': True})


# ============================================================
# PROFILE & SETTINGS
# ============================================================

@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_profile(request):
    data = dict(UserSerializer(request.user).data)
    data['settings'] = UserSettingsSerializer(_settings_for(request.user)).data
    return Response(data)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def user_settings(request):
    """Display name, onboarding flag and theme"""
    instance = _settings_for(request.user)

    if request.method == 'GET':
        return Response(UserSettingsSerializer(instance).data)

    serializer = UserSettingsSerializer(instance, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    serializer.save()
    return Response(serializer.data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def complete_onboarding(request):
    UserSettings.objects.update_or_create(
        user=request.user,
        defaults={'onboarding_completed': True},
    )
    return Response({'success': True, 'onboarding_completed': True})

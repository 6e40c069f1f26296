# ===== apps/users/health_urls.py =====
import logging

from channels.layers import get_channel_layer
from django.conf import settings
from django.db import DatabaseError, connection
from django.http import JsonResponse
from django.urls import path
from django.utils import timezone

logger = logging.getLogger(__name__)


def _database_status():
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError as e:
        logger.error(f"Health check database error: {e}")
        return "disconnected"
    return "connected"


def health_check(request):
    """Liveness of the store and the realtime layer"""
    db_status = _database_status()
    layer = get_channel_layer()

    return JsonResponse({
        'status': 'healthy' if db_status == "connected" else 'degraded',
        'timestamp': timezone.now().isoformat(),
        'version': '1.0.0',
        'database': db_status,
        'channel_layer': type(layer).__name__ if layer is not None else None,
        'risk_limit': settings.JOURNAL_RISK_MAX_MONTHLY,
    })


urlpatterns = [
    path('', health_check, name='health_check'),
]

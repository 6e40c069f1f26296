# apps/trading/notifications.py
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)


def group_name(user_id):
    return f"trading_{user_id}"


def update_message(kind, data, source=None):
    return {
        "type": "trading.update",
        "kind": kind,
        "source": source,
        "data": data,
    }


def push_update(user, kind, data):
    """
    Tell every open journal socket of ``user`` that something changed.
    Called from sync views, failures never break the request.
    """
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return

    try:
        async_to_sync(channel_layer.group_send)(
            group_name(user.id),
            update_message(kind, data),
        )
    except Exception:
        logger.exception(f"push_update {kind} failed for {user}")

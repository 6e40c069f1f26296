import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from django.contrib.auth.models import AnonymousUser
from rest_framework.authtoken.models import Token

logger = logging.getLogger(__name__)


@database_sync_to_async
def get_user(token_key):
    try:
        token = Token.objects.select_related("user").get(key=token_key)
    except Token.DoesNotExist:
        logger.info("WebSocket rejected: unknown token")
        return AnonymousUser()

    if not token.user.is_active:
        return AnonymousUser()
    return token.user


def token_from_scope(scope):
    """Token key from ``?token=`` or an ``Authorization: Token <key>`` header."""
    query = parse_qs(scope.get("query_string", b"").decode())
    token = query.get("token")
    if token:
        return token[0]

    for name, value in scope.get("headers", []):
        if name == b"authorization":
            parts = value.decode().split()
            if len(parts) == 2 and parts[0].lower() == "token":
                return parts[1]
    return None


class TokenAuthMiddleware:
    def __init__(self, inner):
        self.inner = inner

    async def __call__(self, scope, receive, send):
        scope = dict(scope)
        token = token_from_scope(scope)

        if token:
            scope["user"] = await get_user(token)
        else:
            scope["user"] = AnonymousUser()

        return await self.inner(scope, receive, send)

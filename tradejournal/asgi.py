import os

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'tradejournal.settings')

from django.core.asgi import get_asgi_application

# Django must be set up before the routing imports below pull in models.
django_asgi_app = get_asgi_application()

from channels.routing import ProtocolTypeRouter, URLRouter
from apps.trading.routing import websocket_urlpatterns
from apps.trading.middleware import TokenAuthMiddleware

application = ProtocolTypeRouter({
    "http": django_asgi_app,
    "websocket": TokenAuthMiddleware(
        URLRouter(websocket_urlpatterns)
    ),
})

from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/auth/', include('apps.users.urls')),
    path('api/trading/', include('apps.trading.urls')),
    path('api/growth/', include('apps.growth.urls')),
    path('api/diary/', include('apps.diary.urls')),
    path('api/analytics/', include('apps.analytics.urls')),
    path('health/', include('apps.users.health_urls')),
]

if settings.DEBUG:
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

admin.site.site_header = "Trading Journal Administration"
admin.site.site_title = "Trading Journal Admin"
admin.site.index_title = "Welcome to Trading Journal"

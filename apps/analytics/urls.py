# ===== apps/analytics/urls.py =====
from django.urls import path
from . import views

urlpatterns = [
    path('summary', views.get_summary, name='summary'),
    path('reports', views.get_reports, name='reports'),
    path('overview', views.get_overview, name='overview'),
]

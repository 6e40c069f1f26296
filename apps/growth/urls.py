from django.urls import path
from . import views

urlpatterns = [
    path('accounts', views.accounts),
    path('accounts/<uuid:account_id>', views.account_detail),
    path('dashboard', views.dashboard),
]

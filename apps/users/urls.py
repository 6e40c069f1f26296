from django.urls import path
from . import views

urlpatterns = [
    path('register', views.register, name='register'),
    path('login', views.login, name='login'),
    path('logout', views.logout, name='logout'),

    path('profile', views.get_profile, name='profile'),
    path('settings', views.user_settings, name='user_settings'),
    path('onboarding', views.complete_onboarding, name='complete_onboarding'),
]

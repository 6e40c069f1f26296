from django.urls import path
from . import views

urlpatterns = [
    path('quarters/<int:year>/<int:quarter>', views.get_quarter),
    path('quarters/<int:year>/<int:quarter>/months/<str:month>', views.update_month),

    path('months/<uuid:month_id>/trades', views.create_trade),

    path('trades/<uuid:trade_id>', views.trade_detail),
    path('trades/<uuid:trade_id>/open', views.open_trade),
    path('trades/<uuid:trade_id>/close', views.close_trade),
]

from django.urls import path
from . import views

urlpatterns = [
    path('<int:year>/<int:quarter>', views.get_diary),
    path('<int:year>/<int:quarter>/notes', views.create_note),
    path('<int:year>/<int:quarter>/reflection', views.put_reflection),
    path('notes/<uuid:note_id>', views.note_detail),
]

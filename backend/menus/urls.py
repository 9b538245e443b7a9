from django.urls import path

from .views import menu_by_day, suggestions

urlpatterns = [
    path("menus/by-day/", menu_by_day, name="menu-by-day"),
    path("suggestions/", suggestions, name="menu-suggestions"),
]

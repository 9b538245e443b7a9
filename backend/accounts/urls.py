# backend/accounts/urls.py
from django.urls import path

from .views import AdminLoginView, AdminMeView, AdminRefreshView

urlpatterns = [
    path("login/", AdminLoginView.as_view(), name="admin-login"),
    path("refresh/", AdminRefreshView.as_view(), name="admin-refresh"),
    path("me/", AdminMeView.as_view(), name="admin-me"),
]

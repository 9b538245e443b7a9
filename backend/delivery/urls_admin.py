from django.urls import path

from . import views

urlpatterns = [
    path("delivery/config/", views.admin_delivery_config, name="admin-delivery-config"),
    path("delivery/settings/", views.admin_delivery_settings, name="admin-delivery-settings"),
    path("delivery/slots/", views.admin_delivery_slots, name="admin-delivery-slots"),
    path("delivery/blackouts/", views.admin_delivery_blackouts, name="admin-delivery-blackouts"),
]

from django.urls import path

from . import views

urlpatterns = [
    path("delivery/config/", views.delivery_config, name="delivery-config"),
    path("delivery/quote/", views.delivery_quote, name="delivery-quote"),
    path("availability/", views.availability, name="availability"),
]

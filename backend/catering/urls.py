from django.urls import path

from . import views

urlpatterns = [
    path("catering/orders/", views.submit_catering_order, name="catering-orders"),
]

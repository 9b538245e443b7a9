from django.urls import path

from . import views

urlpatterns = [
    path("catering/orders/", views.admin_catering_orders, name="admin-catering-orders"),
    path("catering/orders/<int:order_id>/", views.admin_catering_order_detail, name="admin-catering-order-detail"),
]

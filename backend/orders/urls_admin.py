from django.urls import path

from . import views

urlpatterns = [
    path("orders/", views.admin_orders, name="admin-orders"),
    path("orders/<int:order_id>/", views.admin_order_detail, name="admin-order-detail"),
    path("orders/<int:order_id>/refund/", views.admin_order_refund, name="admin-order-refund"),
]

from django.urls import path

from . import views

urlpatterns = [
    path("create-payment-intent/", views.create_payment_intent_view, name="create-payment-intent"),
    path("orders/by-intent/<str:payment_intent_id>/", views.order_by_intent, name="order-by-intent"),
    path("stripe/webhook/", views.StripeWebhookView.as_view(), name="stripe-webhook"),
]

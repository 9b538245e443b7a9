from django.contrib import admin
from .models import DeliveryGroup, Order, OrderAddOn, OrderItem


class DeliveryGroupInline(admin.TabularInline):
    model = DeliveryGroup
    extra = 0


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    raw_id_fields = ("menu_item", "delivery_group")


class OrderAddOnInline(admin.TabularInline):
    model = OrderAddOn
    extra = 0
    raw_id_fields = ("add_on", "delivery_group")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "customer_name", "fulfillment", "status", "total_cents", "refunded_cents", "created_at")
    search_fields = ("customer_name", "customer_email", "stripe_payment_intent_id")
    list_filter = ("status", "fulfillment")
    inlines = [DeliveryGroupInline, OrderItemInline, OrderAddOnInline]

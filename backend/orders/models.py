from django.db import models
from django.utils import timezone

from menus.models import AddOn, MenuItem


class Order(models.Model):
    """A paid order. Only ever created from a successful payment webhook."""

    FULFILLMENT_CHOICES = [
        ("delivery", "Delivery"),
        ("pickup", "Pickup"),
    ]
    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("confirmed", "Confirmed"),
        ("preparing", "Preparing"),
        ("out_for_delivery", "Out for delivery"),
        ("completed", "Completed"),
    ]

    fulfillment = models.CharField(max_length=10, choices=FULFILLMENT_CHOICES, default="delivery")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")

    total_cents = models.PositiveIntegerField(default=0)
    refunded_cents = models.PositiveIntegerField(default=0)

    delivery_date = models.DateField(null=True, blank=True)
    delivery_slot = models.CharField(max_length=80, blank=True, default="")
    address = models.CharField(max_length=255, blank=True, default="")
    phone = models.CharField(max_length=40, blank=True, default="")
    customer_name = models.CharField(max_length=140, blank=True, default="")
    customer_email = models.EmailField(blank=True, default="")

    stripe_payment_intent_id = models.CharField(max_length=120, unique=True, null=True, blank=True)
    email_sent_at = models.DateTimeField(null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["status", "created_at"], name="orders_order_status_idx"),
            models.Index(fields=["delivery_date"], name="orders_order_ddate_idx"),
        ]

    def __str__(self):
        return f"Order #{self.id}"

    @property
    def refundable_cents(self):
        return max(0, self.total_cents - self.refunded_cents)


class DeliveryGroup(models.Model):
    """All the lines of one order scheduled for one (service date, slot)."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="delivery_groups")
    service_date = models.DateField()
    slot_label = models.CharField(max_length=80, blank=True, default="")

    class Meta:
        ordering = ["service_date", "slot_label"]
        indexes = [
            models.Index(fields=["service_date", "slot_label"], name="orders_group_date_slot_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["order", "service_date", "slot_label"], name="uniq_order_group_date_slot"
            )
        ]

    def __str__(self):
        return f"{self.order_id} {self.service_date} {self.slot_label}"


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="order_items")
    delivery_group = models.ForeignKey(
        DeliveryGroup, on_delete=models.CASCADE, null=True, blank=True, related_name="items"
    )
    menu_item = models.ForeignKey(MenuItem, on_delete=models.PROTECT, related_name="order_items")

    name = models.CharField(max_length=200, blank=True, default="")
    variant_label = models.CharField(max_length=80, blank=True, default="")
    quantity = models.PositiveIntegerField(default=1)
    price_cents = models.PositiveIntegerField(default=0)

    class Meta:
        indexes = [
            models.Index(fields=["menu_item"], name="orders_item_menu_item_idx"),
        ]

    def __str__(self):
        return f"{self.name or self.menu_item_id} x{self.quantity}"

    @property
    def line_total_cents(self):
        return self.quantity * self.price_cents


class OrderAddOn(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="add_ons")
    delivery_group = models.ForeignKey(
        DeliveryGroup, on_delete=models.CASCADE, null=True, blank=True, related_name="add_ons"
    )
    add_on = models.ForeignKey(AddOn, on_delete=models.SET_NULL, null=True, blank=True, related_name="order_add_ons")

    name = models.CharField(max_length=140)
    quantity = models.PositiveIntegerField(default=1)
    price_cents = models.PositiveIntegerField(default=0)

    def __str__(self):
        return f"{self.name} x{self.quantity}"

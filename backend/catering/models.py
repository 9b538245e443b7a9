from django.db import models
from django.utils import timezone


class Customer(models.Model):
    """Contact captured from a catering inquiry; no login attached."""

    name = models.CharField(max_length=140, blank=True, default="")
    email = models.EmailField(unique=True)
    is_guest = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return self.email


class CateringOrder(models.Model):
    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("quoted", "Quoted"),
        ("confirmed", "Confirmed"),
        ("cancelled", "Cancelled"),
    ]

    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name="catering_orders")
    event_date = models.DateTimeField()
    guest_count = models.PositiveIntegerField()
    special_requests = models.TextField(blank=True, default="")
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default="pending")
    total_cents = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Catering #{self.id}"


class CateringItem(models.Model):
    catering_order = models.ForeignKey(CateringOrder, on_delete=models.CASCADE, related_name="items")
    name = models.CharField(max_length=140)
    quantity = models.PositiveIntegerField(default=1)
    price_cents = models.PositiveIntegerField(default=0)

    def __str__(self):
        return f"{self.name} x{self.quantity}"

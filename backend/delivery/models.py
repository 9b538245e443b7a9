from django.db import models
from django.utils import timezone


class DeliverySettings(models.Model):
    """Singleton row (id=1): where deliveries start from and what they cost."""

    SINGLETON_ID = 1

    origin_address = models.CharField(max_length=255, blank=True, default="")
    origin_lat = models.FloatField(null=True, blank=True)
    origin_lng = models.FloatField(null=True, blank=True)
    max_radius_miles = models.FloatField(null=True, blank=True)
    fee_tiers = models.JSONField(default=list, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "delivery settings"

    def __str__(self):
        return self.origin_address or "Delivery settings"

    @classmethod
    def load(cls):
        return cls.objects.filter(id=cls.SINGLETON_ID).first()


class SlotTemplate(models.Model):
    """A time window offered on every service day."""

    label = models.CharField(max_length=80, unique=True)
    start_min = models.PositiveSmallIntegerField()
    end_min = models.PositiveSmallIntegerField()
    capacity = models.PositiveIntegerField(default=0)
    active = models.BooleanField(default=True)

    class Meta:
        ordering = ["start_min"]

    def __str__(self):
        return self.label


class BlackoutDate(models.Model):
    date = models.DateField(unique=True)
    reason = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["date"]

    def __str__(self):
        return self.date.isoformat()

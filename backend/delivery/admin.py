from django.contrib import admin
from .models import BlackoutDate, DeliverySettings, SlotTemplate


@admin.register(DeliverySettings)
class DeliverySettingsAdmin(admin.ModelAdmin):
    list_display = ("id", "origin_address", "max_radius_miles", "updated_at")


@admin.register(SlotTemplate)
class SlotTemplateAdmin(admin.ModelAdmin):
    list_display = ("id", "label", "start_min", "end_min", "capacity", "active")
    list_filter = ("active",)


@admin.register(BlackoutDate)
class BlackoutDateAdmin(admin.ModelAdmin):
    list_display = ("id", "date", "reason")

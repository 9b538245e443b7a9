from django.contrib import admin
from .models import CateringItem, CateringOrder, Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("id", "email", "name", "is_guest", "created_at")
    search_fields = ("email", "name")


class CateringItemInline(admin.TabularInline):
    model = CateringItem
    extra = 0


@admin.register(CateringOrder)
class CateringOrderAdmin(admin.ModelAdmin):
    list_display = ("id", "customer", "event_date", "guest_count", "status", "total_cents")
    list_filter = ("status",)
    inlines = [CateringItemInline]

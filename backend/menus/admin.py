from django.contrib import admin
from .models import AddOn, Category, Menu, MenuItem, MenuVariant


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "created_at")
    search_fields = ("name",)


@admin.register(AddOn)
class AddOnAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "price_cents")
    search_fields = ("name",)


@admin.register(Menu)
class MenuAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "service_day", "week_of", "is_template", "is_active")
    list_filter = ("service_day", "is_template", "is_active")


class MenuVariantInline(admin.TabularInline):
    model = MenuVariant
    extra = 0


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "menu", "category", "capacity_per_day", "archived")
    search_fields = ("name", "menu__name")
    list_filter = ("archived", "menu__service_day")
    inlines = [MenuVariantInline]

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from utils.dates import DAY_LABELS

SERVICE_DAY_CHOICES = [(idx, label) for idx, label in enumerate(DAY_LABELS)]


class Category(models.Model):
    name = models.CharField(max_length=80, unique=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "categories"

    def __str__(self):
        return self.name


class AddOn(models.Model):
    name = models.CharField(max_length=140)
    description = models.TextField(blank=True, default="")
    image_url = models.CharField(max_length=500, blank=True, default="")
    price_cents = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Menu(models.Model):
    """
    One menu per service day. Template menus (``is_template``) are the weekly
    pattern; ``week_of`` menus are clones pinned to a calendar week (Monday).
    """

    name = models.CharField(max_length=140)
    service_day = models.PositiveSmallIntegerField(
        choices=SERVICE_DAY_CHOICES,
        validators=[MinValueValidator(0), MaxValueValidator(6)],
    )
    week_of = models.DateField(null=True, blank=True)
    is_template = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=["service_day", "is_template"], name="menus_menu_day_tmpl_idx"),
            models.Index(fields=["service_day", "week_of"], name="menus_menu_day_week_idx"),
        ]

    def __str__(self):
        return self.name


class MenuItem(models.Model):
    menu = models.ForeignKey(Menu, on_delete=models.CASCADE, related_name="items")
    category = models.ForeignKey(
        Category, on_delete=models.SET_NULL, null=True, blank=True, related_name="items"
    )
    name = models.CharField(max_length=140)
    description = models.TextField(blank=True, default="")
    image_url = models.CharField(max_length=500, blank=True, default="")
    capacity_per_day = models.PositiveIntegerField(null=True, blank=True)
    archived = models.BooleanField(default=False)
    add_ons = models.ManyToManyField(AddOn, through="MenuItemAddOn", related_name="menu_items", blank=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["menu", "archived"], name="menus_item_menu_arch_idx"),
        ]

    def __str__(self):
        return self.name


class MenuVariant(models.Model):
    menu_item = models.ForeignKey(MenuItem, on_delete=models.CASCADE, related_name="variants")
    label = models.CharField(max_length=80)
    price_cents = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["menu_item", "label"], name="uniq_menu_variant_label"),
        ]

    def __str__(self):
        return f"{self.menu_item_id} {self.label}"


class MenuItemAddOn(models.Model):
    menu_item = models.ForeignKey(MenuItem, on_delete=models.CASCADE, related_name="add_on_links")
    add_on = models.ForeignKey(AddOn, on_delete=models.CASCADE, related_name="menu_item_links")

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["menu_item", "add_on"], name="uniq_menu_item_add_on"),
        ]

    def __str__(self):
        return f"{self.menu_item_id} -> {self.add_on_id}"

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("menus", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "fulfillment",
                    models.CharField(
                        choices=[("delivery", "Delivery"), ("pickup", "Pickup")], default="delivery", max_length=10
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("confirmed", "Confirmed"),
                            ("preparing", "Preparing"),
                            ("out_for_delivery", "Out for delivery"),
                            ("completed", "Completed"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("total_cents", models.PositiveIntegerField(default=0)),
                ("refunded_cents", models.PositiveIntegerField(default=0)),
                ("delivery_date", models.DateField(blank=True, null=True)),
                ("delivery_slot", models.CharField(blank=True, default="", max_length=80)),
                ("address", models.CharField(blank=True, default="", max_length=255)),
                ("phone", models.CharField(blank=True, default="", max_length=40)),
                ("customer_name", models.CharField(blank=True, default="", max_length=140)),
                ("customer_email", models.EmailField(blank=True, default="", max_length=254)),
                ("stripe_payment_intent_id", models.CharField(blank=True, max_length=120, null=True, unique=True)),
                ("email_sent_at", models.DateTimeField(blank=True, null=True)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="orders_order_status_idx"),
                    models.Index(fields=["delivery_date"], name="orders_order_ddate_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="DeliveryGroup",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("service_date", models.DateField()),
                ("slot_label", models.CharField(blank=True, default="", max_length=80)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="delivery_groups", to="orders.order"
                    ),
                ),
            ],
            options={
                "ordering": ["service_date", "slot_label"],
                "indexes": [
                    models.Index(fields=["service_date", "slot_label"], name="orders_group_date_slot_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("order", "service_date", "slot_label"), name="uniq_order_group_date_slot"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(blank=True, default="", max_length=200)),
                ("variant_label", models.CharField(blank=True, default="", max_length=80)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("price_cents", models.PositiveIntegerField(default=0)),
                (
                    "delivery_group",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="orders.deliverygroup",
                    ),
                ),
                (
                    "menu_item",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="order_items", to="menus.menuitem"
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="order_items", to="orders.order"
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(fields=["menu_item"], name="orders_item_menu_item_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderAddOn",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=140)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("price_cents", models.PositiveIntegerField(default=0)),
                (
                    "add_on",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="order_add_ons",
                        to="menus.addon",
                    ),
                ),
                (
                    "delivery_group",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="add_ons",
                        to="orders.deliverygroup",
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="add_ons", to="orders.order"
                    ),
                ),
            ],
        ),
    ]

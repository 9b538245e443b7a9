from rest_framework import serializers

from utils.dates import to_date_key

from .models import AddOn, Category, Menu, MenuItem, MenuVariant


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "created_at"]
        read_only_fields = ["id", "created_at"]


class AddOnSerializer(serializers.ModelSerializer):
    class Meta:
        model = AddOn
        fields = ["id", "name", "description", "image_url", "price_cents", "created_at"]
        read_only_fields = ["id", "created_at"]


class MenuVariantSerializer(serializers.ModelSerializer):
    class Meta:
        model = MenuVariant
        fields = ["id", "label", "price_cents"]
        read_only_fields = ["id"]


class MenuItemSerializer(serializers.ModelSerializer):
    variants = serializers.SerializerMethodField()
    add_ons = serializers.SerializerMethodField()
    category = CategorySerializer(read_only=True)
    menu = serializers.SerializerMethodField()

    class Meta:
        model = MenuItem
        fields = [
            "id",
            "name",
            "description",
            "image_url",
            "capacity_per_day",
            "archived",
            "category",
            "menu",
            "variants",
            "add_ons",
            "created_at",
            "updated_at",
        ]

    def get_variants(self, obj):
        variants = sorted(obj.variants.all(), key=lambda v: (v.price_cents, v.id))
        return MenuVariantSerializer(variants, many=True).data

    def get_add_ons(self, obj):
        return AddOnSerializer([link.add_on for link in obj.add_on_links.all()], many=True).data

    def get_menu(self, obj):
        menu = obj.menu
        return {
            "id": menu.id,
            "name": menu.name,
            "service_day": menu.service_day,
            "week_of": menu.week_of.isoformat() if menu.week_of else None,
            "is_template": menu.is_template,
        }


class MenuItemWriteSerializer(serializers.Serializer):
    id = serializers.IntegerField(required=False, allow_null=True)
    weekday = serializers.IntegerField(min_value=0, max_value=6)
    week_of = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    name = serializers.CharField(max_length=140, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")
    image_url = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")
    category_id = serializers.IntegerField(required=False, allow_null=True)
    capacity_per_day = serializers.IntegerField(required=False, allow_null=True, min_value=1)

    def validate_name(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("name required")
        return value

    def validate_week_of(self, value):
        if not value:
            return None
        try:
            return to_date_key(value)
        except ValueError:
            raise serializers.ValidationError("week_of must be YYYY-MM-DD")

    def validate_category_id(self, value):
        if value is not None and not Category.objects.filter(id=value).exists():
            raise serializers.ValidationError("Unknown category")
        return value


class VariantsReplaceSerializer(serializers.Serializer):
    variants = MenuVariantSerializer(many=True)

    def validate_variants(self, value):
        labels = [v["label"].strip() for v in value]
        if len(labels) != len(set(labels)):
            raise serializers.ValidationError("Variant labels must be unique per item.")
        return value


class AddOnLinkSerializer(serializers.Serializer):
    add_on_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=True)

    def validate_add_on_ids(self, value):
        ids = list(dict.fromkeys(value))
        found = set(AddOn.objects.filter(id__in=ids).values_list("id", flat=True))
        missing = [i for i in ids if i not in found]
        if missing:
            raise serializers.ValidationError(f"Unknown add-ons: {missing}")
        return ids


class CopyWeekdaySerializer(serializers.Serializer):
    from_weekday = serializers.IntegerField(min_value=0, max_value=6)
    to_weekday = serializers.IntegerField(min_value=0, max_value=6)
    mode = serializers.ChoiceField(choices=["append", "replace"], default="append")


class StartWeekSerializer(serializers.Serializer):
    week_of = serializers.CharField()
    weekdays = serializers.ListField(
        child=serializers.IntegerField(min_value=0, max_value=6), required=False, allow_null=True
    )

    def validate_week_of(self, value):
        try:
            return to_date_key(value)
        except ValueError:
            raise serializers.ValidationError("week_of (YYYY-MM-DD) required")


def public_menu_item(item, remaining):
    """Storefront shape: priced variants, flattened add-ons and the day's remaining count."""
    data = MenuItemSerializer(item).data
    data.pop("archived", None)
    data.pop("menu", None)
    data["remaining"] = remaining
    return data


def menu_meta(menu: Menu):
    if menu is None:
        return {"menu_id": None, "week_of": None, "is_template": False}
    return {
        "menu_id": menu.id,
        "week_of": menu.week_of.isoformat() if menu.week_of else None,
        "is_template": menu.is_template,
    }

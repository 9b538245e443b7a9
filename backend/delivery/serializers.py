from rest_framework import serializers

from .models import BlackoutDate, DeliverySettings, SlotTemplate


class FeeTierSerializer(serializers.Serializer):
    to_miles = serializers.FloatField(min_value=0)
    fee_cents = serializers.IntegerField(min_value=0)


class DeliverySettingsSerializer(serializers.ModelSerializer):
    fee_tiers = FeeTierSerializer(many=True, required=False)

    class Meta:
        model = DeliverySettings
        fields = [
            "origin_address",
            "origin_lat",
            "origin_lng",
            "max_radius_miles",
            "fee_tiers",
            "updated_at",
        ]
        read_only_fields = ["updated_at"]

    def validate_max_radius_miles(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("max_radius_miles must be >= 0")
        return value

    def validate_fee_tiers(self, value):
        return sorted((dict(t) for t in value), key=lambda t: t["to_miles"])


class SlotTemplateSerializer(serializers.ModelSerializer):
    class Meta:
        model = SlotTemplate
        fields = ["id", "label", "start_min", "end_min", "capacity", "active"]
        read_only_fields = ["id"]
        # labels are unique across the replacement batch, checked below
        extra_kwargs = {"label": {"validators": []}}

    def validate(self, attrs):
        if attrs["end_min"] > 24 * 60:
            raise serializers.ValidationError({"end_min": "end_min must be within the day (<= 1440)."})
        if attrs["start_min"] >= attrs["end_min"]:
            raise serializers.ValidationError({"end_min": "end_min must be after start_min."})
        return attrs


class BlackoutDateSerializer(serializers.ModelSerializer):
    class Meta:
        model = BlackoutDate
        fields = ["id", "date", "reason"]
        read_only_fields = ["id"]
        extra_kwargs = {"date": {"validators": []}}


class SlotsReplaceSerializer(serializers.Serializer):
    slots = SlotTemplateSerializer(many=True)

    def validate_slots(self, value):
        labels = [row["label"].strip() for row in value]
        if len(labels) != len(set(labels)):
            raise serializers.ValidationError("Slot labels must be unique.")
        return value


class BlackoutsReplaceSerializer(serializers.Serializer):
    blackouts = BlackoutDateSerializer(many=True)

    def validate_blackouts(self, value):
        dates = [row["date"] for row in value]
        if len(dates) != len(set(dates)):
            raise serializers.ValidationError("Blackout dates must be unique.")
        return value


class QuoteRequestSerializer(serializers.Serializer):
    lat = serializers.FloatField(required=False, min_value=-90, max_value=90)
    lng = serializers.FloatField(required=False, min_value=-180, max_value=180)
    miles = serializers.FloatField(required=False, min_value=0)

    def validate(self, attrs):
        has_coords = attrs.get("lat") is not None and attrs.get("lng") is not None
        if attrs.get("miles") is None and not has_coords:
            raise serializers.ValidationError("Provide either miles or lat/lng.")
        return attrs


def delivery_config_payload():
    settings_obj = DeliverySettings.load()
    return {
        "settings": DeliverySettingsSerializer(settings_obj).data if settings_obj else None,
        "slots": SlotTemplateSerializer(SlotTemplate.objects.order_by("start_min"), many=True).data,
        "blackouts": BlackoutDateSerializer(BlackoutDate.objects.order_by("date"), many=True).data,
    }

from rest_framework import serializers

from .models import CateringItem, CateringOrder, Customer


class CustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = ["id", "name", "email", "is_guest"]


class CateringItemSerializer(serializers.ModelSerializer):
    quantity = serializers.IntegerField(min_value=1)
    price_cents = serializers.IntegerField(min_value=0, required=False, default=0)

    class Meta:
        model = CateringItem
        fields = ["id", "name", "quantity", "price_cents"]
        read_only_fields = ["id"]


class CateringOrderSerializer(serializers.ModelSerializer):
    customer = CustomerSerializer(read_only=True)
    items = CateringItemSerializer(many=True, read_only=True)

    class Meta:
        model = CateringOrder
        fields = [
            "id",
            "customer",
            "event_date",
            "guest_count",
            "special_requests",
            "status",
            "total_cents",
            "items",
            "created_at",
        ]
        read_only_fields = fields


class CateringContactSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=140, required=False, allow_blank=True, default="")
    email = serializers.EmailField()


class CateringRequestSerializer(serializers.Serializer):
    user = CateringContactSerializer()
    event_date = serializers.DateTimeField()
    guest_count = serializers.IntegerField(min_value=1)
    special_requests = serializers.CharField(required=False, allow_blank=True, default="")
    items = CateringItemSerializer(many=True, allow_empty=False)

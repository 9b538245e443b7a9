from rest_framework import serializers

from .models import DeliveryGroup, Order, OrderAddOn, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    line_total_cents = serializers.IntegerField(read_only=True)
    service_date = serializers.SerializerMethodField()

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "menu_item",
            "name",
            "variant_label",
            "quantity",
            "price_cents",
            "line_total_cents",
            "delivery_group",
            "service_date",
        ]

    def get_service_date(self, obj):
        group = obj.delivery_group
        return group.service_date.isoformat() if group else None


class OrderAddOnSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderAddOn
        fields = ["id", "add_on", "name", "quantity", "price_cents", "delivery_group"]


class DeliveryGroupSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    add_ons = OrderAddOnSerializer(many=True, read_only=True)

    class Meta:
        model = DeliveryGroup
        fields = ["id", "service_date", "slot_label", "items", "add_ons"]


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(source="order_items", many=True, read_only=True)
    add_ons = OrderAddOnSerializer(many=True, read_only=True)
    delivery_groups = DeliveryGroupSerializer(many=True, read_only=True)
    refundable_cents = serializers.IntegerField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "fulfillment",
            "status",
            "total_cents",
            "refunded_cents",
            "refundable_cents",
            "delivery_date",
            "delivery_slot",
            "address",
            "phone",
            "customer_name",
            "customer_email",
            "stripe_payment_intent_id",
            "email_sent_at",
            "items",
            "add_ons",
            "delivery_groups",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PaymentIntentRequestSerializer(serializers.Serializer):
    amount = serializers.IntegerField(min_value=1)
    name = serializers.CharField(max_length=140)
    email = serializers.EmailField()
    type = serializers.ChoiceField(choices=["delivery", "pickup"])
    metadata = serializers.DictField(required=False, default=dict)


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.CharField()


class RefundRequestSerializer(serializers.Serializer):
    amount_cents = serializers.IntegerField(required=False, allow_null=True)

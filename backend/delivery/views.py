import logging

from rest_framework import permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from accounts.permissions import ADMIN_PERMISSIONS
from utils.dates import to_date_key
from utils.pricing import haversine_miles, resolve_delivery_fee

from .models import DeliverySettings
from .serializers import (
    BlackoutDateSerializer,
    BlackoutsReplaceSerializer,
    DeliverySettingsSerializer,
    QuoteRequestSerializer,
    SlotsReplaceSerializer,
    SlotTemplateSerializer,
    delivery_config_payload,
)
from .services.slots import (
    DeliveryNotConfigured,
    replace_blackouts,
    replace_slots,
    slot_availability,
    upsert_settings,
)

LOGGER = logging.getLogger(__name__)


@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def delivery_config(request):
    return Response(delivery_config_payload())


@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def availability(request):
    """GET /api/availability/?date=YYYY-MM-DD"""
    raw = request.query_params.get("date")
    if not raw:
        return Response({"detail": "Missing `date`."}, status=status.HTTP_400_BAD_REQUEST)
    try:
        date_key = to_date_key(raw)
    except ValueError:
        return Response({"detail": "Invalid date (YYYY-MM-DD)."}, status=status.HTTP_400_BAD_REQUEST)

    try:
        slots = slot_availability(date_key)
    except DeliveryNotConfigured as exc:
        LOGGER.error("Availability requested for %s but delivery settings are missing", date_key)
        return Response({"detail": str(exc)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    return Response({"date": date_key, "slots": slots})


@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def delivery_quote(request):
    """
    POST /api/delivery/quote/ {lat, lng} or {miles}
    ``fee_cents`` is null and ``in_range`` false when the address can't be served.
    """
    serializer = QuoteRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    settings_obj = DeliverySettings.load()
    if settings_obj is None:
        return Response({"detail": "Delivery settings not configured"}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    miles = data.get("miles")
    if miles is None:
        if settings_obj.origin_lat is None or settings_obj.origin_lng is None:
            return Response(
                {"detail": "Delivery origin has no coordinates; send miles instead."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        miles = haversine_miles(settings_obj.origin_lat, settings_obj.origin_lng, data["lat"], data["lng"])

    fee = resolve_delivery_fee(miles, settings_obj.fee_tiers, settings_obj.max_radius_miles)
    return Response({"miles": round(float(miles), 2), "fee_cents": fee, "in_range": fee is not None})


# --------------------------------
# Admin
# --------------------------------

@api_view(["GET"])
@permission_classes(ADMIN_PERMISSIONS)
def admin_delivery_config(request):
    return Response(delivery_config_payload())


@api_view(["PUT"])
@permission_classes(ADMIN_PERMISSIONS)
def admin_delivery_settings(request):
    serializer = DeliverySettingsSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = dict(serializer.validated_data)
    data.setdefault("fee_tiers", [])
    obj = upsert_settings(**data)
    return Response(DeliverySettingsSerializer(obj).data)


@api_view(["PUT"])
@permission_classes(ADMIN_PERMISSIONS)
def admin_delivery_slots(request):
    serializer = SlotsReplaceSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    rows = [
        {**row, "label": row["label"].strip()} for row in serializer.validated_data["slots"]
    ]
    return Response(SlotTemplateSerializer(replace_slots(rows), many=True).data)


@api_view(["PUT"])
@permission_classes(ADMIN_PERMISSIONS)
def admin_delivery_blackouts(request):
    serializer = BlackoutsReplaceSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    rows = [dict(row) for row in serializer.validated_data["blackouts"]]
    return Response(BlackoutDateSerializer(replace_blackouts(rows), many=True).data)

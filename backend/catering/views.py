from rest_framework import permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from accounts.permissions import ADMIN_PERMISSIONS

from .models import CateringOrder
from .serializers import CateringOrderSerializer, CateringRequestSerializer
from .services.inquiries import create_catering_order


def _catering_queryset():
    return CateringOrder.objects.select_related("customer").prefetch_related("items")


@api_view(["POST"])
@permission_classes([permissions.AllowAny])
def submit_catering_order(request):
    serializer = CateringRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(
            {"detail": "Invalid data provided.", "errors": serializer.errors},
            status=status.HTTP_400_BAD_REQUEST,
        )

    order = create_catering_order(**serializer.validated_data)
    return Response(
        CateringOrderSerializer(_catering_queryset().get(id=order.id)).data,
        status=status.HTTP_201_CREATED,
    )


@api_view(["GET"])
@permission_classes(ADMIN_PERMISSIONS)
def admin_catering_orders(request):
    return Response(CateringOrderSerializer(_catering_queryset(), many=True).data)


@api_view(["GET"])
@permission_classes(ADMIN_PERMISSIONS)
def admin_catering_order_detail(request, order_id: int):
    order = _catering_queryset().filter(id=order_id).first()
    if not order:
        return Response({"detail": "Order not found."}, status=status.HTTP_404_NOT_FOUND)
    return Response(CateringOrderSerializer(order).data)

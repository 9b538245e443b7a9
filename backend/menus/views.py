import logging

from django.db import transaction
from django.db.models import Prefetch
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from accounts.permissions import ADMIN_PERMISSIONS
from utils.dates import to_date_key

from .models import AddOn, Category, MenuItem, MenuItemAddOn, MenuVariant
from .serializers import (
    AddOnLinkSerializer,
    AddOnSerializer,
    CategorySerializer,
    CopyWeekdaySerializer,
    MenuItemSerializer,
    MenuItemWriteSerializer,
    MenuVariantSerializer,
    StartWeekSerializer,
    VariantsReplaceSerializer,
    menu_meta,
    public_menu_item,
)
from .services.availability import compute_item_remaining
from .services.menus import (
    InvalidWeekdayError,
    SourceMenuMissingError,
    copy_weekday,
    find_menu,
    get_or_create_menu,
    parse_weekday,
    remove_menu_item,
    resolve_public_menu,
    start_week,
)

LOGGER = logging.getLogger(__name__)


def _item_queryset():
    return MenuItem.objects.select_related("category", "menu").prefetch_related(
        "variants",
        Prefetch("add_on_links", queryset=MenuItemAddOn.objects.select_related("add_on").order_by("id")),
    )


def _parse_optional_date(value, field):
    if not value:
        return None, None
    try:
        return to_date_key(value), None
    except ValueError:
        return None, Response({"detail": f"Invalid {field} (YYYY-MM-DD)."}, status=status.HTTP_400_BAD_REQUEST)


# --------------------------------
# Public
# --------------------------------

@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def menu_by_day(request):
    """
    GET /api/menus/by-day/?weekday=0..6[&date=YYYY-MM-DD][&week_of=YYYY-MM-DD]
    ``remaining`` is only computed when a concrete service date is given.
    """
    try:
        weekday = parse_weekday(request.query_params.get("weekday"))
    except InvalidWeekdayError as exc:
        return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

    date_key, error = _parse_optional_date(request.query_params.get("date"), "date")
    if error:
        return error
    week_of, error = _parse_optional_date(request.query_params.get("week_of"), "week_of")
    if error:
        return error

    menu = resolve_public_menu(weekday, week_of)
    items = []
    if menu is not None:
        items = [
            item
            for item in _item_queryset().filter(menu=menu, archived=False).order_by("id")
            if any(v.price_cents > 0 for v in item.variants.all())
        ]

    remaining = compute_item_remaining(items, date_key) if date_key else {}
    data = [public_menu_item(item, remaining.get(item.id)) for item in items]
    meta = {"weekday": weekday, "date": date_key, **menu_meta(menu)}
    if week_of and not meta["week_of"]:
        meta["requested_week_of"] = week_of
    return Response({"items": data, "meta": meta})


@api_view(["GET"])
@permission_classes([permissions.AllowAny])
def suggestions(request):
    """Add-ons linked to a menu item, used for cart upsells."""
    raw = request.query_params.get("item_id") or request.query_params.get("itemId")
    if not raw:
        return Response({"detail": "item_id required."}, status=status.HTTP_400_BAD_REQUEST)
    try:
        item_id = int(raw)
    except (TypeError, ValueError):
        return Response([])

    add_ons = AddOn.objects.filter(menu_item_links__menu_item_id=item_id).order_by("menu_item_links__id")
    return Response(AddOnSerializer(add_ons, many=True).data)


# --------------------------------
# Admin: menu items
# --------------------------------

@api_view(["GET"])
@permission_classes(ADMIN_PERMISSIONS)
def admin_menu_items(request):
    items = _item_queryset().order_by("-created_at")
    return Response(MenuItemSerializer(items, many=True).data)


@api_view(["GET"])
@permission_classes(ADMIN_PERMISSIONS)
def admin_menu_by_day(request):
    try:
        weekday = parse_weekday(request.query_params.get("weekday"))
    except InvalidWeekdayError as exc:
        return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
    week_of, error = _parse_optional_date(request.query_params.get("week_of"), "week_of")
    if error:
        return error

    menu = find_menu(weekday, week_of)
    items = _item_queryset().filter(menu=menu).order_by("id") if menu else []
    return Response({"items": MenuItemSerializer(items, many=True).data, "meta": menu_meta(menu)})


@api_view(["POST"])
@permission_classes(ADMIN_PERMISSIONS)
def admin_save_menu_item(request):
    serializer = MenuItemWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    menu = get_or_create_menu(data["weekday"], data.get("week_of"))
    fields = {
        "menu": menu,
        "name": data["name"],
        "description": (data.get("description") or "").strip(),
        "image_url": data.get("image_url") or "",
        "category_id": data.get("category_id"),
    }
    if "capacity_per_day" in data:
        fields["capacity_per_day"] = data["capacity_per_day"]

    item_id = data.get("id")
    if item_id:
        item = MenuItem.objects.filter(id=item_id).first()
        if not item:
            return Response({"detail": "Menu item not found."}, status=status.HTTP_404_NOT_FOUND)
        for key, value in fields.items():
            setattr(item, key, value)
        item.save()
        code = status.HTTP_200_OK
    else:
        item = MenuItem.objects.create(**fields)
        code = status.HTTP_201_CREATED

    item = _item_queryset().get(id=item.id)
    return Response(MenuItemSerializer(item).data, status=code)


@api_view(["DELETE"])
@permission_classes(ADMIN_PERMISSIONS)
def admin_delete_menu_item(request, item_id: int):
    item = MenuItem.objects.filter(id=item_id).first()
    if not item:
        return Response({"detail": "Menu item not found."}, status=status.HTTP_404_NOT_FOUND)

    if remove_menu_item(item):
        return Response({"ok": True, "soft_deleted": True})
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["PUT"])
@permission_classes(ADMIN_PERMISSIONS)
def admin_replace_variants(request, item_id: int):
    item = MenuItem.objects.filter(id=item_id).first()
    if not item:
        return Response({"detail": "Menu item not found."}, status=status.HTTP_404_NOT_FOUND)

    serializer = VariantsReplaceSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    with transaction.atomic():
        MenuVariant.objects.filter(menu_item=item).delete()
        MenuVariant.objects.bulk_create(
            [
                MenuVariant(menu_item=item, label=v["label"].strip(), price_cents=v["price_cents"])
                for v in serializer.validated_data["variants"]
            ]
        )

    fresh = MenuVariant.objects.filter(menu_item=item).order_by("id")
    return Response(MenuVariantSerializer(fresh, many=True).data)


@api_view(["PUT"])
@permission_classes(ADMIN_PERMISSIONS)
def admin_link_add_ons(request, item_id: int):
    item = MenuItem.objects.filter(id=item_id).first()
    if not item:
        return Response({"detail": "Menu item not found."}, status=status.HTTP_404_NOT_FOUND)

    serializer = AddOnLinkSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    with transaction.atomic():
        MenuItemAddOn.objects.filter(menu_item=item).delete()
        MenuItemAddOn.objects.bulk_create(
            [MenuItemAddOn(menu_item=item, add_on_id=add_on_id) for add_on_id in serializer.validated_data["add_on_ids"]]
        )
    return Response({"ok": True})


@api_view(["POST"])
@permission_classes(ADMIN_PERMISSIONS)
def admin_copy_weekday(request):
    serializer = CopyWeekdaySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        menu = copy_weekday(data["from_weekday"], data["to_weekday"], data["mode"])
    except SourceMenuMissingError as exc:
        return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)

    items = _item_queryset().filter(menu=menu, archived=False).order_by("id")
    return Response({"items": MenuItemSerializer(items, many=True).data})


@api_view(["POST"])
@permission_classes(ADMIN_PERMISSIONS)
def admin_start_week(request):
    serializer = StartWeekSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    monday, generated = start_week(data["week_of"], data.get("weekdays"))
    return Response({"ok": True, "week_of": monday.isoformat(), "weekdays": generated})


# --------------------------------
# Admin: categories / add-ons
# --------------------------------

class CategoryViewSet(viewsets.ModelViewSet):
    queryset = Category.objects.all().order_by("name")
    serializer_class = CategorySerializer
    permission_classes = ADMIN_PERMISSIONS


class AddOnViewSet(viewsets.ModelViewSet):
    queryset = AddOn.objects.all().order_by("name")
    serializer_class = AddOnSerializer
    permission_classes = ADMIN_PERMISSIONS

# backend/menus/services/menus.py
import logging

from django.db import transaction

from utils.dates import DAY_LABELS, start_of_week

from ..models import Menu, MenuItem, MenuItemAddOn, MenuVariant

LOGGER = logging.getLogger(__name__)


class MenuError(Exception):
    pass


class InvalidWeekdayError(MenuError):
    def __init__(self, value=None):
        super().__init__("Invalid weekday (0-6)")
        self.value = value


class SourceMenuMissingError(MenuError):
    pass


def parse_weekday(value) -> int:
    try:
        weekday = int(value)
    except (TypeError, ValueError):
        raise InvalidWeekdayError(value)
    if str(value).strip() != str(weekday) or not 0 <= weekday <= 6:
        raise InvalidWeekdayError(value)
    return weekday


def get_or_create_menu(weekday: int, week_of=None) -> Menu:
    """Template menu for the weekday, or that weekday's menu for the week of ``week_of``."""
    if week_of:
        monday = start_of_week(week_of)
        menu = Menu.objects.filter(service_day=weekday, week_of=monday).first()
        if not menu:
            menu = Menu.objects.create(
                name=f"{DAY_LABELS[weekday]} {monday.isoformat()}",
                service_day=weekday,
                week_of=monday,
                is_template=False,
                is_active=True,
            )
        return menu

    menu = Menu.objects.filter(service_day=weekday, is_template=True).first()
    if not menu:
        menu = Menu.objects.create(
            name=f"{DAY_LABELS[weekday]} Template",
            service_day=weekday,
            is_template=True,
            is_active=True,
        )
    return menu


def find_menu(weekday: int, week_of=None, active_only=False):
    qs = Menu.objects.filter(service_day=weekday)
    if active_only:
        qs = qs.filter(is_active=True)
    if week_of:
        return qs.filter(week_of=start_of_week(week_of)).first()
    return qs.filter(is_template=True).first()


def resolve_public_menu(weekday: int, week_of=None):
    """Week menu when one exists for ``week_of``, else the template, else any active menu."""
    if week_of:
        menu = find_menu(weekday, week_of, active_only=True)
        if menu:
            return menu
    menu = find_menu(weekday, active_only=True)
    if menu:
        return menu
    return Menu.objects.filter(service_day=weekday, is_active=True).order_by("id").first()


def remove_menu_item(item: MenuItem) -> bool:
    """
    Hard delete, unless orders reference the item: then it is only archived.
    Returns True for a soft delete.
    """
    if item.order_items.exists():
        if not item.archived:
            item.archived = True
            item.save(update_fields=["archived", "updated_at"])
        LOGGER.info("Menu item %s archived (has order history)", item.id)
        return True

    with transaction.atomic():
        MenuItemAddOn.objects.filter(menu_item=item).delete()
        MenuVariant.objects.filter(menu_item=item).delete()
        item.delete()
    return False


def clear_menu(menu: Menu):
    for item in list(menu.items.filter(archived=False)):
        remove_menu_item(item)


def clone_item(item: MenuItem, target: Menu) -> MenuItem:
    clone = MenuItem.objects.create(
        menu=target,
        category_id=item.category_id,
        name=item.name,
        description=item.description,
        image_url=item.image_url,
        capacity_per_day=item.capacity_per_day,
    )
    MenuVariant.objects.bulk_create(
        [MenuVariant(menu_item=clone, label=v.label, price_cents=v.price_cents) for v in item.variants.all()]
    )
    MenuItemAddOn.objects.bulk_create(
        [MenuItemAddOn(menu_item=clone, add_on_id=link.add_on_id) for link in item.add_on_links.all()]
    )
    return clone


def _source_items(menu: Menu):
    return list(
        menu.items.filter(archived=False)
        .order_by("id")
        .prefetch_related("variants", "add_on_links")
    )


def copy_weekday(from_weekday: int, to_weekday: int, mode: str = "append") -> Menu:
    source = Menu.objects.filter(service_day=from_weekday, is_template=True).first()
    if not source:
        source = Menu.objects.filter(service_day=from_weekday).order_by("id").first()
    if not source:
        raise SourceMenuMissingError("Source weekday has no menu")

    target = get_or_create_menu(to_weekday)
    with transaction.atomic():
        if mode == "replace":
            clear_menu(target)
        for item in _source_items(source):
            clone_item(item, target)
    return target


def start_week(week_of, weekdays=None):
    """Clone every weekday template into the week starting at ``start_of_week(week_of)``."""
    monday = start_of_week(week_of)
    only = set(weekdays) if weekdays is not None else None
    generated = []

    with transaction.atomic():
        for day in range(7):
            if only is not None and day not in only:
                continue
            template = Menu.objects.filter(service_day=day, is_template=True).first()
            if not template:
                continue
            target = get_or_create_menu(day, monday)
            clear_menu(target)
            for item in _source_items(template):
                clone_item(item, target)
            generated.append(day)

    LOGGER.info("Week %s generated for weekdays %s", monday.isoformat(), generated)
    return monday, generated

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import (
    AddOnViewSet,
    CategoryViewSet,
    admin_copy_weekday,
    admin_delete_menu_item,
    admin_link_add_ons,
    admin_menu_by_day,
    admin_menu_items,
    admin_replace_variants,
    admin_save_menu_item,
    admin_start_week,
)
from .views_uploads import upload_image

router = DefaultRouter()
router.register(r"categories", CategoryViewSet, basename="admin-categories")
router.register(r"addons", AddOnViewSet, basename="admin-addons")

urlpatterns = [
    path("menus/", admin_menu_items, name="admin-menu-items"),
    path("menus/by-day/", admin_menu_by_day, name="admin-menu-by-day"),
    path("menus/item/", admin_save_menu_item, name="admin-menu-item-save"),
    path("menus/copy/", admin_copy_weekday, name="admin-menu-copy"),
    path("menus/start-week/", admin_start_week, name="admin-menu-start-week"),
    path("menus/<int:item_id>/", admin_delete_menu_item, name="admin-menu-item-delete"),
    path("menus/<int:item_id>/variants/", admin_replace_variants, name="admin-menu-item-variants"),
    path("menus/<int:item_id>/addons/", admin_link_add_ons, name="admin-menu-item-addons"),
    path("uploads/", upload_image, name="admin-uploads"),
    path("", include(router.urls)),
]

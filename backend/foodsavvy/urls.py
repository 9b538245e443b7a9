from django.conf import settings
from django.contrib import admin
from django.db import connection
from django.db.utils import OperationalError, ProgrammingError
from django.http import JsonResponse
from django.urls import include, path, re_path
from django.views.static import serve

from foodsavvy.metrics import metrics_view
from orders.views import StripeWebhookView


def health(request):
    return JsonResponse({"status": "ok"})


def health_db(request):
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        return JsonResponse({"status": "ok", "db": "ok"})
    except (OperationalError, ProgrammingError):
        return JsonResponse({"status": "degraded", "db": "unavailable"}, status=503)


admin_api = [
    path("", include("accounts.urls")),
    path("", include("menus.urls_admin")),
    path("", include("delivery.urls_admin")),
    path("", include("orders.urls_admin")),
    path("", include("catering.urls_admin")),
]

urlpatterns = [
    path("health/", health, name="health"),
    path("health/db/", health_db, name="health-db"),
    path("metrics/", metrics_view, name="metrics"),
    path("django-admin/", admin.site.urls),

    path("api/admin/", include(admin_api)),
    path("api/", include("menus.urls")),
    path("api/", include("delivery.urls")),
    path("api/", include("orders.urls")),
    path("api/", include("catering.urls")),
    # legacy webhook endpoint still registered in the Stripe dashboard
    path("webhook/", StripeWebhookView.as_view(), name="stripe-webhook-legacy"),

    re_path(r"^uploads/(?P<path>.*)$", serve, {"document_root": settings.UPLOADS_DIR}),
]

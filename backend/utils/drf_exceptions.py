import logging

from django.db.utils import OperationalError, ProgrammingError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from orders.services.fulfillment import OrderError

LOGGER = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    JSON for order-domain errors and infra failures (DB down, migrations
    missing) instead of the default Django HTML 500 page.
    """
    response = exception_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, OrderError):
        return Response(
            {"detail": str(exc), "code": exc.code},
            status=exc.status_code,
        )

    if isinstance(exc, (OperationalError, ProgrammingError)):
        request = context.get("request")
        if request is not None:
            LOGGER.exception("Database error on %s %s", request.method, request.get_full_path())
        else:
            LOGGER.exception("Database error (no request in context)")

        return Response(
            {
                "detail": "Service unavailable (database). Please try again shortly.",
                "code": "db_unavailable",
            },
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    return None

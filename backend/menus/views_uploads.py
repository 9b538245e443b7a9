import logging
import os
import time

from django.conf import settings
from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response

from accounts.permissions import ADMIN_PERMISSIONS

LOGGER = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".gif"}
ALLOWED_IMAGE_TYPES = {"image/png", "image/jpeg", "image/webp", "image/gif"}


def _upload_name(original_name: str) -> str:
    ext = os.path.splitext(original_name or "")[1].lower()
    return f"{int(time.time() * 1000)}{ext}"


@api_view(["POST"])
@permission_classes(ADMIN_PERMISSIONS)
@parser_classes([MultiPartParser, FormParser])
def upload_image(request):
    """
    POST /api/admin/uploads/ (multipart, field ``file``)
    Stores the image under UPLOADS_DIR and returns its public path.
    """
    file_obj = request.FILES.get("file")
    if not file_obj:
        return Response({"detail": "No file uploaded."}, status=status.HTTP_400_BAD_REQUEST)

    ext = os.path.splitext(file_obj.name or "")[1].lower()
    content_type = (getattr(file_obj, "content_type", "") or "").lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS or content_type not in ALLOWED_IMAGE_TYPES:
        return Response(
            {"detail": "Only image uploads are allowed (png, jpg, jpeg, webp, gif)."},
            status=status.HTTP_400_BAD_REQUEST,
        )

    max_bytes = getattr(settings, "MAX_UPLOAD_BYTES", 5 * 1024 * 1024)
    if file_obj.size > max_bytes:
        return Response({"detail": "File too large (max 5MB)."}, status=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE)

    upload_dir = settings.UPLOADS_DIR
    os.makedirs(upload_dir, exist_ok=True)
    name = _upload_name(file_obj.name)
    with open(os.path.join(upload_dir, name), "wb") as fh:
        for chunk in file_obj.chunks():
            fh.write(chunk)

    LOGGER.info("Image uploaded: %s (%s bytes)", name, file_obj.size)
    return Response({"url": f"{settings.UPLOADS_URL}{name}"}, status=status.HTTP_201_CREATED)

# backend/accounts/serializers.py
import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.utils.crypto import constant_time_compare
from rest_framework import exceptions, serializers
from rest_framework_simplejwt.tokens import RefreshToken

LOGGER = logging.getLogger(__name__)

User = get_user_model()


def _admin_user(username: str):
    user, created = User.objects.get_or_create(
        username=username,
        defaults={"is_staff": True, "is_active": True},
    )
    if created:
        user.set_unusable_password()
        user.save(update_fields=["password"])
    elif not user.is_staff or not user.is_active:
        user.is_staff = True
        user.is_active = True
        user.save(update_fields=["is_staff", "is_active"])
    return user


class AdminLoginSerializer(serializers.Serializer):
    """Exchange the static admin credentials (from the environment) for a bearer token."""

    username = serializers.CharField()
    password = serializers.CharField(trim_whitespace=False)

    def validate(self, attrs):
        expected_user = getattr(settings, "ADMIN_USERNAME", "") or ""
        expected_password = getattr(settings, "ADMIN_PASSWORD", "") or ""

        if not expected_user or not expected_password:
            LOGGER.warning("Admin login attempted but ADMIN_USERNAME/ADMIN_PASSWORD are not configured.")
            raise exceptions.AuthenticationFailed("Invalid credentials.")

        user_ok = constant_time_compare(attrs["username"], expected_user)
        password_ok = constant_time_compare(attrs["password"], expected_password)
        if not (user_ok and password_ok):
            LOGGER.info("Admin login rejected for username=%s", attrs["username"])
            raise exceptions.AuthenticationFailed("Invalid credentials.")

        user = _admin_user(expected_user)
        refresh = RefreshToken.for_user(user)
        refresh["admin"] = True
        return {
            "token": str(refresh.access_token),
            "refresh": str(refresh),
        }

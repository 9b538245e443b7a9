from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenRefreshView

from .permissions import ADMIN_PERMISSIONS
from .serializers import AdminLoginSerializer


class AdminLoginView(APIView):
    """
    POST /api/admin/login/
    Body: { "username": "...", "password": "..." }
    Return: { "token": "<access>", "refresh": "<refresh>" }
    """

    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = AdminLoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(serializer.validated_data)


class AdminRefreshView(TokenRefreshView):
    permission_classes = [permissions.AllowAny]


class AdminMeView(APIView):
    permission_classes = ADMIN_PERMISSIONS

    def get(self, request):
        return Response({"username": request.user.username, "is_admin": True})

"""
Accounts app views.

All views follow the **Thin View** pattern: validate input via
serializers, delegate to the service layer, and return the result
wrapped in a DRF ``Response``.

View Map
--------
- ``LoginView`` — POST /auth/login/
- ``MeView``    — GET /me/
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import CustomTokenObtainPairSerializer, UserDetailSerializer


class LoginView(APIView):
    """
    POST /api/accounts/auth/login/

    Public endpoint.  Authenticates ``username`` + ``password`` and
    returns a JWT pair plus the user's profile.
    """

    permission_classes = [AllowAny]

    @extend_schema(
        request=CustomTokenObtainPairSerializer,
        responses={200: UserDetailSerializer},
        tags=["Auth"],
        summary="Obtain a JWT pair",
    )
    def post(self, request: Request) -> Response:
        serializer = CustomTokenObtainPairSerializer(
            data=request.data,
            context={"request": request},
        )
        serializer.is_valid(raise_exception=True)

        payload = dict(serializer.validated_data)
        payload["user"] = UserDetailSerializer(serializer.user).data

        return Response(payload, status=status.HTTP_200_OK)


class MeView(APIView):
    """
    GET /api/accounts/me/

    Returns the authenticated user's profile including role and the
    stations they are scoped to.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        responses={200: UserDetailSerializer},
        tags=["Auth"],
        summary="Current user profile",
    )
    def get(self, request: Request) -> Response:
        return Response(UserDetailSerializer(request.user).data, status=status.HTTP_200_OK)

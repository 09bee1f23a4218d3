"""
Accounts app serializers.

Login and profile serializers.  **No business logic** lives here; token
issuing and profile resolution are delegated to ``services.py``.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .services import AuthenticationService

User = get_user_model()


# ═══════════════════════════════════════════════════════════════════
#  Authentication Serializers
# ═══════════════════════════════════════════════════════════════════


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    SimpleJWT serializer that injects the station-scope claims
    (``role``, ``station_ids``) into the access token so the frontend
    can decide which stations to offer without a separate API call.
    """

    @classmethod
    def get_token(cls, user) -> Any:
        token = super().get_token(user)
        for claim, value in AuthenticationService.build_scope_claims(user).items():
            token[claim] = value
        return token


class StationSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    code = serializers.CharField()


class UserDetailSerializer(serializers.ModelSerializer):
    """
    Full user representation (used by login and ``me``).

    ``scope_stations`` lists the stations the user may act on; it is
    ``null`` for administrators, who are unrestricted.
    """

    role_display = serializers.CharField(source="get_role_display", read_only=True)
    is_admin = serializers.BooleanField(read_only=True)
    scope_stations = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "designation",
            "is_active",
            "date_joined",
            "role",
            "role_display",
            "is_admin",
            "scope_stations",
        ]
        read_only_fields = fields

    def get_scope_stations(self, obj) -> list[dict[str, Any]] | None:
        stations = AuthenticationService.get_scope_stations(obj)
        if stations is None:
            return None
        return StationSummarySerializer(stations, many=True).data

"""
Serializers for Account API endpoints.
"""

from rest_framework import serializers

from api.v1.admin.serializers import PrincipalDTOSerializer


class RedeemRequestSerializer(serializers.Serializer):
    """Serializer for redeem activation key request."""

    secret = serializers.CharField(max_length=64, trim_whitespace=True)


class RedemptionSerializer(serializers.Serializer):
    """Serializer for RedemptionDTO."""

    duration_days = serializers.IntegerField()
    subscription_expires_at = serializers.DateTimeField()


class ProfileSerializer(serializers.Serializer):
    """Serializer for ProfileDTO."""

    principal = PrincipalDTOSerializer()
    allowed_tabs = serializers.ListField(child=serializers.CharField())
    has_active_subscription = serializers.BooleanField()


class AccessCheckQuerySerializer(serializers.Serializer):
    """Serializer for access check query parameters."""

    tab = serializers.CharField()
    principal_id = serializers.UUIDField(required=False)


class AccessCheckResponseSerializer(serializers.Serializer):
    """Serializer for access check response."""

    allowed = serializers.BooleanField()


class CredentialsSerializer(serializers.Serializer):
    """Serializer for register and login requests."""

    username = serializers.CharField(max_length=150, trim_whitespace=True)
    password = serializers.CharField(max_length=128, trim_whitespace=False)


class SignedInSerializer(serializers.Serializer):
    """Serializer for a new session and the profile it belongs to."""

    token = serializers.CharField()
    profile = ProfileSerializer()

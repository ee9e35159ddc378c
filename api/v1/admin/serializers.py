"""
Serializers for Admin API endpoints.
"""

from rest_framework import serializers

from activation_keys.domain.activation_key import (
    MAX_DURATION_DAYS,
    MAX_NOTE_LENGTH,
    MIN_DURATION_DAYS,
)
from activation_keys.domain.key_issuer import MAX_BATCH_SIZE
from activation_keys.domain.key_store import DEFAULT_LIST_LIMIT


class GenerateKeysRequestSerializer(serializers.Serializer):
    """Serializer for generate activation keys request."""

    duration_days = serializers.IntegerField(
        min_value=MIN_DURATION_DAYS, max_value=MAX_DURATION_DAYS
    )
    count = serializers.IntegerField(min_value=1, max_value=MAX_BATCH_SIZE)
    note = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=MAX_NOTE_LENGTH
    )


class ListKeysQuerySerializer(serializers.Serializer):
    """Serializer for list activation keys query parameters."""

    limit = serializers.IntegerField(required=False, min_value=1, default=DEFAULT_LIST_LIMIT)


class ActivationKeyDTOSerializer(serializers.Serializer):
    """Serializer for ActivationKeyDTO."""

    id = serializers.IntegerField()
    secret = serializers.CharField()
    duration_days = serializers.IntegerField()
    note = serializers.CharField(allow_null=True)
    state = serializers.CharField()
    created_at = serializers.DateTimeField()
    used_by_principal_id = serializers.UUIDField(allow_null=True)
    used_at = serializers.DateTimeField(allow_null=True)
    revoked_at = serializers.DateTimeField(allow_null=True)


class GenerateKeysResponseSerializer(serializers.Serializer):
    """Serializer for generate activation keys response."""

    keys = ActivationKeyDTOSerializer(many=True)


class KeyStatsSerializer(serializers.Serializer):
    """Serializer for KeyStatsDTO."""

    total = serializers.IntegerField()
    active = serializers.IntegerField()
    used = serializers.IntegerField()
    revoked = serializers.IntegerField()


class GroupDTOSerializer(serializers.Serializer):
    """Serializer for GroupDTO."""

    id = serializers.IntegerField()
    name = serializers.CharField()
    allowed_tabs = serializers.ListField(child=serializers.CharField())


class SetGroupTabsRequestSerializer(serializers.Serializer):
    """
    Serializer for set group tabs request.

    Tags are checked against the tab enumeration by the domain, so an
    unknown tag is rejected rather than stored.
    """

    allowed_tabs = serializers.ListField(child=serializers.CharField(), allow_empty=True)


class CreateGroupRequestSerializer(serializers.Serializer):
    """Serializer for create group request."""

    name = serializers.CharField(max_length=100)
    allowed_tabs = serializers.ListField(
        child=serializers.CharField(), required=False, default=list
    )


class PrincipalDTOSerializer(serializers.Serializer):
    """Serializer for PrincipalDTO."""

    id = serializers.UUIDField()
    username = serializers.CharField()
    group_id = serializers.IntegerField()
    group_name = serializers.CharField(allow_null=True)
    subscription_expires_at = serializers.DateTimeField(allow_null=True)
    is_super_admin = serializers.BooleanField()
    created_at = serializers.DateTimeField()


class AssignGroupRequestSerializer(serializers.Serializer):
    """Serializer for assign principal group request."""

    group_id = serializers.IntegerField(min_value=1)

"""
Admin API views.

These endpoints are used by console administrators to:
- Issue, list and revoke activation keys
- Edit group permissions
- Reassign principals to groups
"""

import uuid

from asgiref.sync import async_to_sync
from django.conf import settings
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.infrastructure.repositories.django_principal_repository import (
    DjangoPrincipalRepository,
)
from access_groups.application.commands.group_commands import (
    AssignPrincipalGroupCommand,
    CreateGroupCommand,
    DeleteGroupCommand,
    SetAllowedTabsCommand,
)
from access_groups.application.handlers.group_handlers import (
    GroupCommandHandler,
    PrincipalQueryHandler,
)
from access_groups.domain.services import GroupRegistry
from access_groups.infrastructure.repositories.django_group_repository import (
    DjangoGroupRepository,
)
from activation_keys.application.commands.generate_keys import GenerateActivationKeysCommand
from activation_keys.application.commands.revoke_key import RevokeActivationKeyCommand
from activation_keys.application.handlers.key_issuance_handler import (
    GenerateActivationKeysHandler,
)
from activation_keys.application.handlers.key_lifecycle_handlers import (
    RevokeActivationKeyHandler,
)
from activation_keys.application.handlers.key_query_handlers import (
    ActivationKeyStatsHandler,
    ListActivationKeysHandler,
)
from activation_keys.application.queries.list_keys import ListActivationKeysQuery
from activation_keys.domain.key_issuer import KeyIssuer
from activation_keys.domain.key_store import KeyStore
from activation_keys.infrastructure.repositories.django_activation_key_repository import (
    DjangoActivationKeyRepository,
)
from api.permissions import AdminTabPermission, SuperAdminPermission
from api.v1.admin.serializers import (
    ActivationKeyDTOSerializer,
    AssignGroupRequestSerializer,
    CreateGroupRequestSerializer,
    GenerateKeysRequestSerializer,
    GenerateKeysResponseSerializer,
    GroupDTOSerializer,
    KeyStatsSerializer,
    ListKeysQuerySerializer,
    PrincipalDTOSerializer,
    SetGroupTabsRequestSerializer,
)
from core.infrastructure.events import event_bus
from core.instrumentation import Status, StatusCode, get_tracer

# Initialize repositories (in production, use DI container)
_key_repo = DjangoActivationKeyRepository()
_group_repo = DjangoGroupRepository()
_principal_repo = DjangoPrincipalRepository()
_key_store = KeyStore(_key_repo)

tracer = get_tracer(__name__)


def _group_registry() -> GroupRegistry:
    return GroupRegistry(
        group_repository=_group_repo,
        principal_repository=_principal_repo,
        event_bus=event_bus,
        protected_group_names=(settings.DEFAULT_GROUP_NAME, settings.SUBSCRIBER_GROUP_NAME),
    )


class GenerateActivationKeysView(APIView):
    """View for minting activation keys."""

    permission_classes = [AdminTabPermission]

    @extend_schema(
        operation_id="generate_activation_keys",
        summary="Generate Activation Keys",
        description="Mint a batch of activation keys. All keys are stored or none are.",
        tags=["Admin API"],
        request=GenerateKeysRequestSerializer,
        responses={
            201: GenerateKeysResponseSerializer,
            400: {"description": "Bad Request - duration or count out of bounds"},
            401: {"description": "Unauthorized - Missing or invalid session token"},
            403: {"description": "Forbidden - admin tab required"},
            503: {"description": "Storage failure - no keys were issued"},
        },
    )
    def post(self, request: Request) -> Response:
        """Generate activation keys."""
        return async_to_sync(self._handle_generate)(request)

    async def _handle_generate(self, request: Request) -> Response:
        """Async handler for generate activation keys."""
        with tracer.start_as_current_span("generate_activation_keys") as span:
            span.set_attribute("operation", "generate_activation_keys")

            serializer = GenerateKeysRequestSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            data = serializer.validated_data

            span.set_attribute("keys.count", data["count"])
            span.set_attribute("keys.duration_days", data["duration_days"])

            issuer = KeyIssuer(_key_store, prefix=settings.ACTIVATION_KEY_PREFIX)
            handler = GenerateActivationKeysHandler(issuer)
            keys = await handler.handle(
                GenerateActivationKeysCommand(
                    duration_days=data["duration_days"],
                    count=data["count"],
                    note=data.get("note"),
                )
            )

            span.set_status(Status(StatusCode.OK))
            return Response(
                GenerateKeysResponseSerializer({"keys": keys}).data,
                status=status.HTTP_201_CREATED,
            )


class ListActivationKeysView(APIView):
    """View for listing activation keys."""

    permission_classes = [AdminTabPermission]

    @extend_schema(
        operation_id="list_activation_keys",
        summary="List Activation Keys",
        description="Most recent keys first. The limit is capped at 2000.",
        tags=["Admin API"],
        parameters=[
            OpenApiParameter(
                name="limit",
                type=int,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Maximum number of keys (default 500)",
            ),
        ],
        responses={
            200: ActivationKeyDTOSerializer(many=True),
            401: {"description": "Unauthorized"},
            403: {"description": "Forbidden - admin tab required"},
        },
    )
    def get(self, request: Request) -> Response:
        """List activation keys."""
        return async_to_sync(self._handle_list)(request)

    async def _handle_list(self, request: Request) -> Response:
        """Async handler for list activation keys."""
        with tracer.start_as_current_span("list_activation_keys") as span:
            query_serializer = ListKeysQuerySerializer(data=request.query_params)
            query_serializer.is_valid(raise_exception=True)
            limit = query_serializer.validated_data["limit"]
            span.set_attribute("keys.limit", limit)

            keys = await ListActivationKeysHandler(_key_store).handle(
                ListActivationKeysQuery(limit=limit)
            )

            span.set_attribute("keys.returned", len(keys))
            return Response(ActivationKeyDTOSerializer(keys, many=True).data)


class ActivationKeyStatsView(APIView):
    """View for activation key summary counts."""

    permission_classes = [AdminTabPermission]

    @extend_schema(
        operation_id="activation_key_stats",
        summary="Activation Key Stats",
        description="Count of keys in total and per state.",
        tags=["Admin API"],
        responses={200: KeyStatsSerializer},
    )
    def get(self, request: Request) -> Response:
        """Return key counts."""
        stats = async_to_sync(ActivationKeyStatsHandler(_key_store).handle)()
        return Response(KeyStatsSerializer(stats).data)


class RevokeActivationKeyView(APIView):
    """View for revoking an unused activation key."""

    permission_classes = [AdminTabPermission]

    @extend_schema(
        operation_id="revoke_activation_key",
        summary="Revoke Activation Key",
        description="Revoke an active key. Used keys cannot be revoked.",
        tags=["Admin API"],
        request=None,
        responses={
            200: {"description": "Key revoked"},
            404: {"description": "Key not found"},
            409: {"description": "Key already used or already revoked"},
        },
    )
    def post(self, request: Request, key_id: int) -> Response:
        """Revoke an activation key."""
        return async_to_sync(self._handle_revoke)(request, key_id)

    async def _handle_revoke(self, request: Request, key_id: int) -> Response:
        """Async handler for revoke activation key."""
        with tracer.start_as_current_span("revoke_activation_key") as span:
            span.set_attribute("operation", "revoke_activation_key")
            span.set_attribute("key.id", key_id)

            await RevokeActivationKeyHandler(_key_store).handle(
                RevokeActivationKeyCommand(key_id=key_id)
            )

            span.set_status(Status(StatusCode.OK))
            return Response({}, status=status.HTTP_200_OK)


class GroupListView(APIView):
    """View for listing and creating groups."""

    def get_permissions(self):
        if self.request.method == "POST":
            return [SuperAdminPermission()]
        return [AdminTabPermission()]

    @extend_schema(
        operation_id="list_groups",
        summary="List Groups",
        description="All groups with their allowed tabs, ordered by id.",
        tags=["Admin API"],
        responses={200: GroupDTOSerializer(many=True)},
    )
    def get(self, request: Request) -> Response:
        """List groups."""
        groups = async_to_sync(GroupCommandHandler(_group_registry()).list_groups)()
        return Response(GroupDTOSerializer(groups, many=True).data)

    @extend_schema(
        operation_id="create_group",
        summary="Create Group",
        description="Create a group. Only super administrators may do this.",
        tags=["Admin API"],
        request=CreateGroupRequestSerializer,
        responses={
            201: GroupDTOSerializer,
            400: {"description": "Unknown tab or invalid name"},
            409: {"description": "Group name already taken"},
        },
    )
    def post(self, request: Request) -> Response:
        """Create a group."""
        return async_to_sync(self._handle_create)(request)

    async def _handle_create(self, request: Request) -> Response:
        """Async handler for create group."""
        with tracer.start_as_current_span("create_group") as span:
            serializer = CreateGroupRequestSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            group = await GroupCommandHandler(_group_registry()).create_group(
                CreateGroupCommand(
                    name=serializer.validated_data["name"],
                    allowed_tabs=serializer.validated_data["allowed_tabs"],
                )
            )
            span.set_attribute("group.id", group.id)
            return Response(GroupDTOSerializer(group).data, status=status.HTTP_201_CREATED)


class GroupDetailView(APIView):
    """View for replacing a group's tabs and deleting a group."""

    permission_classes = [SuperAdminPermission]

    @extend_schema(
        operation_id="set_group_tabs",
        summary="Set Group Tabs",
        description=(
            "Replace the full allowed tab set of a group. The new set is not "
            "merged with the previous one. Unknown tabs are rejected."
        ),
        tags=["Admin API"],
        request=SetGroupTabsRequestSerializer,
        responses={
            200: {"description": "Tabs replaced"},
            400: {"description": "Unknown tab"},
            403: {"description": "Forbidden - super administrator required"},
            404: {"description": "Group not found"},
        },
    )
    def put(self, request: Request, group_id: int) -> Response:
        """Replace a group's allowed tabs."""
        return async_to_sync(self._handle_set_tabs)(request, group_id)

    async def _handle_set_tabs(self, request: Request, group_id: int) -> Response:
        """Async handler for set group tabs."""
        with tracer.start_as_current_span("set_group_tabs") as span:
            span.set_attribute("operation", "set_group_tabs")
            span.set_attribute("group.id", group_id)

            serializer = SetGroupTabsRequestSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)

            await GroupCommandHandler(_group_registry()).set_allowed_tabs(
                SetAllowedTabsCommand(
                    group_id=group_id,
                    allowed_tabs=serializer.validated_data["allowed_tabs"],
                )
            )

            span.set_status(Status(StatusCode.OK))
            return Response({}, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="delete_group",
        summary="Delete Group",
        description=(
            "Delete a group. Refused while principals belong to it, and always "
            "refused for the default and subscriber groups."
        ),
        tags=["Admin API"],
        responses={
            204: {"description": "Group deleted"},
            404: {"description": "Group not found"},
            409: {"description": "Group in use"},
        },
    )
    def delete(self, request: Request, group_id: int) -> Response:
        """Delete a group."""
        async_to_sync(GroupCommandHandler(_group_registry()).delete_group)(
            DeleteGroupCommand(group_id=group_id)
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


class PrincipalListView(APIView):
    """View for listing principals."""

    permission_classes = [AdminTabPermission]

    @extend_schema(
        operation_id="list_principals",
        summary="List Principals",
        description="All principals with their group and subscription expiry.",
        tags=["Admin API"],
        responses={200: PrincipalDTOSerializer(many=True)},
    )
    def get(self, request: Request) -> Response:
        """List principals."""
        principals = async_to_sync(PrincipalQueryHandler(_group_registry()).list_principals)()
        return Response(PrincipalDTOSerializer(principals, many=True).data)


class PrincipalGroupView(APIView):
    """View for moving a principal to another group."""

    permission_classes = [SuperAdminPermission]

    @extend_schema(
        operation_id="assign_principal_group",
        summary="Assign Principal Group",
        description="Move a principal to another existing group.",
        tags=["Admin API"],
        request=AssignGroupRequestSerializer,
        responses={
            200: PrincipalDTOSerializer,
            404: {"description": "Principal or group not found"},
        },
    )
    def put(self, request: Request, principal_id: uuid.UUID) -> Response:
        """Assign a principal's group."""
        serializer = AssignGroupRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        principal = async_to_sync(PrincipalQueryHandler(_group_registry()).assign_group)(
            AssignPrincipalGroupCommand(
                principal_id=principal_id,
                group_id=serializer.validated_data["group_id"],
            )
        )
        return Response(PrincipalDTOSerializer(principal).data)

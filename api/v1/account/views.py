"""
Account API views.

Sign-up, login and logout, plus the endpoints used by signed-in
principals: redeeming an activation key, reading their own profile and
checking tab access.
"""

from asgiref.sync import async_to_sync
from django.conf import settings
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.domain.principal import Principal
from accounts.domain.services import AccountService, SignedIn
from accounts.infrastructure.repositories.django_credential_store import DjangoCredentialStore
from accounts.infrastructure.repositories.django_principal_repository import (
    DjangoPrincipalRepository,
)
from accounts.infrastructure.repositories.django_subscription_grantor import (
    DjangoSubscriptionGrantor,
)
from access_groups.application.dto.group_dto import PrincipalDTO, ProfileDTO
from access_groups.infrastructure.repositories.django_group_repository import (
    DjangoGroupRepository,
)
from activation_keys.application.commands.redeem_key import RedeemActivationKeyCommand
from activation_keys.application.handlers.key_lifecycle_handlers import (
    RedeemActivationKeyHandler,
)
from activation_keys.domain.key_redeemer import KeyRedeemer
from activation_keys.domain.key_store import KeyStore
from activation_keys.infrastructure.repositories.django_activation_key_repository import (
    DjangoActivationKeyRepository,
)
from api.permissions import (
    ActivateTabPermission,
    IsAuthenticatedPrincipal,
    access_gate,
    check_tab,
)
from api.v1.account.serializers import (
    AccessCheckQuerySerializer,
    AccessCheckResponseSerializer,
    CredentialsSerializer,
    ProfileSerializer,
    RedeemRequestSerializer,
    RedemptionSerializer,
    SignedInSerializer,
)
from core.domain.exceptions import AccessDeniedError, PrincipalNotFoundError
from core.domain.value_objects import FeatureTab
from core.infrastructure.events import event_bus
from core.instrumentation import Status, StatusCode, get_tracer
from core.middleware.auth import bearer_token

# Initialize repositories (in production, use DI container)
_key_store = KeyStore(DjangoActivationKeyRepository())
_principal_repo = DjangoPrincipalRepository()
_group_repo = DjangoGroupRepository()
_credential_store = DjangoCredentialStore()

tracer = get_tracer(__name__)


def _account_service() -> AccountService:
    return AccountService(
        principal_repository=_principal_repo,
        group_repository=_group_repo,
        credential_store=_credential_store,
        default_group_name=settings.DEFAULT_GROUP_NAME,
        subscriber_group_name=settings.SUBSCRIBER_GROUP_NAME,
        event_bus=event_bus,
    )


async def _profile_of(principal: Principal) -> ProfileDTO:
    group = await _group_repo.find_by_id(principal.group_id)
    tabs = await access_gate.allowed_tabs_for(principal.id)
    return ProfileDTO(
        principal=PrincipalDTO.from_entity(principal, group),
        allowed_tabs=[tab.value for tab in FeatureTab if tab in tabs],
        has_active_subscription=principal.has_active_subscription(),
    )


class RedeemActivationKeyView(APIView):
    """View for redeeming an activation key."""

    permission_classes = [ActivateTabPermission]

    @extend_schema(
        operation_id="redeem_activation_key",
        summary="Redeem Activation Key",
        description=(
            "Consume an activation key and extend the caller's subscription by "
            "its duration. Time stacks onto an unexpired subscription. Each key "
            "can be redeemed exactly once."
        ),
        tags=["Account API"],
        request=RedeemRequestSerializer,
        responses={
            200: RedemptionSerializer,
            400: {"description": "Bad Request - empty key"},
            401: {"description": "Unauthorized - Missing or invalid session token"},
            404: {"description": "Activation key is not valid"},
            409: {"description": "Key already used or revoked"},
            429: {"description": "Too many redemption attempts"},
            502: {"description": "Key consumed but subscription grant failed"},
        },
    )
    def post(self, request: Request) -> Response:
        """Redeem an activation key."""
        return async_to_sync(self._handle_redeem)(request)

    async def _handle_redeem(self, request: Request) -> Response:
        """Async handler for redeem activation key."""
        with tracer.start_as_current_span("redeem_activation_key") as span:
            span.set_attribute("operation", "redeem_activation_key")
            span.set_attribute("principal.id", str(request.principal_id))

            serializer = RedeemRequestSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)

            redeemer = KeyRedeemer(
                key_store=_key_store,
                principal_repository=_principal_repo,
                subscription_grantor=DjangoSubscriptionGrantor(),
                event_bus=event_bus,
            )
            try:
                redemption = await RedeemActivationKeyHandler(redeemer).handle(
                    RedeemActivationKeyCommand(
                        secret=serializer.validated_data["secret"],
                        principal_id=request.principal_id,
                    )
                )
            except Exception as e:
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                raise

            span.set_attribute("redemption.duration_days", redemption.duration_days)
            span.set_status(Status(StatusCode.OK))
            return Response(RedemptionSerializer(redemption).data, status=status.HTTP_200_OK)


class MeView(APIView):
    """View for the caller's own profile."""

    permission_classes = [IsAuthenticatedPrincipal]

    @extend_schema(
        operation_id="get_profile",
        summary="Get Profile",
        description="The caller's group, effective tabs and subscription expiry.",
        tags=["Account API"],
        responses={200: ProfileSerializer, 401: {"description": "Unauthorized"}},
    )
    def get(self, request: Request) -> Response:
        """Return the caller's profile."""
        return async_to_sync(self._handle_me)(request)

    async def _handle_me(self, request: Request) -> Response:
        principal = await _principal_repo.find_by_id(request.principal_id)
        if principal is None:
            raise PrincipalNotFoundError(f"Principal {request.principal_id} not found")
        return Response(ProfileSerializer(await _profile_of(principal)).data)


class AccessCheckView(APIView):
    """View for checking whether a principal may use a tab."""

    permission_classes = [IsAuthenticatedPrincipal]

    @extend_schema(
        operation_id="check_access",
        summary="Check Tab Access",
        description=(
            "Whether a principal's current group allows a tab. Checking "
            "another principal requires the admin tab. Unknown tabs answer false."
        ),
        tags=["Account API"],
        parameters=[
            OpenApiParameter(
                name="tab",
                type=str,
                location=OpenApiParameter.QUERY,
                required=True,
                description="Tab tag",
            ),
            OpenApiParameter(
                name="principal_id",
                type=str,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Principal to check (defaults to the caller)",
            ),
        ],
        responses={200: AccessCheckResponseSerializer},
    )
    def get(self, request: Request) -> Response:
        """Check tab access."""
        query_serializer = AccessCheckQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)
        data = query_serializer.validated_data

        principal_id = data.get("principal_id") or request.principal_id
        if str(principal_id) != str(request.principal_id) and not check_tab(
            request, FeatureTab.ADMIN
        ):
            raise AccessDeniedError("Checking another principal requires the admin tab")

        allowed = async_to_sync(access_gate.is_allowed)(principal_id, data["tab"])
        return Response(AccessCheckResponseSerializer({"allowed": allowed}).data)


def _signed_in_response(signed_in: SignedIn, status_code: int) -> Response:
    profile = async_to_sync(_profile_of)(signed_in.principal)
    return Response(
        SignedInSerializer({"token": signed_in.token, "profile": profile}).data,
        status=status_code,
    )


class RegisterView(APIView):
    """View for self-service sign-up."""

    permission_classes = []

    @extend_schema(
        operation_id="register",
        summary="Register",
        description=(
            "Create a principal in the default group and open a session. "
            "Usernames need at least 2 characters, passwords at least 4."
        ),
        tags=["Account API"],
        request=CredentialsSerializer,
        responses={
            201: SignedInSerializer,
            400: {"description": "Bad Request - username or password too short"},
            409: {"description": "Username already exists"},
        },
        auth=[],
    )
    def post(self, request: Request) -> Response:
        """Register a new principal."""
        with tracer.start_as_current_span("register") as span:
            span.set_attribute("operation", "register")
            serializer = CredentialsSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)

            signed_in = async_to_sync(_account_service().register)(
                serializer.validated_data["username"], serializer.validated_data["password"]
            )

            span.set_attribute("principal.id", str(signed_in.principal.id))
            return _signed_in_response(signed_in, status.HTTP_201_CREATED)


class LoginView(APIView):
    """View for signing in with a username and password."""

    permission_classes = []

    @extend_schema(
        operation_id="login",
        summary="Login",
        description="Check credentials and open a new session.",
        tags=["Account API"],
        request=CredentialsSerializer,
        responses={
            200: SignedInSerializer,
            401: {"description": "Invalid username or password"},
        },
        auth=[],
    )
    def post(self, request: Request) -> Response:
        """Sign in."""
        with tracer.start_as_current_span("login") as span:
            span.set_attribute("operation", "login")
            serializer = CredentialsSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)

            signed_in = async_to_sync(_account_service().login)(
                serializer.validated_data["username"], serializer.validated_data["password"]
            )

            span.set_attribute("principal.id", str(signed_in.principal.id))
            return _signed_in_response(signed_in, status.HTTP_200_OK)


class LogoutView(APIView):
    """View for invalidating the caller's session."""

    permission_classes = [IsAuthenticatedPrincipal]

    @extend_schema(
        operation_id="logout",
        summary="Logout",
        description="Invalidate the session token used for this request.",
        tags=["Account API"],
        request=None,
        responses={200: {"description": "Session closed"}, 401: {"description": "Unauthorized"}},
    )
    def post(self, request: Request) -> Response:
        """Close the current session."""
        async_to_sync(_account_service().logout)(bearer_token(request))
        return Response({}, status=status.HTTP_200_OK)

"""
Pytest configuration and shared fixtures.
"""

import uuid

import pytest

from accounts.domain.principal import Principal
from accounts.infrastructure.repositories.django_principal_repository import (
    DjangoPrincipalRepository,
)
from accounts.infrastructure.repositories.in_memory_principal_repository import (
    InMemoryCredentialStore,
    InMemoryPrincipalRepository,
    InMemorySubscriptionGrantor,
)
from access_groups.domain.group import Group
from access_groups.infrastructure.repositories.django_group_repository import (
    DjangoGroupRepository,
)
from access_groups.infrastructure.repositories.in_memory_group_repository import (
    InMemoryGroupRepository,
)
from activation_keys.domain.key_store import KeyStore
from activation_keys.infrastructure.repositories.django_activation_key_repository import (
    DjangoActivationKeyRepository,
)
from activation_keys.infrastructure.repositories.in_memory_activation_key_repository import (
    InMemoryActivationKeyRepository,
)
from core.infrastructure.events import InMemoryEventBus


class RecordingEventBus(InMemoryEventBus):
    """Event bus that keeps every published event."""

    def __init__(self):
        super().__init__()
        self.published = []

    async def publish(self, event):
        self.published.append(event)
        await super().publish(event)

    def of_type(self, event_type):
        return [e for e in self.published if isinstance(e, event_type)]


# In-memory fixtures for domain service tests


@pytest.fixture
def event_recorder():
    """Fixture for an event bus that records published events."""
    return RecordingEventBus()


@pytest.fixture
def memory_group_repository():
    """Fixture for InMemoryGroupRepository."""
    return InMemoryGroupRepository()


@pytest.fixture
def memory_principal_repository(memory_group_repository):
    """Fixture for InMemoryPrincipalRepository sharing the group repository."""
    principals = InMemoryPrincipalRepository(memory_group_repository)
    memory_group_repository.member_counter = principals.count_in_group_now
    return principals


@pytest.fixture
def memory_key_store():
    """Fixture for a KeyStore over InMemoryActivationKeyRepository."""
    return KeyStore(InMemoryActivationKeyRepository())


@pytest.fixture
async def seeded_groups(memory_group_repository):
    """The four standard groups, saved in the in-memory repository."""
    groups = {}
    for name, tabs in [
        ("user", ["dashboard", "settings"]),
        ("viewer", ["dashboard", "signals", "chart"]),
        ("admin", ["dashboard", "signals", "chart", "settings", "admin"]),
        ("pro", ["dashboard", "signals", "chart", "autotrade", "pnl", "activate"]),
    ]:
        groups[name] = await memory_group_repository.save(Group.create(name, tabs))
    return groups


@pytest.fixture
async def basic_principal(seeded_groups, memory_principal_repository):
    """A principal in the default group without a subscription."""
    principal = Principal.create(
        username=f"trader-{uuid.uuid4().hex[:8]}", group_id=seeded_groups["user"].id
    )
    return await memory_principal_repository.save(principal)


@pytest.fixture
def memory_grantor(seeded_groups, memory_principal_repository):
    """Fixture for InMemorySubscriptionGrantor promoting user -> pro."""
    return InMemorySubscriptionGrantor(
        memory_principal_repository,
        default_group_id=seeded_groups["user"].id,
        subscriber_group_id=seeded_groups["pro"].id,
    )


@pytest.fixture
def memory_credential_store(memory_principal_repository):
    """Fixture for InMemoryCredentialStore."""
    return InMemoryCredentialStore(memory_principal_repository)


# Django fixtures for integration tests


@pytest.fixture
def group_repository():
    """Fixture for DjangoGroupRepository."""
    return DjangoGroupRepository()


@pytest.fixture
def principal_repository():
    """Fixture for DjangoPrincipalRepository."""
    return DjangoPrincipalRepository()


@pytest.fixture
def key_repository():
    """Fixture for DjangoActivationKeyRepository."""
    return DjangoActivationKeyRepository()


@pytest.fixture
def make_principal(db):
    """
    Factory for principals saved in the database, with a session token.

    Returns ``(principal_model, raw_token)``. Seeded groups are looked up
    by name.
    """
    from accounts.infrastructure.models import Principal as PrincipalModel
    from accounts.infrastructure.models import Session
    from access_groups.infrastructure.models import AccessGroup

    def _make(group_name="user", is_super_admin=False, subscription_expires_at=None):
        group = AccessGroup.objects.get(name=group_name)
        principal = PrincipalModel.objects.create(
            username=f"{group_name}-{uuid.uuid4().hex[:8]}",
            group=group,
            is_super_admin=is_super_admin,
            subscription_expires_at=subscription_expires_at,
        )
        session = Session.objects.create(principal=principal)
        return principal, session._raw_token  # pylint: disable=protected-access

    return _make


@pytest.fixture
def api_client():
    """Fixture for DRF API client."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def auth_client(api_client):
    """Returns a function that authenticates the API client with a token."""

    def _auth(token):
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        return api_client

    return _auth

"""
Event handlers for domain events.

These handlers process domain events for side effects
like audit logging and metrics.
"""

import logging

from asgiref.sync import sync_to_async

from accounts.domain.events import PrincipalGroupChanged, PrincipalRegistered
from access_groups.domain.events import GroupCreated, GroupDeleted, GroupTabsChanged
from activation_keys.domain.events import (
    ActivationGrantFailed,
    ActivationKeyRedeemed,
    ActivationKeyRevoked,
    ActivationKeysIssued,
)
from core.domain.events import DomainEvent, EventHandler
from core.metrics import (
    activation_grant_failures_total,
    activation_keys_issued_total,
    activation_keys_redeemed_total,
    activation_keys_revoked_total,
    group_changes_total,
    principals_registered_total,
    subscriptions_downgraded_total,
)

logger = logging.getLogger(__name__)

AUDITED_EVENTS = (
    ActivationKeysIssued,
    ActivationKeyRedeemed,
    ActivationKeyRevoked,
    ActivationGrantFailed,
    GroupCreated,
    GroupTabsChanged,
    GroupDeleted,
    PrincipalGroupChanged,
    PrincipalRegistered,
)


class AuditLogEventHandler(EventHandler):
    """
    Event handler for audit logging.

    Writes every event to the AuditLog table.
    """

    async def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event for audit logging.

        Args:
            event: Domain event to log
        """
        from core.infrastructure.models import AuditLog

        logger.info(
            f"Audit log: {event.event_type} - {event.aggregate_id}",
            extra={
                "event_id": str(event.event_id),
                "event_type": event.event_type,
                "aggregate_id": event.aggregate_id,
                "occurred_at": event.occurred_at.isoformat(),
            },
        )
        # pylint: disable=no-member
        await sync_to_async(AuditLog.objects.create)(
            event_id=event.event_id,
            event_type=event.event_type,
            aggregate_id=event.aggregate_id,
            data=event.payload(),
            requires_reconciliation=isinstance(event, ActivationGrantFailed),
            occurred_at=event.occurred_at,
        )


class MetricsEventHandler(EventHandler):
    """Event handler that counts domain events in Prometheus."""

    async def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event for metrics.

        Args:
            event: Domain event
        """
        if isinstance(event, ActivationKeysIssued):
            activation_keys_issued_total.labels(duration_days=str(event.duration_days)).inc(
                len(event.key_ids)
            )
        elif isinstance(event, ActivationKeyRedeemed):
            activation_keys_redeemed_total.labels(duration_days=str(event.duration_days)).inc()
        elif isinstance(event, ActivationKeyRevoked):
            activation_keys_revoked_total.inc()
        elif isinstance(event, ActivationGrantFailed):
            activation_grant_failures_total.inc()
        elif isinstance(event, PrincipalGroupChanged):
            if event.reason == "subscription_expired":
                subscriptions_downgraded_total.inc()
            group_changes_total.labels(change="membership").inc()
        elif isinstance(event, PrincipalRegistered):
            principals_registered_total.inc()
        else:
            group_changes_total.labels(change=event.event_type).inc()


# Register event handlers
def register_event_handlers():
    """Register all event handlers with the event bus."""
    from core.infrastructure.events import event_bus

    audit_handler = AuditLogEventHandler()
    metrics_handler = MetricsEventHandler()

    for event_type in AUDITED_EVENTS:
        event_bus.subscribe(event_type, audit_handler)
        event_bus.subscribe(event_type, metrics_handler)

    logger.info("Event handlers registered")

"""
App configuration for Access Key Service.
"""

import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class AccessKeyServiceConfig(AppConfig):
    """App configuration for AccessKeyService."""

    name = "AccessKeyService"
    verbose_name = "Access Key Service"

    def ready(self):
        """Register event handlers and, when enabled, tracing export."""
        from core.infrastructure.event_handlers import register_event_handlers
        from core.instrumentation import otel_enabled, setup_opentelemetry

        register_event_handlers()

        if otel_enabled() and not getattr(self, "_otel_initialized", False):
            setup_opentelemetry()
            self._otel_initialized = True
            logger.info("Observability setup complete")

"""
Models for core app.

Models are in infrastructure/models.py to keep them with the adapters.
"""

from core.infrastructure.models import AuditLog  # noqa: F401

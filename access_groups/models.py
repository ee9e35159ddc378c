"""
Models for access_groups app.

Models are in infrastructure/models.py to keep them with the adapters.
"""

from access_groups.infrastructure.models import AccessGroup  # noqa: F401

"""
Models for accounts app.

Models are in infrastructure/models.py to keep them with the adapters.
"""

from accounts.infrastructure.models import Principal, Session  # noqa: F401

"""
Models for activation_keys app.

Models are in infrastructure/models.py to keep them with the adapters.
"""

from activation_keys.infrastructure.models import ActivationKey  # noqa: F401

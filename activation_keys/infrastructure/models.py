"""
Activation key model.
"""

from django.db import models
from django.utils import timezone


class ActivationKey(models.Model):
    """
    Activation key that grants subscription days once.

    ``state`` is the source of truth; ``used_at`` and ``revoked_at`` record
    when the terminal transition happened.
    """

    STATE_CHOICES = [
        ("active", "Active"),
        ("used", "Used"),
        ("revoked", "Revoked"),
    ]

    secret = models.CharField(max_length=64, unique=True, editable=False)
    secret_hash = models.CharField(
        max_length=64,
        unique=True,
        editable=False,
        help_text="SHA-256 of the secret, used for redemption lookups",
    )
    duration_days = models.PositiveIntegerField(help_text="Subscription days granted")
    note = models.CharField(max_length=500, null=True, blank=True)
    state = models.CharField(max_length=10, choices=STATE_CHOICES, default="active")
    used_by_principal_id = models.UUIDField(null=True, blank=True)
    used_at = models.DateTimeField(null=True, blank=True)
    revoked_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        app_label = "activation_keys"
        db_table = "activation_keys"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["state"], name="activation_keys_state_idx"),
            models.Index(fields=["-created_at"], name="activation_keys_created_idx"),
        ]

    def __str__(self):
        return f"{self.secret} ({self.state})"

"""
Principal and Session models.
"""

import hashlib
import secrets
import uuid

from django.db import models


class Principal(models.Model):
    """
    An account that signs in to the console.

    Group membership decides which feature tabs the account may use.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    username = models.CharField(max_length=150, unique=True)
    password = models.CharField(
        max_length=128,
        blank=True,
        default="",
        help_text="Django password hash; empty for operator-created principals",
    )
    group = models.ForeignKey(
        "access_groups.AccessGroup",
        on_delete=models.PROTECT,
        related_name="principals",
    )
    subscription_expires_at = models.DateTimeField(null=True, blank=True)
    is_super_admin = models.BooleanField(
        default=False,
        help_text="May edit group permissions",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "accounts"
        db_table = "principals"
        ordering = ["created_at"]
        indexes = [
            models.Index(
                fields=["group", "subscription_expires_at"],
                name="principals_group_expiry_idx",
            ),
        ]

    def __str__(self):
        return self.username


class Session(models.Model):
    """
    Bearer session token for a principal.

    Only the SHA-256 hash of the token is stored.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    principal = models.ForeignKey(Principal, on_delete=models.CASCADE, related_name="sessions")
    token_prefix = models.CharField(max_length=8, editable=False)
    token_hash = models.CharField(max_length=64, unique=True, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    last_used_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        app_label = "accounts"
        db_table = "sessions"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.principal.username} - {self.token_prefix}..."

    @staticmethod
    def hash_token(raw_token: str) -> str:
        """Hash a raw bearer token for storage and lookup."""
        return hashlib.sha256(raw_token.encode()).hexdigest()

    def save(self, *args, **kwargs):
        """Generate the token on first save."""
        if not self.token_hash:
            raw_token = secrets.token_urlsafe(32)
            self.token_prefix = raw_token[:8]
            self.token_hash = self.hash_token(raw_token)
            # Store the raw token temporarily for retrieval
            self._raw_token = raw_token
        super().save(*args, **kwargs)

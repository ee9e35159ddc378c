"""
Access group model.
"""

from django.db import models


class AccessGroup(models.Model):
    """
    Named permission set.

    ``allowed_tabs`` holds feature tab tags sorted in enumeration order;
    only membership is meaningful.
    """

    name = models.CharField(max_length=100, unique=True, help_text="Group display label")
    allowed_tabs = models.JSONField(
        default=list,
        blank=True,
        help_text="Feature tabs members of this group may use",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "access_groups"
        db_table = "groups"
        ordering = ["id"]

    def __str__(self):
        return self.name

    def clean(self):
        """Validate stored tab tags."""
        from django.core.exceptions import ValidationError

        from core.domain.exceptions import InvalidArgumentError
        from core.domain.value_objects import FeatureTab

        if not isinstance(self.allowed_tabs, list):
            raise ValidationError("Allowed tabs must be a list")
        try:
            FeatureTab.parse_many(self.allowed_tabs)
        except InvalidArgumentError as e:
            raise ValidationError(e.message) from e

from django.conf import settings
from django.db import models
from django.db.models import Q
import uuid

from files.models import ResourceType


class Role(models.TextChoices):
    VIEWER = "viewer", "Viewer"
    EDITOR = "editor", "Editor"
    ADMIN = "admin", "Admin"


ROLE_RANK = {Role.VIEWER: 1, Role.EDITOR: 2, Role.ADMIN: 3}


def role_rank(role):
    return ROLE_RANK.get(role, 0)


def role_satisfies(held, required):
    return held is not None and role_rank(held) >= role_rank(required)


class AccessGrant(models.Model):
    uid = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='access_grants')
    resource_id = models.UUIDField()
    resource_type = models.CharField(max_length=10, choices=ResourceType.choices)
    role = models.CharField(max_length=10, choices=Role.choices)
    granted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='issued_grants'
    )
    granted_at = models.DateTimeField(auto_now_add=True)
    is_active = models.BooleanField(default=True)
    revoked_at = models.DateTimeField(null=True, blank=True)
    revoked_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    updated_at = models.DateTimeField(null=True, blank=True)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user", "resource_id", "resource_type"],
                condition=Q(is_active=True),
                name="unique_active_grant",
            ),
        ]
        indexes = [
            models.Index(fields=["resource_id", "resource_type", "is_active"], name="grant_resource_idx"),
            models.Index(fields=["user", "is_active"], name="grant_user_idx"),
        ]


class Share(models.Model):
    """
    History entry mirroring one AccessGrant.

    ``shared_by_name`` and ``shared_with_name`` hold the display names as they
    were when the share was made and are never refreshed.
    """

    uid = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    grant = models.OneToOneField(AccessGrant, on_delete=models.CASCADE, related_name='share')
    resource_id = models.UUIDField()
    resource_type = models.CharField(max_length=10, choices=ResourceType.choices)
    shared_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='shares_made')
    shared_with = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='shares_received')
    shared_by_name = models.CharField(max_length=255, blank=True, default="")
    shared_with_name = models.CharField(max_length=255, blank=True, default="")
    role = models.CharField(max_length=10, choices=Role.choices)
    inherit_to_children = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    shared_at = models.DateTimeField(auto_now_add=True)
    revoked_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-shared_at"]
        indexes = [
            models.Index(fields=["shared_by", "is_active"], name="share_by_idx"),
            models.Index(fields=["shared_with", "is_active"], name="share_with_idx"),
        ]

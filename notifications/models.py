from django.conf import settings
from django.db import models
import uuid


class NotificationKind(models.TextChoices):
    FILE_SHARED = "file_shared", "File shared"
    FOLDER_SHARED = "folder_shared", "Folder shared"
    SHARE_UPDATED = "share_updated", "Share updated"
    SHARE_REVOKED = "share_revoked", "Share revoked"


class Notification(models.Model):
    uid = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    recipient = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications')
    type = models.CharField(max_length=50, choices=NotificationKind.choices)
    title = models.CharField(max_length=255)
    message = models.TextField()
    related_item_id = models.UUIDField(null=True, blank=True)
    related_item_type = models.CharField(max_length=10, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    read = models.BooleanField(default=False)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["recipient", "read"], name="notification_unread_idx"),
        ]

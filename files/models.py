from django.conf import settings
from django.db import models
import uuid


class ResourceType(models.TextChoices):
    FILE = "file", "File"
    FOLDER = "folder", "Folder"


class Folder(models.Model):
    uid = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='folders')
    name = models.CharField(max_length=255)
    parent = models.ForeignKey('self', on_delete=models.CASCADE, null=True, blank=True, related_name='children')
    # materialized "A/B/C"; written only by create and rename
    path = models.TextField()
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    resource_type = ResourceType.FOLDER

    class Meta:
        indexes = [
            models.Index(fields=["owner", "parent", "is_deleted"], name="folder_owner_parent_idx"),
            models.Index(fields=["parent", "name"], name="folder_parent_name_idx"),
            models.Index(fields=["is_deleted", "deleted_at"], name="folder_trash_idx"),
        ]

    def __str__(self):
        return self.path

    @property
    def is_active(self):
        return not self.is_deleted


class File(models.Model):
    uid = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='files')
    name = models.CharField(max_length=255)
    folder = models.ForeignKey(Folder, on_delete=models.CASCADE, null=True, blank=True, related_name='files')
    size = models.BigIntegerField(default=0)
    mime_type = models.CharField(max_length=255, default="application/octet-stream")
    extension = models.CharField(max_length=20, blank=True, default="")
    storage_key = models.CharField(max_length=1024)
    storage_id = models.CharField(max_length=255, blank=True, default="")
    version = models.IntegerField(default=1)
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    resource_type = ResourceType.FILE

    class Meta:
        indexes = [
            models.Index(fields=["owner", "folder", "is_deleted"], name="file_owner_folder_idx"),
            models.Index(fields=["folder", "name"], name="file_folder_name_idx"),
            models.Index(fields=["is_deleted", "deleted_at"], name="file_trash_idx"),
        ]

    def __str__(self):
        return self.name

    @property
    def is_active(self):
        return not self.is_deleted

    @property
    def parent(self):
        return self.folder

    @property
    def path(self):
        return f"{self.folder.path}/{self.name}" if self.folder_id else self.name

    @property
    def storage_handle(self):
        from files.storage import StorageHandle
        return StorageHandle(key=self.storage_key, blob_id=self.storage_id)


class FileVersion(models.Model):
    """A previous revision of a file, kept with its own storage handle."""

    uid = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    file = models.ForeignKey(File, on_delete=models.CASCADE, related_name='versions')
    version_number = models.IntegerField()
    size = models.BigIntegerField(default=0)
    storage_key = models.CharField(max_length=1024)
    storage_id = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField()
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True)

    class Meta:
        ordering = ["-version_number"]
        indexes = [
            models.Index(fields=["file", "version_number"], name="fileversion_file_number_idx"),
        ]

    @property
    def storage_handle(self):
        from files.storage import StorageHandle
        return StorageHandle(key=self.storage_key, blob_id=self.storage_id)

import logging
import mimetypes
import uuid
from dataclasses import dataclass
from pathlib import Path

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Sum

from drive_backend.exceptions import DependencyError, QuotaExceededError, ValidationError
from files.models import File, FileVersion, ResourceType
from files.services.tree import FolderService, sibling_files, validate_name
from files.storage import build_storage_key, get_storage
from sharing.models import Role
from sharing.services.permissions import resolver

logger = logging.getLogger(__name__)


@dataclass
class UploadItem:
    name: str
    fileobj: object
    size: int
    content_type: str = ""
    relative_path: str = ""

    @property
    def folder_path(self):
        """Directory part of ``relative_path`` ("a/b/report.pdf" -> "a/b")."""
        parts = [p for p in self.relative_path.replace("\\", "/").split("/") if p]
        return "/".join(parts[:-1])

    @property
    def mime_type(self):
        return self.content_type or mimetypes.guess_type(self.name)[0] or "application/octet-stream"


def used_storage(user):
    return File.objects.filter(owner=user, is_deleted=False).aggregate(total=Sum("size"))["total"] or 0


def check_quota(user, incoming_bytes):
    used = used_storage(user)
    if used + incoming_bytes > user.storage_quota:
        raise QuotaExceededError(
            f"Upload of {incoming_bytes} bytes exceeds the storage quota "
            f"({used} of {user.storage_quota} bytes used)."
        )
    return used


class UploadService:
    def __init__(self, storage=None):
        self._storage = storage
        self.folders = FolderService(storage=storage)

    @property
    def storage(self):
        return self._storage or get_storage()

    def _validate(self, uploads):
        if not uploads:
            raise ValidationError("No files were provided.")
        total = 0
        for item in uploads:
            item.name = validate_name(Path(item.name).name, "File name")
            if item.size > settings.MAX_FILE_SIZE:
                raise QuotaExceededError(
                    f"'{item.name}' is larger than the {settings.MAX_FILE_SIZE} byte file size limit."
                )
            total += item.size
        return total

    def upload_files(self, owner, uploads, folder_id=None):
        """
        Store ``uploads`` for ``owner`` in ``folder_id`` (or the root).

        Limits and the quota are checked for the whole batch before anything is
        written to storage, and the quota once more with the owner row locked
        before any file is recorded. A name that already exists in the target folder
        becomes a new version of that file.
        """
        base_folder = None
        if folder_id:
            base_folder = resolver.require(owner, folder_id, ResourceType.FOLDER, Role.EDITOR)
        total = self._validate(uploads)
        check_quota(owner, total)

        storage = self.storage
        written = []
        try:
            for item in uploads:
                key = build_storage_key(owner.uid, uuid.uuid4(), item.name)
                written.append((item, storage.put(item.fileobj, key, item.mime_type)))

            with transaction.atomic():
                # serializes concurrent uploads of one owner; the early check ran unlocked
                check_quota(get_user_model().objects.select_for_update().get(pk=owner.pk), total)
                results = [
                    self._record_upload(owner, base_folder, item, handle)
                    for item, handle in written
                ]
        except Exception:
            self._discard_blobs(handle for _, handle in written)
            raise

        logger.info("Stored %d files (%d bytes) for %s", len(results), total, owner.pk)
        return results

    def _record_upload(self, owner, base_folder, item, handle):
        folder = base_folder
        if item.folder_path:
            folder = self.folders.get_or_create_folder_path(item.folder_path, owner, base_folder)

        existing = sibling_files(owner, folder).filter(name=item.name).select_for_update().first()
        if existing is not None:
            FileVersion.objects.create(
                file=existing,
                version_number=existing.version,
                size=existing.size,
                storage_key=existing.storage_key,
                storage_id=existing.storage_id,
                created_at=existing.updated_at,
                created_by=owner,
            )
            existing.size = item.size
            existing.mime_type = item.mime_type
            existing.storage_key = handle.key
            existing.storage_id = handle.blob_id
            existing.version += 1
            existing.save()
            return existing

        return File.objects.create(
            owner=owner,
            name=item.name,
            folder=folder,
            size=item.size,
            mime_type=item.mime_type,
            extension=Path(item.name).suffix.lower()[:20],
            storage_key=handle.key,
            storage_id=handle.blob_id,
        )

    def _discard_blobs(self, handles):
        for handle in handles:
            try:
                self.storage.delete(handle)
            except DependencyError:
                logger.warning("Could not remove orphaned upload %s", handle.key, exc_info=True)

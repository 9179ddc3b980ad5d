import logging
from dataclasses import dataclass
from datetime import timedelta
from heapq import merge

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from drive_backend.exceptions import ConflictError, DependencyError, DriveError, NotFoundError, ValidationError
from drive_backend.results import BulkResult
from files.models import File, FileVersion, Folder, ResourceType
from files.services.tree import collect_subtree, sibling_files, sibling_folders
from files.storage import get_storage
from sharing.models import AccessGrant, Share
from sharing.services.permissions import parse_resource_type, parse_uuid

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 200


def retention_period():
    return timedelta(days=settings.TRASH_RETENTION_DAYS)


@dataclass
class TrashItem:
    id: str
    type: str
    name: str
    original_path: str
    owner_id: str
    size: int
    deleted_at: object

    @property
    def auto_purge_at(self):
        return self.deleted_at + retention_period()

    @classmethod
    def from_folder(cls, folder):
        return cls(str(folder.uid), ResourceType.FOLDER, folder.name, folder.path, str(folder.owner_id), 0, folder.deleted_at)

    @classmethod
    def from_file(cls, file):
        return cls(str(file.uid), ResourceType.FILE, file.name, file.path, str(file.owner_id), file.size, file.deleted_at)


class TrashService:
    def __init__(self, storage=None):
        self._storage = storage

    @property
    def storage(self):
        return self._storage or get_storage()

    # Listing

    def _trashed_folders(self, user):
        return Folder.objects.filter(owner=user, is_deleted=True).order_by("-deleted_at", "path")

    def _trashed_files(self, user):
        return (
            File.objects.filter(owner=user, is_deleted=True)
            .select_related("folder")
            .order_by("-deleted_at", "name")
        )

    def list_items(self, user, item_type=None, limit=50, offset=0):
        """
        Every soft-deleted folder and file owned by ``user``, most recently
        deleted first. Items inside a trashed folder are listed too; restoring
        one of them directly is refused until the folder comes back.
        """
        if item_type:
            parse_resource_type(item_type)
        if limit < 1 or offset < 0:
            raise ValidationError("limit must be positive and offset non-negative.")
        limit = min(limit, MAX_PAGE_SIZE)
        window = offset + limit

        sources, total = [], 0
        if item_type in (None, ResourceType.FOLDER):
            folders = self._trashed_folders(user)
            total += folders.count()
            sources.append(TrashItem.from_folder(f) for f in folders[:window])
        if item_type in (None, ResourceType.FILE):
            files = self._trashed_files(user)
            total += files.count()
            sources.append(TrashItem.from_file(f) for f in files[:window])

        items = list(merge(*sources, key=lambda item: item.deleted_at, reverse=True))
        return {"items": items[offset:window], "total": total, "limit": limit, "offset": offset}

    # Restore

    def _load_trashed(self, item_id, item_type, user):
        item_id = parse_uuid(item_id, "item id")
        model = Folder if parse_resource_type(item_type) == ResourceType.FOLDER else File
        item = model.objects.filter(uid=item_id, is_deleted=True, owner=user).first()
        if item is None:
            raise NotFoundError(f"{item_type.capitalize()} not found in trash.")
        return item

    def restore(self, item_id, item_type, user):
        item = self._load_trashed(item_id, item_type, user)
        parent = item.parent
        if parent is not None and parent.is_deleted:
            raise ConflictError(
                f"Cannot restore '{item.name}': its parent folder '{parent.name}' is in the trash. "
                "Restore the parent folder first."
            )

        if isinstance(item, Folder):
            siblings = sibling_folders(item.owner, parent)
        else:
            siblings = sibling_files(item.owner, parent)
        if siblings.filter(name=item.name).exists():
            raise ConflictError(f"An item named '{item.name}' already exists in the original location.")

        with transaction.atomic():
            if isinstance(item, Folder):
                folder_ids = [item.uid] + [f.uid for f in collect_subtree(item, is_deleted=True)]
                Folder.objects.filter(uid__in=folder_ids).update(is_deleted=False, deleted_at=None, updated_at=timezone.now())
                files = File.objects.filter(folder_id__in=folder_ids, is_deleted=True)
                file_count = files.update(is_deleted=False, deleted_at=None, updated_at=timezone.now())
                logger.info("Restored folder %s with %d folders and %d files", item.uid, len(folder_ids), file_count)
            else:
                File.objects.filter(uid=item.uid).update(is_deleted=False, deleted_at=None, updated_at=timezone.now())
                logger.info("Restored file %s", item.uid)

        item.refresh_from_db()
        return item

    def restore_many(self, items, user):
        result = BulkResult()
        if len(items) > settings.MAX_BULK_ITEMS:
            raise ValidationError(f"At most {settings.MAX_BULK_ITEMS} items can be restored at once.")
        for entry in items:
            item_id = entry.get("id")
            try:
                restored = self.restore(item_id, entry.get("type"), user)
                result.add_success(restored.uid, type=restored.resource_type, name=restored.name)
            except DriveError as exc:
                result.add_failure(item_id, exc)
        return result

    # Purge

    def _delete_blobs(self, files):
        storage = self.storage
        handles = []
        for file in files:
            handles.append(file.storage_handle)
        for version in FileVersion.objects.filter(file__in=files):
            handles.append(version.storage_handle)
        failures = 0
        for handle in handles:
            try:
                storage.delete(handle)
            except DependencyError as exc:
                failures += 1
                logger.warning("Orphaned blob %s left behind during purge: %s", handle.key, exc)
        return failures

    def _purge(self, item):
        if isinstance(item, Folder):
            folder_ids = [item.uid] + [f.uid for f in collect_subtree(item)]
            files = list(File.objects.filter(folder_id__in=folder_ids))
        else:
            folder_ids = []
            files = [item]
        file_ids = [f.uid for f in files]

        self._delete_blobs(files)

        now = timezone.now()
        with transaction.atomic():
            targets = Q(resource_type=ResourceType.FILE, resource_id__in=file_ids)
            if folder_ids:
                targets |= Q(resource_type=ResourceType.FOLDER, resource_id__in=folder_ids)
            AccessGrant.objects.filter(targets, is_active=True).update(is_active=False, revoked_at=now)
            Share.objects.filter(targets, is_active=True).update(is_active=False, revoked_at=now)
            File.objects.filter(uid__in=file_ids).delete()
            if folder_ids:
                Folder.objects.filter(uid__in=folder_ids).delete()

        count = len(folder_ids) + len(file_ids)
        logger.info("Purged %s %s (%d items)", item.resource_type, item.uid, count)
        return count

    def purge(self, item_id, item_type, user):
        return self._purge(self._load_trashed(item_id, item_type, user))

    def _purge_candidates(self, folders, files):
        count = 0
        # shallowest first so a parent's purge removes its trashed children in one pass
        for folder in sorted(folders, key=lambda f: f.path.count("/")):
            current = Folder.objects.filter(uid=folder.uid, is_deleted=True).first()
            if current is not None:
                count += self._purge(current)
        for file in files:
            current = File.objects.filter(uid=file.uid, is_deleted=True).first()
            if current is not None:
                count += self._purge(current)
        return count

    def purge_all(self, user):
        count = self._purge_candidates(
            list(Folder.objects.filter(owner=user, is_deleted=True)),
            list(File.objects.filter(owner=user, is_deleted=True)),
        )
        logger.info("Emptied trash for %s: %d items", user.pk, count)
        return count

    def auto_purge_expired_items(self, now=None):
        cutoff = (now or timezone.now()) - retention_period()
        count = self._purge_candidates(
            list(Folder.objects.filter(is_deleted=True, deleted_at__lte=cutoff)),
            list(File.objects.filter(is_deleted=True, deleted_at__lte=cutoff)),
        )
        if count:
            logger.info("Trash sweep purged %d items deleted before %s", count, cutoff.isoformat())
        return count

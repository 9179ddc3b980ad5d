"""
Folder and file structure operations.

Every cascading operation (delete, restore, purge, rename, share propagation,
zip export) walks a subtree with ``iter_subtree_levels``: one query per tree
level on ``parent_id``. Folder paths are materialized and rewritten for the
whole subtree on rename.
"""
import logging
from dataclasses import dataclass, field
from pathlib import PurePath

from django.db import transaction
from django.db.models import Count, Q
from django.conf import settings
from django.utils import timezone

from drive_backend.exceptions import ConflictError, NotFoundError, ValidationError
from files.models import File, Folder, ResourceType
from files.storage import get_storage
from sharing.models import Role
from sharing.services.permissions import parse_uuid, resolver

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 255
PREVIEWABLE_PREFIXES = ("image/", "video/", "audio/", "text/")
PREVIEWABLE_TYPES = ("application/pdf", "application/json")


def iter_subtree_levels(root, **filters):
    """
    Yield the descendant folders of ``root`` one tree level at a time.

    ``filters`` are applied at every level; a folder that does not match is not
    descended into.
    """
    level_ids = [root.uid]
    while level_ids:
        level = list(Folder.objects.filter(parent_id__in=level_ids, **filters).order_by("name"))
        if not level:
            return
        yield level
        level_ids = [folder.uid for folder in level]


def collect_subtree(root, **filters):
    return [folder for level in iter_subtree_levels(root, **filters) for folder in level]


def validate_name(name, label="Name"):
    if name is None or not str(name).strip():
        raise ValidationError(f"{label} is required.")
    name = str(name).strip()
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"{label} must be at most {MAX_NAME_LENGTH} characters.")
    if "/" in name or "\\" in name or name in (".", ".."):
        raise ValidationError(f"{label} contains invalid characters.")
    return name


def build_path(parent, name):
    return f"{parent.path}/{name}" if parent is not None else name


def sibling_folders(owner, parent):
    qs = Folder.objects.filter(parent=parent, is_deleted=False)
    # root level is per owner; inside a folder every collaborator shares the namespace
    return qs.filter(owner=owner) if parent is None else qs


def sibling_files(owner, folder):
    qs = File.objects.filter(folder=folder, is_deleted=False)
    return qs.filter(owner=owner) if folder is None else qs


def soft_delete_folders(folder_ids, when):
    return Folder.objects.filter(uid__in=folder_ids).update(is_deleted=True, deleted_at=when, updated_at=when)


def soft_delete_files(folder_ids, when):
    return File.objects.filter(folder_id__in=folder_ids, is_deleted=False).update(
        is_deleted=True, deleted_at=when, updated_at=when
    )


@dataclass
class FolderContents:
    folder: Folder
    role: str
    folders: list = field(default_factory=list)
    files: list = field(default_factory=list)

    @property
    def can_edit(self):
        return self.role in (Role.EDITOR, Role.ADMIN)

    @property
    def can_share(self):
        return self.role == Role.ADMIN


class FolderService:
    def __init__(self, storage=None):
        self._storage = storage

    @property
    def storage(self):
        return self._storage or get_storage()

    def _create_folder_record(self, name, owner, parent):
        if sibling_folders(owner, parent).filter(name=name).exists():
            raise ConflictError(f"A folder named '{name}' already exists here.")
        return Folder.objects.create(owner=owner, name=name, parent=parent, path=build_path(parent, name))

    def create_folder(self, name, owner, parent_id=None):
        name = validate_name(name, "Folder name")
        parent = None
        if parent_id:
            parent = resolver.require(owner, parent_id, ResourceType.FOLDER, Role.EDITOR)
        folder = self._create_folder_record(name, owner, parent)
        logger.info("Folder %s created at '%s' by %s", folder.uid, folder.path, owner.pk)
        return folder

    def get_or_create_folder_path(self, relative_path, owner, base_folder=None):
        """Walk ``relative_path`` (``a/b/c``) under ``base_folder``, creating missing folders."""
        current = base_folder
        for segment in [part for part in str(relative_path).replace("\\", "/").split("/") if part]:
            segment = validate_name(segment, "Folder name")
            existing = sibling_folders(owner, current).filter(name=segment).first()
            current = existing or self._create_folder_record(segment, owner, current)
        return current

    def rename_folder(self, folder_id, new_name, user):
        new_name = validate_name(new_name, "Folder name")
        folder = resolver.require(user, folder_id, ResourceType.FOLDER, Role.EDITOR)
        if folder.name == new_name:
            return folder
        if sibling_folders(folder.owner, folder.parent).filter(name=new_name).exclude(uid=folder.uid).exists():
            raise ConflictError(f"A folder named '{new_name}' already exists here.")

        with transaction.atomic():
            folder.name = new_name
            folder.path = build_path(folder.parent, new_name)
            folder.save(update_fields=["name", "path", "updated_at"])
            paths = {folder.uid: folder.path}
            updated = 0
            for level in iter_subtree_levels(folder):
                for child in level:
                    child.path = f"{paths[child.parent_id]}/{child.name}"
                    paths[child.uid] = child.path
                Folder.objects.bulk_update(level, ["path"])
                updated += len(level)
        logger.info("Folder %s renamed to '%s'; %d descendant paths rewritten", folder.uid, folder.path, updated)
        return folder

    def rename_file(self, file_id, new_name, user):
        new_name = validate_name(new_name, "File name")
        file = resolver.require(user, file_id, ResourceType.FILE, Role.EDITOR)
        if file.name == new_name:
            return file
        if sibling_files(file.owner, file.folder).filter(name=new_name).exclude(uid=file.uid).exists():
            raise ConflictError(f"A file named '{new_name}' already exists here.")

        file.name = new_name
        file.extension = PurePath(new_name).suffix.lower()[:20]
        file.save(update_fields=["name", "extension", "updated_at"])
        logger.info("File %s renamed to '%s' by %s", file.uid, new_name, user.pk)
        return file

    def delete_folder(self, folder_id, user):
        folder = resolver.require(user, folder_id, ResourceType.FOLDER, Role.ADMIN)
        when = timezone.now()
        with transaction.atomic():
            folder_ids = [folder.uid] + [f.uid for f in collect_subtree(folder, is_deleted=False)]
            soft_delete_folders(folder_ids, when)
            file_count = soft_delete_files(folder_ids, when)
        logger.info("Folder %s moved to trash with %d folders and %d files", folder.uid, len(folder_ids), file_count)
        folder.is_deleted, folder.deleted_at = True, when
        return {"folders": len(folder_ids), "files": file_count, "deleted_at": when}

    def _soft_delete_file(self, file):
        when = timezone.now()
        File.objects.filter(uid=file.uid).update(is_deleted=True, deleted_at=when, updated_at=when)
        file.is_deleted, file.deleted_at = True, when
        logger.info("File %s moved to trash", file.uid)
        return file

    def delete_file_from_folder(self, folder_id, file_id, user):
        folder = resolver.require(user, folder_id, ResourceType.FOLDER, Role.EDITOR)
        try:
            file = File.objects.get(uid=parse_uuid(file_id, "file id"), folder=folder, is_deleted=False)
        except File.DoesNotExist:
            raise NotFoundError("File not found in this folder.")
        return self._soft_delete_file(file)

    def delete_file(self, file_id, user):
        file = resolver.require(user, file_id, ResourceType.FILE, Role.ADMIN)
        return self._soft_delete_file(file)

    def folder_contents(self, folder_id, user):
        folder = resolver.require(user, folder_id, ResourceType.FOLDER, Role.VIEWER)
        folders = (
            Folder.objects.filter(parent=folder, is_deleted=False)
            .annotate(file_count=Count("files", filter=Q(files__is_deleted=False)))
            .order_by("name")
        )
        files = File.objects.filter(folder=folder, is_deleted=False).order_by("name")
        return FolderContents(folder=folder, role=resolver.role_for(user, folder), folders=list(folders), files=list(files))

    def root_contents(self, user):
        folders = (
            Folder.objects.filter(owner=user, parent__isnull=True, is_deleted=False)
            .annotate(
                file_count=Count("files", filter=Q(files__is_deleted=False), distinct=True),
                subfolder_count=Count("children", filter=Q(children__is_deleted=False), distinct=True),
            )
            .order_by("name")
        )
        files = File.objects.filter(owner=user, folder__isnull=True, is_deleted=False).order_by("name")
        return {"folders": list(folders), "files": list(files)}

    def get_file(self, file_id, user):
        return resolver.require(user, file_id, ResourceType.FILE, Role.VIEWER)

    def file_versions(self, file_id, user):
        file = resolver.require(user, file_id, ResourceType.FILE, Role.VIEWER)
        return file, list(file.versions.all())

    def download_url(self, file_id, user):
        file = resolver.require(user, file_id, ResourceType.FILE, Role.VIEWER)
        return file, self.storage.signed_url(file.storage_handle, settings.SIGNED_URL_TTL, filename=file.name)

    def preview_url(self, file_id, user):
        file = resolver.require(user, file_id, ResourceType.FILE, Role.VIEWER)
        if not (file.mime_type.startswith(PREVIEWABLE_PREFIXES) or file.mime_type in PREVIEWABLE_TYPES):
            raise ValidationError(f"Preview is not available for {file.mime_type} files.")
        return file, self.storage.signed_url(file.storage_handle, settings.SIGNED_URL_TTL, filename=file.name, inline=True)


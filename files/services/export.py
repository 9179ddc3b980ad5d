"""
Streaming zip export of a folder tree.

The archive is produced through a write-only sink that is drained after every
chunk, so neither the archive nor any single file is held in memory. Because
the sink cannot seek, entries are written with data descriptors.
"""
import logging
import threading
import time
import zipfile

from django.conf import settings
from django.utils import timezone

from files.models import File, ResourceType
from files.services.tree import iter_subtree_levels
from files.storage import get_storage
from sharing.models import Role
from sharing.services.permissions import resolver

logger = logging.getLogger(__name__)

DIRECTORY_ATTRS = (0o40755 << 16) | 0x10
FILE_ATTRS = 0o644 << 16


class ExportCancelled(Exception):
    pass


class CancelToken:
    """Deadline plus an explicit cancel flag, checked between units of work."""

    def __init__(self, timeout=None, clock=time.monotonic):
        self._clock = clock
        self._deadline = clock() + timeout if timeout else None
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self):
        return self._event.is_set() or (self._deadline is not None and self._clock() >= self._deadline)

    def raise_if_cancelled(self):
        if self._event.is_set():
            raise ExportCancelled("Export was cancelled.")
        if self._deadline is not None and self._clock() >= self._deadline:
            raise ExportCancelled("Export timed out.")


class _ChunkSink:
    """Write-only, non-seekable buffer that hands out what was written since the last drain."""

    def __init__(self):
        self._chunks = []

    def write(self, data):
        self._chunks.append(bytes(data))
        return len(data)

    def flush(self):
        pass

    def drain(self):
        data = b"".join(self._chunks)
        self._chunks.clear()
        return data


def _zip_timestamp(value):
    value = timezone.localtime(value) if timezone.is_aware(value) else value
    return max(value, value.replace(year=1980, month=1, day=1)).timetuple()[:6]


def _directory_entry(name, modified):
    info = zipfile.ZipInfo(name.rstrip("/") + "/", date_time=_zip_timestamp(modified))
    info.external_attr = DIRECTORY_ATTRS
    return info


def _file_entry(name, file):
    info = zipfile.ZipInfo(name, date_time=_zip_timestamp(file.updated_at))
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = FILE_ATTRS
    # lets zipfile decide on zip64 up front; the sink cannot seek back to fix headers
    info.file_size = file.size
    return info


def stream_folder_zip(folder, cancel_token, storage=None):
    """
    Yield the bytes of a zip archive mirroring ``folder`` and its active subtree.

    Cancellation is checked before each folder level and before each file.
    Closing the generator early, which is what the server does when the
    client disconnects, cancels ``cancel_token``.
    Failures after the first chunk are logged and re-raised, which aborts the
    response instead of producing a truncated archive that looks valid.
    """
    storage = storage or get_storage()
    sink = _ChunkSink()
    archive = zipfile.ZipFile(sink, mode="w", compression=zipfile.ZIP_DEFLATED, allowZip64=True)
    paths = {folder.uid: folder.name}
    files_written = 0
    try:
        archive.writestr(_directory_entry(folder.name, folder.updated_at), b"")
        yield sink.drain()

        levels = iter_subtree_levels(folder, is_deleted=False)
        current = [folder]
        while current:
            cancel_token.raise_if_cancelled()
            for sub in current:
                if sub.uid != folder.uid:
                    paths[sub.uid] = f"{paths[sub.parent_id]}/{sub.name}"
                    archive.writestr(_directory_entry(paths[sub.uid], sub.updated_at), b"")
            yield sink.drain()

            files = File.objects.filter(folder__in=current, is_deleted=False).order_by("folder_id", "name")
            for file in files.iterator():
                cancel_token.raise_if_cancelled()
                entry = _file_entry(f"{paths[file.folder_id]}/{file.name}", file)
                with archive.open(entry, mode="w", force_zip64=file.size > zipfile.ZIP64_LIMIT) as dest:
                    for chunk in storage.open(file.storage_handle):
                        dest.write(chunk)
                        data = sink.drain()
                        if data:
                            yield data
                yield sink.drain()
                files_written += 1

            current = next(levels, [])

        archive.close()
        yield sink.drain()
        logger.info("Exported folder %s: %d files", folder.uid, files_written)
    except GeneratorExit:
        # the server closes the response iterator when the client goes away
        cancel_token.cancel()
        logger.warning("Zip export of folder %s cancelled by client disconnect after %d files", folder.uid, files_written)
        raise
    except Exception:
        logger.exception("Zip export of folder %s aborted after %d files", folder.uid, files_written)
        raise


class FolderExportService:
    def __init__(self, storage=None):
        self._storage = storage

    def download_folder(self, folder_id, user, cancel_token=None):
        """Check access and return ``(folder, chunk iterator)``; nothing is streamed until iterated."""
        folder = resolver.require(user, folder_id, ResourceType.FOLDER, Role.VIEWER)
        if cancel_token is None:
            cancel_token = CancelToken(timeout=settings.FOLDER_EXPORT_TIMEOUT)
        return folder, stream_folder_zip(folder, cancel_token, storage=self._storage)

"""
Name search over a user's own folders and files, plus the recent-files view.

Matching is a case-insensitive substring test on the name; trashed items never
appear. Shared content is reached through the sharing listings instead.
"""
import logging
from datetime import timedelta

from django.db.models import Q
from django.utils import timezone

from drive_backend.exceptions import ValidationError
from files.models import File, Folder

logger = logging.getLogger(__name__)

MAX_RESULTS = 200
MAX_QUERY_LENGTH = 255


def _page(limit, offset):
    if limit < 1 or offset < 0:
        raise ValidationError("limit must be positive and offset non-negative.")
    return min(limit, MAX_RESULTS), offset


def _clean_query(query):
    query = (query or "").strip()
    if not query:
        raise ValidationError("Search query is required.")
    if len(query) > MAX_QUERY_LENGTH:
        raise ValidationError(f"Search query must be at most {MAX_QUERY_LENGTH} characters.")
    return query


class SearchService:
    def _files(self, user, query):
        return (
            File.objects.filter(owner=user, is_deleted=False, name__icontains=query)
            .select_related("folder", "owner")
            .order_by("name", "uid")
        )

    def _folders(self, user, query):
        return (
            Folder.objects.filter(owner=user, is_deleted=False, name__icontains=query)
            .select_related("owner")
            .order_by("path", "uid")
        )

    def search(self, user, query, limit=50, offset=0):
        query = _clean_query(query)
        limit, offset = _page(limit, offset)
        result = {
            "files": list(self._files(user, query)[offset:offset + limit]),
            "folders": list(self._folders(user, query)[offset:offset + limit]),
        }
        logger.debug("Search '%s' for %s: %d files, %d folders",
                     query, user.pk, len(result["files"]), len(result["folders"]))
        return result

    def search_files(self, user, query, limit=50, offset=0):
        query = _clean_query(query)
        limit, offset = _page(limit, offset)
        return list(self._files(user, query)[offset:offset + limit])

    def search_folders(self, user, query, limit=50, offset=0):
        query = _clean_query(query)
        limit, offset = _page(limit, offset)
        return list(self._folders(user, query)[offset:offset + limit])

    def recent_files(self, user, limit=20, days=30):
        """Files created or changed in the last ``days`` days, newest change first."""
        if days < 1:
            raise ValidationError("days must be positive.")
        limit, _ = _page(limit, 0)
        since = timezone.now() - timedelta(days=days)
        return list(
            File.objects.filter(owner=user, is_deleted=False)
            .filter(Q(updated_at__gte=since) | Q(created_at__gte=since))
            .select_related("folder", "owner")
            .order_by("-updated_at", "-created_at")[:limit]
        )

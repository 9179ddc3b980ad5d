"""
Answers "does this user hold at least role R on resource X".

Resolution order for a resource:

1. the owner always holds admin;
2. a file inside a folder is resolved through that folder's chain first, and
   its own grant only counts when the chain gives nothing;
3. for a folder, an active grant on the folder itself, then its parent's chain;
4. a root-level file falls back to its own grant alone.

Walking upward stops at the first owner or grant match (nearest match). Grants
on different ancestors are never merged, so a viewer grant on a subfolder hides
an editor grant on one of its ancestors.
"""
import logging
import uuid

from files.models import File, Folder, ResourceType
from sharing.models import AccessGrant, Role, role_satisfies
from drive_backend.exceptions import InsufficientPermissionError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

MAX_DEPTH = 256


def parse_uuid(value, label="id"):
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        raise ValidationError(f"Invalid {label}: {value!r}.")


def parse_resource_type(value):
    if value not in ResourceType.values:
        raise ValidationError(f"Invalid resource type: {value!r}.")
    return value


def parse_role(value):
    if value not in Role.values:
        raise ValidationError(f"Invalid role: {value!r}.")
    return value


def load_active_resource(resource_id, resource_type):
    """Return the active Folder/File or raise NotFoundError."""
    resource_id = parse_uuid(resource_id, "resource id")
    model = Folder if parse_resource_type(resource_type) == ResourceType.FOLDER else File
    try:
        resource = model.objects.select_related("owner").get(uid=resource_id)
    except model.DoesNotExist:
        raise NotFoundError(f"{resource_type.capitalize()} not found.")
    if resource.is_deleted:
        raise NotFoundError(f"{resource_type.capitalize()} not found.")
    return resource


class PermissionResolver:
    def _direct_role(self, user, resource_id, resource_type):
        return (
            AccessGrant.objects
            .filter(user=user, resource_id=resource_id, resource_type=resource_type, is_active=True)
            .values_list("role", flat=True)
            .first()
        )

    def _folder_chain_role(self, user, folder):
        seen = set()
        while folder is not None and len(seen) < MAX_DEPTH:
            if folder.uid in seen or folder.is_deleted:
                break
            seen.add(folder.uid)
            if folder.owner_id == user.pk:
                return Role.ADMIN
            role = self._direct_role(user, folder.uid, ResourceType.FOLDER)
            if role:
                return role
            folder = folder.parent
        return None

    def role_for(self, user, resource):
        """Effective role of ``user`` on an already loaded active resource, or None."""
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        if resource.owner_id == user.pk:
            return Role.ADMIN
        if isinstance(resource, File):
            role = None
            if resource.folder_id is not None:
                role = self._folder_chain_role(user, resource.folder)
            return role or self._direct_role(user, resource.uid, ResourceType.FILE)
        return self._folder_chain_role(user, resource)

    def effective_role(self, user, resource_id, resource_type):
        return self.role_for(user, load_active_resource(resource_id, resource_type))

    def has_permission(self, user, resource_id, resource_type, required_role):
        parse_role(required_role)
        return role_satisfies(self.effective_role(user, resource_id, resource_type), required_role)

    def require(self, user, resource_id, resource_type, required_role):
        """Load the resource and return it, raising if ``user`` lacks ``required_role``."""
        parse_role(required_role)
        resource = load_active_resource(resource_id, resource_type)
        self.require_on(user, resource, required_role)
        return resource

    def require_on(self, user, resource, required_role):
        role = self.role_for(user, resource)
        if not role_satisfies(role, required_role):
            logger.debug("Denied %s on %s %s for %s", required_role, resource.resource_type, resource.uid, user)
            raise InsufficientPermissionError(
                f"{required_role.capitalize()} access is required for this {resource.resource_type}."
            )
        return role


resolver = PermissionResolver()


def has_permission(user, resource_id, resource_type, required_role):
    return resolver.has_permission(user, resource_id, resource_type, required_role)

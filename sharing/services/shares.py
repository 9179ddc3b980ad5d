import logging
from dataclasses import dataclass

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from drive_backend.exceptions import (
    ConflictError, DriveError, InsufficientPermissionError, NotFoundError, ValidationError,
)
from drive_backend.results import BulkResult
from files.models import File, Folder, ResourceType
from files.services.tree import collect_subtree
from notifications.models import NotificationKind
from notifications.services import notify
from sharing.models import AccessGrant, Role, Share
from sharing.services.permissions import (
    load_active_resource, parse_resource_type, parse_role, parse_uuid, resolver,
)

logger = logging.getLogger(__name__)


@dataclass
class ShareResult:
    share: Share
    children_affected: int = 0


def _person(user):
    if user is None:
        return None
    return {"id": str(user.pk), "email": user.email, "display_name": user.display_name}


class ShareService:
    def _find_grantee(self, email):
        email = (email or "").strip().lower()
        if not email:
            raise ValidationError("Recipient email is required.")
        grantee = get_user_model().objects.filter(email__iexact=email, is_active=True).first()
        if grantee is None:
            raise NotFoundError(f"No user found with email {email}.")
        return grantee

    def _has_active_grant(self, grantee, resource):
        return AccessGrant.objects.filter(
            user=grantee, resource_id=resource.uid, resource_type=resource.resource_type, is_active=True
        ).exists()

    def _grant(self, resource, granter, grantee, role, inherit_to_children=False):
        if grantee.pk == resource.owner_id:
            raise ConflictError("The owner already has full access to this resource.")
        if self._has_active_grant(grantee, resource):
            raise ConflictError(f"{grantee.email} already has access; change the role instead.")

        try:
            with transaction.atomic():
                grant = AccessGrant.objects.create(
                    user=grantee,
                    resource_id=resource.uid,
                    resource_type=resource.resource_type,
                    role=role,
                    granted_by=granter,
                )
                share = Share.objects.create(
                    grant=grant,
                    resource_id=resource.uid,
                    resource_type=resource.resource_type,
                    shared_by=granter,
                    shared_with=grantee,
                    shared_by_name=granter.display_name,
                    shared_with_name=grantee.display_name,
                    role=role,
                    inherit_to_children=inherit_to_children,
                )
        except IntegrityError:
            # lost a race against a concurrent share of the same resource
            raise ConflictError(f"{grantee.email} already has access; change the role instead.")
        return share

    def _share_descendants(self, folder, granter, grantee, role):
        affected = 0
        for child in collect_subtree(folder, is_deleted=False):
            try:
                # a narrower grant further down can take admin away from the granter
                resolver.require_on(granter, child, Role.ADMIN)
                self._grant(child, granter, grantee, role, inherit_to_children=True)
                affected += 1
            except (DriveError, DatabaseError) as exc:
                logger.warning("Skipped sharing folder %s with %s: %s", child.uid, grantee.pk, exc)
        return affected

    def share(self, resource_id, resource_type, granter, grantee_email, role, inherit_to_children=False):
        parse_resource_type(resource_type)
        parse_role(role)
        resource = resolver.require(granter, resource_id, resource_type, Role.ADMIN)
        grantee = self._find_grantee(grantee_email)
        if grantee.pk == granter.pk:
            raise ValidationError("You cannot share a resource with yourself.")

        share = self._grant(resource, granter, grantee, role, inherit_to_children)
        logger.info("%s %s shared with %s as %s by %s", resource_type, resource.uid, grantee.pk, role, granter.pk)

        kind = NotificationKind.FOLDER_SHARED if resource_type == ResourceType.FOLDER else NotificationKind.FILE_SHARED
        transaction.on_commit(lambda: notify(
            grantee,
            kind,
            f"{granter.display_name} shared \"{resource.name}\" with you",
            f"You now have {role} access to the {resource_type} \"{resource.name}\".",
            item_id=resource.uid,
            item_type=resource_type,
        ))

        children = 0
        if resource_type == ResourceType.FOLDER and inherit_to_children:
            children = self._share_descendants(resource, granter, grantee, role)
            logger.info("Share of folder %s propagated to %d subfolders", resource.uid, children)
        return ShareResult(share=share, children_affected=children)

    def bulk_share(self, resources, granter, grantee_email, role, inherit_to_children=False):
        if not resources:
            raise ValidationError("At least one resource is required.")
        if len(resources) > settings.MAX_BULK_ITEMS:
            raise ValidationError(f"At most {settings.MAX_BULK_ITEMS} resources can be shared at once.")

        result = BulkResult()
        for entry in resources:
            resource_id = entry.get("resource_id")
            try:
                outcome = self.share(
                    resource_id, entry.get("resource_type"), granter, grantee_email, role, inherit_to_children,
                )
                result.add_success(
                    resource_id,
                    share_id=str(outcome.share.uid),
                    children_affected=outcome.children_affected,
                )
            except DriveError as exc:
                result.add_failure(resource_id, exc)
        return result

    def _load_managed_share(self, share_id, user):
        share_id = parse_uuid(share_id, "share id")
        share = Share.objects.select_related("grant", "shared_with").filter(uid=share_id, is_active=True).first()
        if share is None:
            raise NotFoundError("Share not found or already revoked.")
        resource = load_active_resource(share.resource_id, share.resource_type)
        if share.shared_by_id != user.pk and resolver.role_for(user, resource) != Role.ADMIN:
            raise InsufficientPermissionError("Only an admin of the resource or the original sharer can change this share.")
        if share.shared_with_id == resource.owner_id:
            raise ConflictError("The owner's access cannot be changed.")
        return share, resource

    def revoke(self, share_id, revoker):
        share, resource = self._load_managed_share(share_id, revoker)
        now = timezone.now()
        with transaction.atomic():
            AccessGrant.objects.filter(uid=share.grant_id).update(is_active=False, revoked_at=now, revoked_by=revoker)
            Share.objects.filter(uid=share.uid).update(is_active=False, revoked_at=now)
        share.refresh_from_db()
        logger.info("Share %s revoked by %s", share.uid, revoker.pk)

        transaction.on_commit(lambda: notify(
            share.shared_with,
            NotificationKind.SHARE_REVOKED,
            f"Access to \"{resource.name}\" was removed",
            f"{revoker.display_name} removed your access to the {resource.resource_type} \"{resource.name}\".",
            item_id=resource.uid,
            item_type=resource.resource_type,
        ))
        return share

    def update_role(self, share_id, new_role, updater):
        parse_role(new_role)
        share, resource = self._load_managed_share(share_id, updater)
        if share.role == new_role:
            return share
        now = timezone.now()
        with transaction.atomic():
            AccessGrant.objects.filter(uid=share.grant_id).update(role=new_role, updated_at=now, updated_by=updater)
            Share.objects.filter(uid=share.uid).update(role=new_role, updated_at=now)
        share.refresh_from_db()
        logger.info("Share %s changed to %s by %s", share.uid, new_role, updater.pk)

        transaction.on_commit(lambda: notify(
            share.shared_with,
            NotificationKind.SHARE_UPDATED,
            f"Your access to \"{resource.name}\" changed",
            f"You now have {new_role} access to the {resource.resource_type} \"{resource.name}\".",
            item_id=resource.uid,
            item_type=resource.resource_type,
        ))
        return share

    # Listings resolve names at read time; the *_name snapshot fields stay as recorded.

    def _live_resources(self, shares):
        ids = {ResourceType.FILE: set(), ResourceType.FOLDER: set()}
        for share in shares:
            ids[share.resource_type].add(share.resource_id)
        live = {}
        for folder in Folder.objects.filter(uid__in=ids[ResourceType.FOLDER], is_deleted=False):
            live[(ResourceType.FOLDER, folder.uid)] = folder
        for file in File.objects.filter(uid__in=ids[ResourceType.FILE], is_deleted=False).select_related("folder"):
            live[(ResourceType.FILE, file.uid)] = file
        return live

    def _entries(self, queryset, resource_type=None):
        if resource_type:
            parse_resource_type(resource_type)
            queryset = queryset.filter(resource_type=resource_type)
        shares = list(queryset.select_related("shared_by", "shared_with"))
        live = self._live_resources(shares)
        entries = []
        for share in shares:
            resource = live.get((share.resource_type, share.resource_id))
            if resource is None:
                continue
            entries.append({
                "share_id": str(share.uid),
                "resource_id": str(share.resource_id),
                "resource_type": share.resource_type,
                "resource_name": resource.name,
                "resource_path": resource.path,
                "role": share.role,
                "inherit_to_children": share.inherit_to_children,
                "shared_at": share.shared_at,
                "updated_at": share.updated_at,
                "shared_by": _person(share.shared_by),
                "shared_with": _person(share.shared_with),
                "shared_by_name": share.shared_by_name,
                "shared_with_name": share.shared_with_name,
            })
        return entries

    def share_details(self, share_id, user):
        """One active share, visible to the two people on it and to admins of the resource."""
        share_id = parse_uuid(share_id, "share id")
        share = Share.objects.filter(uid=share_id, is_active=True).first()
        if share is None:
            raise NotFoundError("Share not found or already revoked.")
        resource = load_active_resource(share.resource_id, share.resource_type)
        if user.pk not in (share.shared_by_id, share.shared_with_id) and resolver.role_for(user, resource) != Role.ADMIN:
            raise InsufficientPermissionError("You do not have access to this share.")
        [entry] = self._entries(Share.objects.filter(uid=share.uid))
        return entry

    def shared_by_me(self, user, resource_type=None):
        return self._entries(Share.objects.filter(shared_by=user, is_active=True), resource_type)

    def shared_with_me(self, user, resource_type=None):
        return self._entries(Share.objects.filter(shared_with=user, is_active=True), resource_type)

    def all_shared(self, user):
        by_me = self.shared_by_me(user)
        with_me = self.shared_with_me(user)
        return {"shared_by_me": by_me, "shared_with_me": with_me, "total": len(by_me) + len(with_me)}

    def resource_permissions(self, resource_id, resource_type, user):
        resource = resolver.require(user, resource_id, resource_type, Role.ADMIN)
        grants = (
            AccessGrant.objects
            .filter(resource_id=resource.uid, resource_type=resource.resource_type, is_active=True)
            .select_related("user", "granted_by", "share")
            .order_by("granted_at")
        )
        permissions = [{
            "user": _person(resource.owner),
            "role": Role.ADMIN,
            "is_owner": True,
            "share_id": None,
            "granted_by": None,
            "granted_at": resource.created_at,
        }]
        for grant in grants:
            permissions.append({
                "user": _person(grant.user),
                "role": grant.role,
                "is_owner": False,
                "share_id": str(grant.share.uid) if hasattr(grant, "share") else None,
                "granted_by": _person(grant.granted_by),
                "granted_at": grant.granted_at,
            })
        return {
            "resource_id": str(resource.uid),
            "resource_type": resource.resource_type,
            "resource_name": resource.name,
            "permissions": permissions,
        }


share_service = ShareService()

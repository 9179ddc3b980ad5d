import pytest
from django.db import DatabaseError, IntegrityError, transaction

from drive_backend.exceptions import ConflictError, InsufficientPermissionError, NotFoundError, ValidationError
from sharing.models import AccessGrant, Share
from sharing.services.permissions import has_permission
from sharing.services.shares import ShareService


@pytest.fixture
def shares():
    return ShareService()


@pytest.mark.django_db
def test_share_creates_grant_and_mirrored_record(alice, bob, folders, shares):
    folder = folders.create_folder("Docs", alice)

    result = shares.share(folder.uid, "folder", alice, "bob@example.com", "editor")

    share = result.share
    assert share.grant.user == bob
    assert share.grant.role == "editor" and share.grant.is_active
    assert share.role == "editor"
    assert share.shared_by_name == "Alice Owner"
    assert share.shared_with_name == "Bob Reader"
    assert result.children_affected == 0
    assert has_permission(bob, folder.uid, "folder", "editor")


@pytest.mark.django_db
def test_grantee_email_is_normalized(alice, bob, folders, shares):
    folder = folders.create_folder("Docs", alice)

    result = shares.share(folder.uid, "folder", alice, "  BOB@Example.COM ", "viewer")

    assert result.share.shared_with == bob


@pytest.mark.django_db
def test_share_preconditions(alice, bob, carol, folders, shares):
    folder = folders.create_folder("Docs", alice)

    with pytest.raises(NotFoundError):
        shares.share(folder.uid, "folder", alice, "nobody@example.com", "viewer")
    with pytest.raises(ValidationError):
        shares.share(folder.uid, "folder", alice, "alice@example.com", "viewer")
    with pytest.raises(ValidationError):
        shares.share(folder.uid, "folder", alice, "bob@example.com", "owner")

    shares.share(folder.uid, "folder", alice, "bob@example.com", "editor")
    with pytest.raises(InsufficientPermissionError):
        shares.share(folder.uid, "folder", bob, "carol@example.com", "viewer")


@pytest.mark.django_db
def test_cannot_share_with_the_owner(alice, bob, folders, shares):
    folder = folders.create_folder("Docs", alice)
    shares.share(folder.uid, "folder", alice, "bob@example.com", "admin")

    with pytest.raises(ConflictError):
        shares.share(folder.uid, "folder", bob, "alice@example.com", "viewer")


@pytest.mark.django_db
def test_duplicate_share_is_a_conflict(alice, bob, folders, shares):
    folder = folders.create_folder("Docs", alice)
    shares.share(folder.uid, "folder", alice, "bob@example.com", "viewer")

    with pytest.raises(ConflictError):
        shares.share(folder.uid, "folder", alice, "bob@example.com", "editor")

    assert AccessGrant.objects.filter(user=bob, resource_id=folder.uid, is_active=True).count() == 1


@pytest.mark.django_db
def test_racing_share_loses_on_unique_constraint(alice, bob, folders, shares, monkeypatch):
    """A request that passed the existence check still cannot create a second active grant."""
    folder = folders.create_folder("Docs", alice)
    shares.share(folder.uid, "folder", alice, "bob@example.com", "viewer")
    monkeypatch.setattr(shares, "_has_active_grant", lambda grantee, resource: False)

    with pytest.raises(ConflictError):
        shares.share(folder.uid, "folder", alice, "bob@example.com", "editor")

    assert AccessGrant.objects.filter(user=bob, resource_id=folder.uid, is_active=True).count() == 1
    assert Share.objects.filter(shared_with=bob, is_active=True).count() == 1


@pytest.mark.django_db
def test_active_grant_uniqueness_is_enforced_by_the_database(alice, bob, folders):
    folder = folders.create_folder("Docs", alice)
    AccessGrant.objects.create(user=bob, resource_id=folder.uid, resource_type="folder", role="viewer")
    AccessGrant.objects.create(
        user=bob, resource_id=folder.uid, resource_type="folder", role="viewer", is_active=False
    )

    with pytest.raises(IntegrityError), transaction.atomic():
        AccessGrant.objects.create(user=bob, resource_id=folder.uid, resource_type="folder", role="editor")


@pytest.mark.django_db
def test_failed_share_record_rolls_back_the_grant(alice, bob, folders, shares, monkeypatch):
    folder = folders.create_folder("Docs", alice)

    def broken_create(**kwargs):
        raise DatabaseError("share table unavailable")

    monkeypatch.setattr(Share.objects, "create", broken_create)

    with pytest.raises(DatabaseError):
        shares.share(folder.uid, "folder", alice, "bob@example.com", "viewer")

    assert not AccessGrant.objects.filter(user=bob).exists()
    assert not has_permission(bob, folder.uid, "folder", "viewer")


@pytest.mark.django_db
def test_inherit_to_children_counts_active_subfolders(alice, bob, folders, shares):
    docs = folders.create_folder("Docs", alice)
    sub = folders.create_folder("Sub", alice, docs.uid)
    folders.create_folder("Deeper", alice, sub.uid)
    old = folders.create_folder("Old", alice, docs.uid)
    folders.delete_folder(old.uid, alice)

    result = shares.share(docs.uid, "folder", alice, "bob@example.com", "viewer", inherit_to_children=True)

    assert result.children_affected == 2
    assert AccessGrant.objects.filter(user=bob, is_active=True).count() == 3


@pytest.mark.django_db
def test_inherit_to_children_skips_failing_subfolders(alice, bob, folders, shares):
    docs = folders.create_folder("Docs", alice)
    sub = folders.create_folder("Sub", alice, docs.uid)
    folders.create_folder("Other", alice, docs.uid)
    # a more specific grant already exists on one child
    shares.share(sub.uid, "folder", alice, "bob@example.com", "editor")

    result = shares.share(docs.uid, "folder", alice, "bob@example.com", "viewer", inherit_to_children=True)

    assert result.children_affected == 1
    assert AccessGrant.objects.get(user=bob, resource_id=sub.uid, is_active=True).role == "editor"


@pytest.mark.django_db
def test_inherit_to_children_skips_subfolders_the_granter_cannot_administer(alice, bob, carol, folders, shares):
    top = folders.create_folder("Top", alice)
    child = folders.create_folder("Child", alice, top.uid)
    sibling = folders.create_folder("Sibling", alice, top.uid)
    shares.share(top.uid, "folder", alice, "bob@example.com", "admin")
    shares.share(child.uid, "folder", alice, "bob@example.com", "viewer")

    result = shares.share(top.uid, "folder", bob, "carol@example.com", "admin", inherit_to_children=True)

    assert result.children_affected == 1
    assert not AccessGrant.objects.filter(user=carol, resource_id=child.uid).exists()
    assert AccessGrant.objects.filter(user=carol, resource_id=sibling.uid, is_active=True).exists()


@pytest.mark.django_db
def test_docs_sub_scenario_inherits_without_a_grant_row(alice, bob, folders, shares):
    """A subfolder created after sharing is covered by the parent-walk, not a copied grant."""
    docs = folders.create_folder("Docs", alice)
    shares.share(docs.uid, "folder", alice, "bob@example.com", "editor", inherit_to_children=True)

    sub = folders.create_folder("Sub", alice, docs.uid)

    assert sub.path == "Docs/Sub"
    assert not AccessGrant.objects.filter(resource_id=sub.uid).exists()
    assert has_permission(bob, sub.uid, "folder", "editor")


@pytest.mark.django_db
def test_revoke_deactivates_both_records(alice, bob, folders, shares):
    folder = folders.create_folder("Docs", alice)
    share = shares.share(folder.uid, "folder", alice, "bob@example.com", "editor").share

    revoked = shares.revoke(share.uid, alice)

    grant = AccessGrant.objects.get(uid=share.grant_id)
    assert not grant.is_active and grant.revoked_by == alice and grant.revoked_at is not None
    assert not revoked.is_active and revoked.revoked_at is not None
    assert not has_permission(bob, folder.uid, "folder", "viewer")
    with pytest.raises(NotFoundError):
        shares.revoke(share.uid, alice)


@pytest.mark.django_db
def test_revoke_authorization(alice, bob, carol, folders, shares):
    folder = folders.create_folder("Docs", alice)
    shares.share(folder.uid, "folder", alice, "bob@example.com", "admin")
    carol_share = shares.share(folder.uid, "folder", bob, "carol@example.com", "viewer").share

    # carol is neither admin nor the sharer
    with pytest.raises(InsufficientPermissionError):
        shares.revoke(carol_share.uid, carol)
    # the owner is an admin even though bob made the share
    shares.revoke(carol_share.uid, alice)


@pytest.mark.django_db
def test_original_sharer_can_revoke_after_losing_admin(alice, bob, carol, folders, shares):
    folder = folders.create_folder("Docs", alice)
    bob_share = shares.share(folder.uid, "folder", alice, "bob@example.com", "admin").share
    carol_share = shares.share(folder.uid, "folder", bob, "carol@example.com", "viewer").share
    shares.update_role(bob_share.uid, "viewer", alice)

    shares.revoke(carol_share.uid, bob)

    assert not has_permission(carol, folder.uid, "folder", "viewer")


@pytest.mark.django_db
def test_update_role_changes_grant_and_share(alice, bob, folders, shares):
    folder = folders.create_folder("Docs", alice)
    share = shares.share(folder.uid, "folder", alice, "bob@example.com", "viewer").share

    updated = shares.update_role(share.uid, "editor", alice)

    grant = AccessGrant.objects.get(uid=share.grant_id)
    assert grant.role == "editor" and grant.updated_by == alice
    assert updated.role == "editor" and updated.updated_at is not None
    assert has_permission(bob, folder.uid, "folder", "editor")
    with pytest.raises(ValidationError):
        shares.update_role(share.uid, "owner", alice)


@pytest.mark.django_db
def test_listings_resolve_live_names_and_keep_snapshots(alice, bob, folders, shares, make_file):
    folder = folders.create_folder("Docs", alice)
    file = make_file(alice, "plan.txt")
    shares.share(folder.uid, "folder", alice, "bob@example.com", "viewer")
    shares.share(file.uid, "file", alice, "bob@example.com", "editor")
    folders.rename_folder(folder.uid, "Documents", alice)
    bob.first_name = "Robert"
    bob.save()

    by_me = shares.shared_by_me(alice)
    with_me = shares.shared_with_me(bob, "folder")

    assert {entry["resource_name"] for entry in by_me} == {"Documents", "plan.txt"}
    assert len(with_me) == 1
    entry = with_me[0]
    assert entry["resource_name"] == "Documents"
    assert entry["shared_with"]["display_name"] == "Robert Reader"
    assert entry["shared_with_name"] == "Bob Reader"
    assert shares.all_shared(alice)["total"] == 2


@pytest.mark.django_db
def test_listings_omit_deleted_resources(alice, bob, folders, shares):
    folder = folders.create_folder("Docs", alice)
    shares.share(folder.uid, "folder", alice, "bob@example.com", "viewer")
    folders.delete_folder(folder.uid, alice)

    assert shares.shared_with_me(bob) == []


@pytest.mark.django_db
def test_bulk_share_reports_partial_failure(alice, bob, folders, shares, make_file):
    mine = folders.create_folder("Mine", alice)
    file = make_file(alice, "a.txt")
    not_mine = folders.create_folder("Bob's", bob)

    result = shares.bulk_share(
        [
            {"resource_id": str(mine.uid), "resource_type": "folder"},
            {"resource_id": str(file.uid), "resource_type": "file"},
            {"resource_id": str(not_mine.uid), "resource_type": "folder"},
            {"resource_id": "garbage", "resource_type": "file"},
        ],
        alice,
        "bob@example.com",
        "viewer",
    )

    summary = result.summary
    assert summary == {"total": 4, "successful": 2, "failed": 2}
    failures = {item["id"]: item["error"] for item in result.failed}
    assert failures[str(not_mine.uid)] == "permission_denied"
    assert failures["garbage"] == "validation_error"


@pytest.mark.django_db
def test_resource_permissions_requires_admin(alice, bob, folders, shares):
    folder = folders.create_folder("Docs", alice)
    shares.share(folder.uid, "folder", alice, "bob@example.com", "editor")

    listing = shares.resource_permissions(folder.uid, "folder", alice)

    assert [p["role"] for p in listing["permissions"]] == ["admin", "editor"]
    assert listing["permissions"][0]["is_owner"]
    assert listing["permissions"][1]["user"]["email"] == "bob@example.com"
    with pytest.raises(InsufficientPermissionError):
        shares.resource_permissions(folder.uid, "folder", bob)


@pytest.mark.django_db
def test_share_details_visible_to_participants_and_admins(alice, bob, carol, folders, shares):
    docs = folders.create_folder("Docs", alice)
    share = shares.share(docs.uid, "folder", alice, "bob@example.com", "viewer").share

    for viewer in (alice, bob):
        details = shares.share_details(share.uid, viewer)
        assert details["share_id"] == str(share.uid)
        assert details["resource_name"] == "Docs"
        assert details["role"] == "viewer"
        assert details["shared_with"]["email"] == "bob@example.com"

    with pytest.raises(InsufficientPermissionError):
        shares.share_details(share.uid, carol)
    shares.share(docs.uid, "folder", alice, "carol@example.com", "admin")
    assert shares.share_details(share.uid, carol)["shared_by"]["email"] == "alice@example.com"


@pytest.mark.django_db
def test_share_details_of_revoked_or_unknown_share_is_not_found(alice, bob, folders, shares):
    docs = folders.create_folder("Docs", alice)
    share = shares.share(docs.uid, "folder", alice, "bob@example.com", "viewer").share
    shares.revoke(share.uid, alice)

    with pytest.raises(NotFoundError):
        shares.share_details(share.uid, alice)
    with pytest.raises(ValidationError):
        shares.share_details("not-a-uuid", alice)

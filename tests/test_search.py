from datetime import timedelta

import pytest
from django.utils import timezone

from drive_backend.exceptions import ValidationError
from files.models import File
from files.services.search import SearchService


@pytest.fixture
def search():
    return SearchService()


@pytest.fixture
def library(alice, bob, folders, make_file):
    reports = folders.create_folder("Reports", alice)
    archive = folders.create_folder("Old reports", alice, reports.uid)
    make_file(alice, "Q1 report.pdf", folder=reports)
    make_file(alice, "notes.txt", folder=archive)
    trashed = make_file(alice, "report draft.txt")
    folders.delete_file(trashed.uid, alice)
    make_file(bob, "bob report.txt")
    return {"reports": reports, "archive": archive}


@pytest.mark.django_db
def test_search_matches_names_case_insensitively(alice, search, library):
    result = search.search(alice, "REPORT")

    assert [f.name for f in result["files"]] == ["Q1 report.pdf"]
    assert [f.path for f in result["folders"]] == ["Reports", "Reports/Old reports"]


@pytest.mark.django_db
def test_search_only_covers_own_live_items(bob, search, library):
    result = search.search(bob, "report")

    assert [f.name for f in result["files"]] == ["bob report.txt"]
    assert result["folders"] == []


@pytest.mark.django_db
def test_files_and_folders_only_searches(alice, search, library):
    found = [f.name for f in search.search_files(alice, "o")]

    assert sorted(found) == ["Q1 report.pdf", "notes.txt"]
    assert [f.name for f in search.search_files(alice, "o", limit=1, offset=1)] == found[1:]
    assert [f.name for f in search.search_folders(alice, "old")] == ["Old reports"]


@pytest.mark.django_db
def test_search_validates_query_and_paging(alice, search):
    with pytest.raises(ValidationError):
        search.search(alice, "   ")
    with pytest.raises(ValidationError):
        search.search_files(alice, "x" * 256)
    with pytest.raises(ValidationError):
        search.search_folders(alice, "x", limit=0)


@pytest.mark.django_db
def test_recent_files_are_newest_first_within_the_window(alice, search, make_file):
    now = timezone.now()
    old = make_file(alice, "old.txt")
    older = make_file(alice, "older.txt")
    fresh = make_file(alice, "fresh.txt")
    File.objects.filter(uid=old.uid).update(created_at=now - timedelta(days=40), updated_at=now - timedelta(days=40))
    File.objects.filter(uid=older.uid).update(created_at=now - timedelta(days=20), updated_at=now - timedelta(days=10))
    File.objects.filter(uid=fresh.uid).update(updated_at=now - timedelta(hours=1))

    assert [f.name for f in search.recent_files(alice)] == ["fresh.txt", "older.txt"]
    assert [f.name for f in search.recent_files(alice, days=5)] == ["fresh.txt"]
    assert [f.name for f in search.recent_files(alice, limit=1)] == ["fresh.txt"]
    with pytest.raises(ValidationError):
        search.recent_files(alice, days=0)


@pytest.mark.django_db
def test_search_endpoints(alice, api_client, library):
    client = api_client(alice)

    both = client.get("/api/files/search/", {"q": "report"})
    assert both.status_code == 200
    assert [f["name"] for f in both.data["files"]] == ["Q1 report.pdf"]
    assert len(both.data["folders"]) == 2

    files = client.get("/api/files/search/files/", {"q": "notes"})
    assert [f["name"] for f in files.data["files"]] == ["notes.txt"]

    folders = client.get("/api/files/search/folders/", {"q": "old"})
    assert [f["path"] for f in folders.data["folders"]] == ["Reports/Old reports"]

    recent = client.get("/api/files/recent/", {"limit": 10})
    assert {f["name"] for f in recent.data["files"]} == {"Q1 report.pdf", "notes.txt"}

    missing = client.get("/api/files/search/")
    assert missing.status_code == 400 and missing.data["error"] == "validation_error"
    assert client.get("/api/files/recent/", {"days": "soon"}).status_code == 400

import io
import zipfile

import pytest

from drive_backend.exceptions import InsufficientPermissionError
from files.services.export import CancelToken, ExportCancelled, FolderExportService
from sharing.services.shares import ShareService


@pytest.fixture
def exporter(storage):
    return FolderExportService(storage=storage)


def read_archive(chunks):
    return zipfile.ZipFile(io.BytesIO(b"".join(chunks)))


@pytest.fixture
def project(alice, folders, make_file):
    docs = folders.create_folder("Docs", alice)
    sub = folders.create_folder("Sub", alice, docs.uid)
    empty = folders.create_folder("Empty", alice, docs.uid)
    make_file(alice, "readme.txt", folder=docs, content=b"top level file")
    make_file(alice, "nested.txt", folder=sub, content=b"x" * 1000)
    return {"docs": docs, "sub": sub, "empty": empty}


@pytest.mark.django_db
def test_archive_mirrors_the_folder_tree(alice, exporter, project):
    folder, chunks = exporter.download_folder(project["docs"].uid, alice)

    archive = read_archive(chunks)

    assert folder == project["docs"]
    assert set(archive.namelist()) == {
        "Docs/",
        "Docs/Empty/",
        "Docs/Sub/",
        "Docs/readme.txt",
        "Docs/Sub/nested.txt",
    }
    assert archive.read("Docs/readme.txt") == b"top level file"
    assert archive.read("Docs/Sub/nested.txt") == b"x" * 1000
    assert archive.testzip() is None


@pytest.mark.django_db
def test_archive_skips_trashed_content(alice, folders, make_file, exporter, project):
    gone = make_file(alice, "gone.txt", folder=project["docs"])
    folders.delete_file(gone.uid, alice)
    folders.delete_folder(project["sub"].uid, alice)

    _, chunks = exporter.download_folder(project["docs"].uid, alice)
    names = read_archive(chunks).namelist()

    assert "Docs/gone.txt" not in names
    assert not any(name.startswith("Docs/Sub") for name in names)


@pytest.mark.django_db
def test_archive_is_produced_in_many_chunks(alice, exporter, project):
    _, chunks = exporter.download_folder(project["docs"].uid, alice)

    produced = [chunk for chunk in chunks if chunk]

    assert len(produced) > 3


@pytest.mark.django_db
def test_access_is_checked_before_anything_is_streamed(bob, exporter, project):
    with pytest.raises(InsufficientPermissionError):
        exporter.download_folder(project["docs"].uid, bob)


@pytest.mark.django_db
def test_viewer_can_export_shared_folder(alice, bob, exporter, project):
    ShareService().share(project["docs"].uid, "folder", alice, "bob@example.com", "viewer")

    _, chunks = exporter.download_folder(project["sub"].uid, bob)

    assert "Sub/nested.txt" in read_archive(chunks).namelist()


@pytest.mark.django_db
def test_cancelled_export_stops_after_first_chunk(alice, exporter, project, caplog):
    token = CancelToken()
    token.cancel()
    _, chunks = exporter.download_folder(project["docs"].uid, alice, cancel_token=token)

    first = next(chunks)

    assert first
    with pytest.raises(ExportCancelled):
        next(chunks)
    assert "aborted" in caplog.text


@pytest.mark.django_db
def test_export_stops_when_deadline_passes(alice, exporter, project):
    now = [0.0]
    token = CancelToken(timeout=5, clock=lambda: now[0])
    _, chunks = exporter.download_folder(project["docs"].uid, alice, cancel_token=token)

    next(chunks)
    now[0] = 6.0

    with pytest.raises(ExportCancelled, match="timed out"):
        list(chunks)


def test_cancel_token_states():
    now = [100.0]
    token = CancelToken(timeout=10, clock=lambda: now[0])

    assert not token.cancelled
    now[0] = 110.0
    assert token.cancelled

    untimed = CancelToken()
    assert not untimed.cancelled
    untimed.cancel()
    assert untimed.cancelled
    with pytest.raises(ExportCancelled, match="cancelled"):
        untimed.raise_if_cancelled()


@pytest.mark.django_db
def test_client_disconnect_cancels_the_export(alice, exporter, project, caplog):
    token = CancelToken()
    _, chunks = exporter.download_folder(project["docs"].uid, alice, cancel_token=token)
    next(chunks)
    next(chunks)

    chunks.close()

    assert token.cancelled
    assert "client disconnect" in caplog.text


@pytest.mark.django_db
def test_finished_export_leaves_token_untouched(alice, exporter, project):
    token = CancelToken()
    _, chunks = exporter.download_folder(project["docs"].uid, alice, cancel_token=token)
    read_archive(chunks)

    chunks.close()

    assert not token.cancelled

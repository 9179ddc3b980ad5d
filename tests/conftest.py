import io
import uuid

import pytest
from rest_framework.test import APIClient

from accounts.models import CustomUser
from accounts.utils.token_utils import create_access_token
from files.models import File
from files.storage import get_storage, _storage_for
from files.services.tree import FolderService


@pytest.fixture
def storage(settings):
    settings.DRIVE_STORAGE_BACKEND = "tests.fakes.InMemoryStorage"
    _storage_for.cache_clear()
    yield get_storage()
    _storage_for.cache_clear()


@pytest.fixture
def make_user(db):
    def make(email, first_name="", last_name="", **extra):
        return CustomUser.objects.create_user(
            email=email, password="pw-12345", first_name=first_name, last_name=last_name, **extra
        )
    return make


@pytest.fixture
def alice(make_user):
    return make_user("alice@example.com", "Alice", "Owner")


@pytest.fixture
def bob(make_user):
    return make_user("bob@example.com", "Bob", "Reader")


@pytest.fixture
def carol(make_user):
    return make_user("carol@example.com", "Carol", "Other")


@pytest.fixture
def folders(storage):
    return FolderService(storage=storage)


@pytest.fixture
def make_file(storage):
    """Create a file row with a stored blob, bypassing quota checks."""
    def make(owner, name, folder=None, content=b"hello", size=None):
        key = f"test/{uuid.uuid4()}/{name}"
        handle = storage.put(io.BytesIO(content), key)
        return File.objects.create(
            owner=owner,
            name=name,
            folder=folder,
            size=len(content) if size is None else size,
            mime_type="text/plain",
            storage_key=handle.key,
            storage_id=handle.blob_id,
        )
    return make


@pytest.fixture
def api_client():
    def client_for(user=None):
        client = APIClient()
        if user is not None:
            client.credentials(HTTP_AUTHORIZATION=f"Bearer {create_access_token(user)}")
        return client
    return client_for

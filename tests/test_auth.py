from datetime import timedelta

import pytest
import requests
from django.core.cache import caches

from accounts.apps import get_state_store
from accounts.forms import CustomUserCreationForm
from accounts.models import CustomUser
from accounts.state_store import OAuthStateStore
from accounts.utils.jwe_utils import decrypt_jwe, encrypt_jwe
from accounts.utils.token_utils import create_access_token
from accounts.views import google_oauth_views

ME_URL = "/api/accounts/me/"


def bearer(client, token):
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client


def test_jwe_round_trip(settings):
    payload = {"uid": "abc", "type": "access"}

    token = encrypt_jwe(payload)

    assert token.count(".") == 4
    assert decrypt_jwe(token) == payload


def test_short_secret_key_is_rejected(settings):
    settings.JWE_SECRET_KEY = "c2hvcnQ="

    with pytest.raises(ValueError):
        encrypt_jwe({"uid": "abc"})


@pytest.mark.django_db
def test_valid_token_authenticates(alice, api_client):
    response = api_client(alice).get(ME_URL)

    assert response.status_code == 200
    assert response.data["email"] == "alice@example.com"


@pytest.mark.django_db
def test_missing_token_is_unauthorized(api_client):
    response = api_client().get(ME_URL)

    assert response.status_code == 401


@pytest.mark.django_db
def test_expired_token_is_rejected(alice, api_client):
    token = create_access_token(alice, lifetime=timedelta(seconds=-1))

    response = bearer(api_client(), token).get(ME_URL)

    assert response.status_code == 401


@pytest.mark.django_db
def test_stale_token_version_is_rejected(alice, api_client):
    token = create_access_token(alice)
    alice.access_token_version += 1
    alice.save()

    response = bearer(api_client(), token).get(ME_URL)

    assert response.status_code == 401


@pytest.mark.django_db
def test_wrong_token_type_and_garbage_are_rejected(alice, api_client):
    refresh = encrypt_jwe({
        "uid": str(alice.uid),
        "type": "refresh",
        "access_token_version": alice.access_token_version,
        "exp": "2999-01-01T00:00:00+00:00",
    })

    assert bearer(api_client(), refresh).get(ME_URL).status_code == 401
    assert bearer(api_client(), "not.a.real.jwe.token").get(ME_URL).status_code == 401


@pytest.mark.django_db
def test_disabled_account_is_rejected(alice, api_client):
    client = api_client(alice)
    alice.is_active = False
    alice.save()

    assert client.get(ME_URL).status_code == 401


@pytest.mark.django_db
def test_profile_reports_storage_usage(alice, api_client, make_file):
    make_file(alice, "a.txt", content=b"12345")

    response = api_client(alice).get(ME_URL)

    assert response.data["storage_used"] == 5
    assert response.data["storage_quota"] == 2_000_000_000


def test_state_is_single_use():
    store = OAuthStateStore(ttl=60)
    token = store.issue(redirect_uri="https://app.test/cb")

    assert store.consume(token) == {"redirect_uri": "https://app.test/cb"}
    assert store.consume(token) is None
    assert store.consume("unknown") is None
    assert store.consume(None) is None


def test_state_lives_in_the_shared_cache():
    store = OAuthStateStore(ttl=60)
    token = store.issue()

    assert caches["default"].get(f"oauth-state:{token}") == {}
    # a second store, as in another worker, can consume it
    assert OAuthStateStore(ttl=60).consume(token) == {}


def test_expired_state_is_rejected():
    store = OAuthStateStore(ttl=0)
    token = store.issue()

    assert store.consume(token) is None


def test_state_taken_by_a_concurrent_consumer_is_rejected(monkeypatch):
    store = OAuthStateStore(ttl=60)
    token = store.issue()
    cache = caches["default"]
    real_get = cache.get

    def get_then_lose_race(key, *args, **kwargs):
        value = real_get(key, *args, **kwargs)
        cache.delete(key)
        return value

    monkeypatch.setattr(cache, "get", get_then_lose_race)

    assert store.consume(token) is None


class FakeResponse:
    def __init__(self, payload):
        self.payload = payload

    def json(self):
        return self.payload


@pytest.fixture
def google(monkeypatch):
    calls = {"userinfo": {"email": "New.Person@Example.com", "given_name": "New", "family_name": "Person"}}

    def fake_post(url, data=None, timeout=None):
        calls["code"] = data["code"]
        return FakeResponse({"access_token": "google-token"})

    def fake_get(url, params=None, timeout=None):
        return FakeResponse(calls["userinfo"])

    monkeypatch.setattr(google_oauth_views.requests, "post", fake_post)
    monkeypatch.setattr(google_oauth_views.requests, "get", fake_get)
    return calls


@pytest.mark.django_db
def test_google_sign_in_creates_account_and_issues_token(api_client, google):
    client = api_client()
    state = client.get("/api/accounts/oauth/google/").data["state"]

    response = client.get("/api/accounts/oauth/google/callback/", {"state": state, "code": "abc"})

    assert response.status_code == 200
    user = CustomUser.objects.get(email="new.person@example.com")
    assert user.display_name == "New Person"
    assert google["code"] == "abc"
    assert decrypt_jwe(response.data["access_token"])["uid"] == str(user.uid)


@pytest.mark.django_db
def test_google_callback_rejects_unknown_or_reused_state(api_client, google):
    client = api_client()
    state = get_state_store().issue()

    assert client.get("/api/accounts/oauth/google/callback/", {"state": "forged", "code": "abc"}).status_code == 400
    assert client.get("/api/accounts/oauth/google/callback/", {"state": state, "code": "abc"}).status_code == 200
    assert client.get("/api/accounts/oauth/google/callback/", {"state": state, "code": "abc"}).status_code == 400


@pytest.mark.django_db
def test_google_outage_is_reported_as_unavailable(api_client, monkeypatch):
    def broken(*args, **kwargs):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(google_oauth_views.requests, "post", broken)
    state = get_state_store().issue()

    response = api_client().get("/api/accounts/oauth/google/callback/", {"state": state, "code": "abc"})

    assert response.status_code == 503


@pytest.mark.django_db
def test_admin_form_rejects_negative_quota():
    form = CustomUserCreationForm(data={
        "email": "dave@example.com",
        "storage_quota": -1,
        "password1": "a-long-passphrase-42",
        "password2": "a-long-passphrase-42",
    })

    assert not form.is_valid()
    assert "storage_quota" in form.errors


@pytest.mark.django_db
def test_profile_update_changes_display_name(alice, api_client):
    client = api_client(alice)

    response = client.put(ME_URL, {"first_name": "Alicia"}, format="json")

    assert response.status_code == 200
    assert client.get(ME_URL).data["display_name"] == "Alicia Owner"


@pytest.mark.django_db
def test_refresh_issues_a_new_working_token(alice, api_client):
    response = api_client(alice).post("/api/accounts/token/refresh/")

    assert response.status_code == 200
    fresh = response.data["access_token"]
    assert decrypt_jwe(fresh)["exp"] == response.data["expires_at"]
    assert bearer(api_client(), fresh).get(ME_URL).status_code == 200


@pytest.mark.django_db
def test_validate_reports_token_owner(alice, api_client):
    response = api_client(alice).get("/api/accounts/token/validate/")

    assert response.status_code == 200
    assert response.data["valid"] is True
    assert response.data["user_id"] == str(alice.uid)
    assert response.data["email"] == "alice@example.com"
    assert api_client().get("/api/accounts/token/validate/").status_code == 401


@pytest.mark.django_db
def test_logout_revokes_every_issued_token(alice, api_client):
    other_session = create_access_token(alice)
    version = alice.access_token_version
    client = api_client(alice)

    assert client.post("/api/accounts/logout/").status_code == 200

    alice.refresh_from_db()
    assert alice.access_token_version == version + 1
    assert client.get(ME_URL).status_code == 401
    assert bearer(api_client(), other_session).get(ME_URL).status_code == 401
    assert api_client(alice).get(ME_URL).status_code == 200

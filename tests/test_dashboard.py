# Tests for dashboard.py and dashboard_auth.py — pages and Google sign-in flow.
# Created: 2026-10-12

from unittest.mock import AsyncMock, patch
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient

from cloudarchive.api.deps import get_storage
from cloudarchive.auth import (
    AuthRejected,
    Identity,
    SignInError,
    create_session_token,
    verify_session_token,
)
from cloudarchive.dashboard import create_app, resolve_navigation
from cloudarchive.dashboard_auth import SESSION_COOKIE, STATE_COOKIE
from cloudarchive.hierarchy import (
    NavigationMode,
    NavigationState,
    StorageObject,
    get_browser_registry,
)
from cloudarchive.storage import BucketListError, ContentsListError


@pytest.fixture
def app(storage):
    app = create_app()
    app.dependency_overrides[get_storage] = lambda: storage
    return app


@pytest.fixture
def anon(app):
    return TestClient(app, follow_redirects=False)


@pytest.fixture
def client(app, session_cookie):
    return TestClient(app, cookies={SESSION_COOKIE: session_cookie()}, follow_redirects=False)


def _state_client(app, session_secret, nonce="nonce-1"):
    """Client holding a valid OAuth state cookie; returns (client, state)."""
    state = create_session_token(session_secret, nonce, ttl_seconds=600)
    return TestClient(app, cookies={STATE_COOKIE: nonce}, follow_redirects=False), state


class TestResolveNavigation:
    def test_plain_path(self):
        assert resolve_navigation("a/c") == NavigationState(current_path="a/c")

    def test_breadcrumb(self):
        assert resolve_navigation("a/c", crumb=1) == NavigationState(current_path="a")

    def test_search(self):
        state = resolve_navigation("a", q="d.txt")
        assert state.mode is NavigationMode.SEARCH
        assert state.current_path == "a"

    def test_clear_search(self):
        assert resolve_navigation("a", q="") == NavigationState()

    def test_open_result_wins(self):
        assert resolve_navigation("", q="d", open_item="a/c/d.txt") == NavigationState(
            current_path="a/c"
        )


class TestAuthGate:
    """Unauthenticated requests never reach a page or the API."""

    def test_index_redirects_to_login(self, anon):
        resp = anon.get("/")
        assert resp.status_code == 303
        assert resp.headers["location"] == "/login"

    def test_health_is_public(self, anon):
        resp = anon.get("/api/v1/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["sign_in_configured"] is True
        assert data["storage_configured"] is False

    def test_login_page(self, anon):
        resp = anon.get("/login")
        assert resp.status_code == 200
        assert "Sign in with Google" in resp.text
        assert 'href="/auth/google"' in resp.text

    def test_login_page_access_denied(self, anon):
        resp = anon.get("/login", params={"error": "AccessDenied"})
        assert "not allowed to access this archive" in resp.text

    def test_signed_in_user_skips_login(self, client):
        resp = client.get("/login")
        assert resp.status_code == 303
        assert resp.headers["location"] == "/"

    def test_removed_from_allow_list(self, app, session_cookie):
        client = TestClient(
            app,
            cookies={SESSION_COOKIE: session_cookie("carol@example.com")},
            follow_redirects=False,
        )
        assert client.get("/").headers["location"] == "/login"

    def test_tampered_cookie(self, app):
        client = TestClient(app, cookies={SESSION_COOKIE: "x:1:y"}, follow_redirects=False)
        assert client.get("/").status_code == 303

    def test_security_headers(self, anon):
        resp = anon.get("/login")
        assert resp.headers["X-Frame-Options"] == "DENY"
        assert "default-src 'self'" in resp.headers["Content-Security-Policy"]
        assert anon.get("/").headers["X-Content-Type-Options"] == "nosniff"


class TestGoogleSignIn:
    def test_start_redirects_to_google(self, anon):
        resp = anon.get("/auth/google")
        assert resp.status_code == 303
        target = urlparse(resp.headers["location"])
        assert target.netloc == "accounts.google.com"
        params = parse_qs(target.query)
        assert params["redirect_uri"] == ["http://localhost:8000/auth/callback"]
        assert params["state"]
        assert STATE_COOKIE in resp.headers["set-cookie"]

    def test_start_unconfigured(self, anon, monkeypatch):
        from cloudarchive.config import get_settings

        monkeypatch.delenv("GOOGLE_CLIENT_ID")
        get_settings.cache_clear()
        resp = anon.get("/auth/google")
        assert resp.headers["location"] == "/login?error=Configuration"

    def test_callback_success_sets_session(self, app, session_secret):
        client, state = _state_client(app, session_secret)
        identity = Identity(email="alice@example.com", name="Alice")
        with patch(
            "cloudarchive.dashboard_auth.GoogleSignIn.authenticate",
            new_callable=AsyncMock,
            return_value=identity,
        ) as authenticate:
            resp = client.get("/auth/callback", params={"code": "c1", "state": state})

        authenticate.assert_awaited_once_with("c1")
        assert resp.status_code == 303
        assert resp.headers["location"] == "/"
        assert SESSION_COOKIE in resp.cookies
        subject = verify_session_token(resp.cookies[SESSION_COOKIE], session_secret)
        assert Identity.from_subject(subject) == identity
        set_cookie = resp.headers["set-cookie"].lower()
        assert "httponly" in set_cookie
        assert "samesite=lax" in set_cookie

    def test_callback_rejected_user(self, app, session_secret):
        client, state = _state_client(app, session_secret)
        with patch(
            "cloudarchive.dashboard_auth.GoogleSignIn.authenticate",
            new_callable=AsyncMock,
            side_effect=AuthRejected("mallory@example.com"),
        ):
            resp = client.get("/auth/callback", params={"code": "c1", "state": state})

        assert resp.headers["location"] == "/login?error=AccessDenied"
        assert SESSION_COOKIE not in resp.cookies

    def test_callback_provider_failure(self, app, session_secret):
        client, state = _state_client(app, session_secret)
        with patch(
            "cloudarchive.dashboard_auth.GoogleSignIn.authenticate",
            new_callable=AsyncMock,
            side_effect=SignInError("boom"),
        ):
            resp = client.get("/auth/callback", params={"code": "c1", "state": state})
        assert resp.headers["location"] == "/login?error=SignInFailed"

    def test_callback_state_mismatch(self, app, session_secret):
        client, _ = _state_client(app, session_secret, nonce="nonce-1")
        forged = create_session_token(session_secret, "nonce-2", ttl_seconds=600)
        with patch(
            "cloudarchive.dashboard_auth.GoogleSignIn.authenticate", new_callable=AsyncMock
        ) as authenticate:
            resp = client.get("/auth/callback", params={"code": "c1", "state": forged})
        assert resp.headers["location"] == "/login?error=SignInFailed"
        authenticate.assert_not_awaited()

    def test_callback_google_error(self, anon):
        resp = anon.get("/auth/callback", params={"error": "access_denied"})
        assert resp.headers["location"] == "/login?error=SignInFailed"

    def test_logout(self, client):
        client.get("/")
        assert len(get_browser_registry()) == 1

        resp = client.post("/auth/logout")

        assert resp.status_code == 303
        assert resp.headers["location"] == "/login"
        assert f'{SESSION_COOKIE}=""' in resp.headers["set-cookie"]
        assert len(get_browser_registry()) == 0

    def test_logout_requires_post(self, client):
        client.get("/")
        resp = client.get("/auth/logout")
        assert resp.status_code == 405
        assert len(get_browser_registry()) == 1
        assert client.get("/").status_code == 200

    def test_plain_email_cookie_rejected(self, app, session_secret):
        token = create_session_token(session_secret, "alice@example.com", ttl_seconds=600)
        client = TestClient(app, cookies={SESSION_COOKIE: token}, follow_redirects=False)
        assert client.get("/").headers["location"] == "/login"


class TestIndexPage:
    """Server-rendered browsing page."""

    def test_first_bucket_selected(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert "Contents of archive" in resp.text
        assert 'title="alice@example.com">Alice</span>' in resp.text
        assert "e.txt" in resp.text
        assert "path=a" in resp.text

    def test_nested_folder(self, client):
        resp = client.get("/", params={"bucket": "archive", "path": "a/c"})
        assert "d.txt" in resp.text
        assert "20 B" in resp.text
        assert "download?key=a/c/d.txt" in resp.text

    def test_empty_folder(self, client):
        resp = client.get("/", params={"bucket": "archive", "path": "missing"})
        assert "This folder is empty" in resp.text

    def test_search(self, client):
        resp = client.get("/", params={"bucket": "archive", "q": "d.txt"})
        assert "1 result " in resp.text
        assert "a/c/d.txt" in resp.text

    def test_open_search_result(self, client):
        client.get("/", params={"bucket": "archive", "q": "d.txt"})
        resp = client.get("/", params={"bucket": "archive", "open": "a/c/d.txt"})
        browser = get_browser_registry().get("alice@example.com")
        assert browser.state == NavigationState(current_path="a/c")
        assert "This folder is empty" not in resp.text

    def test_bucket_switch_resets_path(self, client, storage):
        client.get("/", params={"bucket": "archive", "path": "a"})
        client.get("/", params={"bucket": "photos"})
        browser = get_browser_registry().get("alice@example.com")
        assert browser.bucket == "photos"
        assert browser.state.mode is NavigationMode.ROOT
        storage.list_bucket_contents.assert_called_with("photos")

    def test_bucket_list_failure(self, client, storage):
        storage.list_buckets.side_effect = BucketListError()
        resp = client.get("/")
        assert resp.status_code == 200
        assert "Failed to list buckets" in resp.text

    def test_contents_failure(self, client, storage):
        storage.list_bucket_contents.side_effect = ContentsListError("archive")
        resp = client.get("/")
        assert "Failed to list contents of bucket archive" in resp.text

    def test_no_buckets(self, client, storage):
        storage.list_buckets.return_value = []
        resp = client.get("/")
        assert "Select a bucket to view its contents" in resp.text

    def test_name_falls_back_to_email(self, app, session_cookie):
        client = TestClient(
            app, cookies={SESSION_COOKIE: session_cookie(name="")}, follow_redirects=False
        )
        resp = client.get("/")
        assert '<span class="user" title="alice@example.com">alice@example.com</span>' in resp.text

    def test_leading_slash_keys(self, client, storage):
        storage.list_bucket_contents.return_value = [
            StorageObject("/x.txt", 3),
            StorageObject("//y.txt", 4),
        ]
        root = client.get("/", params={"bucket": "archive"})
        assert "path=/" in root.text

        resp = client.get("/", params={"bucket": "archive", "path": "/"})
        assert "x.txt" in resp.text
        assert "download?key=/x.txt" in resp.text
        assert "path=//" in resp.text

        nested = client.get("/", params={"bucket": "archive", "path": "//"})
        assert "download?key=//y.txt" in nested.text

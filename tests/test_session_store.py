"""Tests for the session store, expiry, access gate and authenticator."""

import threading
from datetime import datetime, timedelta, timezone

import pytest

from treeserve.services.auth_service import Authenticator
from treeserve.services.session_store import (
    Access,
    SessionStore,
    resolve_access,
)
from treeserve.utils.hashing import hash_password, verify_password


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


class TestTokens:
    def test_token_is_256_bit_hex(self):
        token = SessionStore.generate_token()
        assert len(token) == 64
        int(token, 16)

    def test_tokens_differ(self):
        assert len({SessionStore.generate_token() for _ in range(100)}) == 100


class TestLifecycle:
    def test_round_trip(self):
        store = SessionStore()
        token = store.generate_token()
        store.add(token)
        assert store.is_valid(token) is True
        store.remove(token)
        assert store.is_valid(token) is False

    def test_remove_unknown_is_noop(self):
        store = SessionStore()
        store.remove("does-not-exist")
        store.remove(None)
        assert len(store) == 0

    def test_empty_token_invalid(self):
        store = SessionStore()
        assert store.is_valid("") is False
        assert store.is_valid(None) is False

    def test_add_overwrites(self, clock):
        store = SessionStore(ttl=timedelta(minutes=10), clock=clock)
        store.add("t")
        clock.advance(minutes=9)
        store.add("t")
        clock.advance(minutes=9)
        assert store.is_valid("t") is True
        assert len(store) == 1

    def test_no_ttl_never_expires(self, clock):
        store = SessionStore(clock=clock)
        store.add("t")
        clock.advance(days=3650)
        assert store.is_valid("t") is True
        assert store.purge_expired() == 0


class TestExpiry:
    def test_expired_token_rejected_and_evicted(self, clock):
        store = SessionStore(ttl=timedelta(minutes=30), clock=clock)
        store.add("t")
        clock.advance(minutes=29)
        assert store.is_valid("t") is True
        clock.advance(minutes=1)
        assert store.is_valid("t") is False
        assert len(store) == 0

    def test_purge_expired(self, clock):
        store = SessionStore(ttl=timedelta(minutes=30), clock=clock)
        store.add("old")
        clock.advance(minutes=20)
        store.add("new")
        clock.advance(minutes=15)
        assert store.purge_expired() == 1
        assert store.is_valid("new") is True
        assert store.is_valid("old") is False


class TestConcurrency:
    def test_parallel_add_and_remove(self):
        store = SessionStore()
        tokens = [store.generate_token() for _ in range(400)]

        def worker(chunk):
            for token in chunk:
                store.add(token)
                assert store.is_valid(token)
                store.remove(token)

        threads = [threading.Thread(target=worker, args=(tokens[i::8],)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(store) == 0


class TestAccessGate:
    def test_authenticated_always_allowed(self):
        for path in ("/", "/api/files", "/ws", "/files/a.txt"):
            assert resolve_access(path, True) is Access.ALLOW

    def test_login_page_open(self):
        assert resolve_access("/login", False) is Access.ALLOW

    @pytest.mark.parametrize("path", ["/api/files", "/api/random-media", "/ws"])
    def test_api_and_live_routes_unauthorized(self, path):
        assert resolve_access(path, False) is Access.UNAUTHORIZED

    @pytest.mark.parametrize("path", ["/", "/browse/b", "/files/a.txt", "/static/app.js", "/login/extra"])
    def test_pages_redirect(self, path):
        assert resolve_access(path, False) is Access.REDIRECT


class TestAuthenticator:
    def test_disabled_without_password(self):
        auth = Authenticator.from_password("", SessionStore())
        assert auth.enabled is False
        assert auth.is_authenticated(None) is True
        assert auth.login("anything") is None

    def test_login_logout(self):
        auth = Authenticator(SessionStore(), hash_password("s3cret"))
        assert auth.is_authenticated(None) is False
        assert auth.login("wrong") is None

        token = auth.login("s3cret")
        assert token is not None
        assert auth.is_authenticated(token) is True

        auth.logout(token)
        assert auth.is_authenticated(token) is False


class TestHashing:
    def test_verify(self):
        hashed = hash_password("pa55")
        assert verify_password("pa55", hashed) is True
        assert verify_password("pa56", hashed) is False

    def test_long_passwords_accepted(self):
        password = "x" * 100
        assert verify_password(password, hash_password(password)) is True

    def test_garbage_hash_is_a_mismatch(self):
        assert verify_password("pa55", b"not-a-bcrypt-hash") is False

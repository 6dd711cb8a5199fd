"""
Tests for the in-memory token cache.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from nonce_chat.entities import NonceTokenEntity
from nonce_chat.protocols import TokenStore


def make_token(value: str = "abc123", ttl: int = 3600) -> NonceTokenEntity:
    return NonceTokenEntity(value=value, acquired_at=0.0, ttl=ttl)


class TestInMemoryTokenStore:

    def test_satisfies_protocol(self, token_store):
        assert isinstance(token_store, TokenStore)

    def test_empty_store_misses(self, token_store):
        assert token_store.get() is None
        assert token_store.get_stats() == {"keys": 0, "hits": 0, "misses": 1}

    def test_get_returns_token_until_ttl_elapses(self, token_store, clock):
        token = make_token()
        token_store.set(token, ttl=60)

        assert token_store.get() is token
        clock.advance(59.9)
        assert token_store.get() is token
        clock.advance(0.1)
        assert token_store.get() is None

    def test_expired_entry_is_evicted_and_counted_as_miss(self, token_store, clock):
        token_store.set(make_token(), ttl=10)
        clock.advance(11)

        assert token_store.get() is None
        assert token_store.get_stats() == {"keys": 0, "hits": 0, "misses": 1}

    def test_ttl_defaults_to_token_validity(self, token_store, clock):
        token_store.set(make_token(ttl=30))

        clock.advance(29)
        assert token_store.get() is not None
        clock.advance(1)
        assert token_store.get() is None

    def test_set_replaces_previous_token(self, token_store):
        token_store.set(make_token("first"))
        token_store.set(make_token("second"))

        assert token_store.get().value == "second"
        assert token_store.get_stats()["keys"] == 1

    def test_peek_leaves_counters_alone(self, token_store):
        token_store.set(make_token())

        assert token_store.peek() is not None
        assert token_store.get_stats() == {"keys": 1, "hits": 0, "misses": 0}

    def test_hits_and_misses_are_counted(self, token_store):
        token_store.get()
        token_store.set(make_token())
        token_store.get()
        token_store.get()

        assert token_store.get_stats() == {"keys": 1, "hits": 2, "misses": 1}

    def test_invalidate(self, token_store):
        token_store.set(make_token())

        assert token_store.invalidate() is True
        assert token_store.invalidate() is False
        assert token_store.get() is None

    def test_keys_are_independent(self, token_store):
        token_store.set(make_token("a"), key="one")
        token_store.set(make_token("b"), key="two")
        token_store.invalidate(key="one")

        assert token_store.get(key="one") is None
        assert token_store.get(key="two").value == "b"

    def test_clear_returns_count(self, token_store):
        token_store.set(make_token("a"), key="one")
        token_store.set(make_token("b"), key="two")

        assert token_store.clear() == 2
        assert token_store.get_stats()["keys"] == 0

    def test_non_positive_ttl_is_rejected(self, token_store):
        with pytest.raises(ValueError):
            token_store.set(make_token(), ttl=0)

    def test_concurrent_writers_never_expose_foreign_values(self, token_store):
        written = {f"token-{i}" for i in range(50)}

        def write_then_read(value: str) -> str | None:
            token_store.set(make_token(value))
            token = token_store.get()
            return token.value if token else None

        with ThreadPoolExecutor(max_workers=8) as pool:
            seen = list(pool.map(write_then_read, sorted(written)))

        assert all(value in written for value in seen)
        assert token_store.get_stats()["keys"] == 1


class TestNonceTokenEntity:

    def test_repr_hides_value(self):
        token = make_token("super-secret")
        assert "super-secret" not in repr(token)

    def test_expiry_is_measured_from_storage_time(self, token_store, clock):
        # acquired_at is informational; only the store's clock decides expiry
        token = NonceTokenEntity(value="old", acquired_at=0.0, ttl=60)
        token_store.set(token)

        clock.advance(59)
        assert token_store.get() is token

"""Tests for EncryptionKeyCache."""
from concurrent.futures import ThreadPoolExecutor

from policy_propagator.encryption.cache import EncryptionKeyCache

from .conftest import CLUSTER_NAME, KEY_SIZE


class TestEncryptionKeyCache:
    """Tests for cache reads, writes and thread safety."""

    def test_set_then_get(self):
        """Test get() returns the exact bytes passed to set()."""
        cache = EncryptionKeyCache()
        cache.set(CLUSTER_NAME, b"A")
        assert cache.get(CLUSTER_NAME) == b"A"

    def test_get_missing_returns_none(self):
        """Test get() returns None for an unknown cluster."""
        cache = EncryptionKeyCache()
        assert cache.get(CLUSTER_NAME) is None
        assert CLUSTER_NAME not in cache

    def test_overwrite(self):
        """Test set() replaces an existing entry."""
        cache = EncryptionKeyCache()
        cache.set(CLUSTER_NAME, b"A")
        cache.set(CLUSTER_NAME, b"B")
        assert cache.get(CLUSTER_NAME) == b"B"
        assert len(cache) == 1

    def test_caller_buffer_is_not_aliased(self):
        """Test mutating the buffer passed to set() does not change the cache."""
        cache = EncryptionKeyCache()
        buffer = bytearray(b"secret")
        cache.set(CLUSTER_NAME, buffer)
        buffer[0] = ord("X")
        value = cache.get(CLUSTER_NAME)
        assert value == b"secret"
        assert isinstance(value, bytes)

    def test_entries_are_per_cluster(self):
        """Test each cluster keeps its own entry."""
        cache = EncryptionKeyCache()
        cache.set("cluster-a", b"a")
        cache.set("cluster-b", b"b")
        assert cache.get("cluster-a") == b"a"
        assert cache.get("cluster-b") == b"b"
        assert len(cache) == 2

    def test_concurrent_access(self):
        """Test concurrent set()/get() from worker threads."""
        cache = EncryptionKeyCache()

        def worker(n: int) -> bytes:
            name = f"cluster-{n % 8}"
            cache.set(name, bytes([n % 8]) * KEY_SIZE)
            return cache.get(name)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(worker, range(200)))

        assert len(cache) == 8
        for n in range(8):
            assert cache.get(f"cluster-{n}") == bytes([n]) * KEY_SIZE
        assert all(len(value) == KEY_SIZE for value in results)

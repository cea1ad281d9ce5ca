"""In-memory cache of per-cluster encryption keys."""
import threading
from typing import Optional


class EncryptionKeyCache:
    """Thread-safe mapping of cluster name to encryption key.

    A disposable replica of the secret store: empty on process start and
    filled as keys are resolved. One lock guards the whole mapping.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._cache: dict[str, bytes] = {}

    def get(self, cluster_name: str) -> Optional[bytes]:
        """Return the cached key for ``cluster_name``, or None."""
        with self._lock:
            return self._cache.get(cluster_name)

    def set(self, cluster_name: str, key: bytes) -> None:
        """Cache ``key`` for ``cluster_name``, replacing any previous entry."""
        # bytes() detaches bytearray/memoryview input from the caller's buffer
        value = bytes(key)
        with self._lock:
            self._cache[cluster_name] = value

    def __contains__(self, cluster_name: object) -> bool:
        with self._lock:
            return cluster_name in self._cache

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

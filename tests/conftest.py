"""Shared fixtures and constants for the policy encryption tests."""
import pytest

from policy_propagator.encryption.store import MemorySecretStore, SecretRecord


POLICY_NAME = "test-policy"
CLUSTER_NAME = "local-cluster"
SECRET_NAME = "policy-encryption-key"
KEY_SIZE = 256 // 8
IV_SIZE = 128 // 8


class CountingStore(MemorySecretStore):
    """MemorySecretStore that records how often it is read and written."""

    def __init__(self, records=None):
        super().__init__(records)
        self.reads = 0
        self.creates = 0

    async def get(self, namespace, name):
        self.reads += 1
        return await super().get(namespace, name)

    async def create(self, record):
        self.creates += 1
        return await super().create(record)


@pytest.fixture
def store():
    """Create an empty counting store."""
    return CountingStore()


@pytest.fixture
def existing_key():
    """A fixed 32-byte key already persisted for CLUSTER_NAME."""
    return bytes(range(KEY_SIZE))


@pytest.fixture
def store_with_key(existing_key):
    """Create a store holding a key record for CLUSTER_NAME."""
    return CountingStore([
        SecretRecord(
            namespace=CLUSTER_NAME,
            name=SECRET_NAME,
            data={"key": existing_key},
        )
    ])

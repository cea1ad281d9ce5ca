"""
Key Provisioning — Get-or-create of per-cluster encryption keys.

Each managed cluster has one AES-256 key, persisted in the secret store as
``<cluster>/policy-encryption-key`` with the raw bytes in the ``key`` field.
Lookup order for ``get_encryption_key()``: in-memory cache → store → create.

When two reconcilers create the same record concurrently, the store keeps the
first write; the loser discards its generated key and returns the stored one.

Security Note:
    Never log key material. Only log cluster names and outcomes.
"""
import asyncio
import enum
import logging
import secrets
from typing import Any, Awaitable, Optional

from pydantic import BaseModel

from .cache import EncryptionKeyCache
from .config import EncryptionConfig, KEY_SIZE
from .exceptions import (
    ObjectAlreadyExists,
    ObjectNotFound,
    RandomSourceError,
    SecretStoreError,
)
from .store import SecretRecord, SecretStore

logger = logging.getLogger("propagator.encryption")


def generate_random_bytes(size: int) -> bytes:
    """Return ``size`` bytes from the OS cryptographic random source.

    Raises:
        RandomSourceError: If the OS cannot supply random bytes.
    """
    try:
        return secrets.token_bytes(size)
    except (OSError, NotImplementedError) as err:
        raise RandomSourceError(
            f"secure random source unavailable: {err}"
        ) from err


def generate_key(size: int = KEY_SIZE) -> bytes:
    """Generate a new random encryption key (32 bytes by default)."""
    return generate_random_bytes(size)


async def _bounded(aw: Awaitable[Any], timeout: Optional[float]) -> Any:
    return await asyncio.wait_for(aw, timeout)


# ---------------------------------------------------------------------------
# Create-or-get
# ---------------------------------------------------------------------------

class ProvisionOutcome(str, enum.Enum):
    CREATED = "created"
    ALREADY_EXISTED = "already_existed"
    FAILED = "failed"


class ProvisionResult(BaseModel):
    """Tagged result of ``create_or_get``.

    ``record`` holds the authoritative record for CREATED and
    ALREADY_EXISTED; ``error`` holds the store error for FAILED.
    """

    outcome: ProvisionOutcome
    record: Optional[SecretRecord] = None
    error: Optional[Exception] = None

    model_config = {"arbitrary_types_allowed": True}


async def create_or_get(
    store: SecretStore,
    record: SecretRecord,
    timeout: Optional[float] = None,
) -> ProvisionResult:
    """Create ``record``, or fetch the record that won a concurrent create.

    Args:
        store: Secret store backend.
        record: Record to create.
        timeout: Per-call store timeout in seconds (None to disable).

    Returns:
        ProvisionResult tagged CREATED, ALREADY_EXISTED or FAILED.
        Cancellation is not captured and propagates to the caller.
    """
    try:
        await _bounded(store.create(record), timeout)
    except ObjectAlreadyExists:
        try:
            existing = await _bounded(
                store.get(record.namespace, record.name), timeout,
            )
        except Exception as err:
            return ProvisionResult(outcome=ProvisionOutcome.FAILED, error=err)
        return ProvisionResult(
            outcome=ProvisionOutcome.ALREADY_EXISTED, record=existing,
        )
    except Exception as err:
        return ProvisionResult(outcome=ProvisionOutcome.FAILED, error=err)
    return ProvisionResult(outcome=ProvisionOutcome.CREATED, record=record)


# ---------------------------------------------------------------------------
# Provisioner
# ---------------------------------------------------------------------------

class KeyProvisioner:
    """Resolves the encryption key of a cluster, creating it on first use.

    The cache is filled only after the store confirmed a read or a create,
    so a cancelled or failed call leaves nothing behind and can be retried.
    Store errors are raised unmodified; retrying is left to the caller's
    requeue policy.
    """

    def __init__(
        self,
        store: SecretStore,
        cache: Optional[EncryptionKeyCache] = None,
        config: Optional[EncryptionConfig] = None,
    ):
        self._store = store
        self._cache = cache if cache is not None else EncryptionKeyCache()
        self._config = config or EncryptionConfig()

    @property
    def cache(self) -> EncryptionKeyCache:
        return self._cache

    async def get_encryption_key(self, cluster_name: str) -> bytes:
        """Return the encryption key for ``cluster_name``.

        Args:
            cluster_name: Managed cluster name, also the record namespace.

        Returns:
            The cluster's 32-byte key.

        Raises:
            RandomSourceError: If a new key could not be generated.
            SecretStoreError: If the stored record has no key field.
            Exception: Any other store error, as raised by the backend.
        """
        key = self._cache.get(cluster_name)
        if key is not None:
            return key

        try:
            record = await _bounded(
                self._store.get(cluster_name, self._config.secret_name),
                self._config.store_timeout,
            )
            logger.debug("Loaded encryption key for cluster=%s", cluster_name)
        except ObjectNotFound:
            record = await self._provision(cluster_name)

        key = self._extract_key(record)
        self._cache.set(cluster_name, key)
        return key

    async def _provision(self, cluster_name: str) -> SecretRecord:
        record = SecretRecord(
            namespace=cluster_name,
            name=self._config.secret_name,
            data={self._config.key_field: generate_key(self._config.key_size)},
        )
        result = await create_or_get(
            self._store, record, self._config.store_timeout,
        )
        if result.outcome is ProvisionOutcome.FAILED:
            raise result.error
        if result.outcome is ProvisionOutcome.ALREADY_EXISTED:
            logger.warning(
                "Encryption key for cluster=%s was created concurrently, "
                "using the stored key", cluster_name,
            )
        else:
            logger.info("Created encryption key for cluster=%s", cluster_name)
        return result.record

    def _extract_key(self, record: SecretRecord) -> bytes:
        key = record.data.get(self._config.key_field)
        if key is None:
            raise SecretStoreError(
                f"secret {record.namespace}/{record.name} has no "
                f"'{self._config.key_field}' field",
                record.namespace, record.name,
            )
        return key

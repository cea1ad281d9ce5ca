"""
Secret Store — Durable records holding per-cluster key material.

A record is addressed by (namespace, name) and carries a ``data`` map of
field name to raw bytes, the same shape as a Kubernetes Secret. The key
provisioner only needs two operations from a backend:

- ``get(namespace, name)`` — raises ``ObjectNotFound`` when absent
- ``create(record)`` — raises ``ObjectAlreadyExists`` when taken

Any other backend failure propagates to the caller as raised.

Security Note:
    Never log record data. Only log namespaces and names.
"""
import base64
import logging
import threading
from typing import Any, Protocol

import orjson
from pydantic import BaseModel, Field

from .exceptions import ObjectAlreadyExists, ObjectNotFound

logger = logging.getLogger("propagator.encryption")


class SecretRecord(BaseModel):
    """A named record in the secret store."""

    namespace: str = Field(min_length=1)
    name: str = Field(min_length=1)
    data: dict[str, bytes] = Field(default_factory=dict)


class SecretStore(Protocol):
    """Read-by-identity and create-by-identity access to secret records."""

    async def get(self, namespace: str, name: str) -> SecretRecord:
        """Return the record, or raise ObjectNotFound."""
        ...

    async def create(self, record: SecretRecord) -> None:
        """Persist a new record, or raise ObjectAlreadyExists."""
        ...


class MemorySecretStore:
    """Process-local secret store.

    Records are copied in and out, so callers can never mutate what the
    store holds.
    """

    def __init__(self, records: list[SecretRecord] | None = None):
        self._lock = threading.Lock()
        self._records: dict[tuple[str, str], SecretRecord] = {}
        for record in records or []:
            self._records[(record.namespace, record.name)] = record.model_copy(deep=True)

    async def get(self, namespace: str, name: str) -> SecretRecord:
        with self._lock:
            record = self._records.get((namespace, name))
        if record is None:
            raise ObjectNotFound(namespace, name)
        return record.model_copy(deep=True)

    async def create(self, record: SecretRecord) -> None:
        identity = (record.namespace, record.name)
        with self._lock:
            if identity in self._records:
                raise ObjectAlreadyExists(record.namespace, record.name)
            self._records[identity] = record.model_copy(deep=True)
        logger.debug("Stored secret %s/%s", record.namespace, record.name)


# ---------------------------------------------------------------------------
# PostgreSQL backend
# ---------------------------------------------------------------------------

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS policy_secrets (
    namespace TEXT NOT NULL,
    name TEXT NOT NULL,
    data JSONB NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    UNIQUE (namespace, name)
)
"""

_SELECT_SECRET = """
SELECT namespace, name, data
FROM policy_secrets
WHERE namespace = $1 AND name = $2
"""

_INSERT_SECRET = """
INSERT INTO policy_secrets (namespace, name, data)
VALUES ($1, $2, $3)
ON CONFLICT (namespace, name) DO NOTHING
RETURNING namespace
"""


def encode_data(data: dict[str, bytes]) -> str:
    """Serialize a record data map to JSON with base64-encoded values.

    Args:
        data: Mapping of field name to raw bytes.

    Returns:
        JSON text suitable for a JSONB column.
    """
    wrapped = {
        field: base64.b64encode(value).decode("ascii")
        for field, value in data.items()
    }
    return orjson.dumps(wrapped).decode("utf-8")


def decode_data(raw: Any) -> dict[str, bytes]:
    """Deserialize a record data map produced by ``encode_data``.

    Args:
        raw: JSON text/bytes, or an already decoded mapping when the
            connection has a JSONB codec installed.

    Returns:
        Mapping of field name to raw bytes.
    """
    parsed = orjson.loads(raw) if isinstance(raw, (str, bytes)) else raw
    return {
        field: base64.b64decode(value, validate=True)
        for field, value in parsed.items()
    }


class PostgresSecretStore:
    """Secret store backed by a PostgreSQL table.

    Uniqueness of (namespace, name) is enforced by the database, so
    concurrent creators across controller replicas resolve to one row.
    """

    def __init__(self, db_pool: Any):
        self._db = db_pool

    async def ensure_schema(self) -> None:
        """Create the secrets table if it does not exist."""
        async with self._db.acquire() as conn:
            await conn.execute(_CREATE_TABLE)

    async def get(self, namespace: str, name: str) -> SecretRecord:
        async with self._db.acquire() as conn:
            row = await conn.fetchrow(_SELECT_SECRET, namespace, name)
        if row is None:
            raise ObjectNotFound(namespace, name)
        return SecretRecord(
            namespace=row["namespace"],
            name=row["name"],
            data=decode_data(row["data"]),
        )

    async def create(self, record: SecretRecord) -> None:
        async with self._db.acquire() as conn:
            row = await conn.fetchrow(
                _INSERT_SECRET,
                record.namespace, record.name, encode_data(record.data),
            )
        if row is None:
            raise ObjectAlreadyExists(record.namespace, record.name)
        logger.debug("Stored secret %s/%s", record.namespace, record.name)

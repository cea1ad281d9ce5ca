"""Policy Encryption — Per-cluster key and IV custody for policy templates.

Security Note (Threat Model):
    Keys are held in process memory for the lifetime of the controller.
    A memory dump of the controller process exposes every cached cluster key.
    This is an accepted limitation; the secret store remains the source of
    truth and access to it must be restricted to the controller.
"""

from .cache import EncryptionKeyCache
from .config import EncryptionConfig, IV_ANNOTATION, IV_SIZE, KEY_SIZE, SECRET_NAME
from .exceptions import (
    EncryptionError,
    ObjectAlreadyExists,
    ObjectNotFound,
    RandomSourceError,
    SecretStoreError,
)
from .iv import get_initialization_vector
from .keys import (
    KeyProvisioner,
    ProvisionOutcome,
    ProvisionResult,
    create_or_get,
    generate_key,
)
from .store import MemorySecretStore, PostgresSecretStore, SecretRecord, SecretStore

__all__ = [
    "EncryptionKeyCache",
    "EncryptionConfig",
    "IV_ANNOTATION",
    "IV_SIZE",
    "KEY_SIZE",
    "SECRET_NAME",
    "EncryptionError",
    "ObjectAlreadyExists",
    "ObjectNotFound",
    "RandomSourceError",
    "SecretStoreError",
    "get_initialization_vector",
    "KeyProvisioner",
    "ProvisionOutcome",
    "ProvisionResult",
    "create_or_get",
    "generate_key",
    "MemorySecretStore",
    "PostgresSecretStore",
    "SecretRecord",
    "SecretStore",
]

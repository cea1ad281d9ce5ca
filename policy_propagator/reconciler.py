"""
PolicyReconciler — Encryption material for policies replicated to clusters.

Owns the encryption key cache for the lifetime of the reconciler and hands
the templating engine the (key, IV) pair for each replicated policy.
"""
import logging
from collections.abc import MutableMapping
from typing import Optional

from pydantic import BaseModel, field_validator

from .encryption.cache import EncryptionKeyCache
from .encryption.config import EncryptionConfig, IV_SIZE, KEY_SIZE
from .encryption.iv import get_initialization_vector
from .encryption.keys import KeyProvisioner
from .encryption.store import SecretStore

logger = logging.getLogger("propagator.reconciler")


class TemplateEncryptionConfig(BaseModel):
    """Key material handed to the templating engine for one policy."""

    aes_key: bytes
    initialization_vector: bytes
    encryption_enabled: bool = True

    model_config = {"frozen": True, "hide_input_in_errors": True}

    @field_validator("aes_key")
    @classmethod
    def validate_key(cls, v: bytes) -> bytes:
        if len(v) != KEY_SIZE:
            raise ValueError(f"aes_key must be {KEY_SIZE} bytes, got {len(v)}")
        return v

    @field_validator("initialization_vector")
    @classmethod
    def validate_iv(cls, v: bytes) -> bytes:
        if len(v) != IV_SIZE:
            raise ValueError(
                f"initialization_vector must be {IV_SIZE} bytes, got {len(v)}"
            )
        return v

    def __repr__(self) -> str:
        return (
            f"TemplateEncryptionConfig(encryption_enabled={self.encryption_enabled})"
        )

    __str__ = __repr__


class PolicyReconciler:
    """Resolves per-cluster encryption material during policy reconciliation.

    Args:
        store: Secret store holding the per-cluster key records.
        config: Encryption settings; defaults apply when omitted.
    """

    def __init__(
        self,
        store: SecretStore,
        config: Optional[EncryptionConfig] = None,
    ):
        self._config = config or EncryptionConfig()
        self.encryption_key_cache = EncryptionKeyCache()
        self._provisioner = KeyProvisioner(
            store, self.encryption_key_cache, self._config,
        )

    async def get_encryption_key(self, cluster_name: str) -> bytes:
        """Return the encryption key of ``cluster_name``, creating it if needed."""
        return await self._provisioner.get_encryption_key(cluster_name)

    def get_initialization_vector(
        self,
        policy_name: str,
        cluster_name: str,
        annotations: MutableMapping[str, str],
    ) -> bytes:
        """Return the IV pinned in ``annotations``, generating one if needed."""
        return get_initialization_vector(
            policy_name,
            cluster_name,
            annotations,
            annotation=self._config.iv_annotation,
            size=self._config.iv_size,
        )

    async def encryption_config(
        self,
        policy_name: str,
        cluster_name: str,
        annotations: MutableMapping[str, str],
    ) -> TemplateEncryptionConfig:
        """Resolve the key and IV used to encrypt one replicated policy.

        Args:
            policy_name: Name of the replicated policy.
            cluster_name: Cluster the policy is replicated to.
            annotations: Replicated policy annotations; the IV annotation is
                added when missing or invalid.

        Returns:
            TemplateEncryptionConfig for the templating engine.
        """
        key = await self.get_encryption_key(cluster_name)
        iv = self.get_initialization_vector(policy_name, cluster_name, annotations)
        logger.debug(
            "Resolved encryption config for policy=%s cluster=%s",
            policy_name, cluster_name,
        )
        return TemplateEncryptionConfig(aes_key=key, initialization_vector=iv)

"""
Encryption Configuration — Key custody settings and validated defaults.

Reads optional overrides from environment variables:
    POLICY_ENCRYPTION_SECRET_NAME = <name of the per-cluster key record>
    POLICY_ENCRYPTION_STORE_TIMEOUT = <seconds, or "none" to disable>

Security Note:
    Never log key material. Only log cluster names and record names.
"""
import os
import logging
from typing import Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("propagator.encryption")

SECRET_NAME = "policy-encryption-key"
KEY_FIELD = "key"
IV_ANNOTATION = "policy.open-cluster-management.io/encryption-iv"
KEY_SIZE = 32  # AES-256
IV_SIZE = 16  # AES block size
DEFAULT_STORE_TIMEOUT = 10.0


def _parse_timeout(raw: str) -> Optional[float]:
    """Parse POLICY_ENCRYPTION_STORE_TIMEOUT; empty or "none" disables it."""
    value = raw.strip().lower()
    if value in ("", "none"):
        return None
    return float(value)


class EncryptionConfig(BaseModel):
    """Validated encryption key custody configuration."""

    secret_name: str = Field(default=SECRET_NAME, min_length=1, max_length=253)
    key_field: str = Field(default=KEY_FIELD, min_length=1)
    iv_annotation: str = Field(default=IV_ANNOTATION, min_length=1)
    key_size: int = Field(default=KEY_SIZE)
    iv_size: int = Field(default=IV_SIZE)
    store_timeout: Optional[float] = Field(default=DEFAULT_STORE_TIMEOUT, gt=0)

    model_config = {"frozen": True}

    @field_validator("key_size")
    @classmethod
    def validate_key_size(cls, v: int) -> int:
        """The templating engine only accepts AES-256 keys."""
        if v != KEY_SIZE:
            raise ValueError(f"key_size must be {KEY_SIZE} bytes, got {v}")
        return v

    @field_validator("iv_size")
    @classmethod
    def validate_iv_size(cls, v: int) -> int:
        """The templating engine only accepts 128-bit IVs."""
        if v != IV_SIZE:
            raise ValueError(f"iv_size must be {IV_SIZE} bytes, got {v}")
        return v

    @classmethod
    def from_env(cls) -> "EncryptionConfig":
        """Create EncryptionConfig by loading overrides from environment.

        Returns:
            Populated EncryptionConfig instance.

        Raises:
            ValueError: If an override has an invalid value.
        """
        values = {}
        secret_name = os.environ.get("POLICY_ENCRYPTION_SECRET_NAME")
        if secret_name:
            values["secret_name"] = secret_name
        raw_timeout = os.environ.get("POLICY_ENCRYPTION_STORE_TIMEOUT")
        if raw_timeout is not None:
            values["store_timeout"] = _parse_timeout(raw_timeout)
        config = cls(**values)
        logger.debug(
            "Loaded encryption config: secret_name=%s store_timeout=%s",
            config.secret_name, config.store_timeout,
        )
        return config

"""Tests for EncryptionConfig."""
import pytest
from pydantic import ValidationError

from policy_propagator.encryption.config import (
    DEFAULT_STORE_TIMEOUT,
    IV_ANNOTATION,
    EncryptionConfig,
)


class TestEncryptionConfig:
    """Tests for EncryptionConfig defaults and validation."""

    def test_defaults(self):
        """Test default values match the key record layout."""
        config = EncryptionConfig()
        assert config.secret_name == "policy-encryption-key"
        assert config.key_field == "key"
        assert config.iv_annotation == IV_ANNOTATION
        assert config.key_size == 32
        assert config.iv_size == 16
        assert config.store_timeout == DEFAULT_STORE_TIMEOUT

    @pytest.mark.parametrize("size", [16, 24, 64])
    def test_rejects_other_key_sizes(self, size):
        """Test key sizes other than 32 bytes are rejected."""
        with pytest.raises(ValidationError):
            EncryptionConfig(key_size=size)

    def test_rejects_other_iv_sizes(self):
        """Test IV sizes other than 16 bytes are rejected."""
        with pytest.raises(ValidationError):
            EncryptionConfig(iv_size=12)

    def test_rejects_non_positive_timeout(self):
        """Test a zero store timeout is rejected."""
        with pytest.raises(ValidationError):
            EncryptionConfig(store_timeout=0)

    def test_rejects_empty_secret_name(self):
        """Test an empty secret name is rejected."""
        with pytest.raises(ValidationError):
            EncryptionConfig(secret_name="")

    def test_is_frozen(self):
        """Test the config cannot be modified after creation."""
        config = EncryptionConfig()
        with pytest.raises(ValidationError):
            config.secret_name = "other"


class TestFromEnv:
    """Tests for EncryptionConfig.from_env."""

    def test_defaults_without_env(self, monkeypatch):
        """Test defaults apply when no variables are set."""
        monkeypatch.delenv("POLICY_ENCRYPTION_SECRET_NAME", raising=False)
        monkeypatch.delenv("POLICY_ENCRYPTION_STORE_TIMEOUT", raising=False)
        assert EncryptionConfig.from_env() == EncryptionConfig()

    def test_overrides(self, monkeypatch):
        """Test environment variables override defaults."""
        monkeypatch.setenv("POLICY_ENCRYPTION_SECRET_NAME", "custom-key")
        monkeypatch.setenv("POLICY_ENCRYPTION_STORE_TIMEOUT", "2.5")
        config = EncryptionConfig.from_env()
        assert config.secret_name == "custom-key"
        assert config.store_timeout == 2.5

    @pytest.mark.parametrize("value", ["none", "None", ""])
    def test_timeout_can_be_disabled(self, monkeypatch, value):
        """Test empty or "none" disables the store timeout."""
        monkeypatch.setenv("POLICY_ENCRYPTION_STORE_TIMEOUT", value)
        assert EncryptionConfig.from_env().store_timeout is None

    def test_invalid_timeout(self, monkeypatch):
        """Test a non-numeric timeout raises ValueError."""
        monkeypatch.setenv("POLICY_ENCRYPTION_STORE_TIMEOUT", "soon")
        with pytest.raises(ValueError):
            EncryptionConfig.from_env()

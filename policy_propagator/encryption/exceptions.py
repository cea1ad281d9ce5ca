"""Errors raised by the encryption key custody layer."""


class EncryptionError(Exception):
    """Base class for key custody errors."""


class SecretStoreError(EncryptionError):
    """The secret store could not complete an operation."""

    def __init__(self, message: str, namespace: str = "", name: str = ""):
        super().__init__(message)
        self.namespace = namespace
        self.name = name


class ObjectNotFound(SecretStoreError):
    """No record exists at (namespace, name)."""

    def __init__(self, namespace: str, name: str):
        super().__init__(
            f"secret {namespace}/{name} not found", namespace, name,
        )


class ObjectAlreadyExists(SecretStoreError):
    """A record already exists at (namespace, name)."""

    def __init__(self, namespace: str, name: str):
        super().__init__(
            f"secret {namespace}/{name} already exists", namespace, name,
        )


class RandomSourceError(EncryptionError):
    """The operating system could not supply secure random bytes."""

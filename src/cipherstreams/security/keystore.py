"""Secret store integration.

A secret store is a small key/value store for secrets, scoped to one
application namespace. ``KeyringSecretStore`` keeps values in the OS keystore
through `keyring` (namespace = keyring service, key = keyring username).
``MemorySecretStore`` keeps them in a dict for the lifetime of the process.
Do not assume keyring provides hardware-backed security on all platforms.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional, Protocol, runtime_checkable

try:
    import keyring
    from keyring.errors import KeyringError, PasswordDeleteError
except Exception:
    keyring = None
    KeyringError = PasswordDeleteError = None

from cipherstreams.core.config import DEFAULT_SERVICE
from cipherstreams.core.exceptions import SecretStoreError

logger = logging.getLogger(__name__)


@runtime_checkable
class SecretStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def add(self, key: str, value: str) -> bool: ...

    def update(self, key: str, value: str) -> bool: ...

    def delete(self, key: str) -> bool: ...


def _require_keyring():
    if keyring is None:
        raise SecretStoreError("keyring package is not available; install keyring to use the OS secret store")


class KeyringSecretStore:
    """Secret store backed by the platform keyring."""

    def __init__(self, namespace: str = DEFAULT_SERVICE):
        self.namespace = namespace

    def get(self, key: str) -> Optional[str]:
        """Return the stored value or None; raises SecretStoreError if the backend fails."""
        _require_keyring()
        try:
            return keyring.get_password(self.namespace, key)
        except KeyringError as e:
            raise SecretStoreError(f"failed to read '{key}' from keyring: {e}") from e

    def add(self, key: str, value: str) -> bool:
        """Store ``value`` only if ``key`` is absent. Returns False if it exists or the write failed.

        keyring has no atomic insert, so this is check-then-set.
        """
        _require_keyring()
        try:
            if keyring.get_password(self.namespace, key) is not None:
                return False
            keyring.set_password(self.namespace, key, value)
        except KeyringError as e:
            logger.warning("keyring add failed for %s/%s: %s", self.namespace, key, e)
            return False
        return True

    def update(self, key: str, value: str) -> bool:
        """Replace an existing value. Returns False if ``key`` is absent or the write failed."""
        _require_keyring()
        try:
            if keyring.get_password(self.namespace, key) is None:
                return False
            keyring.set_password(self.namespace, key, value)
        except KeyringError as e:
            logger.warning("keyring update failed for %s/%s: %s", self.namespace, key, e)
            return False
        return True

    def set(self, key: str, value: str) -> bool:
        if self.get(key) is not None:
            return self.update(key, value)
        return self.add(key, value)

    def delete(self, key: str) -> bool:
        """Remove ``key``. Returns False if it did not exist or the backend refused."""
        _require_keyring()
        try:
            keyring.delete_password(self.namespace, key)
        except PasswordDeleteError:
            return False
        except KeyringError as e:
            logger.warning("keyring delete failed for %s/%s: %s", self.namespace, key, e)
            return False
        return True


class MemorySecretStore:
    """Process-local secret store. Values are lost when the process exits."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def add(self, key: str, value: str) -> bool:
        if key in self._values:
            return False
        self._values[key] = value
        return True

    def update(self, key: str, value: str) -> bool:
        if key not in self._values:
            return False
        self._values[key] = value
        return True

    def set(self, key: str, value: str) -> bool:
        self._values[key] = value
        return True

    def delete(self, key: str) -> bool:
        return self._values.pop(key, None) is not None


def assess_keyring_backend() -> tuple[bool, str]:
    """Return (is_secure, message) describing the current keyring backend.

    Heuristics are used because the `keyring` package exposes different backends
    across platforms. If `keyring` is not available this returns (False, reason).
    """
    if keyring is None:
        return False, "keyring package is not installed"

    try:
        backend = keyring.get_keyring()
    except Exception as e:
        return False, f"failed to get keyring backend: {e}"

    name = backend.__class__.__name__
    priority = getattr(backend, "priority", None)

    insecure_indicators = ("Plaintext", "Uncrypted", "Simple", "File")
    if any(tok in name for tok in insecure_indicators):
        return False, f"insecure backend detected: {name}"

    if priority is not None and priority <= 0:
        return False, f"no suitable secure keyring backend available (priority={priority}, backend={name})"

    # treat known platform backends as acceptable
    if "Win" in name or "Keychain" in name or "SecretService" in name or "KWallet" in name:
        return True, f"backend looks acceptable: {name} (priority={priority})"

    return True, f"unknown backend '{name}', treat with caution (priority={priority})"


def default_store(namespace: str = DEFAULT_SERVICE) -> SecretStore:
    return KeyringSecretStore(namespace)

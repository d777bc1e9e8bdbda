"""Security helpers: key derivation, secret storage and cipher sessions for cipherstreams.

This package provides:
- Argon2id-based key derivation from a password and salt
- Secret stores (OS keyring or in-memory) scoped to an application namespace
- The per-installation secret identifier and automatic stream passwords
- Block cipher sessions (AES, CBC/CTR, PKCS7) over `cryptography`
"""

from .kdf import derive_key, derive_aes128_key, kdf_params_to_dict
from .keystore import (
    SecretStore,
    KeyringSecretStore,
    MemorySecretStore,
    assess_keyring_backend,
    default_store,
)
from .identity import (
    generate_secret_identifier,
    get_or_create_secret_identifier,
    reset_secret_identifier,
    derive_stream_password,
)
from .cipher import Algorithm, Mode, Operation, Padding, CipherSession, create_session

__all__ = [
    "derive_key",
    "derive_aes128_key",
    "kdf_params_to_dict",
    "SecretStore",
    "KeyringSecretStore",
    "MemorySecretStore",
    "assess_keyring_backend",
    "default_store",
    "generate_secret_identifier",
    "get_or_create_secret_identifier",
    "reset_secret_identifier",
    "derive_stream_password",
    "Algorithm",
    "Mode",
    "Operation",
    "Padding",
    "CipherSession",
    "create_session",
]

"""Key derivation for cipherstreams."""
from typing import Dict, Union

from argon2.exceptions import Argon2Error
from argon2.low_level import Type, hash_secret_raw

from cipherstreams.core.config import (
    KDF_MEMORY_COST,
    KDF_PARALLELISM,
    KDF_TIME_COST,
    KEY_LENGTH,
)
from cipherstreams.core.exceptions import KeyDerivationError


def _to_bytes(value: Union[str, bytes]) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def derive_key(
    password: Union[str, bytes],
    salt: Union[str, bytes],
    key_len: int = KEY_LENGTH,
    time_cost: int = KDF_TIME_COST,
    memory_cost: int = KDF_MEMORY_COST,
    parallelism: int = KDF_PARALLELISM,
) -> bytes:
    """
    Derive ``key_len`` bytes of key material from a password and salt using Argon2id.

    The result is a pure function of its arguments. Raises KeyDerivationError
    for an empty password or when Argon2 rejects the parameters (for example a
    salt shorter than 8 bytes).
    """
    secret = _to_bytes(password)
    if not secret:
        raise KeyDerivationError("password must not be empty")
    if key_len <= 0:
        raise KeyDerivationError(f"invalid key length: {key_len}")

    try:
        return hash_secret_raw(
            secret=secret,
            salt=_to_bytes(salt),
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            hash_len=key_len,
            type=Type.ID,
        )
    except (Argon2Error, ValueError) as e:
        raise KeyDerivationError(f"key derivation failed: {e}") from e


def derive_aes128_key(password: Union[str, bytes], salt: Union[str, bytes]) -> bytes:
    return derive_key(password, salt, key_len=16)


def kdf_params_to_dict(salt: Union[str, bytes], time_cost: int, memory_cost: int, parallelism: int) -> Dict:
    return {
        "algo": "argon2id",
        "salt": _to_bytes(salt).hex(),
        "time": time_cost,
        "memory": memory_cost,
        "parallelism": parallelism,
    }

"""Unit tests for the Key Derivation Function (KDF) module."""

import pytest
from cipherstreams.core.config import DEFAULT_SALT
from cipherstreams.core.exceptions import KeyDerivationError
from cipherstreams.security.kdf import derive_key, derive_aes128_key, kdf_params_to_dict

# Use very low costs for speed in unit tests
FAST = {"time_cost": 1, "memory_cost": 8, "parallelism": 1}


def test_derive_key_default_length():
    """Default key length is 16 bytes (AES-128)."""
    key = derive_key("password", DEFAULT_SALT, **FAST)
    assert isinstance(key, bytes)
    assert len(key) == 16


def test_derive_key_custom_length():
    key = derive_key("password", DEFAULT_SALT, key_len=32, **FAST)
    assert len(key) == 32


def test_derive_key_is_deterministic():
    """Same (password, salt) pair always yields the same key."""
    k1 = derive_key("correct horse", "some-salt-value", **FAST)
    k2 = derive_key("correct horse", "some-salt-value", **FAST)
    assert k1 == k2


def test_derive_key_str_and_bytes_agree():
    """Text inputs are UTF-8 encoded before derivation."""
    k_str = derive_key("pässword", "salt-salt", **FAST)
    k_bytes = derive_key("pässword".encode("utf-8"), b"salt-salt", **FAST)
    assert k_str == k_bytes


def test_derive_key_differs_for_password():
    assert derive_key("a.txt-password", "salt-salt", **FAST) != derive_key("b.txt-password", "salt-salt", **FAST)


def test_derive_key_differs_for_salt():
    assert derive_key("password", "salt-one", **FAST) != derive_key("password", "salt-two", **FAST)


def test_derive_key_rejects_empty_password():
    with pytest.raises(KeyDerivationError, match="must not be empty"):
        derive_key("", DEFAULT_SALT, **FAST)

    with pytest.raises(KeyDerivationError):
        derive_key(b"", DEFAULT_SALT, **FAST)


def test_derive_key_rejects_short_salt():
    """Argon2 requires at least 8 bytes of salt; the failure is wrapped."""
    with pytest.raises(KeyDerivationError, match="key derivation failed"):
        derive_key("password", "abc", **FAST)


def test_derive_key_rejects_invalid_length():
    with pytest.raises(KeyDerivationError, match="invalid key length"):
        derive_key("password", DEFAULT_SALT, key_len=0, **FAST)


def test_derive_aes128_key():
    key = derive_aes128_key("password", DEFAULT_SALT)
    assert len(key) == 16
    assert key == derive_aes128_key("password", DEFAULT_SALT)


def test_kdf_params_to_dict():
    """Parameter description never includes key material."""
    result = kdf_params_to_dict(salt=b"\xaa" * 16, time_cost=2, memory_cost=1024, parallelism=4)

    assert result == {
        "algo": "argon2id",
        "salt": "aa" * 16,
        "time": 2,
        "memory": 1024,
        "parallelism": 4,
    }


def test_kdf_params_to_dict_text_salt():
    result = kdf_params_to_dict(salt="ab", time_cost=1, memory_cost=8, parallelism=1)
    assert result["salt"] == "6162"

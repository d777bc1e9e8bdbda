"""
Unit tests for cipher engine sessions.
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest

from cipherstreams.core.exceptions import CipherEngineError
from cipherstreams.security import cipher as cipher_module
from cipherstreams.security.cipher import (
    Algorithm,
    Mode,
    Operation,
    Padding,
    create_session,
)

KEY = bytes.fromhex("2b7e151628aed2a6abf7158809cf4f3c")
IV = bytes.fromhex("000102030405060708090a0b0c0d0e0f")


def _run(session, data: bytes, step: int = 7) -> bytes:
    out = b""
    for i in range(0, len(data), step):
        out += session.update(data[i:i + step])
    return out + session.finalize()


def test_block_sizes():
    assert Algorithm.AES.block_size() == 16


def test_aes_key_sizes():
    assert Algorithm.AES.key_sizes() == {16, 24, 32}


def test_aes_cbc_known_vector():
    """NIST SP 800-38A F.2.1, first block."""
    session = create_session(Operation.ENCRYPT, Algorithm.AES, Mode.CBC, Padding.NONE, KEY, IV)
    ct = _run(session, bytes.fromhex("6bc1bee22e409f96e93d7e117393172a"))
    assert ct == bytes.fromhex("7649abac8119b246cee98e9b12e9197d")


@pytest.mark.parametrize("length", [0, 1, 15, 16, 17, 100])
def test_cbc_pkcs7_roundtrip(length):
    data = os.urandom(length)
    enc = create_session(Operation.ENCRYPT, Algorithm.AES, Mode.CBC, Padding.PKCS7, KEY, IV)
    ct = _run(enc, data)
    # at least one byte of padding
    assert len(ct) == (length // 16 + 1) * 16

    dec = create_session(Operation.DECRYPT, Algorithm.AES, Mode.CBC, Padding.PKCS7, KEY, IV)
    assert _run(dec, ct, step=5) == data


def test_ctr_without_padding():
    mode = Mode.CTR
    data = b"stream modes keep the length" * 3
    enc = create_session(Operation.ENCRYPT, Algorithm.AES, mode, Padding.NONE, KEY, IV)
    ct = _run(enc, data)
    assert len(ct) == len(data)

    dec = create_session(Operation.DECRYPT, Algorithm.AES, mode, Padding.NONE, KEY, IV)
    assert _run(dec, ct) == data


def test_import_emits_no_deprecation_warnings():
    """Only ciphers that current `cryptography` keeps in its primary namespace are referenced."""
    src = Path(cipher_module.__file__).resolve().parents[2]
    env = dict(os.environ, PYTHONPATH=os.pathsep.join([str(src), os.environ.get("PYTHONPATH", "")]))
    result = subprocess.run(
        [
            sys.executable,
            "-W",
            "error::cryptography.utils.CryptographyDeprecationWarning",
            "-c",
            "import cipherstreams.security.cipher",
        ],
        env=env,
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0, result.stderr


def test_invalid_key_size():
    with pytest.raises(CipherEngineError):
        create_session(Operation.ENCRYPT, Algorithm.AES, Mode.CBC, Padding.PKCS7, b"short", IV)


def test_invalid_iv_size():
    with pytest.raises(CipherEngineError):
        create_session(Operation.ENCRYPT, Algorithm.AES, Mode.CBC, Padding.PKCS7, KEY, b"\x00" * 8)


def test_unpadded_cbc_rejects_partial_block():
    session = create_session(Operation.ENCRYPT, Algorithm.AES, Mode.CBC, Padding.NONE, KEY, IV)
    session.update(b"not a full block")
    session.update(b"!")
    with pytest.raises(CipherEngineError):
        session.finalize()


def test_wrong_key_fails_padding_check():
    enc = create_session(Operation.ENCRYPT, Algorithm.AES, Mode.CBC, Padding.PKCS7, KEY, IV)
    ct = _run(enc, b"some secret text")

    # try a handful of wrong keys; a valid-looking pad can appear by chance
    failures = 0
    for i in range(8):
        wrong = bytes([i + 1]) * 16
        dec = create_session(Operation.DECRYPT, Algorithm.AES, Mode.CBC, Padding.PKCS7, wrong, IV)
        try:
            assert _run(dec, ct) != b"some secret text"
        except CipherEngineError:
            failures += 1
    assert failures > 0


def test_session_cannot_be_reused_after_finalize():
    session = create_session(Operation.ENCRYPT, Algorithm.AES, Mode.CBC, Padding.PKCS7, KEY, IV)
    session.finalize()
    assert session.finalized

    with pytest.raises(CipherEngineError, match="already finalized"):
        session.update(b"data")
    with pytest.raises(CipherEngineError, match="already finalized"):
        session.finalize()

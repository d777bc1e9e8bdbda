"""Block cipher sessions over the `cryptography` package.

A session is one encrypt or decrypt pass bound to (algorithm, mode, padding,
key, iv). Feed it with ``update`` and close it with ``finalize``; padding is
applied on encrypt and stripped on decrypt when the padding policy is PKCS7.
Engine failures are wrapped in CipherEngineError, not interpreted.
"""
from __future__ import annotations

import enum

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import padding as sym_padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from cipherstreams.core.exceptions import CipherEngineError


class Operation(enum.Enum):
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"


class Algorithm(enum.Enum):
    AES = "aes"

    def block_size(self) -> int:
        """Block size in bytes."""
        return _ALGORITHMS[self].block_size // 8

    def key_sizes(self) -> frozenset:
        """Accepted key sizes in bytes."""
        return _KEY_SIZES[self]


class Mode(enum.Enum):
    CBC = "cbc"
    CTR = "ctr"


class Padding(enum.Enum):
    PKCS7 = "pkcs7"
    NONE = "none"


_ALGORITHMS = {
    Algorithm.AES: algorithms.AES,
}

# 512-bit AES keys are XTS-only
_KEY_SIZES = {
    Algorithm.AES: frozenset({16, 24, 32}),
}

_MODES = {
    Mode.CBC: modes.CBC,
    Mode.CTR: modes.CTR,
}


class CipherSession:
    """One streaming encrypt/decrypt pass. Not reusable after finalize()."""

    def __init__(self, operation: Operation, context, padder=None):
        self.operation = operation
        self._context = context
        self._padder = padder
        self._finalized = False

    @property
    def finalized(self) -> bool:
        return self._finalized

    def update(self, data: bytes) -> bytes:
        if self._finalized:
            raise CipherEngineError("session already finalized")
        try:
            if self.operation is Operation.ENCRYPT:
                if self._padder is not None:
                    data = self._padder.update(data)
                return self._context.update(data)
            out = self._context.update(data)
            if self._padder is not None:
                out = self._padder.update(out)
            return out
        except ValueError as e:
            raise CipherEngineError(str(e)) from e

    def finalize(self) -> bytes:
        if self._finalized:
            raise CipherEngineError("session already finalized")
        self._finalized = True
        try:
            if self.operation is Operation.ENCRYPT:
                out = b""
                if self._padder is not None:
                    out = self._context.update(self._padder.finalize())
                return out + self._context.finalize()
            out = self._context.finalize()
            if self._padder is not None:
                out = self._padder.update(out) + self._padder.finalize()
            return out
        except ValueError as e:
            raise CipherEngineError(str(e)) from e


def create_session(
    operation: Operation,
    algorithm: Algorithm,
    mode: Mode,
    padding: Padding,
    key: bytes,
    iv: bytes,
) -> CipherSession:
    """Create a CipherSession; raises CipherEngineError for a bad key or iv."""
    try:
        cipher = Cipher(_ALGORITHMS[algorithm](bytes(key)), _MODES[mode](bytes(iv)))
    except (ValueError, UnsupportedAlgorithm) as e:
        raise CipherEngineError(str(e)) from e

    padder = None
    if padding is Padding.PKCS7:
        pkcs7 = sym_padding.PKCS7(_ALGORITHMS[algorithm].block_size)
        padder = pkcs7.padder() if operation is Operation.ENCRYPT else pkcs7.unpadder()

    try:
        if operation is Operation.ENCRYPT:
            context = cipher.encryptor()
        else:
            context = cipher.decryptor()
    except UnsupportedAlgorithm as e:
        raise CipherEngineError(f"unsupported cipher: {e}") from e
    return CipherSession(operation, context, padder)

"""
IV-framed cipher streams.

On-wire layout, no further framing::

    [IV: block_size bytes][ciphertext ...]

The producer fixes algorithm, mode and padding for every stream it opens. A
stream written by one configuration cannot be detected as foreign by another;
it decrypts to garbage or fails in the cipher engine.
"""

from __future__ import annotations

import logging
import secrets
from typing import Optional

from cipherstreams.core.exceptions import CipherEngineError, HeaderReadError, HeaderWriteError
from cipherstreams.security.cipher import (
    Algorithm,
    CipherSession,
    Mode,
    Operation,
    Padding,
    create_session,
)
from .base import InputStreamLike, OutputStreamLike
from .cipher_stream import CipherInputStream, CipherOutputStream

logger = logging.getLogger(__name__)


class CipherStreamProducer:
    def __init__(self, key: bytes, algorithm: Algorithm, mode: Mode, padding: Padding):
        # reject bad keys before any stream is opened or truncated
        if len(key) not in algorithm.key_sizes():
            raise CipherEngineError(
                f"invalid {algorithm.name} key length {len(key)}; expected one of {sorted(algorithm.key_sizes())}"
            )
        self._key = bytes(key)
        self.algorithm = algorithm
        self.mode = mode
        self.padding = padding

    @classmethod
    def using_aes(cls, key: bytes) -> "CipherStreamProducer":
        """AES in CBC mode with PKCS7 padding."""
        return cls(key, Algorithm.AES, Mode.CBC, Padding.PKCS7)

    @property
    def block_size(self) -> int:
        return self.algorithm.block_size()

    def __repr__(self) -> str:
        return f"CipherStreamProducer(algorithm={self.algorithm.name}, mode={self.mode.name}, padding={self.padding.name})"

    def create_session(self, operation: Operation, iv: bytes) -> CipherSession:
        return create_session(operation, self.algorithm, self.mode, self.padding, self._key, iv)

    # ------------------------------------------------------------------
    # Adapter factory; the inner stream must already be open
    # ------------------------------------------------------------------

    def create_input_stream(
        self,
        inner: InputStreamLike,
        operation: Operation,
        iv: bytes,
        capacity: Optional[int] = None,
    ) -> CipherInputStream:
        return CipherInputStream(self.create_session(operation, iv), inner, capacity)

    def create_output_stream(
        self,
        inner: OutputStreamLike,
        operation: Operation,
        iv: bytes,
        capacity: Optional[int] = None,
    ) -> CipherOutputStream:
        return CipherOutputStream(self.create_session(operation, iv), inner, capacity)

    # ------------------------------------------------------------------
    # Framed streams
    # ------------------------------------------------------------------

    def open_output_stream_encryptor(
        self, inner: OutputStreamLike, capacity: Optional[int] = None
    ) -> CipherOutputStream:
        """
        Open ``inner``, write a fresh random IV as its first bytes and return an
        encrypting writer over it.

        Raises HeaderWriteError (after closing ``inner``) if the IV could not be
        written in full. The cipher session is built before ``inner`` is opened,
        so a rejected key or iv never truncates an existing file. Errors from
        ``inner.open()`` propagate unchanged.
        """
        iv = secrets.token_bytes(self.block_size)
        session = self.create_session(Operation.ENCRYPT, iv)

        inner.open()

        try:
            written = inner.write(iv)
        except OSError as e:
            inner.close()
            raise HeaderWriteError(f"failed to write IV header: {e}") from e

        if written != len(iv):
            inner.close()
            raise HeaderWriteError(f"wrote {written} of {len(iv)} IV header bytes")

        logger.debug("opened encrypting stream (%s/%s/%s)", self.algorithm.name, self.mode.name, self.padding.name)
        return CipherOutputStream(session, inner, capacity)

    def open_input_stream_decryptor(
        self, inner: InputStreamLike, capacity: Optional[int] = None
    ) -> CipherInputStream:
        """
        Open ``inner``, read the IV header and return a decrypting reader over
        the rest of the stream.

        Raises HeaderReadError (after closing ``inner``) if the stream ends
        before a full IV could be read; this is how a truncated or foreign file
        is told apart from an empty encrypted payload.
        """
        inner.open()

        iv = bytearray()
        try:
            while len(iv) < self.block_size:
                chunk = inner.read(self.block_size - len(iv))
                if not chunk:
                    break
                iv += chunk
        except OSError as e:
            inner.close()
            raise HeaderReadError(f"failed to read IV header: {e}") from e

        if len(iv) != self.block_size:
            inner.close()
            logger.debug("IV header truncated: got %d of %d bytes", len(iv), self.block_size)
            raise HeaderReadError(f"read {len(iv)} of {self.block_size} IV header bytes")

        try:
            stream = self.create_input_stream(inner, Operation.DECRYPT, bytes(iv), capacity)
        except Exception:
            inner.close()
            raise
        logger.debug("opened decrypting stream (%s/%s/%s)", self.algorithm.name, self.mode.name, self.padding.name)
        return stream

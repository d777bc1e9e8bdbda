"""
Streaming adapters that run a cipher session over a byte stream.

CipherInputStream pulls ``capacity``-sized chunks from the inner stream and
hands back transformed bytes; the session is finalized once, when the inner
stream reports end of stream. CipherOutputStream transforms written bytes,
buffers up to ``capacity`` of output and pushes it to the inner stream; close()
finalizes the session and flushes the last block.

Both adapters own the inner stream: any failure closes it before the
CipherStreamError propagates, and close() closes it.
"""

from __future__ import annotations

import logging

from cipherstreams.core.exceptions import (
    CipherEngineError,
    CipherStreamError,
    CipherStreamStatus,
)
from cipherstreams.security.cipher import CipherSession
from .base import InputStreamLike, OutputStreamLike, resolve_capacity

logger = logging.getLogger(__name__)


class CipherInputStream:
    def __init__(self, session: CipherSession, inner: InputStreamLike, capacity: int | None = None):
        self.session = session
        self.inner = inner
        self.capacity = resolve_capacity(capacity)
        self._buffer = bytearray()
        self._finalized = False
        self._closed = False

    def __enter__(self) -> "CipherInputStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def has_bytes_available(self) -> bool:
        return not self._closed and (bool(self._buffer) or not self._finalized)

    def _fail(self, status: CipherStreamStatus, exc: Exception) -> CipherStreamError:
        logger.debug("cipher input stream failed (%s): %s", status.name, exc)
        self.close()
        return CipherStreamError(status, str(exc))

    def _fill(self, wanted: int) -> None:
        while len(self._buffer) < wanted and not self._finalized:
            try:
                chunk = self.inner.read(self.capacity)
            except OSError as e:
                raise self._fail(CipherStreamStatus.INNER_TRANSFER, e) from e

            if chunk:
                try:
                    self._buffer += self.session.update(chunk)
                except CipherEngineError as e:
                    raise self._fail(CipherStreamStatus.ENGINE, e) from e
                continue

            self._finalized = True
            try:
                self._buffer += self.session.finalize()
            except CipherEngineError as e:
                raise self._fail(CipherStreamStatus.FINAL_TRANSFER, e) from e

    def read(self, max_length: int) -> bytes:
        """Return up to ``max_length`` transformed bytes, ``b""`` at end of stream."""
        if self._closed:
            raise CipherStreamError(CipherStreamStatus.OUTER_TRANSFER, "read from closed stream")
        if max_length <= 0:
            return b""
        self._fill(max_length)
        out = bytes(self._buffer[:max_length])
        del self._buffer[:max_length]
        return out

    def read_all(self) -> bytes:
        out = bytearray()
        while True:
            chunk = self.read(self.capacity)
            if not chunk:
                return bytes(out)
            out += chunk

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._buffer.clear()
        self.inner.close()


class CipherOutputStream:
    def __init__(self, session: CipherSession, inner: OutputStreamLike, capacity: int | None = None):
        self.session = session
        self.inner = inner
        self.capacity = resolve_capacity(capacity)
        self._buffer = bytearray()
        self._closed = False

    def __enter__(self) -> "CipherOutputStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
        else:
            self.discard()

    @property
    def closed(self) -> bool:
        return self._closed

    def _abort(self, status: CipherStreamStatus, exc: Exception) -> CipherStreamError:
        logger.debug("cipher output stream failed (%s): %s", status.name, exc)
        self.discard()
        return CipherStreamError(status, str(exc))

    def _drain(self) -> None:
        while self._buffer:
            try:
                written = self.inner.write(bytes(self._buffer))
            except OSError as e:
                raise self._abort(CipherStreamStatus.INNER_TRANSFER, e) from e
            if written <= 0:
                raise self._abort(
                    CipherStreamStatus.INNER_TRANSFER,
                    OSError(f"inner stream accepted {written} of {len(self._buffer)} bytes"),
                )
            del self._buffer[:written]

    def write(self, data: bytes) -> int:
        """Transform ``data`` and return the number of application bytes accepted."""
        if self._closed:
            raise CipherStreamError(CipherStreamStatus.OUTER_TRANSFER, "write to closed stream")
        try:
            self._buffer += self.session.update(bytes(data))
        except CipherEngineError as e:
            raise self._abort(CipherStreamStatus.ENGINE, e) from e
        if len(self._buffer) >= self.capacity:
            self._drain()
        return len(data)

    def flush(self) -> None:
        if self._closed:
            raise CipherStreamError(CipherStreamStatus.OUTER_TRANSFER, "flush on closed stream")
        self._drain()

    def discard(self) -> None:
        """Close the inner stream without finalizing; pending output is dropped."""
        if self._closed:
            return
        self._closed = True
        self._buffer.clear()
        self.inner.close()

    def close(self) -> None:
        """Finalize the session, write the last block and close the inner stream."""
        if self._closed:
            return
        try:
            self._buffer += self.session.finalize()
        except CipherEngineError as e:
            raise self._abort(CipherStreamStatus.FINAL_TRANSFER, e) from e
        self._drain()
        self._closed = True
        self.inner.close()

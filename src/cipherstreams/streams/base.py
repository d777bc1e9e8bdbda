"""
Byte stream capability used by the cipher streams.

Input streams expose open/read/close, output streams open/write/close.
``read(max_length)`` returns at most ``max_length`` bytes and ``b""`` at end of
stream; ``write(data)`` returns the number of bytes accepted. File adapters wrap
real file handles, memory adapters wrap a bytes buffer.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from cipherstreams.core.config import DEFAULT_CAPACITY, MAX_CAPACITY


@runtime_checkable
class StreamLike(Protocol):
    def open(self) -> None: ...

    def close(self) -> None: ...


@runtime_checkable
class InputStreamLike(StreamLike, Protocol):
    @property
    def has_bytes_available(self) -> bool: ...

    def read(self, max_length: int) -> bytes: ...


@runtime_checkable
class OutputStreamLike(StreamLike, Protocol):
    def write(self, data: bytes) -> int: ...


def resolve_capacity(capacity: Optional[int] = None) -> int:
    # None -> default; otherwise clamped to [1, MAX_CAPACITY]
    if capacity is None:
        return DEFAULT_CAPACITY
    return max(1, min(int(capacity), MAX_CAPACITY))


# ----------------------------------------------------------------------
# File adapters
# ----------------------------------------------------------------------


class FileInputStream:
    """Reads a file from disk. ``open()`` raises OSError if the file cannot be opened."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._fh: Optional[io.BufferedReader] = None
        self._eof = False

    def open(self) -> None:
        if self._fh is None:
            self._fh = open(self.path, "rb")
            self._eof = False

    @property
    def is_open(self) -> bool:
        return self._fh is not None

    @property
    def has_bytes_available(self) -> bool:
        return self._fh is not None and not self._eof

    def read(self, max_length: int) -> bytes:
        if self._fh is None:
            raise OSError(f"stream for {self.path} is not open")
        data = self._fh.read(max_length)
        if not data:
            self._eof = True
        return data

    def close(self) -> None:
        if self._fh is not None:
            try:
                self._fh.close()
            finally:
                self._fh = None


class FileOutputStream:
    """Writes a file to disk, truncating it unless ``append`` is set."""

    def __init__(self, path: Path | str, append: bool = False):
        self.path = Path(path)
        self.append = append
        self._fh: Optional[io.BufferedWriter] = None

    def open(self) -> None:
        if self._fh is None:
            self._fh = open(self.path, "ab" if self.append else "wb")

    @property
    def is_open(self) -> bool:
        return self._fh is not None

    def write(self, data: bytes) -> int:
        if self._fh is None:
            raise OSError(f"stream for {self.path} is not open")
        written = self._fh.write(data)
        return len(data) if written is None else written

    def close(self) -> None:
        if self._fh is not None:
            try:
                self._fh.close()
            finally:
                self._fh = None


# ----------------------------------------------------------------------
# In-memory adapters
# ----------------------------------------------------------------------


class MemoryInputStream:
    """Reads from an in-memory bytes buffer."""

    def __init__(self, data: bytes = b""):
        self._data = bytes(data)
        self._pos = 0
        self.is_open = False

    def open(self) -> None:
        self.is_open = True

    @property
    def has_bytes_available(self) -> bool:
        return self.is_open and self._pos < len(self._data)

    def read(self, max_length: int) -> bytes:
        if not self.is_open:
            raise OSError("memory stream is not open")
        chunk = self._data[self._pos:self._pos + max_length]
        self._pos += len(chunk)
        return chunk

    def close(self) -> None:
        self.is_open = False


class MemoryOutputStream:
    """Collects written bytes; ``getvalue()`` still works after close."""

    def __init__(self):
        self._buffer = bytearray()
        self.is_open = False

    def open(self) -> None:
        self.is_open = True

    def write(self, data: bytes) -> int:
        if not self.is_open:
            raise OSError("memory stream is not open")
        self._buffer += data
        return len(data)

    def getvalue(self) -> bytes:
        return bytes(self._buffer)

    def close(self) -> None:
        self.is_open = False


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------


def write_bytes(stream: OutputStreamLike, data: bytes) -> int:
    return stream.write(bytes(data))


def write_utf8(stream: OutputStreamLike, text: str) -> int:
    return write_bytes(stream, text.encode("utf-8"))


def read_text(
    stream: InputStreamLike, encoding: str = "utf-8", buffer_length: Optional[int] = None
) -> Optional[str]:
    """Read one chunk and decode it; returns None at end of stream or if it does not decode."""
    data = stream.read(buffer_length or DEFAULT_CAPACITY)
    if not data:
        return None
    try:
        return data.decode(encoding)
    except UnicodeDecodeError:
        return None


def read_all(stream: InputStreamLike, chunk_size: int = DEFAULT_CAPACITY) -> bytes:
    out = bytearray()
    while True:
        data = stream.read(chunk_size)
        if not data:
            break
        out += data
    return bytes(out)


def read_all_text(stream: InputStreamLike, encoding: str = "utf-8") -> str:
    # decode once at the end so multi-byte characters split across chunks survive
    return read_all(stream).decode(encoding)

"""
AES-encrypted files on disk.

An AESEncryptedFile pairs a path with a key and opens IV-framed AES/CBC/PKCS7
streams over it. The key comes from one of the constructors:

- ``automatic(path)``: password derived from the installation's secret
  identifier and the file name, then the default salt
- ``with_password(path, password)``: caller password, default salt
- ``with_password_and_salt(path, password, salt)``
- ``with_key(path, key)``: raw 16/24/32 byte key

Files written with ``automatic`` can only be read back on the same
installation and under the same file name.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from cipherstreams.security.identity import derive_stream_password
from cipherstreams.security.kdf import derive_aes128_key
from cipherstreams.security.keystore import SecretStore
from cipherstreams.streams.base import FileInputStream, FileOutputStream
from cipherstreams.streams.cipher_stream import CipherInputStream, CipherOutputStream
from cipherstreams.streams.producer import CipherStreamProducer
from .config import DEFAULT_SALT
from .exceptions import StreamCreationError

logger = logging.getLogger(__name__)


class AESEncryptedFile:
    def __init__(self, path: Path | str, key: bytes):
        self.path = Path(path)
        self.producer = CipherStreamProducer.using_aes(key)

    @classmethod
    def automatic(cls, path: Path | str, store: Optional[SecretStore] = None) -> "AESEncryptedFile":
        path = Path(path)
        password = derive_stream_password(path.name, store)
        return cls.with_password(path, password)

    @classmethod
    def with_password(cls, path: Path | str, password: str) -> "AESEncryptedFile":
        return cls.with_password_and_salt(path, password, DEFAULT_SALT)

    @classmethod
    def with_password_and_salt(cls, path: Path | str, password: str, salt: str) -> "AESEncryptedFile":
        return cls(path, derive_aes128_key(password, salt))

    @classmethod
    def with_key(cls, path: Path | str, key: bytes) -> "AESEncryptedFile":
        return cls(path, key)

    def __repr__(self) -> str:
        return f"AESEncryptedFile({str(self.path)!r})"

    # ------------------------------------------------------------------
    # Streams
    # ------------------------------------------------------------------

    def open_input_stream(self, capacity: Optional[int] = None) -> CipherInputStream:
        """Open the file for decryption. Raises StreamCreationError if it cannot be opened."""
        try:
            return self.producer.open_input_stream_decryptor(FileInputStream(self.path), capacity)
        except OSError as e:
            logger.debug("could not open %s for reading: %s", self.path, e)
            raise StreamCreationError(f"cannot open {self.path} for reading: {e}") from e

    def open_output_stream(self, capacity: Optional[int] = None) -> CipherOutputStream:
        """Open (truncate) the file for encryption. Raises StreamCreationError if it cannot be opened."""
        try:
            return self.producer.open_output_stream_encryptor(FileOutputStream(self.path), capacity)
        except OSError as e:
            logger.debug("could not open %s for writing: %s", self.path, e)
            raise StreamCreationError(f"cannot open {self.path} for writing: {e}") from e

    # ------------------------------------------------------------------
    # Whole-file helpers
    # ------------------------------------------------------------------

    def read_bytes(self) -> bytes:
        with self.open_input_stream() as stream:
            return stream.read_all()

    def write_bytes(self, data: bytes) -> None:
        with self.open_output_stream() as stream:
            stream.write(data)

    def read_text(self, encoding: str = "utf-8") -> str:
        return self.read_bytes().decode(encoding)

    def write_text(self, text: str, encoding: str = "utf-8") -> None:
        self.write_bytes(text.encode(encoding))

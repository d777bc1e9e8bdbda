"""
Exceptions for cipherstreams
Everything derives from CipherStreamsError so callers have one error catcher
"""

import enum


class CipherStreamsError(Exception):
    # general container for errors
    pass


class StreamCreationError(CipherStreamsError):
    # raised when the underlying byte stream cannot be opened
    pass


class HeaderError(CipherStreamsError):
    # raised when the IV header could not be framed
    pass


class HeaderWriteError(HeaderError):
    # raised when fewer than block-size IV bytes were written
    pass


class HeaderReadError(HeaderError):
    # raised when fewer than block-size IV bytes could be read (truncated / foreign file)
    pass


class KeyDerivationError(CipherStreamsError):
    # raised when the KDF rejects its parameters
    pass


class SecretStoreError(CipherStreamsError):
    # raised when the secret store cannot be read or written
    pass


class KeyGenerationFailedError(SecretStoreError):
    # raised when a new secret identifier could not be persisted
    pass


class CipherEngineError(CipherStreamsError):
    # raised when the cipher engine rejects a key, iv or data block
    pass


class CipherStreamStatus(enum.Enum):
    INNER_TRANSFER = "inner transfer error"
    OUTER_TRANSFER = "outer transfer error"
    FINAL_TRANSFER = "final transfer error"
    ENGINE = "cipher engine error"


class CipherStreamError(CipherStreamsError):
    # raised by cipher stream adapters; carries the failing stage
    def __init__(self, status: CipherStreamStatus, message: str = ""):
        self.status = status
        super().__init__(f"{status.value}: {message}" if message else status.value)

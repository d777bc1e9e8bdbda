"""
Configuration values for cipherstreams.

The constants here affect default-parameter behaviour only. Changing
DEFAULT_SALT, KEY_LENGTH or the KDF costs makes existing ciphertext produced
with the defaults undecryptable.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


# Application-wide salt used when callers only supply a password.
DEFAULT_SALT = "nevergonnagiveyouup"

# AES-128
KEY_LENGTH = 16

# Argon2id costs (memory in KiB)
KDF_TIME_COST = 3
KDF_MEMORY_COST = 65536
KDF_PARALLELISM = 1

# Buffer capacity for cipher stream adapters, independent of the cipher block size.
DEFAULT_CAPACITY = 1024
MAX_CAPACITY = DEFAULT_CAPACITY * 16

# Secret store layout
DEFAULT_SERVICE = "cipherstreams"
SECRET_IDENTIFIER_KEY = "loggerId"
SECRET_IDENTIFIER_BYTES = 16
STREAM_PASSWORD_SEPARATOR = "+"


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the command line front end."""

    service: str = DEFAULT_SERVICE
    salt: str = DEFAULT_SALT
    password: str | None = None


def load_settings(environ: dict | None = None) -> Settings:
    """
    Build Settings from the environment.

    - ``CIPHERSTREAMS_SERVICE``: secret store namespace
    - ``CIPHERSTREAMS_SALT``: salt used with ``--password``
    - ``CIPHERSTREAMS_PASSWORD``: password used when none is given on the command line
    """
    env = os.environ if environ is None else environ
    return Settings(
        service=env.get("CIPHERSTREAMS_SERVICE") or DEFAULT_SERVICE,
        salt=env.get("CIPHERSTREAMS_SALT") or DEFAULT_SALT,
        password=env.get("CIPHERSTREAMS_PASSWORD") or None,
    )

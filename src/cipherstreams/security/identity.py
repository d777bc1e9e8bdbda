"""Per-installation secret identifier and automatic stream passwords.

The secret identifier is a random hex token created on first use and kept in a
secret store under a well-known key. Automatic passwords combine it with a
caller-supplied discriminator (usually a file name), so every file gets a
distinct password that can be reproduced on the same installation.
"""
from __future__ import annotations

import logging
import secrets
from typing import Optional

from cipherstreams.core.config import (
    SECRET_IDENTIFIER_BYTES,
    SECRET_IDENTIFIER_KEY,
    STREAM_PASSWORD_SEPARATOR,
)
from cipherstreams.core.exceptions import KeyGenerationFailedError, SecretStoreError
from .keystore import SecretStore, default_store

logger = logging.getLogger(__name__)


def generate_secret_identifier(num_bytes: int = SECRET_IDENTIFIER_BYTES) -> str:
    """Return ``num_bytes`` of CSPRNG output as lowercase hex."""
    return secrets.token_bytes(num_bytes).hex()


def _check_stored(identifier: str) -> str:
    # an empty value blocks creation and cannot be used; surface it instead of overwriting
    if not identifier:
        raise SecretStoreError(
            f"stored secret identifier under '{SECRET_IDENTIFIER_KEY}' is empty; "
            "reset it to create a new one"
        )
    return identifier


def get_or_create_secret_identifier(store: Optional[SecretStore] = None) -> str:
    """
    Return the installation's secret identifier, creating it if absent.

    The new identifier is only returned once the store has accepted it. If the
    store refuses the insert, the value is re-read once: another process may
    have created it in the meantime, and that value wins. If there is still
    nothing stored, KeyGenerationFailedError is raised; falling back to an
    unpersisted identifier would strand anything encrypted under it.
    """
    if store is None:
        store = default_store()

    existing = store.get(SECRET_IDENTIFIER_KEY)
    if existing is not None:
        return _check_stored(existing)

    identifier = generate_secret_identifier()
    if store.add(SECRET_IDENTIFIER_KEY, identifier):
        logger.info("created new secret identifier under '%s'", SECRET_IDENTIFIER_KEY)
        return identifier

    winner = store.get(SECRET_IDENTIFIER_KEY)
    if winner is not None:
        logger.debug("secret identifier was created concurrently; using stored value")
        return _check_stored(winner)

    raise KeyGenerationFailedError("could not persist a new secret identifier")


def reset_secret_identifier(store: Optional[SecretStore] = None) -> bool:
    """Delete the stored identifier. Every automatic password changes afterwards."""
    if store is None:
        store = default_store()
    removed = store.delete(SECRET_IDENTIFIER_KEY)
    if removed:
        logger.warning("secret identifier removed; automatically encrypted data is no longer recoverable")
    return removed


def derive_stream_password(discriminator: str, store: Optional[SecretStore] = None) -> str:
    """Return ``"<identifier>+<discriminator>"``."""
    identifier = get_or_create_secret_identifier(store)
    return f"{identifier}{STREAM_PASSWORD_SEPARATOR}{discriminator}"

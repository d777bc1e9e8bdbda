"""
Command line front end for cipherstreams.

Usage:
  cipherstreams encrypt <src> <dst> [--password P | --auto] [--salt S]
  cipherstreams decrypt <src> <dst> [--password P | --auto] [--salt S]
  cipherstreams identity [--reset]

With ``--auto`` the password comes from the installation's secret identifier
and the name of the encrypted file (``dst`` on encrypt, ``src`` on decrypt).
Without ``--password`` or ``--auto``, CIPHERSTREAMS_PASSWORD is used, then an
interactive prompt.
"""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from pathlib import Path
from typing import List, Optional

from cipherstreams.core.config import (
    KDF_MEMORY_COST,
    KDF_PARALLELISM,
    KDF_TIME_COST,
    Settings,
    load_settings,
)
from cipherstreams.core.encrypted_file import AESEncryptedFile
from cipherstreams.core.exceptions import CipherStreamsError
from cipherstreams.security.identity import get_or_create_secret_identifier, reset_secret_identifier
from cipherstreams.security.kdf import kdf_params_to_dict
from cipherstreams.security.keystore import assess_keyring_backend, default_store
from .logging_config import configure_logging

logger = logging.getLogger(__name__)

CHUNK_SIZE = 65536  # 64KB


def _resolve_file(args: argparse.Namespace, encrypted_path: Path, settings: Settings) -> AESEncryptedFile:
    if args.auto:
        return AESEncryptedFile.automatic(encrypted_path, default_store(settings.service))

    password = args.password or settings.password
    if not password:
        password = getpass.getpass("Password: ")
    salt = args.salt or settings.salt
    logger.debug(
        "key derivation: %s",
        kdf_params_to_dict(salt, KDF_TIME_COST, KDF_MEMORY_COST, KDF_PARALLELISM),
    )
    return AESEncryptedFile.with_password_and_salt(encrypted_path, password, salt)


def encrypt_command(args: argparse.Namespace, settings: Settings) -> int:
    src = Path(args.src).expanduser()
    target = _resolve_file(args, Path(args.dst).expanduser(), settings)

    total = 0
    with open(src, "rb") as inf:
        out = target.open_output_stream()
        try:
            with out:
                while True:
                    chunk = inf.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    total += out.write(chunk)
        except Exception:
            target.path.unlink(missing_ok=True)
            raise

    logger.info("encrypted %d bytes from %s to %s", total, src, target.path)
    return 0


def decrypt_command(args: argparse.Namespace, settings: Settings) -> int:
    source = _resolve_file(args, Path(args.src).expanduser(), settings)
    dst = Path(args.dst).expanduser()

    total = 0
    with source.open_input_stream() as stream:
        try:
            with open(dst, "wb") as outf:
                while True:
                    chunk = stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    outf.write(chunk)
                    total += len(chunk)
        except Exception:
            # partial plaintext is not valid output
            dst.unlink(missing_ok=True)
            raise

    logger.info("decrypted %d bytes from %s to %s", total, source.path, dst)
    return 0


def identity_command(args: argparse.Namespace, settings: Settings) -> int:
    store = default_store(settings.service)

    secure, msg = assess_keyring_backend()
    if not secure:
        logger.warning("secret store: %s", msg)

    if args.reset:
        removed = reset_secret_identifier(store)
        print("secret identifier removed" if removed else "no secret identifier stored")
        return 0

    print(get_or_create_secret_identifier(store))
    return 0


def _add_password_options(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--password",
        default=None,
        help="Password to derive the key from (default: CIPHERSTREAMS_PASSWORD or prompt)",
    )
    group.add_argument(
        "--auto",
        action="store_true",
        help="Derive the password from the installation secret and the encrypted file name",
    )
    parser.add_argument(
        "--salt",
        default=None,
        help="Salt used with --password (default: CIPHERSTREAMS_SALT or the built-in salt)",
    )


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cipherstreams",
        description="Encrypt and decrypt files as IV-prefixed AES streams.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    enc = sub.add_parser("encrypt", help="Encrypt SRC into DST")
    enc.add_argument("src", help="Plaintext input file")
    enc.add_argument("dst", help="Encrypted output file")
    _add_password_options(enc)
    enc.set_defaults(handler=encrypt_command)

    dec = sub.add_parser("decrypt", help="Decrypt SRC into DST")
    dec.add_argument("src", help="Encrypted input file")
    dec.add_argument("dst", help="Plaintext output file")
    _add_password_options(dec)
    dec.set_defaults(handler=decrypt_command)

    ident = sub.add_parser("identity", help="Show or reset the installation secret identifier")
    ident.add_argument(
        "--reset",
        action="store_true",
        help="Delete the identifier; files encrypted with --auto become unreadable",
    )
    ident.set_defaults(handler=identity_command)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    settings = load_settings()
    try:
        return args.handler(args, settings)
    except (CipherStreamsError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry
    sys.exit(main())

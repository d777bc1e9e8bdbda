"""Logging setup for the command line; diagnostics go to stderr so stdout stays scriptable."""

import logging
import sys


def configure_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    # keyring backends log their own probing at debug level
    logging.getLogger("keyring").setLevel(logging.DEBUG if verbose else logging.WARNING)

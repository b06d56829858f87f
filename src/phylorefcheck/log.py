"""Logging setup for the phylorefcheck command line."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(*, level: int | str = logging.WARNING, force: bool = False) -> None:
    """Send log records to stderr at ``level``.

    stdout belongs to the TAP document (or the resolve JSON), which other tools
    parse, so log records must never land there. WARNING is the default so a
    plain run only reports unparsable status timestamps; ``--verbose`` lowers
    it to INFO to show the nodes each phyloreference resolved to.
    ``force=True`` replaces handlers that are already installed.
    """
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        stream=sys.stderr,
        force=force,
    )

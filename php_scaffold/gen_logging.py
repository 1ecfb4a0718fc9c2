"""
Logging for scaffold generation.

Every module logs through a child of "phpgen.gen" (get_logger(__name__)):
- INFO:    the [PHASE 1..5] banners of generate_project and the write summary
- DEBUG:   one line per operation, hoisted schema, rendered artifact and written file
- WARNING: [WARN] lines for renamed operation ids, unknown security schemes,
           undeclared path parameters and unknown config keys

The CLI picks the level with -v / -q through configure_gen_logging().
"""

import logging
import sys

_LOGGER_NAME = "phpgen.gen"


def get_logger(name: str = None) -> logging.Logger:
    """Child logger named after the last component of `name` ("...generators.writer" -> "phpgen.gen.writer")."""
    if name is None or name == _LOGGER_NAME:
        return logging.getLogger(_LOGGER_NAME)
    short = name.rsplit(".", 1)[-1]
    return logging.getLogger(f"{_LOGGER_NAME}.{short}")


def _level(verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def configure_gen_logging(verbose: bool = False, quiet: bool = False) -> None:
    """
    Send generation messages to stderr at the level chosen on the command line.

    --verbose wins over --quiet. Calling again only changes the level: the
    CLI runs several commands per process in tests, each with its own stderr.
    """
    level = _level(verbose, quiet)
    root_logger = logging.getLogger(_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.propagate = False

    if root_logger.handlers:
        for handler in root_logger.handlers:
            handler.setLevel(level)
            if type(handler) is logging.StreamHandler:
                handler.setStream(sys.stderr)
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(_MessageOnlyFormatter())
    root_logger.addHandler(handler)


class _MessageOnlyFormatter(logging.Formatter):
    """Phase banners and [WARN] tags are part of the message; add nothing."""

    def format(self, record: logging.LogRecord) -> str:
        return record.getMessage()

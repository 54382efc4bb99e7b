"""Logging setup for the command-line tool."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)-5s %(name)s: %(message)s"
DATE_FORMAT = "%b %d %H:%M:%S"


class StrippingFormatter(logging.Formatter):
    """Formatter that emits exactly one line ending per record.

    Messages passed through from libraries often carry their own trailing
    newline, which would otherwise show up as empty log lines.
    """

    def format(self, record: logging.LogRecord) -> str:
        return super().format(record).strip()


def configure_logging(level: int = logging.INFO, stream: TextIO | None = None) -> logging.Logger:
    """Install a single stderr handler on the package logger."""

    logger = logging.getLogger("godano_wallet")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StrippingFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


def level_from_flags(*, trace: bool, verbose: bool, quiet: bool, very_quiet: bool) -> int:
    if trace:
        return TRACE
    if verbose:
        return logging.DEBUG
    if very_quiet:
        return logging.ERROR
    if quiet:
        return logging.WARNING
    return logging.INFO

"""Logging configuration for pe-addrgen."""
from __future__ import annotations

import logging
import sys

from tqdm import tqdm

# Module-level logger
logger = logging.getLogger("pe_addrgen")


class _TqdmHandler(logging.StreamHandler):
    """Writes records through tqdm so they do not tear an active progress bar."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            tqdm.write(self.format(record), file=self.stream)
            self.flush()
        except Exception:
            self.handleError(record)


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """
    Configure logging for pe-addrgen.

    Args:
        verbose: Enable debug output (per-signature addresses, skipped candidates)
        quiet: Suppress all output except errors
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    handler = _TqdmHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("[%(levelname).1s] %(message)s"))

    logger.setLevel(level)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.propagate = False


def log_info(msg: str) -> None:
    logger.info(msg)


def log_warning(msg: str) -> None:
    logger.warning(msg)


def log_error(msg: str) -> None:
    logger.error(msg)


def log_debug(msg: str) -> None:
    logger.debug(msg)

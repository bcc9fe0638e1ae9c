"""Verbosity-based logging for workdeps.

Two semantic levels sit between the standard ones: CHANGES for edits to the
dependency graph and progress ledger, CHECKS for validation and evaluator
reasoning. The CLI ``-v`` count selects how much of this is shown.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

CHANGES_LEVEL = 25  # INFO < CHANGES < WARNING
CHECKS_LEVEL = 15  # DEBUG < CHECKS < INFO

logging.addLevelName(CHANGES_LEVEL, "CHANGES")
logging.addLevelName(CHECKS_LEVEL, "CHECKS")

VERBOSITY_SILENT = 0
VERBOSITY_CHANGES = 1
VERBOSITY_CHECKS = 2
VERBOSITY_DEBUG = 3

_LEVELS = {
    VERBOSITY_SILENT: logging.ERROR,
    VERBOSITY_CHANGES: CHANGES_LEVEL,
    VERBOSITY_CHECKS: CHECKS_LEVEL,
    VERBOSITY_DEBUG: logging.DEBUG,
}


class WorkdepsLogger(logging.Logger):
    """Logger with one method per verbosity level.

    - changes(): ``-v`` - edges added/updated/removed, progress transitions
    - checks(): ``-vv`` - cycle checks, binding constraints, data anomalies
    - debug(): ``-vvv`` - every predecessor bound the evaluator considers
    """

    def changes(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log a graph or progress mutation."""
        if self.isEnabledFor(CHANGES_LEVEL):
            self._log(CHANGES_LEVEL, msg, args, **kwargs)

    def checks(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log a validation step or evaluator decision."""
        if self.isEnabledFor(CHECKS_LEVEL):
            self._log(CHECKS_LEVEL, msg, args, **kwargs)


def get_logger() -> WorkdepsLogger:
    """The shared ``workdeps`` logger."""
    previous = logging.getLoggerClass()
    logging.setLoggerClass(WorkdepsLogger)
    try:
        logger = logging.getLogger("workdeps")
    finally:
        logging.setLoggerClass(previous)
    assert isinstance(logger, WorkdepsLogger)
    return logger


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Point the workdeps logger at a stream with the given verbosity.

    Safe to call again; earlier handlers are replaced.

    Args:
        verbosity: 0 errors only, 1 changes, 2 checks, 3 debug
        stream: Where to write (sys.stderr when omitted)
    """
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(_LEVELS.get(verbosity, logging.ERROR))

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    if verbosity >= VERBOSITY_DEBUG:
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False


def reset_logger() -> None:
    """Drop handlers and return to errors-only (used between tests)."""
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(logging.ERROR)


def checks_enabled() -> bool:
    """Whether ``-vv`` output is on."""
    return get_logger().isEnabledFor(CHECKS_LEVEL)


def debug_enabled() -> bool:
    """Whether ``-vvv`` output is on."""
    return get_logger().isEnabledFor(logging.DEBUG)

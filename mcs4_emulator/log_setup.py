"""
MCS-4 Emulator — Logging Setup

All modules log through ``logging.getLogger("mcs4.<area>")`` and never
install handlers themselves. Front ends (the CLI, a notebook, a test
harness) call setup_logging() once.

Console output goes through rich's RichHandler; an optional log file
captures everything at DEBUG.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.logging import RichHandler

ROOT_LOGGER = "mcs4"

FILE_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    rich_tracebacks: bool = True,
) -> logging.Logger:
    """Configure and return the ``mcs4`` root logger.

    Calling this twice replaces the previous handlers, so the CLI can be
    invoked repeatedly from tests without stacking duplicate output.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(logging.DEBUG if log_file else level)
    logger.propagate = False

    console = RichHandler(
        level=level,
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=rich_tracebacks,
    )
    console.setLevel(level)
    logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(path), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATEFMT))
        logger.addHandler(fh)
        logger.debug("Log file: %s", path)

    return logger

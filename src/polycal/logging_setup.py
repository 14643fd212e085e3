from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from typing import Iterable, Optional

DEFAULT_FORMAT = "%(asctime)s  [%(levelname)s]  %(name)s: %(message)s"
DEFAULT_DATEFMT = "%H:%M:%S"

# plotting stack logs a lot at DEBUG
NOISY_LOGGERS = (
    "matplotlib",
    "matplotlib.font_manager",
    "PIL",
)

_configured = False  # guard against double initialisation


def setup_logging(
    *,
    level: int = logging.WARNING,
    console: bool = True,
    fmt: str = DEFAULT_FORMAT,
    datefmt: str = DEFAULT_DATEFMT,
    log_file: Optional[str] = None,
    file_level: Optional[int] = None,
    file_max_bytes: int = 5_000_000,
    file_backup_count: int = 3,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """
    Configure root logging once. Called from the CLI entry point.

    Library modules never call this; they use `logging.getLogger(__name__)`.
    """
    global _configured
    if _configured:
        return

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(level if file_level is None else min(level, file_level))

    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)

    if console:
        ch = logging.StreamHandler()
        ch.setLevel(level)
        ch.setFormatter(formatter)
        root.addHandler(ch)

    if log_file:
        fh = RotatingFileHandler(log_file, maxBytes=file_max_bytes, backupCount=file_backup_count)
        fh.setLevel(file_level if file_level is not None else level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True
    logging.getLogger(__name__).debug("logging initialised (level=%s)", logging.getLevelName(level))


def parse_level(name: str) -> int:
    """'debug' -> logging.DEBUG; raises ValueError for unknown names."""
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}")
    return level

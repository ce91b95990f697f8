"""Logging setup for cemgen runs and diagnostic reporting."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from .diagnostics import Diagnostic, Severity

_LOGGER_NAME = "cemgen"

_CONSOLE_FORMAT = "[cemgen] %(levelname)s %(message)s"
_DEV_FORMAT = "[cemgen] %(levelname)s %(name)s: %(message)s"

_SEVERITY_LEVELS = {
    Severity.INFO: logging.DEBUG,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
    Severity.FATAL: logging.ERROR,
}


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a component logger under the cemgen hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, dev: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install the console handler; ``dev`` also shows which component logged."""
    level = logging.DEBUG if (verbose or dev) else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Watch mode and tests call main() repeatedly.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_DEV_FORMAT if dev else _CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(logging.DEBUG)
        sink.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(sink)

    return logger


def log_diagnostics(logger: logging.Logger, diagnostics: Iterable[Diagnostic]) -> None:
    """Report diagnostics at the log level matching their severity.

    Informational diagnostics (unresolved names and the like) only show up
    with ``--verbose`` or ``--dev``.
    """
    for diagnostic in diagnostics:
        logger.log(_SEVERITY_LEVELS[diagnostic.severity], "%s", diagnostic)


__all__ = ["configure_logging", "get_logger", "log_diagnostics"]

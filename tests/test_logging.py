"""Tests for cemgen.logging."""

from __future__ import annotations

import logging

import pytest

from cemgen.diagnostics import error, info, warning
from cemgen.logging import configure_logging, get_logger, log_diagnostics


def test_get_logger_uses_cemgen_hierarchy() -> None:
    assert get_logger().name == "cemgen"
    assert get_logger("linker").name == "cemgen.linker"


def test_configure_logging_replaces_handlers() -> None:
    configure_logging()
    logger = configure_logging(dev=True)

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert "%(name)s" in logger.handlers[0].formatter._fmt

    configure_logging()


def test_log_diagnostics_maps_severity_to_level(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("diagnostics-under-test")

    with caplog.at_level(logging.DEBUG, logger="diagnostics-under-test"):
        log_diagnostics(
            logger,
            [
                info("src/a.js", "could not resolve 'Base'"),
                warning("src/b.js", "duplicate tag"),
                error("src/c.js", "parse failure"),
            ],
        )

    assert [(record.levelno, record.getMessage()) for record in caplog.records] == [
        (logging.DEBUG, "src/a.js: info: could not resolve 'Base'"),
        (logging.WARNING, "src/b.js: warning: duplicate tag"),
        (logging.ERROR, "src/c.js: error: parse failure"),
    ]

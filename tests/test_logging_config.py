"""Tests for railpath/logging_config.py — package logger setup."""

from __future__ import annotations

import logging

import pytest

from railpath.logging_config import PACKAGE_LOGGER, setup_logging


@pytest.fixture(autouse=True)
def _clean_logger():
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def test_repeated_setup_keeps_one_handler():
    setup_logging()
    logger = setup_logging(logging.DEBUG)
    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    assert logger.handlers[0].level == logging.DEBUG


def test_module_loggers_propagate(capsys):
    setup_logging(logging.INFO)
    logging.getLogger("railpath.level").info("loaded %d tiles", 3)
    err = capsys.readouterr().err
    assert "railpath.level: loaded 3 tiles" in err


def test_level_filters(capsys):
    setup_logging(logging.WARNING)
    logging.getLogger("railpath.track").info("quiet")
    assert "quiet" not in capsys.readouterr().err


def test_log_file(tmp_path):
    log_file = tmp_path / "railpath.log"
    logger = setup_logging(logging.INFO, log_file)
    assert len(logger.handlers) == 2
    logging.getLogger("railpath.simulation").warning("dropped")
    for handler in logger.handlers:
        handler.flush()
    assert "dropped" in log_file.read_text(encoding="utf-8")

# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for CLI logging setup."""

import logging
from collections.abc import Iterator

import pytest

from specbind.cli.logging import LOG_LEVEL_ENV, ChalkFormatter, parse_log_level, setup_logging


@pytest.fixture(autouse=True)
def _restore_package_logger() -> Iterator[None]:
    package_logger = logging.getLogger("specbind")
    handlers, level = package_logger.handlers[:], package_logger.level
    yield
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)


@pytest.mark.parametrize(
    ("value", "level"),
    [("debug", logging.DEBUG), ("WARN", logging.WARNING), (" error ", logging.ERROR), ("15", 15)],
)
def test_parse_log_level(value: str, level: int) -> None:
    assert parse_log_level(value) == level


def test_parse_unknown_log_level() -> None:
    assert parse_log_level("verbose") is None


def test_default_level_is_warning(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
    setup_logging()
    assert logging.getLogger("specbind").level == logging.WARNING


def test_environment_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(LOG_LEVEL_ENV, "debug")
    setup_logging()
    assert logging.getLogger("specbind").level == logging.DEBUG


def test_explicit_level_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(LOG_LEVEL_ENV, "debug")
    setup_logging(logging.ERROR)
    assert logging.getLogger("specbind").level == logging.ERROR


def test_repeated_setup_keeps_one_handler() -> None:
    setup_logging(logging.INFO)
    setup_logging(logging.INFO)
    handlers = logging.getLogger("specbind").handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0].formatter, ChalkFormatter)


def test_handler_writes_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging(logging.INFO)
    logging.getLogger("specbind.test").info("compiled %d file(s)", 3)
    captured = capsys.readouterr()
    assert "compiled 3 file(s)" in captured.err
    assert captured.out == ""

# Copyright 2026 Specbind Contributors
# SPDX-License-Identifier: Apache-2.0

"""Colored console logging for the command-line interface.

Library modules only create loggers; handlers are installed here, once, by
the CLI entry point.
"""

from __future__ import annotations

import logging
import os
import sys

from yachalk import chalk

# ###############
# Public Interface
# ###############

LOG_LEVEL_ENV = "SPECBIND_LOG_LEVEL"

LOG_FORMAT = "[%(levelname)s] %(message)s"
DEBUG_LOG_FORMAT = "[%(levelname)s] [%(name)s:%(lineno)d] %(message)s"


class ChalkFormatter(logging.Formatter):
    """Formatter that colors each record by severity."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        level = record.levelno
        if level >= logging.CRITICAL:
            return chalk.red_bright(message)
        if level >= logging.ERROR:
            return chalk.red(message)
        if level >= logging.WARNING:
            return chalk.yellow(message)
        if level >= logging.INFO:
            return chalk.green(message)
        return chalk.gray(message)


def parse_log_level(value: str) -> int | None:
    """Return the logging level named by *value* (``"debug"``, ``"WARN"``, ``"10"``), or None."""
    name = value.strip().upper()
    if name.isdigit():
        return int(name)
    return _LEVELS.get(name)


def resolve_env_log_level() -> int | None:
    """Return the level set through ``SPECBIND_LOG_LEVEL``, or None if unset or invalid."""
    value = os.environ.get(LOG_LEVEL_ENV)
    if not value:
        return None
    return parse_log_level(value)


def setup_logging(level: int | None = None) -> None:
    """Install a colored stderr handler on the ``specbind`` logger.

    Args:
        level: Logging level.  When None the environment is consulted, then
            WARNING applies.
    """
    if level is None:
        level = resolve_env_log_level()
    if level is None:
        level = logging.WARNING

    package_logger = logging.getLogger("specbind")
    package_logger.setLevel(level)
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ChalkFormatter(LOG_FORMAT if level >= logging.INFO else DEBUG_LOG_FORMAT))
    package_logger.addHandler(handler)


# ################
# Implementation
# ################

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
    "FATAL": logging.CRITICAL,
}

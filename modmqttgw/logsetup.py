"""Logging setup for the gateway: severities, level parsing and output format."""

from __future__ import annotations

import enum
import logging
import os
import re
import sys
from datetime import datetime

LOGGER_NAME = "modmqttgw"

TRACE_LEVEL = 5
OFF_LEVEL = logging.CRITICAL + 10

logging.addLevelName(TRACE_LEVEL, "TRACE")


class Severity(enum.IntEnum):
    """Gateway log severities, numbered as accepted in the configuration."""

    NONE = 0
    CRITICAL = 1
    ERROR = 2
    WARN = 3
    INFO = 4
    DEBUG = 5
    TRACE = 6

    @property
    def label(self) -> str:
        """Fixed-width upper case name used in log output."""
        return _LABELS[self]


_LABELS = {
    Severity.NONE: "NONE",
    Severity.CRITICAL: "CRITICAL",
    Severity.ERROR: "ERROR",
    Severity.WARN: "WARN ",
    Severity.INFO: "INFO ",
    Severity.DEBUG: "DEBUG",
    Severity.TRACE: "TRACE",
}

_NAMES = {
    "off": Severity.NONE,
    "critical": Severity.CRITICAL,
    "error": Severity.ERROR,
    "warning": Severity.WARN,
    "info": Severity.INFO,
    "debug": Severity.DEBUG,
    "trace": Severity.TRACE,
}

_PYTHON_LEVELS = {
    Severity.NONE: OFF_LEVEL,
    Severity.CRITICAL: logging.CRITICAL,
    Severity.ERROR: logging.ERROR,
    Severity.WARN: logging.WARNING,
    Severity.INFO: logging.INFO,
    Severity.DEBUG: logging.DEBUG,
    Severity.TRACE: TRACE_LEVEL,
}

_NUMBER_RE = re.compile(r"\s*[+-]?\d+")


def parse_severity(val: str) -> Severity:
    """Parse a severity given as a number 0-6 or as a level name."""
    if _NUMBER_RE.fullmatch(val):
        number = int(val)
        if 0 <= number <= 6:
            return Severity(number)
    elif val in _NAMES:
        return _NAMES[val]
    raise ValueError(
        f"unknown log level '{val}', valid values: "
        "none,critical,error,warning,info,debug,trace"
    )


def set_level(level: Severity) -> None:
    """Set the level of the gateway logger."""
    logging.getLogger(LOGGER_NAME).setLevel(_PYTHON_LEVELS[Severity(level)])


def log_timestamp() -> bool:
    """Return False when stderr is connected to the journal, which adds its own time."""
    journal_stream = os.environ.get("JOURNAL_STREAM")
    if journal_stream is None or len(journal_stream) <= 2:
        return True
    _, sep, env_inode = journal_stream.partition(":")
    if not sep:
        env_inode = journal_stream
    if not env_inode:
        return True
    try:
        inode = os.fstat(2).st_ino
    except OSError:
        return True
    return str(inode) != env_inode


class _GatewayFormatter(logging.Formatter):
    _LEVEL_TAGS = {
        TRACE_LEVEL: "TRACE",
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO ",
        logging.WARNING: "WARN ",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRIT ",
    }

    def __init__(self, with_timestamp: bool) -> None:
        super().__init__()
        self._with_timestamp = with_timestamp

    def format(self, record: logging.LogRecord) -> str:
        tag = self._LEVEL_TAGS.get(record.levelno, "???  ")
        thread = record.threadName or f"tid:{record.thread}"
        line = f"[{tag}] {thread}: {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        if self._with_timestamp:
            stamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S.%f")
            line = f"{stamp} {line}"
        return line


def init_logging(level: Severity) -> None:
    """Send gateway log records to stderr at the given severity."""
    logger = logging.getLogger(LOGGER_NAME)
    if Severity(level) is Severity.NONE:
        logger.setLevel(OFF_LEVEL)
        return

    try:
        for old in list(logger.handlers):
            logger.removeHandler(old)
            old.close()
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(_GatewayFormatter(log_timestamp()))
        logger.addHandler(handler)
        logger.propagate = False
    except Exception as ex:  # noqa: BLE001 - logging setup must never stop the daemon
        print(f"Cannot configure logging:{ex}", file=sys.stderr)
    set_level(level)
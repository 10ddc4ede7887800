# app/core/logging_config.py
"""
Logging setup for Shiftbook.

Development logs go to a colored console and a small rotating file.
Production (``PRODUCTION=true``) writes JSON lines to ``app.log`` and
``error.log`` under ``LOG_DIR`` and only echoes warnings to stdout.

Shift and series ids attached with ``LogContext`` end up as top-level JSON
keys, so every line touching one series can be grepped by its id.
"""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

IS_PRODUCTION = os.getenv("PRODUCTION", "false").lower() == "true"

# Created by setup_logging, never on import
LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))
APP_LOG_FILE = LOG_DIR / "app.log"
ERROR_LOG_FILE = LOG_DIR / "error.log"

# Record attributes copied into JSON output, with their output key
CONTEXT_FIELDS = {
    "shift_id": "shift_id",
    "recurrence_id": "recurrence_id",
    "request_id": "request_id",
    "method": "method",
    "path": "path",
    "status_code": "status_code",
    "duration": "duration_ms",
}

CONSOLE_FORMAT = "%(levelname)-8s %(asctime)s [%(name)s] %(message)s"
FILE_FORMAT = "%(levelname)s %(asctime)s [%(name)s:%(lineno)d] %(message)s"

# Third-party loggers and the level they are held at
QUIET_LOGGERS = {
    "uvicorn": logging.INFO,
    "uvicorn.access": logging.INFO,
    "uvicorn.error": logging.INFO,
    "watchfiles": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log aggregation in production."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        payload.update(getattr(record, "extra_fields", {}))

        for attribute, key in CONTEXT_FIELDS.items():
            value = getattr(record, attribute, None)
            if value is not None:
                payload[key] = value

        return json.dumps(payload, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname)
        if color is None:
            return super().format(record)

        # Color a copy so file handlers sharing the record see the plain name
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)


def _rotating_file(path: Path, level: int, formatter: logging.Formatter, max_bytes: int, backups: int):
    handler = logging.handlers.RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backups, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _console(level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _production_handlers() -> list[logging.Handler]:
    json_formatter = JSONFormatter()
    return [
        _rotating_file(APP_LOG_FILE, logging.INFO, json_formatter, max_bytes=10_000_000, backups=5),
        _rotating_file(ERROR_LOG_FILE, logging.ERROR, json_formatter, max_bytes=10_000_000, backups=10),
        _console(logging.WARNING, json_formatter),
    ]


def _development_handlers() -> list[logging.Handler]:
    return [
        _console(logging.DEBUG, ColoredFormatter(fmt=CONSOLE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")),
        _rotating_file(APP_LOG_FILE, logging.DEBUG, logging.Formatter(FILE_FORMAT), max_bytes=5_000_000, backups=2),
    ]


def setup_logging() -> None:
    """
    Configure the root logger for the current environment.

    Safe to call more than once: existing root handlers are replaced.
    """
    LOG_DIR.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO if IS_PRODUCTION else logging.DEBUG)
    root_logger.handlers.clear()

    handlers = _production_handlers() if IS_PRODUCTION else _development_handlers()
    for handler in handlers:
        root_logger.addHandler(handler)

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)

    logging.getLogger(__name__).info(
        "Logging configured (production=%s)",
        IS_PRODUCTION,
        extra={"extra_fields": {"log_dir": str(LOG_DIR.absolute())}},
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LogContext:
    """
    Attach fields to every record created inside the block.

    Usage:
        with LogContext(recurrence_id=series_id):
            logger.info("Series created")
    """

    def __init__(self, **fields):
        self.fields = fields
        self._previous_factory = None

    def __enter__(self):
        self._previous_factory = logging.getLogRecordFactory()
        previous = self._previous_factory
        fields = self.fields

        def record_factory(*args, **kwargs):
            record = previous(*args, **kwargs)
            for key, value in fields.items():
                setattr(record, key, value)
            return record

        logging.setLogRecordFactory(record_factory)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        logging.setLogRecordFactory(self._previous_factory)

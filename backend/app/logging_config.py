from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import structlog
from structlog.typing import EventDict, Processor

from backend.app.config import AppSettings

APP_LOGGER_NAME = "clipfinder"
TELEMETRY_LOGGER_NAME = "clipfinder.telemetry"
LOG_FILE_NAME = "clipfinder.log"
TELEMETRY_LOG_FILE_NAME = "clipfinder-telemetry.log"
_SERVER_LOGGER_NAMES: tuple[str, ...] = ("uvicorn", "uvicorn.error")


@dataclass(frozen=True)
class LoggingPaths:
    log_file: Path
    telemetry_log_file: Path


def configure_application_logging(settings: AppSettings) -> LoggingPaths:
    settings.log_dir.mkdir(parents=True, exist_ok=True)
    paths = LoggingPaths(
        log_file=settings.log_dir / LOG_FILE_NAME,
        telemetry_log_file=settings.log_dir / TELEMETRY_LOG_FILE_NAME,
    )
    console_level = _resolve_log_level(settings.log_level)

    _configure_structlog()

    logger = logging.getLogger(APP_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    _reset_handlers(logger)
    logger.addHandler(_console_handler(console_level))
    logger.addHandler(_file_handler(paths.log_file, level=logging.DEBUG))

    # Server logs share the console format but stay out of the application file.
    for name in _SERVER_LOGGER_NAMES:
        server_logger = logging.getLogger(name)
        _reset_handlers(server_logger)
        server_logger.addHandler(_console_handler(console_level))
        server_logger.propagate = False

    telemetry_logger = logging.getLogger(TELEMETRY_LOGGER_NAME)
    telemetry_logger.setLevel(logging.INFO)
    telemetry_logger.propagate = False
    _reset_handlers(telemetry_logger)
    telemetry_logger.addHandler(_file_handler(paths.telemetry_log_file, level=logging.INFO))

    logger.info(
        "logging configured console_level=%s file_level=%s path=%s telemetry_path=%s",
        logging.getLevelName(console_level),
        "DEBUG",
        paths.log_file,
        paths.telemetry_log_file,
    )
    return paths


def _resolve_log_level(raw_level: str) -> int:
    resolved = getattr(logging, raw_level.strip().upper(), None)
    if isinstance(resolved, int):
        return resolved
    return logging.INFO


def _configure_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _reset_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _console_handler(level: int) -> logging.Handler:
    stream = sys.stdout
    handler = logging.StreamHandler(stream=stream)
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_shared_pre_chain(),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.dev.ConsoleRenderer(colors=_stream_supports_color(stream)),
            ],
        )
    )
    return handler


def _file_handler(path: Path, *, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_shared_pre_chain(),
            processors=[
                _add_record_metadata,
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(sort_keys=True),
            ],
        )
    )
    return handler


def _shared_pre_chain() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
    ]


def _add_record_metadata(
    _logger: logging.Logger,
    _method_name: str,
    event_dict: EventDict,
) -> EventDict:
    record = event_dict.get("_record")
    if isinstance(record, logging.LogRecord):
        event_dict["pathname"] = record.pathname
        event_dict["lineno"] = record.lineno
        event_dict["func_name"] = record.funcName
        event_dict["thread_name"] = record.threadName
    return event_dict


def _stream_supports_color(stream: object) -> bool:
    isatty = getattr(stream, "isatty", None)
    if not callable(isatty):
        return False
    try:
        return bool(isatty())
    except (OSError, ValueError):
        return False

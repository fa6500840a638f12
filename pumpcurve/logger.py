"""
Structured logging setup for the curve pricing engine

Everything logs under the "pumpcurve" namespace, so configuring the
engine never touches the host application's root logger.
"""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import structlog
from structlog.typing import EventDict, Processor


LOGGER_NAMESPACE = "pumpcurve"


def add_timestamp(logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add ISO timestamp to log events"""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def add_log_level(logger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["level"] = method_name
    return event_dict


def _build_processors(format: str) -> list:
    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        add_log_level,
        add_timestamp,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=False,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    return processors


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    output_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure structured logging for the engine

    Safe to call repeatedly: handlers from an earlier call are replaced,
    not stacked.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        format: Output format ("json" or "console")
        output_file: Optional file path for log output

    Returns:
        The stdlib logger at the root of the engine namespace
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    engine_logger = logging.getLogger(LOGGER_NAMESPACE)
    engine_logger.setLevel(numeric_level)
    engine_logger.propagate = False

    for handler in engine_logger.handlers[:]:
        engine_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter("%(message)s")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    engine_logger.addHandler(console_handler)

    if output_file:
        log_path = Path(output_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(output_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        engine_logger.addHandler(file_handler)

    structlog.configure(
        processors=_build_processors(format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return engine_logger


def setup_logging_from_config(log_config) -> logging.Logger:
    """Configure logging from a LogConfig (level, format, output_file)"""
    return setup_logging(
        level=log_config.level,
        format=log_config.format,
        output_file=log_config.output_file
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Get a logger inside the engine namespace

    Args:
        name: Module name (usually __name__). Names outside the namespace
            are nested under it, None returns the namespace logger.
    """
    if name is None:
        name = LOGGER_NAMESPACE
    elif name != LOGGER_NAMESPACE and not name.startswith(LOGGER_NAMESPACE + "."):
        name = f"{LOGGER_NAMESPACE}.{name}"

    return structlog.get_logger(name)

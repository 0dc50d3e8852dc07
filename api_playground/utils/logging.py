"""Logging configuration with structured logging support."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, TextIO

from ..config.config import LoggingConfig

# Third-party loggers that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")

CONTEXT_ATTR = "playground_context"


def _record_context(record: logging.LogRecord) -> Dict[str, Any]:
    return dict(getattr(record, CONTEXT_ATTR, None) or {})


class JsonFormatter(logging.Formatter):
    """Structured JSON formatter: one object per record."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Context attached by a ContextLogger (source URL, query text) is
        merged into the top-level object.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data.update(_record_context(record))
        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable lines; context is appended as ``[key=value ...]``."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        context = _record_context(record)
        if not context:
            return line
        pairs = []
        for key in sorted(context):
            pairs.append(f"{key}={context[key]}")
        return f"{line} [{' '.join(pairs)}]"


def setup_logging(
    config: Optional[LoggingConfig] = None, stream: Optional[TextIO] = None
) -> None:
    """Configure the root logger from the ``logging`` config section.

    Logs go to stderr by default so that result tables printed on stdout
    stay machine-readable.

    Args:
        config: Logging section (level, structured, log_file)
        stream: Console stream, stderr when omitted
    """
    config = config or LoggingConfig()
    log_level = getattr(logging, config.level.upper(), logging.INFO)
    formatter = JsonFormatter() if config.structured else ConsoleFormatter()

    handlers = []
    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)
    handlers.append(console_handler)

    if config.log_file:
        file_handler = logging.FileHandler(config.log_file)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)
        handlers.append(file_handler)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that stamps a fixed context onto every record."""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = dict(kwargs.get("extra") or {})
        extra[CONTEXT_ATTR] = dict(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs

    def bind(self, **fields: Any) -> "ContextLogger":
        """Return a new adapter with ``fields`` added to the context."""
        merged = dict(self.extra)
        merged.update(_drop_empty(fields))
        return ContextLogger(self.logger, merged)


def get_contextual_logger(name: str, context: Mapping[str, Any]) -> ContextLogger:
    """Get a logger with contextual information.

    Keys whose value is None are left out, so optional context such as
    the source URL of a file-loaded dataset does not show up as ``None``.

    Args:
        name: Logger name
        context: Context dictionary to include in all logs

    Returns:
        Logger adapter with context

    Example:
        >>> logger = get_contextual_logger(__name__, {"source_url": "https://..."})
        >>> logger.info("Dataset loaded")  # Will include source_url in log
    """
    return ContextLogger(logging.getLogger(name), _drop_empty(context))


def _drop_empty(fields: Mapping[str, Any]) -> Dict[str, Any]:
    kept = {}
    for key, value in fields.items():
        if value is not None:
            kept[key] = value
    return kept

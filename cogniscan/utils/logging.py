"""
Structured Logging Configuration

One line per event. Session-scoped loggers prefix each line with the
user the session belongs to, so interleaved assessments stay readable.
"""
import logging
import sys
from typing import Any, MutableMapping, Optional, Tuple
from datetime import datetime, timezone

PACKAGE_LOGGER = "cogniscan"

# Third-party loggers that are chatty at INFO
_QUIET_LOGGERS = ("httpx", "httpcore", "multipart")


class StructuredFormatter(logging.Formatter):
    """Colored single-line formatter with UTC timestamps and bound context."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        context = getattr(record, "context", None)
        scope = " ".join(f"{k}={v}" for k, v in context.items()) if context else ""

        line = f"[{stamp}] {record.levelname:8} [{record.name}]"
        if scope:
            line += f" ({scope})"
        line += f" {record.getMessage()}"

        if self.use_color and record.levelname in self.COLORS:
            line = f"{self.COLORS[record.levelname]}{line}{self.RESET}"

        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


class SessionLogger(logging.LoggerAdapter):
    """Logger adapter carrying per-session key/value context."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra["context"] = {**self.extra, **extra.get("context", {})}
        kwargs["extra"] = extra
        return msg, kwargs


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure logging for the package.

    Handlers are attached to the `cogniscan` logger rather than the root,
    and records still propagate so test log capture sees them.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for log output
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter(use_color=sys.stdout.isatty()))
    package_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredFormatter(use_color=False))
        package_logger.addHandler(file_handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Module name (typically __name__)
    """
    return logging.getLogger(name)


def bind_logger(logger: logging.Logger, **context: Any) -> SessionLogger:
    """Wrap `logger` so every record carries `context` (e.g. user=...)."""
    return SessionLogger(logger, {k: v for k, v in context.items() if v is not None})

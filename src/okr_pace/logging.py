"""Logging configuration.

Logs always go to stderr so report output on stdout (tables or JSON) stays
clean enough to pipe.
"""

import json
import logging
import sys

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object per line.

    A `kr_id` passed through `extra` is kept as its own field so log lines can
    be filtered by key result.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Serialize the record."""
        payload = {
            "time": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        kr_id = getattr(record, "kr_id", None)
        if kr_id is not None:
            payload["kr_id"] = kr_id
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def build_handler(json_format: bool = False) -> logging.Handler:
    """Create the stderr handler used by setup_logging.

    Args:
        json_format: Emit JSON lines instead of the pipe-separated text format.

    Returns:
        Handler writing to stderr.
    """
    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(
    verbose: bool = False,
    json_format: bool = False,
) -> None:
    """Configure logging for the application.

    Args:
        verbose: Enable debug level logging.
        json_format: Use JSON format for logs (useful for structured logging).
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, handlers=[build_handler(json_format)])


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name.

    Args:
        name: Logger name, typically __name__ of the calling module.

    Returns:
        Configured logger instance.
    """
    return logging.getLogger(name)

import json
import logging
import sys
from datetime import datetime
from typing import Any

from .config import get_settings


class JSONFormatter(logging.Formatter):
    """
    Formatter that outputs JSON strings after parsing the LogRecord.
    """
    def format(self, record: logging.LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "path"):
            log_record["path"] = record.path  # type: ignore

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        # Add extra fields passed via extra={"data": ...}
        if hasattr(record, "data"):
            log_record["data"] = record.data  # type: ignore

        return json.dumps(log_record, default=str)


def setup_logging(level: str | int | None = None) -> logging.Logger:
    """
    Configures the root logger to use JSON formatting.
    The level defaults to the LOG_LEVEL setting.
    """
    if level is None:
        level = get_settings().log_level
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())

    # Remove existing handlers to avoid duplicates (e.g. from Uvicorn's default config)
    logger.handlers = []
    logger.addHandler(handler)

    logging.getLogger("uvicorn.access").disabled = True

    for noisy_logger in ["sqlalchemy.engine", "sqlalchemy.pool", "httpx", "httpcore"]:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    return logger

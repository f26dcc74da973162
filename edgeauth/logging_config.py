# edgeauth/logging_config.py

"""
Configures structured JSON logging for the Edge Auth service.

The root logger gets a single StreamHandler that writes one JSON object
per event to stdout, ready for Docker log drivers and log aggregators.
Every line carries `"service": "edgeauth"`.

Uses the `python-json-logger` package to serialize logs to structured JSON.

💡 Control verbosity with the LOG_LEVEL environment variable (DEBUG, INFO, WARNING).
Tokens never reach the logger on purpose; `BearerRedactionFilter` scrubs any
`Bearer <token>` text that slips into a message anyway.
"""

import logging
import re
import sys

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "edgeauth"

_BEARER = re.compile(r"Bearer\s+\S+")


class BearerRedactionFilter(logging.Filter):
    """
    Replaces bearer credentials in the rendered log message with a placeholder.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if "Bearer" in message:
            record.msg = _BEARER.sub("Bearer <redacted>", message)
            record.args = None
        return True


def configure_logging(level: str = "INFO") -> None:
    """
    Configures the global Python logger.

    Replaces any existing root handlers with a JSON formatter writing to stdout.

    Args:
        level (str): Log level (e.g., "DEBUG", "INFO", "ERROR").
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        static_fields={"service": SERVICE_NAME},
    ))
    handler.addFilter(BearerRedactionFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())

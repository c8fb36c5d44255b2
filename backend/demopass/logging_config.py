"""
JSON log lines for Demo Pass.

Every module logs through a channel logger named demopass.<channel>. The
root logger owns the only handler, so each record leaves the process as
one JSON object on stdout, tagged with the id of the HTTP request that
produced it.
"""

import json
import logging
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone

from demopass.config import LOG_LEVEL
from demopass.validators import isoformat_utc

LOGGER_PREFIX = "demopass"
CHANNELS = ("http", "db", "enrollment", "attendance", "reports")

# Filled in by the request middleware, empty outside a request
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def _channel_of(record: logging.LogRecord) -> str:
    channel = getattr(record, "channel", None)
    if channel:
        return channel
    prefix, _, name = record.name.partition(".")
    return name if prefix == LOGGER_PREFIX and name else "app"


class StructuredJsonFormatter(logging.Formatter):
    """
    Render a record as a JSON object with the keys timestamp, level,
    message, channel, context and extra, plus exception when the record
    carries a traceback. The current request id is always part of context.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, timezone.utc)
        context = {"request_id": request_id_var.get()}
        context.update(getattr(record, "context", None) or {})

        entry = {
            "timestamp": isoformat_utc(created),
            "level": record.levelname,
            "message": record.getMessage(),
            "channel": _channel_of(record),
            "context": context,
            "extra": getattr(record, "extra_data", None) or {},
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level: str = None) -> logging.Logger:
    """Install the JSON stdout handler on the root logger."""
    resolved = logging.getLevelName((level or LOG_LEVEL).upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredJsonFormatter())

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(resolved)
    for channel in CHANNELS:
        get_logger(channel).setLevel(resolved)
    return root


def get_logger(channel: str) -> logging.Logger:
    return logging.getLogger("{}.{}".format(LOGGER_PREFIX, channel))


def log_with_context(logger: logging.Logger, level: str, message: str,
                     context: dict = None, extra_data: dict = None,
                     exc_info=None):
    """
    Log message on logger at the named level.

    context holds the ids the entry is about (batch_id, enrollment_id,
    student_id); extra_data holds measurements and request details such
    as duration_ms or ip. Pass exc_info to attach a traceback.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    logger.log(numeric_level, message, exc_info=exc_info, extra={
        "channel": logger.name.rpartition(".")[2],
        "context": context or {},
        "extra_data": extra_data or {},
    })


def generate_request_id() -> str:
    return str(uuid.uuid4())

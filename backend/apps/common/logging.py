"""
Structured logging helpers.

JSONFormatter is wired into production.py so that every record (including
the `security` audit trail) reaches stdout as one JSON object per line.
"""

from datetime import datetime, timezone
import json
import logging
import traceback

# LogRecord attributes that are not "extra" context
_RECORD_ATTRS = frozenset({
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'stack_info', 'exc_info', 'exc_text', 'thread', 'threadName',
    'taskName', 'message',
})


class JSONFormatter(logging.Formatter):
    """
    Output format:
    {
        "timestamp": "2026-01-15T12:34:56.789Z",
        "level": "INFO",
        "logger": "apps.billing.services",
        "message": "Subscription created",
        "module": "services",
        "function": "subscribe_team",
        "line": 123,
        "extra": {"team_id": 7}
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_data = {
            "timestamp": created.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info and record.exc_info[0]:
            exc_type, exc_value, exc_tb = record.exc_info
            log_data["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
            }

        extra = {}
        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key.startswith('_'):
                continue
            try:
                json.dumps(value)
                extra[key] = value
            except (TypeError, ValueError):
                extra[key] = str(value)

        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, ensure_ascii=False)


class ContextLoggerAdapter(logging.LoggerAdapter):
    """
    Adds fixed context (trace id, client ip, ...) to every record.

        log = get_logger(__name__).with_context(trace_id="ab12cd34")
        log.info("Webhook received", extra={"payment_id": "2d1f..."})
    """

    def __init__(self, logger, extra=None):
        super().__init__(logger, extra or {})

    def process(self, msg, kwargs):
        kwargs['extra'] = {**self.extra, **kwargs.get('extra', {})}
        return msg, kwargs

    def with_context(self, **context):
        return ContextLoggerAdapter(self.logger, {**self.extra, **context})


def get_logger(name: str) -> ContextLoggerAdapter:
    return ContextLoggerAdapter(logging.getLogger(name), {})

import contextvars
import json
import logging
import logging.config
from datetime import datetime, timezone

_BUILTIN_ATTRS = {
    "args",
    "asctime",
    "created",
    "exc_info",
    "exc_text",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "msg",
    "name",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "stack_info",
    "taskName",
    "thread",
    "threadName",
}

_request_id_var = contextvars.ContextVar("request_id", default=None)
_webhook_event_id_var = contextvars.ContextVar("webhook_event_id", default=None)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "severity": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "time": datetime.now(timezone.utc).isoformat(),
        }

        request_id = _request_id_var.get()
        webhook_event_id = _webhook_event_id_var.get()
        if request_id:
            payload["requestId"] = request_id
        if webhook_event_id:
            payload["webhookEventId"] = webhook_event_id

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _BUILTIN_ATTRS:
                continue
            payload[key] = _safe_json_value(value)

        return json.dumps(payload, ensure_ascii=False)


def _safe_json_value(value):
    try:
        json.dumps(value)
        return value
    except TypeError:
        return str(value)


def setup_logging(level: str = "INFO") -> None:
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": "core.logging.JsonFormatter"},
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "formatter": "json",
            }
        },
        "root": {"level": level, "handlers": ["stdout"]},
        "loggers": {
            "uvicorn": {"level": level, "handlers": ["stdout"], "propagate": False},
            "uvicorn.error": {"level": level, "handlers": ["stdout"], "propagate": False},
            "uvicorn.access": {"level": "WARNING", "handlers": ["stdout"], "propagate": False},
            "httpx": {"level": "WARNING", "handlers": ["stdout"], "propagate": False},
        },
    }

    logging.config.dictConfig(config)


def set_request_id(request_id: str | None) -> contextvars.Token:
    return _request_id_var.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    _request_id_var.reset(token)


def get_request_id() -> str | None:
    return _request_id_var.get()


def set_webhook_event_id(event_id: str | None) -> contextvars.Token:
    # asyncio.gather runs each coroutine in its own task, so this stays per event
    return _webhook_event_id_var.set(event_id)


def reset_webhook_event_id(token: contextvars.Token) -> None:
    _webhook_event_id_var.reset(token)

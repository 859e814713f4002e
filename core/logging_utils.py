from __future__ import annotations

import json
import logging
from contextvars import ContextVar, Token
from typing import Any, Iterable, Optional

from .settings import KitSettings, get_settings


# Record attributes copied into the JSON payload when a caller passes them via `extra=`
MANIFEST_LOG_FIELDS = ("request_id", "manifest_path", "env", "entry", "method", "status")


class JsonFormatter(logging.Formatter):
    """One JSON object per line; manifest failures carry their path and environment."""

    def __init__(self, fields: Iterable[str] = MANIFEST_LOG_FIELDS) -> None:
        super().__init__()
        self.fields = tuple(fields)

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        data: dict[str, Any] = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)  # type: ignore[arg-type]
        rid = get_request_id()
        if rid:
            data["request_id"] = rid
        for key in self.fields:
            if hasattr(record, key):
                data[key] = getattr(record, key)
        return json.dumps(data, ensure_ascii=False, default=str)


def configure_json_logging(level: int | str = logging.INFO) -> logging.Handler:
    root = logging.getLogger()
    root.setLevel(level)
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    # Remove other handlers to avoid duplicate logs
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
    return handler


def maybe_enable_json_logging(settings: Optional[KitSettings] = None) -> bool:
    settings = settings or get_settings()
    if not settings.json_logs:
        return False
    configure_json_logging(settings.log_level)
    return True


# Request-scoped context helpers
_REQUEST_ID: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def set_request_id(request_id: Optional[str]) -> Token:
    return _REQUEST_ID.set(request_id)


def reset_request_id(token: Token) -> None:
    _REQUEST_ID.reset(token)


def get_request_id() -> Optional[str]:
    return _REQUEST_ID.get()

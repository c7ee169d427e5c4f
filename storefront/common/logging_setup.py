import logging
import sys
import json
import re
from typing import Any, Dict, Optional
from logging.handlers import QueueHandler, QueueListener
from queue import Queue
from storefront.config.admin_config import admin_config
from storefront.common.constants import request_id_ctx

ENV = getattr(admin_config, "ENV", "dev").lower()

SENSITIVE_PATTERNS = [
    r"password", r"secret", r"token", r"authorization",
    r"auth_token", r"guest_session_id", r"session_token",
    r"smtp_password", r"pwd_hash",
]

_RESERVED_RECORD_ATTRS = ("name", "msg", "args", "levelname", "levelno", "pathname", "filename",
                          "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
                          "created", "msecs", "relativeCreated", "thread", "threadName", "processName",
                          "process", "taskName", "message", "asctime")


def sanitize_message_text(msg: str) -> str:
    """Sanitize sensitive patterns inside a text message (best-effort)."""
    out = msg
    for p in SENSITIVE_PATTERNS:
        # replace occurrences like "password=abc" or '"password": "abc"'
        out = re.sub(rf'("{p}"\s*:\s*")[^"]+(")', rf'\1[REDACTED]\2', out, flags=re.IGNORECASE)
        out = re.sub(rf'({p}\s*[=:\s]\s*)[\w\-\./]+', rf'\1[REDACTED]', out, flags=re.IGNORECASE)
    return out


def mask_email(value: str) -> str:
    local, _, domain = value.partition("@")
    if not domain:
        return value[:2] + "..."
    return f"{local[:2]}...@{domain}"


class JSONFormatter(logging.Formatter):
    """Structured JSON formatter for production"""
    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "env": ENV,
            "service": getattr(admin_config, "SERVICE_NAME", "storefront"),
        }

        rid = request_id_ctx.get()
        if rid:
            log_data["request_id"] = rid

        extra_fields = {}
        for k, v in record.__dict__.items():
            if k in _RESERVED_RECORD_ATTRS or k.startswith("_"):
                continue
            extra_fields[k] = v

        # never ship guest tokens , shorten emails outside dev
        if "guest_token" in extra_fields:
            extra_fields["guest_token"] = str(extra_fields["guest_token"])[:6] + "..."
        for field in ("email", "shipping_email"):
            if field in extra_fields and extra_fields[field] and ENV != "dev":
                extra_fields[field] = mask_email(str(extra_fields[field]))

        log_data.update(extra_fields)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if ENV != "dev":
            log_data["message"] = sanitize_message_text(log_data.get("message", ""))

        return json.dumps(log_data, default=str)


class SecurityFilter(logging.Filter):
    """Redact sensitive info in non-dev logs"""

    def filter(self, record: logging.LogRecord) -> bool:
        if ENV != "dev":
            record.msg = sanitize_message_text(record.getMessage())
            record.args = ()
        return True


# non-blocking queue-based logging , set up once at app startup
_queue_listener: Optional[QueueListener] = None


def setup_logging():
   
    global _queue_listener

    if ENV in ("prod", "staging"):
        log_level = logging.INFO
    else:
        log_level = logging.DEBUG

    root = logging.getLogger()
    # Clear existing handlers to avoid duplication
    for h in list(root.handlers):
        root.removeHandler(h)
    if _queue_listener is not None:
        _queue_listener.stop()

    q: Queue = Queue(-1)
    qh = QueueHandler(q)

    console_handler = logging.StreamHandler(sys.stdout)
    if ENV != "dev":
        console_handler.setFormatter(JSONFormatter())
        console_handler.addFilter(SecurityFilter())
    else:
        console_handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)8s] %(name)s:%(funcName)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))

    root.setLevel(log_level)
    root.addHandler(qh)

    _queue_listener = QueueListener(q, console_handler, respect_handler_level=True)
    _queue_listener.start()

    # silence noisy third-party loggers outside dev
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING if ENV != "dev" else logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)

    return logging.getLogger("storefront.app")


def shutdown_logging():
    global _queue_listener
    if _queue_listener is not None:
        _queue_listener.stop()
        _queue_listener = None


class ContextLogger:
    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    def _with_ctx(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        extra = dict(extra or {})
        rid = request_id_ctx.get()
        if rid:
            extra.setdefault("request_id", rid)

        return extra

    def debug(self, msg: str, *args, **kwargs):
        extra = kwargs.pop("extra", {})
        kwargs["extra"] = {**self._with_ctx(), **(extra or {})}
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        extra = kwargs.pop("extra", {})
        kwargs["extra"] = {**self._with_ctx(), **(extra or {})}
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        extra = kwargs.pop("extra", {})
        kwargs["extra"] = {**self._with_ctx(), **(extra or {})}
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        extra = kwargs.pop("extra", {})
        kwargs["extra"] = {**self._with_ctx(), **(extra or {})}
        self._logger.error(msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        extra = kwargs.pop("extra", {})
        kwargs["extra"] = {**self._with_ctx(), **(extra or {})}
        self._logger.exception(msg, *args, **kwargs)


def get_logger(name: str = "storefront.app") -> ContextLogger:
    return ContextLogger(name)

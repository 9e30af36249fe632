"""
Logging configuration for kubepilot.

The stdlib root logger owns the handlers (console, optional rotating file);
structlog renders through it so uvicorn, the kubernetes client and our own
``structlog.get_logger`` calls end up in the same stream, plain or JSON.
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, MutableMapping, Optional

import structlog

from ..config import get_settings
from .request_context import request_id_var

_CONFIGURED = False

REDACT_KEYS = {"kubeconfig", "password", "secret", "token", "authorization", "client-key-data"}


def _add_request_id(_: Any, __: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Inject the current request id unless the caller bound one explicitly."""
    rid = request_id_var.get()
    if rid is not None:
        event_dict.setdefault("request_id", rid)
    return event_dict


def _redact_sensitive(_: Any, __: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    for key in list(event_dict):
        if str(key).lower() in REDACT_KEYS and event_dict[key]:
            event_dict[key] = "***REDACTED***"
    return event_dict


_SHARED_PROCESSORS: list[Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
    _add_request_id,
    _redact_sensitive,
]


def _build_formatter(json_output: bool, use_color: bool) -> logging.Formatter:
    renderer: Any
    if json_output:
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=use_color)
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    json_output: Optional[bool] = None,
    use_color: bool = True,
) -> None:
    """Configure the root logger and structlog once per process.

    Args:
        level: log level name, defaults to ``Settings.log_level``
        log_file: optional path for a rotating file handler
        json_output: render JSON lines instead of console output
        use_color: colourize console output when attached to a TTY
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    settings = get_settings()
    json_output = settings.log_json if json_output is None else json_output

    root = logging.getLogger()
    root.setLevel((level or settings.log_level).upper())
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(_build_formatter(json_output, use_color and sys.stdout.isatty()))
    root.addHandler(console_handler)

    file_path = log_file or settings.log_file
    if file_path:
        Path(file_path).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            file_path,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(_build_formatter(json_output, use_color=False))
        root.addHandler(file_handler)

    # route uvicorn/fastapi through the root handlers
    for log_name in ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi"):
        named = logging.getLogger(log_name)
        named.handlers = []
        named.propagate = True

    # urllib3 debug output would echo bearer tokens from kubeconfigs
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_SHARED_PROCESSORS,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True


def get_logger(name: str) -> Any:
    return structlog.get_logger(name)

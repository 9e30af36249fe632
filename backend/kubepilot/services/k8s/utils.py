"""
Helpers shared by the kubernetes service modules.
"""

import json
from typing import Any, Optional

from kubernetes.client.rest import ApiException


DEFAULT_NAMESPACE = "default"


def resolve_namespace(namespace: Optional[str], default: str = DEFAULT_NAMESPACE) -> str:
    """Return the namespace to address, falling back to ``default`` when omitted or blank."""
    if namespace and namespace.strip():
        return namespace.strip()
    return default


def error_status(exc: BaseException) -> Optional[int]:
    """HTTP status of a failed API call, or None for transport and client-side errors."""
    status = getattr(exc, "status", None)
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


def describe_error(exc: BaseException) -> str:
    """
    Reduce a kubernetes client failure to one readable line.

    The API server answers errors with a ``Status`` object whose ``message``
    is what kubectl prints; prefer it over the raw HTTP dump that
    ``str(ApiException)`` produces.
    """
    if isinstance(exc, ApiException):
        message = _status_message(exc.body)
        if message:
            return message
        if exc.reason:
            return f"{exc.status} {exc.reason}" if exc.status else str(exc.reason)
    text = str(exc).strip()
    return text or exc.__class__.__name__


def _status_message(body: Any) -> Optional[str]:
    if not body:
        return None
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except ValueError:
            return None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return None

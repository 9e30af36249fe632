"""
Logging setup (`setup_logging`, `get_logger`) and the request-id context variable.
"""
from .logging import setup_logging, get_logger
from .request_context import request_id_var

__all__ = [
    "setup_logging",
    "get_logger",
    "request_id_var",
]

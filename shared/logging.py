"""
Shared logging configuration for the Finlogic portal services.

Log events carry three pieces of correlation context, each held in a
contextvar: the HTTP request id, the user whose data is being served, and
the cached query whose underlying read is running.
"""

import sys
import structlog
import logging
import uuid
from typing import Any, Dict, Optional
from contextvars import ContextVar

request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar('user_id', default=None)
# Set inside the task that runs a cache miss, so data store logs name the query.
query_var: ContextVar[Optional[str]] = ContextVar('query', default=None)


def configure_logging(service_name: str, log_level: str = "info") -> None:
    """Route structlog through stdlib logging as one JSON object per line."""

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            add_service_context,
            add_correlation_context,
            add_query_context,
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )


def add_service_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Derive ``service`` from the dotted logger name."""
    # "portal.cache" -> service "portal"
    logger_name = event_dict.get("logger", "")
    if "." in logger_name:
        event_dict["service"] = logger_name.split(".")[0]

    return event_dict


def add_correlation_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Attach the request and user ids of the current HTTP request."""
    request_id = request_id_var.get()
    if request_id:
        event_dict.setdefault("request_id", request_id)

    user_id = user_id_var.get()
    if user_id:
        event_dict.setdefault("user_id", user_id)

    return event_dict


def add_query_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Attach the cached query name while its underlying read is running."""
    query = query_var.get()
    if query:
        event_dict.setdefault("query", query)
    return event_dict


def set_request_id(request_id: Optional[str] = None) -> str:
    """Use the caller's request id, or mint one."""
    if request_id is None:
        request_id = str(uuid.uuid4())
    request_id_var.set(request_id)
    return request_id


def get_request_id() -> Optional[str]:
    return request_id_var.get()


def set_user_context(user_id: Optional[str] = None):
    if user_id:
        user_id_var.set(user_id)


def set_query_context(query: Optional[str]) -> None:
    query_var.set(query)


def clear_context():
    """Reset correlation context at the end of a request."""
    request_id_var.set(None)
    user_id_var.set(None)
    query_var.set(None)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)

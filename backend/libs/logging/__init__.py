"""
Logging utilities for the canvas service.

Provides JSON logging, context propagation, and secret redaction.
"""
from __future__ import annotations

from libs.logging.context import (
    clear_context_ids,
    context_ids,
    get_context_ids,
    set_context_ids,
)
from libs.logging.filters import ContextFilter, SecretRedactionFilter
from libs.logging.formatters import JSONFormatter

__all__ = [
    "JSONFormatter",
    "ContextFilter",
    "SecretRedactionFilter",
    "clear_context_ids",
    "context_ids",
    "get_context_ids",
    "set_context_ids",
]

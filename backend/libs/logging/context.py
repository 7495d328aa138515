"""
Context variables for request- and job-scoped IDs.

Values are set by the logging middleware (HTTP requests) and by the task
queue (enrichment jobs) and injected into every log record by ContextFilter.
"""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Iterator

CONTEXT_FIELDS = ("trace_id", "request_id", "org_id", "canvas_id", "node_id", "job")

_vars: dict[str, ContextVar[str | None]] = {
    name: ContextVar(name, default=None) for name in CONTEXT_FIELDS
}


def set_context_ids(
    *,
    trace_id: str | None = None,
    request_id: str | None = None,
    org_id: str | None = None,
    canvas_id: str | None = None,
    node_id: str | None = None,
    job: str | None = None,
) -> dict[str, Token]:
    """
    Set context IDs for the current execution context.

    Empty values are ignored so callers can pass whatever they have.

    Args:
        trace_id: OpenTelemetry trace ID
        request_id: Request ID (from header or generated)
        org_id: Organization UUID
        canvas_id: Canvas UUID
        node_id: Canvas node or typed node UUID being worked on
        job: Dotted name of the running background job

    Returns:
        Tokens for the variables that were set (usable with reset_context_ids)
    """
    values = {
        "trace_id": trace_id,
        "request_id": request_id,
        "org_id": org_id,
        "canvas_id": canvas_id,
        "node_id": node_id,
        "job": job,
    }
    tokens = {}
    for name, value in values.items():
        if value:
            tokens[name] = _vars[name].set(str(value))
    return tokens


def reset_context_ids(tokens: dict[str, Token]) -> None:
    """Restore the variables changed by a previous set_context_ids call."""
    for name, token in tokens.items():
        _vars[name].reset(token)


@contextmanager
def context_ids(**ids: str | None) -> Iterator[None]:
    """Scope context IDs to a block (used around background jobs)."""
    tokens = set_context_ids(**ids)
    try:
        yield
    finally:
        reset_context_ids(tokens)


def get_context_ids() -> dict[str, str | None]:
    """Get all context IDs from the current context."""
    return {name: var.get() for name, var in _vars.items()}


def clear_context_ids() -> None:
    """Clear all context IDs (end of request, tests)."""
    for var in _vars.values():
        var.set(None)

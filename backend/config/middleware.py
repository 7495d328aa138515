"""
Django middleware for logging context propagation.
"""
from __future__ import annotations

import uuid

from libs.logging.context import clear_context_ids, set_context_ids

try:
    from opentelemetry import trace
    from opentelemetry.trace import format_trace_id

    OTELEMETRY_AVAILABLE = True
except ImportError:
    OTELEMETRY_AVAILABLE = False


class LoggingContextMiddleware:
    """
    Middleware that sets context IDs for logging.

    request_id and trace_id are set for the whole request; org_id and
    canvas_id are added once the URL is resolved (process_view).
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        trace_id = None
        if OTELEMETRY_AVAILABLE:
            span = trace.get_current_span()
            if span and span.get_span_context().is_valid:
                trace_id = format_trace_id(span.get_span_context().trace_id)

        set_context_ids(trace_id=trace_id, request_id=request_id)

        request._request_id = request_id
        request._trace_id = trace_id

        try:
            response = self.get_response(request)

            if trace_id:
                response["X-Trace-ID"] = trace_id
            response["X-Request-ID"] = request_id

            return response
        finally:
            # Worker threads are reused between requests
            clear_context_ids()

    def process_view(self, request, view_func, view_args, view_kwargs):
        org_id = view_kwargs.get("org_id")
        canvas_id = view_kwargs.get("canvas_id")
        set_context_ids(
            org_id=str(org_id) if org_id else None,
            canvas_id=str(canvas_id) if canvas_id else None,
        )
        return None

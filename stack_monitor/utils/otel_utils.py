from contextlib import contextmanager
from typing import Any, Dict, Optional

from opentelemetry import trace


@contextmanager
def start_trace(name: str, attributes: Optional[Dict[str, Any]] = None):
    """
    Context manager for starting an OpenTelemetry trace span.
    Spans are no-ops until an SDK tracer provider is installed.
    """
    tracer = trace.get_tracer("stack_monitor")
    with tracer.start_as_current_span(name, attributes=attributes) as span:
        yield span

"""
Context managers and utilities for span management.

Provides context managers for creating spans and adding attributes/events
to the current span without explicit span references.
"""

from contextlib import contextmanager
from typing import Any

from opentelemetry import trace

from .tracer import get_tracer


def _attribute_value(value: Any) -> Any:
    """Keep OpenTelemetry primitive types, stringify everything else."""
    if isinstance(value, (bool, int, float, str)):
        return value
    return str(value)


@contextmanager
def trace_operation(
    operation_name: str,
    kind: trace.SpanKind = trace.SpanKind.INTERNAL,
    **attributes
):
    """
    Context manager for tracing operations.

    Creates a span, adds attributes and records any exception raised
    inside the block before re-raising it.

    Args:
        operation_name: Name of the operation being traced
        kind: Span kind (INTERNAL, CLIENT, SERVER, etc.)
        **attributes: Custom attributes to add to the span

    Yields:
        Span instance for adding custom events/attributes

    Example:
        >>> with trace_operation("word_lengths", word_count=len(words)) as span:
        ...     result = pool.reduce(words, len, operator.add, 0)
        ...     span.set_attribute("total_length", result)
    """
    tracer = get_tracer()

    with tracer.start_as_current_span(
        operation_name,
        kind=kind,
        record_exception=False,
    ) as span:
        for key, value in attributes.items():
            span.set_attribute(key, _attribute_value(value))

        try:
            yield span
        except Exception as e:
            span.set_attribute("error", True)
            span.set_attribute("error.type", type(e).__name__)
            span.set_attribute("error.message", str(e))
            span.record_exception(e)
            raise


def add_span_attributes(**attributes):
    """
    Add attributes to the current span.

    Args:
        **attributes: Attributes to add to current span

    Example:
        >>> with trace_operation("read_words"):
        ...     words = read_words("words.txt")
        ...     add_span_attributes(word_count=len(words))
    """
    current_span = trace.get_current_span()
    if current_span.is_recording():
        for key, value in attributes.items():
            current_span.set_attribute(key, _attribute_value(value))


def add_span_event(name: str, **attributes):
    """
    Add an event to the current span.

    Args:
        name: Event name
        **attributes: Event attributes

    Example:
        >>> with trace_operation("sum_range"):
        ...     add_span_event("reduction_submitted")
        ...     total = pool.reduce(range(100), lambda i: i, operator.add, 0)
        ...     add_span_event("reduction_completed", total=total)
    """
    current_span = trace.get_current_span()
    if current_span.is_recording():
        attrs = {k: _attribute_value(v) for k, v in attributes.items()}
        current_span.add_event(name, attributes=attrs)

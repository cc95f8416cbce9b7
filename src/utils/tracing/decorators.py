"""
Decorators for adding tracing to functions.

Provides a decorator that wraps every call of a function in a span.
"""

import functools

from .context import trace_operation


def trace_function(operation_name: str | None = None, **default_attributes):
    """
    Decorator for tracing function calls.

    When the first positional argument carries a ``pool_size`` attribute
    (a WorkerPool), it is added to the span as well.

    Args:
        operation_name: Optional custom operation name (defaults to module.function)
        **default_attributes: Default attributes to add to all spans

    Example:
        >>> @trace_function(component="demo")
        ... def sum_range(pool, start=0, stop=1_000_000):
        ...     return pool.reduce(range(start, stop), lambda i: i, operator.add, 0)
    """
    def decorator(func):
        name = operation_name or f"{func.__module__}.{func.__name__}"

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            attributes = dict(default_attributes, function=func.__name__)
            pool_size = getattr(args[0], "pool_size", None) if args else None
            if pool_size is not None:
                attributes["pool_size"] = pool_size

            with trace_operation(name, **attributes):
                return func(*args, **kwargs)

        return wrapper
    return decorator

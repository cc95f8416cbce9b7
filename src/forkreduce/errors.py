"""
Exception hierarchy for the forkreduce worker pool.

All errors raised by the pool derive from ForkReduceError so callers can
catch the whole family with one except clause.
"""


class ForkReduceError(Exception):
    """Base exception for worker pool errors."""

    pass


class InvalidConfiguration(ForkReduceError, ValueError):
    """Raised when a pool or reduction is configured with invalid values."""

    pass


class PoolShutDown(ForkReduceError, RuntimeError):
    """Raised when submitting work to a pool that has been shut down."""

    pass


class TaskExecutionFailure(ForkReduceError):
    """
    Raised when a transform, combiner or element hook fails during a reduction.

    The original exception is available as ``cause`` and is also chained
    as ``__cause__``. The reduction that raised it produced no result.
    """

    def __init__(self, message: str, cause: BaseException):
        super().__init__(message)
        self.cause = cause

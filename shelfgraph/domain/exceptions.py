"""Exceptions raised by the ShelfGraph core."""


class ShelfGraphError(Exception):
    """Base class for all ShelfGraph errors."""


class MalformedInputError(ShelfGraphError, ValueError):
    """Rejected before any query is issued (bad limit, blank identifier)."""


class ExecutorUnavailableError(ShelfGraphError):
    """The graph backend could not serve the query.

    Pool exhaustion, dropped connections and transient cluster errors all end
    up here.  The core never retries; callers may.
    """

    retryable = True


class UnsupportedQueryError(ShelfGraphError, KeyError):
    """An executor was asked to run a query it does not know how to answer."""

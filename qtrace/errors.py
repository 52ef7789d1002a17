"""Exceptions raised by qtrace.

Everything derives from QtraceError so the CLI can report any failure
with a single except clause. Nothing in this package retries.
"""

from typing import Any


class QtraceError(Exception):
    """Base class for all qtrace errors."""


class ConfigError(QtraceError):
    """Config file missing, unreadable or invalid."""


class LokiError(QtraceError):
    """Loki query failed or returned no usable log entry."""


class GraphNodeError(QtraceError):
    """Graph-node trace request failed."""


class OutputError(QtraceError):
    """Saving a raw artifact to a file failed."""


# =============================================================================
# Trace parsing
# =============================================================================

class TraceError(QtraceError):
    """Raw trace JSON does not have the expected shape.

    Parsing is fail-fast, so one of these means no tree was built at all.
    """


class NotAnObject(TraceError):
    """A node expected to be a JSON object was a scalar, array or null."""

    def __init__(self, context: str, value: Any = None):
        self.context = context
        self.actual = type(value).__name__
        super().__init__(f"Invalid trace: {context} is not an object (got {self.actual})")


class MissingField(TraceError):
    """A required key is absent from a node."""

    def __init__(self, field: str, context: str = "root"):
        self.field = field
        self.context = context
        super().__init__(f"Invalid trace: {context} is missing '{field}'")


class WrongType(TraceError):
    """A required key is present but holds an incompatible JSON value."""

    def __init__(self, field: str, expected: str, context: str = "root"):
        self.field = field
        self.expected = expected
        self.context = context
        super().__init__(
            f"Invalid trace: '{field}' in {context} is not {expected}"
        )


class TraceTooDeep(TraceError):
    """Trace nesting exceeds the configured depth limit."""

    def __init__(self, limit: int, context: str):
        self.limit = limit
        self.context = context
        super().__init__(
            f"Invalid trace: {context} is nested deeper than {limit} levels"
        )

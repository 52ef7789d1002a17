"""Derived timing totals for a parsed trace.

All functions here are pure: they read the tree and never modify it.
"""

from typing import NamedTuple

from .models import QueryTrace, RootTrace, Trace


class TimingSummary(NamedTuple):
    """Where the root's wall-clock time went.

    Attributes
    ----------
    query_ms : int
        Time spent in measured sub-queries, summed over the whole tree.
    other_ms : int
        Remaining overhead (scheduling, serialization, ...), never negative.
    total_ms : int
        The root's own elapsed time.
    inconsistent : bool
        True when the sub-queries add up to more than the root's elapsed
        time. ``other_ms`` is clamped to zero in that case.
    """

    query_ms: int
    other_ms: int
    total_ms: int
    inconsistent: bool


def query_time(trace: Trace) -> int:
    """Milliseconds attributable to sub-queries in ``trace``.

    A sub-query counts its own elapsed time plus that of its descendants.
    The root only counts its descendants: its elapsed time is the wall
    time of the whole request, not the cost of a query.
    """
    children_ms = sum(query_time(child) for _, child in trace.children)
    if isinstance(trace, QueryTrace):
        return trace.elapsed_ms + children_ms
    return children_ms


def other_time(root: RootTrace) -> int:
    """Milliseconds of the root's elapsed time not spent in sub-queries.

    Clamped at zero when the trace is inconsistent.
    """
    return _remaining(root.elapsed_ms, query_time(root))


def summarize(root: RootTrace) -> TimingSummary:
    """Query, other and total time of ``root`` in one pass over the tree."""
    qt = query_time(root)
    return TimingSummary(
        query_ms=qt,
        other_ms=_remaining(root.elapsed_ms, qt),
        total_ms=root.elapsed_ms,
        inconsistent=qt > root.elapsed_ms,
    )


def _remaining(total_ms: int, spent_ms: int) -> int:
    return max(total_ms - spent_ms, 0)

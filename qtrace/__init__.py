"""qtrace - obtain and summarize graph-node query traces"""

__version__ = "0.1.0"

from .aggregate import TimingSummary, other_time, query_time, summarize
from .errors import (
    QtraceError,
    TraceError,
    NotAnObject,
    MissingField,
    WrongType,
    TraceTooDeep,
)
from .models import RootTrace, QueryTrace, Trace, query_id
from .parser import parse_trace, parse_child
from .render import render_trace, render_header, render_report

__all__ = [
    "TimingSummary",
    "other_time",
    "query_time",
    "summarize",
    "QtraceError",
    "TraceError",
    "NotAnObject",
    "MissingField",
    "WrongType",
    "TraceTooDeep",
    "RootTrace",
    "QueryTrace",
    "Trace",
    "query_id",
    "parse_trace",
    "parse_child",
    "render_trace",
    "render_header",
    "render_report",
]

"""Plain-text timing report for a trace.

Layout of one line per node, indented two spaces per level::

    root                                                1234ms
      users                                                800ms [     10 entities]
        posts                                              300ms [     50 entities]

followed by a query/other/total summary for the root. The renderer returns
lines and leaves printing to the caller.
"""

from typing import List

from .aggregate import summarize
from .models import QueryTrace, RootTrace, Trace, query_id

# Width of the name column at indent 0, name + padding
ROOT_NAME_WIDTH = 48
QUERY_NAME_WIDTH = 50

INDENT_STEP = 2
LABEL_WIDTH = 12


def _ms(value: int) -> str:
    return f"{value:7}ms"


def _name_column(name: str, indent: int, width: int) -> str:
    # Deeper than the column is wide: no padding rather than a crash
    return " " * indent + name.ljust(max(width - indent, 0))


def _summary_line(label: str, value: int) -> str:
    return f"{label + ':':<{LABEL_WIDTH}}{_ms(value)}"


def render_trace(name: str, trace: Trace, indent: int = 0) -> List[str]:
    """Render ``trace`` and everything below it.

    Parameters
    ----------
    name : str
        Label for the node; the key it was found under, or "root".
    trace : Trace
        Node to render.
    indent : int
        Number of spaces before the name.

    Returns
    -------
    List[str]
        Report lines without trailing newlines.
    """
    lines: List[str] = []

    if isinstance(trace, RootTrace):
        lines.append(
            f"{_name_column(name, indent, ROOT_NAME_WIDTH)} {_ms(trace.elapsed_ms)}"
        )
        for child_name, child in trace.children:
            lines.extend(render_trace(child_name, child, indent + INDENT_STEP))

        summary = summarize(trace)
        lines.append("")
        lines.append(_summary_line("query", summary.query_ms))
        lines.append(_summary_line("other", summary.other_ms))
        lines.append(_summary_line("total", summary.total_ms))

    elif isinstance(trace, QueryTrace):
        lines.append(
            f"{_name_column(name, indent, QUERY_NAME_WIDTH)} {_ms(trace.elapsed_ms)}"
            f" [{trace.entity_count:7} entities]"
        )
        for child_name, child in trace.children:
            lines.extend(render_trace(child_name, child, indent + INDENT_STEP))

    else:
        raise TypeError(f"Not a trace node: {type(trace).__name__}")

    return lines


def render_header(trace: Trace, deployment: str) -> List[str]:
    """Lines identifying which query and deployment the report is for."""
    return [
        f"Trace for qid {query_id(trace)}",
        f" deployment {deployment}",
        "",
    ]


def render_report(trace: RootTrace, deployment: str) -> List[str]:
    """Header plus the full timing tree starting at the root."""
    return render_header(trace, deployment) + render_trace("root", trace)

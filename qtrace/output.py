"""Saving raw artifacts of a trace run to files.

None of these transform what they save; they exist so that a slow query
can be re-run or inspected later without going through Loki again.
"""

import json
import logging
from typing import Any, Optional

from .config import Config
from .errors import OutputError
from .loki import LogEntry

logger = logging.getLogger(__name__)


def _write(path: str, text: str) -> None:
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(text + "\n")
    except OSError as e:
        raise OutputError(f"Failed to write {path}: {e}") from e
    logger.info(f"Wrote {path}")


def _pretty(value: Any) -> str:
    return json.dumps(value, indent=2)


def save_query(config: Config, log_entry: LogEntry) -> None:
    """Write the query text and its variables where the config asks for them."""
    if config.output is None:
        return
    if config.output.query:
        _write(config.output.query, log_entry.query)
    if config.output.variables:
        _write(config.output.variables, _pretty(log_entry.variables))


def save_output(config: Config, response: Any, path: Optional[str] = None) -> None:
    """Write the ``data`` member of the graph-node response.

    ``path`` overrides the config's ``output.data``.
    """
    path = path or (config.output.data if config.output else None)
    if path:
        data = response.get("data") if isinstance(response, dict) else None
        _write(path, _pretty(data))


def save_trace(config: Config, trace: Any, path: Optional[str] = None) -> None:
    """Write the raw trace JSON, before any parsing.

    ``path`` overrides the config's ``output.trace``.
    """
    path = path or (config.output.trace if config.output else None)
    if path:
        _write(path, _pretty(trace))

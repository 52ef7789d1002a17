"""Turn the raw trace JSON returned by graph-node into a Trace tree.

The trace format is self-describing: there is no explicit "children" key.
Every entry of a node whose value is itself a JSON object is a named
sub-query; every other entry is metadata of the node. That rule lives in
``_split_children`` and nowhere else.

This is the only place where the untrusted trace is validated. Parsing is
depth first and fail fast: the first problem raises a TraceError and no
partial tree is returned.
"""

import json
import logging
from typing import Any, Dict, List, Mapping, Tuple

from .errors import MissingField, NotAnObject, TraceTooDeep, WrongType
from .models import QueryTrace, RootTrace, Trace

logger = logging.getLogger(__name__)

# Real traces nest as deep as the GraphQL query does, which is far less
# than this. The limit keeps a hostile trace from exhausting the stack.
MAX_DEPTH = 64

DURATION_FIELDS = ("elapsed_ms", "conn_wait_ms", "permit_wait_ms")


def parse_trace(value: Any, max_depth: int = MAX_DEPTH) -> RootTrace:
    """Parse the top-level trace object.

    Parameters
    ----------
    value : Any
        Decoded JSON value of the ``trace`` member of a graph-node response.
    max_depth : int
        Maximum nesting of sub-queries below the root.

    Returns
    -------
    RootTrace
        The validated trace tree.

    Raises
    ------
    NotAnObject
        If the root or any sub-query is not a JSON object.
    MissingField
        If a required key is absent.
    WrongType
        If a required key holds a value of the wrong JSON type.
    TraceTooDeep
        If sub-queries nest deeper than ``max_depth``.
    """
    if not isinstance(value, dict):
        raise NotAnObject("root", value)

    metadata, raw_children = _split_children(value)
    children = tuple(
        parse_child(name, child, depth=1, max_depth=max_depth)
        for name, child in raw_children
    )

    root = RootTrace(
        query=_string(metadata, "query", "root"),
        variables=_json_string(metadata, "variables", "root"),
        query_id=_string(metadata, "query_id", "root"),
        block=_count(metadata, "block", "root"),
        children=children,
        **_durations(metadata, "root"),
    )
    logger.debug(f"Parsed trace for query {root.query_id} with {len(children)} sub-queries")
    return root


def parse_child(
    name: str,
    value: Any,
    depth: int = 1,
    max_depth: int = MAX_DEPTH,
) -> Tuple[str, QueryTrace]:
    """Parse one sub-query entry, recursing into its own sub-queries.

    Returns the ``(name, node)`` pair that goes into the parent's children.
    """
    if depth > max_depth:
        raise TraceTooDeep(max_depth, name)
    if not isinstance(value, dict):
        raise NotAnObject(name, value)

    metadata, raw_children = _split_children(value)
    children = tuple(
        parse_child(child_name, child, depth=depth + 1, max_depth=max_depth)
        for child_name, child in raw_children
    )

    query = metadata.get("query")
    if not isinstance(query, str):
        # Older graph-node versions do not record the SQL per sub-query;
        # keep the node's own JSON so there is still something to look at.
        query = json.dumps(metadata, separators=(",", ":"), default=str)

    node = QueryTrace(
        query=query,
        entity_count=_count(metadata, "entity_count", name),
        children=children,
        **_durations(metadata, name),
    )
    return name, node


# =============================================================================
# Helpers
# =============================================================================

def _split_children(node: Mapping[str, Any]) -> Tuple[Dict[str, Any], List[Tuple[str, Any]]]:
    """Partition a node's entries into metadata and object-valued children."""
    metadata: Dict[str, Any] = {}
    children: List[Tuple[str, Any]] = []
    for key, value in node.items():
        if isinstance(value, dict):
            children.append((key, value))
        else:
            metadata[key] = value
    return metadata, children


def _require(node: Mapping[str, Any], field: str, context: str) -> Any:
    if field not in node:
        raise MissingField(field, context)
    return node[field]


def _count(node: Mapping[str, Any], field: str, context: str) -> int:
    """Read a non-negative JSON integer.

    bool is a subclass of int in Python but ``true`` is not a number in
    JSON, so it is rejected along with floats and negative values.
    """
    value = _require(node, field, context)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise WrongType(field, "a non-negative integer", context)
    return value


def _durations(node: Mapping[str, Any], context: str) -> Dict[str, int]:
    return {field: _count(node, field, context) for field in DURATION_FIELDS}


def _string(node: Mapping[str, Any], field: str, context: str) -> str:
    value = _require(node, field, context)
    if not isinstance(value, str):
        raise WrongType(field, "a string", context)
    return value


def _json_string(node: Mapping[str, Any], field: str, context: str) -> Any:
    """Read a string field that itself holds JSON and decode it."""
    raw = _string(node, field, context)
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise WrongType(field, "a JSON-encoded string", context) from e

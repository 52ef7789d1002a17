"""Data models for query traces.

A trace is a tree with exactly two kinds of nodes: the root invocation and
the nested sub-queries it ran. Both are frozen pydantic models; code that
walks the tree dispatches on the node type with isinstance() instead of
calling methods on the nodes.
"""

from typing import Any, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

# Reported for nodes that carry no query id of their own
NO_QUERY_ID = "none"


class RootTrace(BaseModel):
    """Top-level invocation of a GraphQL query."""

    model_config = ConfigDict(frozen=True)

    query: str
    variables: Any = None  # decoded JSON, not the raw string
    query_id: str
    block: int = Field(..., ge=0)
    elapsed_ms: int = Field(..., ge=0)
    conn_wait_ms: int = Field(..., ge=0)
    permit_wait_ms: int = Field(..., ge=0)
    children: Tuple[Tuple[str, "QueryTrace"], ...] = ()


class QueryTrace(BaseModel):
    """A nested sub-query run while resolving its parent."""

    model_config = ConfigDict(frozen=True)

    query: str
    elapsed_ms: int = Field(..., ge=0)
    conn_wait_ms: int = Field(..., ge=0)
    permit_wait_ms: int = Field(..., ge=0)
    entity_count: int = Field(..., ge=0)
    children: Tuple[Tuple[str, "QueryTrace"], ...] = ()


Trace = Union[RootTrace, QueryTrace]

RootTrace.model_rebuild()
QueryTrace.model_rebuild()


def query_id(trace: Trace) -> str:
    """Return the query id of the request that produced ``trace``.

    Only the root knows it; sub-queries report ``NO_QUERY_ID``.
    """
    if isinstance(trace, RootTrace):
        return trace.query_id
    return NO_QUERY_ID

"""Loki client for finding the log line of a slow query.

graph-node logs one ``Query timing (GraphQL)`` line per query. We pick one
such line for a deployment, optionally narrowed down by query id or minimum
duration, and recover the GraphQL query and its variables from it.
"""

import json
import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel

from .config import LokiConfig
from .errors import LokiError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

QUERY_PATH = "/loki/api/v1/query"

# Has to be adjusted if graph-node changes the format of its query log
LOG_PATTERN = (
    'pattern "<_>INFO Query timing (GraphQL), block: <block>, '
    "query_time_ms: <query_time>, variables: <variables>, "
    'query: <query> , query_id: <query_id>,"'
)


class LogEntry(BaseModel):
    """GraphQL query and variables recovered from a query log line."""

    query: str
    variables: Any = None


def build_logql(
    cluster: str,
    deployment: str,
    qid: Optional[str] = None,
    min_time: Optional[int] = None,
) -> str:
    """Build the LogQL query selecting query log lines for ``deployment``.

    Parameters
    ----------
    cluster : str
        Cluster label of the query nodes.
    deployment : str
        IPFS hash of the deployment.
    qid : Optional[str]
        Only match the query with this id.
    min_time : Optional[int]
        Only match queries that took longer than this many milliseconds.
    """
    query = (
        f'{{cluster="{cluster}",app=~"query-node.*",'
        f'deployment="{deployment}",container="query-node"}} | {LOG_PATTERN}'
    )
    if qid is not None:
        query += f' | query_id="{qid}"'
    if min_time is not None:
        query += f" | query_time > {min_time}"
    return query


class LokiClient:
    """Synchronous client for the Loki query API."""

    def __init__(self, config: LokiConfig, timeout: float = DEFAULT_TIMEOUT):
        self.config = config
        self.timeout = timeout

    def query_url(self) -> str:
        """Loki URL with the query endpoint as path; any configured path is replaced."""
        try:
            url = httpx.URL(self.config.url).copy_with(path=QUERY_PATH)
        except httpx.InvalidURL as e:
            raise LokiError(f"Invalid Loki URL {self.config.url}: {e}") from e
        return str(url)

    def query(
        self,
        deployment: str,
        qid: Optional[str] = None,
        min_time: Optional[int] = None,
    ) -> LogEntry:
        """Fetch one query log entry for ``deployment``.

        Returns
        -------
        LogEntry
            The GraphQL query and decoded variables of the first match.

        Raises
        ------
        LokiError
            If the request fails or the response holds no usable entry.
        """
        logql = build_logql(self.config.cluster, deployment, qid, min_time)
        url = self.query_url()
        logger.debug(f"Loki query: {logql}")

        try:
            with httpx.Client(timeout=self.timeout) as client:
                resp = client.get(
                    url,
                    params={"query": logql, "limit": "1"},
                    auth=(self.config.username, self.config.password),
                )
                resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise LokiError(
                f"Loki query failed with status {e.response.status_code}: {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise LokiError(f"Failed to send Loki query: {e}") from e

        try:
            body = resp.json()
        except (ValueError, RecursionError) as e:
            raise LokiError(f"Failed to parse Loki response: {e}") from e

        return parse_log_entry(body)


def parse_log_entry(body: Any) -> LogEntry:
    """Extract the log entry from a decoded Loki query response."""
    try:
        stream = body["data"]["result"][0]["stream"]
    except (KeyError, IndexError, TypeError):
        stream = None
    if not isinstance(stream, dict):
        raise LokiError("Invalid Loki response: could not find stream")

    query = stream.get("query")
    if not isinstance(query, str):
        raise LokiError("Invalid Loki response: could not find query")

    variables = stream.get("variables")
    if not isinstance(variables, str):
        raise LokiError("Invalid Loki response: could not find variables")
    try:
        variables = json.loads(variables)
    except json.JSONDecodeError as e:
        raise LokiError(f"Invalid Loki response: variables are not JSON: {e}") from e

    entry = LogEntry(query=query, variables=variables)
    logger.info(f"Found query log entry ({len(query)} chars of query)")
    return entry

"""Client for requesting a query trace from graph-node.

graph-node attaches a trace of the query's execution to the response when
the request carries the operator's trace token in ``X-GraphTraceQuery``.
"""

import logging
from typing import Any, Dict

import httpx

from .config import GraphNodeConfig
from .errors import GraphNodeError
from .loki import DEFAULT_TIMEOUT, LogEntry

logger = logging.getLogger(__name__)

TRACE_HEADER = "X-GraphTraceQuery"


class GraphNodeClient:
    """Synchronous client for a graph-node query endpoint."""

    def __init__(self, config: GraphNodeConfig, timeout: float = DEFAULT_TIMEOUT):
        self.config = config
        self.timeout = timeout

    def _get_headers(self) -> Dict[str, str]:
        return {
            TRACE_HEADER: self.config.trace_token,
            "Content-Type": "application/json",
        }

    def query_url(self, deployment: str) -> str:
        try:
            url = httpx.URL(self.config.url).copy_with(path=f"/subgraphs/id/{deployment}")
        except httpx.InvalidURL as e:
            raise GraphNodeError(f"Invalid graph-node URL {self.config.url}: {e}") from e
        return str(url)

    def query(self, deployment: str, log_entry: LogEntry) -> Dict[str, Any]:
        """Re-run the logged query against ``deployment`` with tracing on.

        Parameters
        ----------
        deployment : str
            IPFS hash of the deployment to query.
        log_entry : LogEntry
            Query and variables to send.

        Returns
        -------
        Dict[str, Any]
            Full decoded response; the trace is under ``trace`` and the
            query result under ``data``.

        Raises
        ------
        GraphNodeError
            If the request fails or the response is not a JSON object.
        """
        url = self.query_url(deployment)
        try:
            with httpx.Client(timeout=self.timeout) as client:
                resp = client.post(
                    url,
                    json={"query": log_entry.query, "variables": log_entry.variables},
                    headers=self._get_headers(),
                )
                resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise GraphNodeError(
                f"graph-node query failed with status {e.response.status_code}: {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise GraphNodeError(f"Failed to send graph-node query: {e}") from e

        try:
            body = resp.json()
        except (ValueError, RecursionError) as e:
            raise GraphNodeError(f"Failed to parse graph-node response: {e}") from e
        if not isinstance(body, dict):
            raise GraphNodeError("Invalid graph-node response: not a JSON object")

        if "trace" not in body:
            # Usually a wrong or missing trace token
            logger.warning("graph-node response has no trace")
        return body

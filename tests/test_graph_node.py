"""Tests for the graph-node trace request client, with HTTP mocked by respx."""

import json

import httpx
import pytest

from qtrace.errors import GraphNodeError
from qtrace.graph_node import TRACE_HEADER, GraphNodeClient
from qtrace.loki import LogEntry

DEPLOYMENT = "QmDeployment"
GRAPH_URL = f"https://graph.test/subgraphs/id/{DEPLOYMENT}"


@pytest.fixture
def log_entry():
    return LogEntry(query="query($first: Int) { tokens(first: $first) { id } }", variables={"first": 5})


class TestGraphNodeClient:
    """Tests for GraphNodeClient.query"""

    def test_query_url(self, sample_config):
        client = GraphNodeClient(sample_config.graph_node)
        assert client.query_url(DEPLOYMENT) == GRAPH_URL

    def test_sends_trace_token_and_body(self, respx_mock, sample_config, log_entry):
        """Should post query and variables with the trace token header."""
        route = respx_mock.post(GRAPH_URL).mock(
            return_value=httpx.Response(200, json={"data": {}, "trace": {}})
        )

        GraphNodeClient(sample_config.graph_node).query(DEPLOYMENT, log_entry)

        request = route.calls[0].request
        assert request.headers[TRACE_HEADER] == "trace-token-123"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {
            "query": log_entry.query,
            "variables": {"first": 5},
        }

    def test_returns_full_response(self, respx_mock, sample_config, log_entry, sample_raw_trace):
        body = {"data": {"tokens": [{"id": "0x1"}]}, "trace": sample_raw_trace}
        respx_mock.post(GRAPH_URL).mock(return_value=httpx.Response(200, json=body))

        result = GraphNodeClient(sample_config.graph_node).query(DEPLOYMENT, log_entry)

        assert result == body

    def test_response_without_trace_is_returned(self, respx_mock, sample_config, log_entry):
        """A missing trace is left for the parser to reject."""
        respx_mock.post(GRAPH_URL).mock(
            return_value=httpx.Response(200, json={"data": {}})
        )

        result = GraphNodeClient(sample_config.graph_node).query(DEPLOYMENT, log_entry)

        assert "trace" not in result

    def test_raises_on_http_error(self, respx_mock, sample_config, log_entry):
        respx_mock.post(GRAPH_URL).mock(
            return_value=httpx.Response(500, text="boom")
        )

        with pytest.raises(GraphNodeError, match="status 500"):
            GraphNodeClient(sample_config.graph_node).query(DEPLOYMENT, log_entry)

    def test_raises_on_timeout(self, respx_mock, sample_config, log_entry):
        respx_mock.post(GRAPH_URL).mock(
            side_effect=httpx.TimeoutException("timed out")
        )

        with pytest.raises(GraphNodeError, match="Failed to send graph-node query"):
            GraphNodeClient(sample_config.graph_node).query(DEPLOYMENT, log_entry)

    @pytest.mark.parametrize("text", ["not json", "[1, 2]"])
    def test_raises_on_bad_body(self, respx_mock, sample_config, log_entry, text):
        respx_mock.post(GRAPH_URL).mock(
            return_value=httpx.Response(200, text=text)
        )

        with pytest.raises(GraphNodeError):
            GraphNodeClient(sample_config.graph_node).query(DEPLOYMENT, log_entry)

"""Shared pytest fixtures for qtrace tests."""

import json

import pytest
import respx

from qtrace.config import Config


@pytest.fixture
def respx_mock():
    """Fixture that provides a respx mock router.

    Configuration:
        - assert_all_mocked=True: Any request without a matching route fails,
          so no test ever reaches a real Loki or graph-node.
        - assert_all_called=True: Ensures every mock defined is actually used.
          Catches typos in mock URLs and dead mocks.
    """
    with respx.mock(assert_all_mocked=True, assert_all_called=True) as mock:
        yield mock


@pytest.fixture
def sample_query_node():
    """Minimal sub-query without children"""
    return {
        "query": "select * from sgd1.token",
        "elapsed_ms": 100,
        "conn_wait_ms": 0,
        "permit_wait_ms": 0,
        "entity_count": 5,
    }


@pytest.fixture
def sample_raw_trace():
    """Root with two sub-queries, the first one with a nested sub-query."""
    return {
        "query": "query { tokens { id owner { id } } pools { id } }",
        "variables": json.dumps({"first": 10}),
        "query_id": "f3a1c0de-1234",
        "block": 17000000,
        "elapsed_ms": 200,
        "conn_wait_ms": 3,
        "permit_wait_ms": 1,
        "tokens": {
            "query": "select * from sgd1.token",
            "elapsed_ms": 50,
            "conn_wait_ms": 1,
            "permit_wait_ms": 0,
            "entity_count": 10,
            "owner": {
                "query": "select * from sgd1.account",
                "elapsed_ms": 20,
                "conn_wait_ms": 0,
                "permit_wait_ms": 0,
                "entity_count": 10,
            },
        },
        "pools": {
            "query": "select * from sgd1.pool",
            "elapsed_ms": 70,
            "conn_wait_ms": 0,
            "permit_wait_ms": 0,
            "entity_count": 3,
        },
    }


@pytest.fixture
def sample_config():
    return Config.model_validate({
        "loki": {
            "cluster": "test-cluster",
            "url": "https://loki.test",
            "username": "reader",
            "password": "secret",
        },
        "graph-node": {
            "url": "https://graph.test",
            "trace-token": "trace-token-123",
        },
    })


@pytest.fixture
def config_file(tmp_path):
    """Write a config file and return its path."""
    path = tmp_path / "config.toml"
    path.write_text(
        "[loki]\n"
        'cluster = "test-cluster"\n'
        'url = "https://loki.test"\n'
        'username = "reader"\n'
        'password = "secret"\n'
        "\n"
        "[graph-node]\n"
        'url = "https://graph.test"\n'
        'trace-token = "trace-token-123"\n'
    )
    return path

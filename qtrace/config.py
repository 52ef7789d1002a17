"""Configuration file models.

The config file is TOML with a ``[loki]`` and a ``[graph-node]`` section and
an optional ``[output]`` section naming files to save raw artifacts to::

    [loki]
    cluster = "prod"
    url = "https://loki.example.com"
    username = "reader"
    password = "secret"

    [graph-node]
    url = "https://api.example.com"
    trace-token = "token"

    [output]
    trace = "trace.json"
"""

import logging
import os
import tomllib
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "config.toml"


def default_config_path() -> str:
    """Config path from QTRACE_CONFIG, falling back to ./config.toml"""
    return os.getenv("QTRACE_CONFIG", DEFAULT_CONFIG_FILE)


class LokiConfig(BaseModel):
    """Where and how to query Loki for the query log."""

    cluster: str
    url: str
    username: str
    password: str


class GraphNodeConfig(BaseModel):
    """Graph-node endpoint that serves traced queries."""

    model_config = ConfigDict(populate_by_name=True)

    url: str
    trace_token: str = Field(..., alias="trace-token")


class OutputConfig(BaseModel):
    """Optional files to save raw artifacts to."""

    trace: Optional[str] = None
    data: Optional[str] = None
    query: Optional[str] = None
    variables: Optional[str] = None


class Config(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    loki: LokiConfig
    graph_node: GraphNodeConfig = Field(..., alias="graph-node")
    output: Optional[OutputConfig] = None

    @classmethod
    def load(cls, path: str) -> "Config":
        """Read and validate the TOML config file at ``path``.

        Raises
        ------
        ConfigError
            If the file cannot be read, is not valid TOML, or does not
            match the expected sections.
        """
        try:
            with open(path, "rb") as f:
                raw = tomllib.load(f)
        except OSError as e:
            raise ConfigError(f"Failed to read config file {path}: {e}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Failed to parse config file {path}: {e}") from e

        try:
            config = cls.model_validate(raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid config file {path}: {e}") from e

        logger.debug(f"Loaded config from {path}")
        return config

"""Client configuration.

The three settings can be passed directly or read from the environment:

    GENESISDB_API_URL      e.g. http://localhost:8080
    GENESISDB_API_VERSION  e.g. v1
    GENESISDB_AUTH_TOKEN   bearer token
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from .errors import EnvironmentConfigError

ENV_API_URL = "GENESISDB_API_URL"
ENV_API_VERSION = "GENESISDB_API_VERSION"
ENV_AUTH_TOKEN = "GENESISDB_AUTH_TOKEN"


@dataclass(frozen=True)
class ClientConfig:
    """Connection settings for a Genesis DB server."""

    api_url: str
    api_version: str
    auth_token: str = field(repr=False)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """Build a configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Raises:
            EnvironmentConfigError: If any of the variables is not set
        """
        env = os.environ if environ is None else environ

        values: list[str] = []
        for name in (ENV_API_URL, ENV_API_VERSION, ENV_AUTH_TOKEN):
            value = env.get(name)
            if value is None:
                raise EnvironmentConfigError(f"{name} not set")
            values.append(value)

        api_url, api_version, auth_token = values
        return cls(api_url=api_url, api_version=api_version, auth_token=auth_token)

"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from genesisdb import Client, ClientConfig

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(
        api_url="http://genesisdb.test",
        api_version="v1",
        auth_token="test-token",
    )


@pytest.fixture
def make_client(config: ClientConfig) -> Callable[[Handler], Client]:
    """Create a Client whose requests are answered by a handler function."""

    def factory(handler: Handler) -> Client:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return Client(config, http_client=http_client)

    return factory

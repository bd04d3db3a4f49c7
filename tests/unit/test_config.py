"""Tests for client configuration and error types."""

from __future__ import annotations

import dataclasses

import pytest

from genesisdb import (
    ApiError,
    ClientConfig,
    DecodeError,
    EnvironmentConfigError,
    GenesisDBError,
    MissingConfigError,
    RequestError,
)

FULL_ENV = {
    "GENESISDB_API_URL": "http://localhost:8080",
    "GENESISDB_API_VERSION": "v1",
    "GENESISDB_AUTH_TOKEN": "secret-token",
}


class TestClientConfig:
    """Test configuration loading."""

    def test_from_env_mapping(self) -> None:
        config = ClientConfig.from_env(FULL_ENV)

        assert config.api_url == "http://localhost:8080"
        assert config.api_version == "v1"
        assert config.auth_token == "secret-token"

    def test_from_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name, value in FULL_ENV.items():
            monkeypatch.setenv(name, value)

        assert ClientConfig.from_env() == ClientConfig.from_env(FULL_ENV)

    @pytest.mark.parametrize("missing", sorted(FULL_ENV))
    def test_missing_variable(self, missing: str) -> None:
        env = {k: v for k, v in FULL_ENV.items() if k != missing}

        with pytest.raises(EnvironmentConfigError) as exc_info:
            ClientConfig.from_env(env)

        assert exc_info.value.message == f"{missing} not set"

    def test_empty_variable_is_accepted_here(self) -> None:
        """Empty values are rejected by Client, not by the loader."""
        config = ClientConfig.from_env({**FULL_ENV, "GENESISDB_AUTH_TOKEN": ""})

        assert config.auth_token == ""

    def test_token_hidden_from_repr(self) -> None:
        config = ClientConfig.from_env(FULL_ENV)

        assert "secret-token" not in repr(config)

    def test_immutable(self) -> None:
        config = ClientConfig.from_env(FULL_ENV)

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.api_url = "http://elsewhere"  # type: ignore[misc]


class TestErrors:
    """Test error hierarchy and messages."""

    def test_all_errors_share_base(self) -> None:
        errors = [
            MissingConfigError("api_url"),
            EnvironmentConfigError("X not set"),
            RequestError(ConnectionError("refused")),
            ApiError(500, "Internal Server Error"),
            DecodeError("Expecting value", line="{"),
        ]

        assert all(isinstance(e, GenesisDBError) for e in errors)

    def test_messages(self) -> None:
        assert str(MissingConfigError("api_url")) == "Missing required configuration: api_url"
        assert str(EnvironmentConfigError("X not set")) == "Environment variable error: X not set"
        assert str(ApiError(404, "Not Found")) == "API Error: 404 Not Found"
        assert str(DecodeError("bad")) == "JSON error: bad"
        assert str(RequestError(ConnectionError("refused"))) == "HTTP request error: refused"

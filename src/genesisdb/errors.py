"""Error types for the Genesis DB client.

Every failure surfaces as a subclass of GenesisDBError:
- MissingConfigError: a required configuration value is empty
- EnvironmentConfigError: a required environment variable is absent
- RequestError: the HTTP layer failed (connect, timeout, TLS, read)
- ApiError: the server answered with a non-2xx status
- DecodeError: a response line could not be parsed
"""

from __future__ import annotations


class GenesisDBError(Exception):
    """Base class for all Genesis DB client errors."""

    pass


class MissingConfigError(GenesisDBError):
    """A required configuration value is missing or empty."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"Missing required configuration: {field_name}")


class EnvironmentConfigError(GenesisDBError):
    """A required environment variable is not set."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Environment variable error: {message}")


class RequestError(GenesisDBError):
    """The underlying HTTP request failed before a response was received."""

    def __init__(self, cause: Exception) -> None:
        self.cause = cause
        super().__init__(f"HTTP request error: {cause}")


class ApiError(GenesisDBError):
    """The server returned a non-success status code."""

    def __init__(self, status: int, status_text: str) -> None:
        self.status = status
        self.status_text = status_text
        super().__init__(f"API Error: {status} {status_text}")


class DecodeError(GenesisDBError):
    """A JSON line from the server could not be decoded."""

    def __init__(self, message: str, line: str | None = None) -> None:
        self.message = message
        self.line = line
        super().__init__(f"JSON error: {message}")

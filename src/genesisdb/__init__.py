"""Genesis DB Python SDK.

Async client for Genesis DB, an event-sourcing database exposed over HTTP.
"""

from .client import Client, EventObservation
from .config import ClientConfig
from .decoder import EventStreamDecoder, aiter_events
from .errors import (
    ApiError,
    DecodeError,
    EnvironmentConfigError,
    GenesisDBError,
    MissingConfigError,
    RequestError,
)
from .types import (
    CloudEvent,
    CommitEvent,
    CommitEventOptions,
    Precondition,
    StreamOptions,
)

__version__ = "1.1.0"

__all__ = [
    # Client
    "Client",
    "ClientConfig",
    "EventObservation",
    # Types
    "CloudEvent",
    "CommitEvent",
    "CommitEventOptions",
    "Precondition",
    "StreamOptions",
    # Decoding
    "EventStreamDecoder",
    "aiter_events",
    # Errors
    "GenesisDBError",
    "ApiError",
    "DecodeError",
    "EnvironmentConfigError",
    "MissingConfigError",
    "RequestError",
]

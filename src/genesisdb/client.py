"""Genesis DB client.

Every operation is a single HTTP round trip against
``{api_url}/api/{api_version}/<path>`` with a bearer token, except
observe_events, which keeps the response open and decodes events as they
arrive.

Usage:
    async with Client.from_env() as client:
        await client.commit_events([
            CommitEvent(
                source="io.genesisdb.app",
                subject="/user/123",
                type="io.genesisdb.app.user-created",
                data={"name": "John"},
            )
        ])

        for event in await client.stream_events("/user/123"):
            print(event.id, event.type)

        observation = await client.observe_events("/user/123")
        async for item in observation:
            if isinstance(item, GenesisDBError):
                ...
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence
from typing import Any

import httpx
from pydantic import BaseModel

from .config import ClientConfig
from .decoder import aiter_events, parse_events, parse_ndjson
from .errors import ApiError, GenesisDBError, MissingConfigError, RequestError
from .types import (
    CloudEvent,
    CommitEvent,
    CommitRequest,
    EraseRequest,
    Precondition,
    QueryRequest,
    StreamOptions,
    StreamRequest,
    to_wire,
)

logger = logging.getLogger(__name__)

USER_AGENT = "genesisdb-sdk"
CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_TEXT = "text/plain"
ACCEPT_NDJSON = "application/x-ndjson"


def _api_error(response: httpx.Response) -> ApiError:
    status = response.status_code
    return ApiError(status, httpx.codes.get_reason_phrase(status) or "Unknown")


class EventObservation:
    """Live sequence of events from an open observe response.

    Iterating yields CloudEvent items, or GenesisDBError items for lines
    that failed to decode (iteration continues) and for a transport failure
    (iteration ends). The response is closed once iteration finishes.
    Iterate only once.
    """

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    @property
    def response(self) -> httpx.Response:
        return self._response

    async def __aiter__(self) -> AsyncIterator[CloudEvent | GenesisDBError]:
        try:
            async for item in aiter_events(self._response.aiter_bytes()):
                yield item
        finally:
            await self._response.aclose()

    async def aclose(self) -> None:
        """Stop observing and close the response."""
        await self._response.aclose()

    async def __aenter__(self) -> EventObservation:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()


class Client:
    """Async client for the Genesis DB HTTP API."""

    def __init__(
        self,
        config: ClientConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Create a client.

        Args:
            config: Connection settings; all three values must be non-empty
            http_client: Optional preconfigured httpx client. When omitted the
                client creates and owns one.

        Raises:
            MissingConfigError: If a configuration value is empty
        """
        if not config.api_url:
            raise MissingConfigError("api_url")
        if not config.api_version:
            raise MissingConfigError("api_version")
        if not config.auth_token:
            raise MissingConfigError("auth_token")

        self.config = config
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=None)

    @classmethod
    def from_env(cls, *, http_client: httpx.AsyncClient | None = None) -> Client:
        """Create a client from GENESISDB_* environment variables."""
        return cls(ClientConfig.from_env(), http_client=http_client)

    def build_url(self, path: str) -> str:
        return f"{self.config.api_url}/api/{self.config.api_version}/{path}"

    def auth_header(self) -> str:
        return f"Bearer {self.config.auth_token}"

    def default_headers(self) -> dict[str, str]:
        return {
            "Authorization": self.auth_header(),
            "User-Agent": USER_AGENT,
        }

    async def _send(
        self,
        method: str,
        path: str,
        *,
        body: BaseModel | None = None,
        content_type: str = CONTENT_TYPE_JSON,
        accept: str | None = None,
        stream: bool = False,
    ) -> httpx.Response:
        """Send a request and check its status.

        Raises:
            RequestError: If the request could not be completed
            ApiError: If the server answered with a non-2xx status
        """
        headers = self.default_headers()
        headers["Content-Type"] = content_type
        if accept:
            headers["Accept"] = accept

        url = self.build_url(path)
        logger.debug(f"{method} {url}")

        try:
            request = self._http_client.build_request(
                method,
                url,
                headers=headers,
                json=to_wire(body) if body is not None else None,
            )
            response = await self._http_client.send(request, stream=stream)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise RequestError(e) from e

        if not response.is_success:
            if stream:
                await response.aclose()
            raise _api_error(response)
        return response

    # =========================================================================
    # Status
    # =========================================================================

    async def ping(self) -> str:
        """Ping the server. A healthy server answers "pong"."""
        response = await self._send("GET", "status/ping", content_type=CONTENT_TYPE_TEXT)
        return response.text

    async def audit(self) -> str:
        """Fetch audit information from the server."""
        response = await self._send("GET", "status/audit", content_type=CONTENT_TYPE_TEXT)
        return response.text

    # =========================================================================
    # Events
    # =========================================================================

    async def stream_events(
        self,
        subject: str,
        options: StreamOptions | None = None,
    ) -> list[CloudEvent]:
        """Fetch all events for a subject.

        Args:
            subject: Subject path, e.g. "/user/123"
            options: Optional lower bound / latest-by-type filters

        Raises:
            DecodeError: If any returned line is not a valid event
        """
        response = await self._send(
            "POST",
            "stream",
            body=StreamRequest(subject=subject, options=options),
            accept=ACCEPT_NDJSON,
        )
        return parse_events(response.text)

    async def commit_events(
        self,
        events: Sequence[CommitEvent],
        preconditions: Sequence[Precondition] | None = None,
    ) -> None:
        """Commit events, optionally guarded by preconditions."""
        body = CommitRequest(
            events=list(events),
            preconditions=list(preconditions) if preconditions is not None else None,
        )
        await self._send("POST", "commit", body=body)

    async def erase_data(self, subject: str) -> None:
        """Erase the stored data of a subject (GDPR)."""
        await self._send("POST", "erase", body=EraseRequest(subject=subject))

    async def q(self, query: str) -> list[Any]:
        """Run a query and return its results as JSON values.

        Raises:
            DecodeError: If any returned line is not valid JSON
        """
        response = await self._send(
            "POST",
            "q",
            body=QueryRequest(query=query),
            accept=ACCEPT_NDJSON,
        )
        return parse_ndjson(response.text)

    async def query_events(self, query: str) -> list[Any]:
        """Alias for q()."""
        return await self.q(query)

    async def observe_events(
        self,
        subject: str,
        options: StreamOptions | None = None,
    ) -> EventObservation:
        """Observe events for a subject in real time.

        The status is checked before this returns; decode and transport
        problems after that are delivered as items of the observation.

        Usage:
            observation = await client.observe_events("/user/123")
            async for item in observation:
                if isinstance(item, CloudEvent):
                    handle(item)
        """
        response = await self._send(
            "POST",
            "observe",
            body=StreamRequest(subject=subject, options=options),
            accept=ACCEPT_NDJSON,
            stream=True,
        )
        return EventObservation(response)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def close(self) -> None:
        """Close the underlying HTTP client if this client created it."""
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

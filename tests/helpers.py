"""Shared test helpers for building server responses."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Iterable
from typing import Any

import httpx


class ChunkedStream(httpx.AsyncByteStream):
    """Response body delivered in fixed chunks, optionally failing at the end."""

    def __init__(self, chunks: Iterable[bytes], error: Exception | None = None) -> None:
        self._chunks = list(chunks)
        self._error = error

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self._chunks:
            yield chunk
        if self._error is not None:
            raise self._error


async def aiter_chunks(chunks: Iterable[bytes], error: Exception | None = None) -> AsyncIterator[bytes]:
    """Async byte producer for feeding the decoder directly."""
    for chunk in chunks:
        yield chunk
    if error is not None:
        raise error


def ndjson(*values: Any) -> str:
    """Render values as a newline-terminated NDJSON body."""
    return "".join(json.dumps(v) + "\n" for v in values)


def event_dict(event_id: str = "1", subject: str = "/test", **extra: Any) -> dict[str, Any]:
    """Build a minimal event as the server sends it."""
    event: dict[str, Any] = {
        "id": event_id,
        "source": "test",
        "type": "test.event",
        "subject": subject,
        "specversion": "1.0",
    }
    event.update(extra)
    return event


def one_byte_chunks(data: bytes) -> list[bytes]:
    return [data[i : i + 1] for i in range(len(data))]

"""NDJSON / SSE decoding of Genesis DB responses.

Live observation delivers a response body in arbitrary chunks. Each event is
one JSON object per line, optionally framed as a server-sent event:

    {"id": "1", "source": "...", "type": "...", "subject": "/x"}\\n
    data: {"id": "2", "source": "...", "type": "...", "subject": "/y"}\\n
    {"payload": ""}\\n                      <- heartbeat, dropped

A line is only honored once its newline has arrived. Unterminated content
left over when the stream ends is discarded.
"""

from __future__ import annotations

import codecs
import json
import logging
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

import httpx
from pydantic import ValidationError

from .errors import DecodeError, GenesisDBError, RequestError
from .types import CloudEvent

logger = logging.getLogger(__name__)

SSE_DATA_PREFIX = "data: "


def is_heartbeat(value: Any) -> bool:
    """Check whether a parsed line is a keepalive message."""
    return isinstance(value, dict) and len(value) == 1 and value.get("payload") == ""


def decode_line(line: str) -> CloudEvent | DecodeError | None:
    """Decode one stripped, non-empty line.

    Returns:
        The event, a DecodeError for malformed content, or None for a heartbeat.
    """
    if line.startswith(SSE_DATA_PREFIX):
        line = line[len(SSE_DATA_PREFIX) :]

    try:
        value = json.loads(line)
    except json.JSONDecodeError as e:
        return DecodeError(str(e), line=line)

    if is_heartbeat(value):
        logger.debug("Skipping heartbeat")
        return None

    try:
        return CloudEvent.model_validate(value)
    except ValidationError as e:
        return DecodeError(str(e), line=line)


class EventStreamDecoder:
    """Incremental line decoder for one response body.

    Feed raw byte chunks as they arrive; every complete line is decoded
    before feed() returns, so the buffer only ever holds a partial line.
    """

    def __init__(self) -> None:
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Unterminated text waiting for its newline."""
        return self._buffer

    def feed(self, chunk: bytes) -> list[CloudEvent | DecodeError]:
        """Append a chunk and decode all lines it completes."""
        self._buffer += self._utf8.decode(chunk)

        items: list[CloudEvent | DecodeError] = []
        while (newline := self._buffer.find("\n")) != -1:
            line = self._buffer[:newline].strip()
            self._buffer = self._buffer[newline + 1 :]

            if not line:
                continue

            item = decode_line(line)
            if item is not None:
                items.append(item)
        return items


async def aiter_events(
    chunks: AsyncIterable[bytes],
) -> AsyncIterator[CloudEvent | GenesisDBError]:
    """Decode an async byte stream into events.

    Malformed lines are yielded as DecodeError items and decoding continues.
    A transport failure is yielded once as a RequestError and ends the
    iteration.
    """
    decoder = EventStreamDecoder()
    try:
        async for chunk in chunks:
            for item in decoder.feed(chunk):
                yield item
    except httpx.RequestError as e:
        yield RequestError(e)
        return

    if decoder.pending:
        logger.debug(f"Discarding {len(decoder.pending)} unterminated characters at end of stream")


def parse_ndjson(text: str) -> list[Any]:
    """Parse a complete NDJSON body into JSON values.

    Raises:
        DecodeError: If any non-blank line is not valid JSON
    """
    if not text.strip():
        return []

    values: list[Any] = []
    # Lines end at "\n" only. U+2028, U+0085 and the like may appear raw
    # inside JSON strings.
    for line in text.split("\n"):
        line = line.strip()
        if not line:
            continue
        try:
            values.append(json.loads(line))
        except json.JSONDecodeError as e:
            raise DecodeError(str(e), line=line) from e
    return values


def parse_events(text: str) -> list[CloudEvent]:
    """Parse a complete NDJSON body into events.

    Raises:
        DecodeError: If any line is not a valid event
    """
    events: list[CloudEvent] = []
    for value in parse_ndjson(text):
        try:
            events.append(CloudEvent.model_validate(value))
        except ValidationError as e:
            raise DecodeError(str(e), line=json.dumps(value)) from e
    return events

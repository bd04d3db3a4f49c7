"""Types used by the Genesis DB client.

Field names on the wire follow the Genesis DB HTTP API (camelCase for
options); Python attributes are snake_case with aliases where they differ.
Event payloads and query results are opaque JSON values.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SPEC_VERSION = "1.0"


class GenesisModel(BaseModel):
    """Base model accepting both attribute names and wire aliases."""

    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Events
# =============================================================================


class CloudEvent(BaseModel):
    """A CloudEvent as stored by Genesis DB.

    Instances are immutable. Unknown keys sent by the server are ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    source: str
    type: str
    subject: str
    time: str | None = None
    data: Any | None = None
    specversion: str = DEFAULT_SPEC_VERSION
    datacontenttype: str | None = None


class CommitEventOptions(GenesisModel):
    """Per-event options for a commit."""

    store_data_as_reference: bool | None = Field(default=None, alias="storeDataAsReference")


class CommitEvent(GenesisModel):
    """An event to be committed."""

    source: str
    subject: str
    type: str
    data: Any
    options: CommitEventOptions | None = None


class Precondition(GenesisModel):
    """A condition the server checks before accepting a commit."""

    type: str
    payload: Any

    @classmethod
    def is_subject_new(cls, subject: str) -> Precondition:
        """Require that no event exists yet for the subject."""
        return cls(type="isSubjectNew", payload={"subject": subject})

    @classmethod
    def is_query_result_true(cls, query: str) -> Precondition:
        """Require that the given query evaluates to true."""
        return cls(type="isQueryResultTrue", payload={"query": query})


class StreamOptions(GenesisModel):
    """Options for streaming or observing events."""

    lower_bound: str | None = Field(default=None, alias="lowerBound")
    include_lower_bound_event: bool | None = Field(default=None, alias="includeLowerBoundEvent")
    latest_by_event_type: str | None = Field(default=None, alias="latestByEventType")


# =============================================================================
# Request bodies
# =============================================================================


class StreamRequest(GenesisModel):
    subject: str
    options: StreamOptions | None = None


class CommitRequest(GenesisModel):
    events: list[CommitEvent]
    preconditions: list[Precondition] | None = None


class EraseRequest(GenesisModel):
    subject: str


class QueryRequest(GenesisModel):
    query: str


def to_wire(model: BaseModel) -> dict[str, Any]:
    """Serialize a request body with wire names, omitting unset optionals."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)

"""Genesis DB command line client.

Reads GENESISDB_API_URL, GENESISDB_API_VERSION and GENESISDB_AUTH_TOKEN
from the environment.

Usage:
    genesisdb ping                          # Check server health
    genesisdb audit                         # Show audit information
    genesisdb stream /user/123              # Print all events of a subject
    genesisdb query "FROM e IN events ..."  # Run a query
    genesisdb commit events.json            # Commit events from a JSON file
    genesisdb erase /user/123               # Erase a subject's data
    genesisdb observe /user/123             # Follow new events live
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from typing import IO, Any, TypeVar

import click
from pydantic import ValidationError

from .client import Client
from .errors import GenesisDBError, RequestError
from .types import CloudEvent, CommitEvent, Precondition, StreamOptions

T = TypeVar("T")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def create_client() -> Client:
    """Create the client used by all commands."""
    return Client.from_env()


def _run(operation: Callable[[Client], Awaitable[T]]) -> T:
    """Run an operation against a fresh client, exiting 1 on client errors."""

    async def run() -> T:
        async with create_client() as client:
            return await operation(client)

    try:
        return asyncio.run(run())
    except GenesisDBError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _echo_json(value: Any) -> None:
    click.echo(json.dumps(value, ensure_ascii=False))


def _echo_event(event: CloudEvent) -> None:
    click.echo(event.model_dump_json(exclude_none=True))


def stream_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Shared options for stream and observe."""
    fn = click.option("--latest-by-event-type", default=None, help="Only the latest event of this type")(fn)
    fn = click.option("--include-lower-bound", is_flag=True, help="Include the lower bound event itself")(fn)
    fn = click.option("--lower-bound", default=None, help="Event ID to start after")(fn)
    return fn


def _build_options(
    lower_bound: str | None,
    include_lower_bound: bool,
    latest_by_event_type: str | None,
) -> StreamOptions | None:
    if lower_bound is None and not include_lower_bound and latest_by_event_type is None:
        return None
    return StreamOptions(
        lower_bound=lower_bound,
        include_lower_bound_event=include_lower_bound or None,
        latest_by_event_type=latest_by_event_type,
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log HTTP requests to stderr")
def main(verbose: bool) -> None:
    """Genesis DB client - talk to a Genesis DB server from the shell."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT, stream=sys.stderr)


@main.command()
def ping() -> None:
    """Check that the server is reachable."""
    click.echo(_run(lambda client: client.ping()))


@main.command()
def audit() -> None:
    """Show audit information."""
    click.echo(_run(lambda client: client.audit()))


@main.command()
@click.argument("subject")
@stream_options
def stream(
    subject: str,
    lower_bound: str | None,
    include_lower_bound: bool,
    latest_by_event_type: str | None,
) -> None:
    """Print all events of SUBJECT as JSON lines.

    Examples:

        genesisdb stream /user/123

        genesisdb stream /user --latest-by-event-type io.genesisdb.app.user-updated
    """
    options = _build_options(lower_bound, include_lower_bound, latest_by_event_type)
    events = _run(lambda client: client.stream_events(subject, options))
    for event in events:
        _echo_event(event)


@main.command()
@click.argument("query_text", metavar="QUERY")
def query(query_text: str) -> None:
    """Run QUERY and print each result as a JSON line.

    Example:

        genesisdb query "FROM e IN events WHERE e.type == 'user-created' TOP 10"
    """
    for result in _run(lambda client: client.q(query_text)):
        _echo_json(result)


@main.command()
@click.argument("source", type=click.File("r"))
def commit(source: IO[str]) -> None:
    """Commit events read from SOURCE (a JSON file, or - for stdin).

    The document holds an "events" list and an optional "preconditions" list:

        {"events": [{"source": "...", "subject": "/user/1", "type": "...", "data": {}}],
         "preconditions": [{"type": "isSubjectNew", "payload": {"subject": "/user/1"}}]}
    """
    try:
        document = json.load(source)
        events = [CommitEvent.model_validate(e) for e in document["events"]]
        preconditions = document.get("preconditions")
        if preconditions is not None:
            preconditions = [Precondition.model_validate(p) for p in preconditions]
    except (json.JSONDecodeError, KeyError, TypeError, AttributeError, ValidationError) as e:
        raise click.BadParameter(f"Invalid commit document: {e}", param_hint="SOURCE") from e

    _run(lambda client: client.commit_events(events, preconditions))
    click.echo(f"Committed {len(events)} event(s)", err=True)


@main.command()
@click.argument("subject")
@click.confirmation_option(prompt="Erase all data stored for this subject?")
def erase(subject: str) -> None:
    """Erase the data stored for SUBJECT."""
    _run(lambda client: client.erase_data(subject))
    click.echo(f"Erased {subject}", err=True)


@main.command()
@click.argument("subject")
@stream_options
def observe(
    subject: str,
    lower_bound: str | None,
    include_lower_bound: bool,
    latest_by_event_type: str | None,
) -> None:
    """Follow events of SUBJECT as they are committed.

    Malformed lines are reported on stderr and observation continues.
    Press Ctrl+C to stop.
    """
    options = _build_options(lower_bound, include_lower_bound, latest_by_event_type)

    async def follow(client: Client) -> bool:
        observation = await client.observe_events(subject, options)
        async with observation:
            async for item in observation:
                if isinstance(item, RequestError):
                    click.echo(f"Error: {item}", err=True)
                    return False
                if isinstance(item, GenesisDBError):
                    click.echo(f"Skipping line: {item}", err=True)
                    continue
                _echo_event(item)
        return True

    try:
        completed = _run(follow)
    except KeyboardInterrupt:
        click.echo("\nStopped", err=True)
        return

    if not completed:
        sys.exit(1)

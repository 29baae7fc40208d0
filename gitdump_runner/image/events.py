"""Decoding and printing of Docker JSON event streams.

This module handles:
- Lazily decoding concatenated JSON objects from raw stream chunks
- Validating each object into a BuildEvent
- Rendering events as colored, phase-tagged console lines
"""

from __future__ import annotations

import codecs
import json
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from rich.console import Console
from rich.markup import escape

from gitdump_runner.errors import StreamDecodeError
from gitdump_runner.types import Phase

logger = logging.getLogger(__name__)


class AuxRecord(BaseModel):
    """Auxiliary payload; carries the built image ID."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(default="", alias="ID")


class ErrorDetail(BaseModel):
    """Structured error reported by the engine."""

    model_config = ConfigDict(extra="ignore")

    message: str = ""
    code: int | None = None


class BuildEvent(BaseModel):
    """One decoded unit of a build or run event stream.

    Attributes:
        stream: Free-text log fragment.
        aux: Auxiliary record, present on the image ID event.
        error_detail: Structured error, present on failure events.
        error: Flat error string that accompanies error_detail.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    stream: str = ""
    aux: AuxRecord | None = None
    error_detail: ErrorDetail | None = Field(default=None, alias="errorDetail")
    error: str = ""

    @property
    def aux_id(self) -> str:
        """Image ID carried by this event, or empty string."""
        return self.aux.id.strip() if self.aux else ""

    @property
    def error_message(self) -> str:
        """Error text carried by this event, or empty string."""
        if self.error_detail and self.error_detail.message.strip():
            return self.error_detail.message.strip()
        return self.error.strip()


@dataclass
class StreamSummary:
    """Outcome of consuming an event stream."""

    events: int = 0
    aux_id: str | None = None
    errors: list[str] = field(default_factory=list)


def _to_event(value: object) -> BuildEvent:
    if not isinstance(value, dict):
        raise StreamDecodeError(
            f"Expected JSON object in event stream, got {type(value).__name__}"
        )
    try:
        return BuildEvent.model_validate(value)
    except ValidationError as e:
        raise StreamDecodeError(f"Invalid event in stream: {e}") from e


def iter_events(chunks: Iterable[bytes | str]) -> Iterator[BuildEvent]:
    """Decode JSON events from a stream of chunks, one value at a time.

    Chunk boundaries are arbitrary: a chunk may hold several objects or a
    fragment of one. Objects may be separated by whitespace or not at all.

    Args:
        chunks: Raw bytes or text chunks, e.g. a Docker API response stream.

    Yields:
        BuildEvent for each decoded JSON object.

    Raises:
        StreamDecodeError: As soon as buffered data can no longer be the
            start of a JSON object, or if a partial object remains at the
            end of the stream.
    """
    decoder = json.JSONDecoder()
    text_decoder = codecs.getincrementaldecoder("utf-8")()
    buffer = ""

    for chunk in chunks:
        if isinstance(chunk, bytes):
            try:
                chunk = text_decoder.decode(chunk)
            except UnicodeDecodeError as e:
                raise StreamDecodeError(f"Event stream is not UTF-8: {e}") from e
        buffer += chunk

        while True:
            buffer = buffer.lstrip()
            if not buffer:
                break
            if not buffer.startswith("{"):
                raise StreamDecodeError(
                    f"Malformed JSON in event stream: {buffer[:80]!r}"
                )
            try:
                value, end = decoder.raw_decode(buffer)
            except json.JSONDecodeError as e:
                # Events are newline-delimited; a newline past the failure
                # point means the value is broken, not incomplete
                if "\n" in buffer[e.pos :]:
                    raise StreamDecodeError(
                        f"Malformed JSON in event stream: {e}"
                    ) from e
                break
            buffer = buffer[end:]
            yield _to_event(value)

    try:
        buffer += text_decoder.decode(b"", final=True)
    except UnicodeDecodeError as e:
        raise StreamDecodeError(f"Event stream is not UTF-8: {e}") from e

    leftover = buffer.strip()
    if leftover:
        raise StreamDecodeError(
            f"Malformed JSON at end of event stream: {leftover[:80]!r}"
        )


class EventPrinter:
    """Render build events as console lines."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console if console is not None else Console()

    def line(self, phase: Phase, tag: str, text: str) -> None:
        """Print a single phase-tagged line."""
        self.console.print(
            f"<[green]{phase.value}[/green]> <[yellow]{escape(tag)}[/yellow]> "
            f"{escape(text)}",
            highlight=False,
        )

    def error(self, phase: Phase, message: str) -> None:
        """Print an error line."""
        self.console.print(
            f"<[red]{phase.value}[/red]> <[red]error[/red]> "
            f"[underline red]{escape(message)}[/underline red]",
            highlight=False,
        )

    def render(self, phase: Phase, event: BuildEvent) -> None:
        """Render one event. Only BUILD phase events produce output."""
        if phase is not Phase.BUILD:
            return

        text = event.stream.strip()
        if text:
            self.line(phase, "stream", text)
        if event.aux_id:
            self.line(phase, "aux", event.aux_id)
        if event.error_message:
            self.error(phase, event.error_message)


def print_event_stream(
    phase: Phase,
    chunks: Iterable[bytes | str],
    console: Console | None = None,
) -> StreamSummary:
    """Decode a stream to completion, printing each event.

    Error events are rendered and collected; they do not stop processing.

    Args:
        phase: Phase label for printed lines.
        chunks: Raw event stream.
        console: Console to print to.

    Returns:
        StreamSummary with the last image ID seen and any error messages.

    Raises:
        StreamDecodeError: If the stream cannot be deserialized.
    """
    printer = EventPrinter(console)
    summary = StreamSummary()

    for event in iter_events(chunks):
        summary.events += 1
        printer.render(phase, event)
        if event.aux_id:
            summary.aux_id = event.aux_id
        if event.error_message:
            summary.errors.append(event.error_message)

    logger.debug(
        "%s stream finished: %d event(s), %d error(s)",
        phase.value,
        summary.events,
        len(summary.errors),
    )
    return summary


__all__ = [
    "AuxRecord",
    "BuildEvent",
    "ErrorDetail",
    "EventPrinter",
    "StreamSummary",
    "iter_events",
    "print_event_stream",
]

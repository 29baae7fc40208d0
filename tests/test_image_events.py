"""Tests for image/events.py module.

Tests lazy JSON decoding of Docker event streams and console rendering.
"""

import io

import pytest
from rich.console import Console

from gitdump_runner.errors import StreamDecodeError
from gitdump_runner.image.events import (
    BuildEvent,
    EventPrinter,
    iter_events,
    print_event_stream,
)
from gitdump_runner.types import Phase


@pytest.fixture
def console_buffer() -> io.StringIO:
    """Buffer capturing plain console output."""
    return io.StringIO()


@pytest.fixture
def console(console_buffer) -> Console:
    """Console writing uncolored text to a buffer."""
    return Console(file=console_buffer, width=200, color_system=None)


class TestBuildEvent:
    """Tests for BuildEvent model."""

    def test_defaults(self):
        """Should default to an empty event."""
        event = BuildEvent()
        assert event.stream == ""
        assert event.aux is None
        assert event.aux_id == ""
        assert event.error_message == ""

    def test_aux_id_alias(self):
        """Should read the aux ID from the 'ID' key."""
        event = BuildEvent.model_validate({"aux": {"ID": "sha256:abc"}})
        assert event.aux_id == "sha256:abc"

    def test_error_detail_alias(self):
        """Should read errorDetail and prefer its message."""
        event = BuildEvent.model_validate(
            {"errorDetail": {"message": "detailed", "code": 1}, "error": "flat"}
        )
        assert event.error_detail is not None
        assert event.error_detail.code == 1
        assert event.error_message == "detailed"

    def test_flat_error_fallback(self):
        """Should fall back to the flat error string."""
        event = BuildEvent.model_validate({"error": "flat only"})
        assert event.error_message == "flat only"

    def test_ignores_unknown_keys(self):
        """Should ignore fields it does not model."""
        event = BuildEvent.model_validate({"status": "Pulling", "id": "layer"})
        assert event.stream == ""


class TestIterEvents:
    """Tests for iter_events function."""

    def test_newline_delimited(self):
        """Should decode newline-delimited objects."""
        events = list(iter_events([b'{"stream":"a"}\r\n{"stream":"b"}\r\n']))
        assert [e.stream for e in events] == ["a", "b"]

    def test_object_split_across_chunks(self):
        """Should buffer a partial object until it completes."""
        chunks = [b'{"str', b'eam":"hel', b'lo"}\n']
        events = list(iter_events(chunks))
        assert len(events) == 1
        assert events[0].stream == "hello"

    def test_concatenated_without_separator(self):
        """Should decode back-to-back objects."""
        events = list(iter_events(['{"stream":"a"}{"stream":"b"}']))
        assert [e.stream for e in events] == ["a", "b"]

    def test_multibyte_split_across_chunks(self):
        """Should decode UTF-8 characters split between chunks."""
        events = list(iter_events([b'{"stream":"caf\xc3', b'\xa9"}']))
        assert events[0].stream == "café"

    def test_binary_file_object(self):
        """Should accept a binary file object."""
        stream = io.BytesIO(
            b'{"stream":"Step 1/2"}\n{"aux":{"ID":"sha256:deadbeef"}}\n'
        )
        events = list(iter_events(stream))
        assert events[0].stream == "Step 1/2"
        assert events[1].aux_id == "sha256:deadbeef"

    def test_empty_stream(self):
        """Should end cleanly on an empty stream."""
        assert list(iter_events([])) == []

    def test_whitespace_only(self):
        """Should treat trailing whitespace as clean end-of-stream."""
        assert list(iter_events([b"\n", b"  \r\n"])) == []

    def test_truncated_stream(self):
        """Should raise on a truncated object at end-of-stream."""
        gen = iter_events([b'{"stream":"a"}\n{"stream":'])
        first = next(gen)
        assert first.stream == "a"
        with pytest.raises(StreamDecodeError) as exc_info:
            list(gen)
        assert exc_info.value.code == "stream_decode_error"

    def test_garbage(self):
        """Should raise on non-JSON data."""
        with pytest.raises(StreamDecodeError):
            list(iter_events([b"not json at all"]))

    def test_non_object_value(self):
        """Should raise on JSON values that are not objects."""
        with pytest.raises(StreamDecodeError):
            list(iter_events([b"[1, 2, 3]"]))

    def test_invalid_field_shape(self):
        """Should raise when an object fails validation."""
        with pytest.raises(StreamDecodeError):
            list(iter_events([b'{"aux": "not-an-object"}']))

    def test_invalid_utf8(self):
        """Should raise on undecodable bytes."""
        with pytest.raises(StreamDecodeError):
            list(iter_events([b'{"stream":"\xff"}']))

    def test_lazy(self):
        """Should yield events before the source is exhausted."""

        def source():
            yield b'{"stream":"first"}\n'
            raise AssertionError("read past first event")

        gen = iter_events(source())
        assert next(gen).stream == "first"

    def test_malformed_line_fails_before_reading_further(self):
        """Should raise on a malformed line without consuming more input."""

        def source():
            yield b'{"stream":"a"}\n'
            yield b"garbage\n"
            yield b'{"stream":"b"}\n'
            raise AssertionError("read past malformed line")

        gen = iter_events(source())
        assert next(gen).stream == "a"
        with pytest.raises(StreamDecodeError):
            next(gen)

    def test_malformed_object_followed_by_data(self):
        """Should raise on a broken object once a later line has arrived."""

        def source():
            yield b'{"stream": oops}\n{"stream":"b"}\n'
            raise AssertionError("read past malformed object")

        with pytest.raises(StreamDecodeError):
            next(iter_events(source()))


class TestEventPrinter:
    """Tests for EventPrinter rendering."""

    def test_stream_line(self, console, console_buffer):
        """Should print trimmed stream text with phase and tag."""
        EventPrinter(console).render(
            Phase.BUILD, BuildEvent(stream="Step 1/3 : FROM alpine\n")
        )
        assert console_buffer.getvalue() == "<BUILD> <stream> Step 1/3 : FROM alpine\n"

    def test_blank_stream_skipped(self, console, console_buffer):
        """Should skip stream text that is only whitespace."""
        EventPrinter(console).render(Phase.BUILD, BuildEvent(stream="\n"))
        assert console_buffer.getvalue() == ""

    def test_aux_line(self, console, console_buffer):
        """Should print the aux ID."""
        event = BuildEvent.model_validate({"aux": {"ID": "sha256:abc"}})
        EventPrinter(console).render(Phase.BUILD, event)
        assert "<BUILD> <aux> sha256:abc" in console_buffer.getvalue()

    def test_error_line(self, console, console_buffer):
        """Should print error detail messages."""
        event = BuildEvent.model_validate({"errorDetail": {"message": "boom"}})
        EventPrinter(console).render(Phase.BUILD, event)
        assert "<BUILD> <error> boom" in console_buffer.getvalue()

    def test_markup_is_escaped(self, console, console_buffer):
        """Should print bracketed text literally."""
        EventPrinter(console).render(
            Phase.BUILD, BuildEvent(stream="[internal] load build definition")
        )
        assert "[internal] load build definition" in console_buffer.getvalue()

    def test_run_phase_not_rendered(self, console, console_buffer):
        """Should not render events outside the build phase."""
        EventPrinter(console).render(Phase.RUN, BuildEvent(stream="output"))
        assert console_buffer.getvalue() == ""


class TestPrintEventStream:
    """Tests for print_event_stream function."""

    def test_summary(self, console):
        """Should count events and keep the last aux ID."""
        chunks = [
            b'{"stream":"Step 1/2"}\n',
            b'{"aux":{"ID":"sha256:first"}}\n',
            b'{"aux":{"ID":"sha256:last"}}\n',
        ]
        summary = print_event_stream(Phase.BUILD, chunks, console)
        assert summary.events == 3
        assert summary.aux_id == "sha256:last"
        assert summary.errors == []

    def test_error_events_do_not_raise(self, console, console_buffer):
        """Should render error events and finish the stream."""
        chunks = [
            b'{"stream":"Step 1/2"}\n',
            b'{"errorDetail":{"message":"returned a non-zero code: 1"},'
            b'"error":"returned a non-zero code: 1"}\n',
            b'{"stream":"after"}\n',
        ]
        summary = print_event_stream(Phase.BUILD, chunks, console)
        assert summary.events == 3
        assert summary.errors == ["returned a non-zero code: 1"]
        assert summary.aux_id is None
        output = console_buffer.getvalue()
        assert "<BUILD> <error> returned a non-zero code: 1" in output
        assert "<BUILD> <stream> after" in output

    def test_clean_end(self, console):
        """Should return a summary for a clean, empty stream."""
        summary = print_event_stream(Phase.BUILD, [], console)
        assert summary.events == 0
        assert summary.aux_id is None

    def test_decode_error_propagates(self, console):
        """Should propagate deserialization failures."""
        with pytest.raises(StreamDecodeError):
            print_event_stream(Phase.BUILD, [b'{"stream":"a"}{oops'], console)

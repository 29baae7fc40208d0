"""Image build module.

This module handles:
- Providing the gzipped build context
- Building the git-dumper image via the Docker API
- Decoding and printing the JSON build event stream
"""

from gitdump_runner.image.builder import build_image, parse_image_id
from gitdump_runner.image.context import create_context_archive, open_build_context
from gitdump_runner.image.events import (
    BuildEvent,
    EventPrinter,
    StreamSummary,
    iter_events,
    print_event_stream,
)

__all__ = [
    "BuildEvent",
    "EventPrinter",
    "StreamSummary",
    "build_image",
    "create_context_archive",
    "iter_events",
    "open_build_context",
    "parse_image_id",
    "print_event_stream",
]

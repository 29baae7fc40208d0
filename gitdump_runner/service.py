"""Dump service module.

This module provides the high-level dump API:
- dump_repository(): resolve inputs, build the image, create and run the
  container, and report the result

A run moves configuring -> building -> created -> running -> completed.
Any error moves it to fatal and is re-raised; there is no retry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, BinaryIO

from gitdump_runner.config import get_settings
from gitdump_runner.container.runner import create_container, run_container
from gitdump_runner.engine import get_client
from gitdump_runner.errors import GitDumpError
from gitdump_runner.image.builder import build_image
from gitdump_runner.resolver import resolve_request
from gitdump_runner.types import DumpResult, RunState

if TYPE_CHECKING:
    import docker
    from rich.console import Console

    from gitdump_runner.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class RunTracker:
    """Tracks the state of one dump run."""

    state: RunState = RunState.CONFIGURING
    history: list[RunState] = field(default_factory=lambda: [RunState.CONFIGURING])

    def advance(self, state: RunState) -> None:
        """Move to a new state."""
        logger.debug("Run state: %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)


def dump_repository(
    url: str | None,
    output: str | None,
    settings: Settings | None = None,
    client: docker.DockerClient | None = None,
    console: Console | None = None,
    out: BinaryIO | None = None,
) -> DumpResult:
    """Dump a remote .git directory into a host directory.

    Args:
        url: Source .git URL.
        output: Output directory as given by the user.
        settings: Application settings; loaded from environment if None.
        client: Docker client; opened from settings if None.
        console: Console for progress lines.
        out: Binary stream receiving container output.

    Returns:
        DumpResult describing the completed run.

    Raises:
        GitDumpError: On any failure. The run is abandoned.
    """
    if settings is None:
        settings = get_settings()

    tracker = RunTracker()
    started_at = datetime.now(timezone.utc)

    try:
        request = resolve_request(url, output)

        if client is None:
            client = get_client(settings)

        tracker.advance(RunState.BUILDING)
        image = build_image(
            client,
            request,
            archive_path=settings.context_archive,
            tag=settings.image_tag,
            console=console,
        )

        handle = create_container(
            client,
            image,
            command=settings.dumper_command,
            mount_target=settings.mount_target,
            platform=settings.platform,
        )
        tracker.advance(RunState.CREATED)

        tracker.advance(RunState.RUNNING)
        run_container(client, handle, out=out, console=console)
        tracker.advance(RunState.COMPLETED)

    except GitDumpError as e:
        logger.error(
            "Dump failed during %s [%s]: %s", tracker.state.value, e.code, e
        )
        tracker.advance(RunState.FATAL)
        raise

    finished_at = datetime.now(timezone.utc)
    logger.info(
        "Dumped %s into %s in %.1fs",
        request.url,
        request.output_dir,
        (finished_at - started_at).total_seconds(),
    )

    return DumpResult(
        request=request,
        image_id=image.image_id,
        container_id=handle.container_id,
        container_name=handle.name,
        state=tracker.state,
        started_at=started_at,
        finished_at=finished_at,
        history=list(tracker.history),
    )


__all__ = ["RunTracker", "dump_repository"]

"""Image builder for the git-dumper image.

This module handles:
- Submitting the build context to the Docker build API
- Streaming and printing build output
- Extracting the built image ID from the final aux event
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from gitdump_runner.engine import ENGINE_ERRORS
from gitdump_runner.errors import ImageBuildError, ImageIdError
from gitdump_runner.image.context import open_build_context
from gitdump_runner.image.events import print_event_stream
from gitdump_runner.types import DumpRequest, ImageHandle, Phase

if TYPE_CHECKING:
    import docker
    from rich.console import Console

logger = logging.getLogger(__name__)


def parse_image_id(aux_id: str) -> str:
    """Extract the identifier from an aux ID such as ``sha256:abc...``.

    Args:
        aux_id: Aux ID reported by the engine.

    Returns:
        The identifier portion after the ':' separator.

    Raises:
        ImageIdError: Unless the value has exactly one ':' with text on
            both sides.
    """
    parts = aux_id.split(":")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ImageIdError(
            f"Unexpected image ID format {aux_id!r}, expected '<algorithm>:<digest>'"
        )
    return parts[1]


def build_image(
    client: docker.DockerClient,
    request: DumpRequest,
    archive_path: Path | None = None,
    tag: str | None = None,
    console: Console | None = None,
) -> ImageHandle:
    """Build the git-dumper image and return a handle to it.

    Args:
        client: Docker client.
        request: Resolved dump request; carried into the handle.
        archive_path: Optional prebuilt context archive.
        tag: Optional tag for the built image.
        console: Console for build output.

    Returns:
        ImageHandle with the built image ID.

    Raises:
        BuildContextError: If the build context cannot be opened.
        ImageBuildError: If the build request fails or yields no image.
        StreamDecodeError: If the build output cannot be decoded.
    """
    fileobj = open_build_context(archive_path)
    logger.info("Building image%s", f" {tag}" if tag else "")

    try:
        chunks = client.api.build(
            fileobj=fileobj,
            custom_context=True,
            encoding="gzip",
            quiet=False,
            rm=True,
            tag=tag,
            decode=False,
        )
        summary = print_event_stream(Phase.BUILD, chunks, console)
    except ENGINE_ERRORS as e:
        raise ImageBuildError(
            f"Image build request failed: {e}", code="build_request_failed"
        ) from e
    finally:
        fileobj.close()

    if not summary.aux_id:
        reason = summary.errors[0] if summary.errors else "no image ID in build output"
        raise ImageBuildError(f"Image build failed: {reason}", code="no_image_id")

    image_id = parse_image_id(summary.aux_id)
    logger.info("Built image %s", image_id)

    return ImageHandle(
        image_id=image_id,
        url=request.url,
        output_dir=request.output_dir,
    )


__all__ = ["build_image", "parse_image_id"]

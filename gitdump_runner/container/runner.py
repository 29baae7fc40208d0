"""Container runner for git-dumper.

This module handles:
- Composing the git-dumper entrypoint
- Creating a container with the output directory bind-mounted
- Starting it and streaming combined stdout/stderr to the console
- Removing the container (and its anonymous volumes) afterwards
"""

from __future__ import annotations

import logging
import sys
import uuid
from typing import TYPE_CHECKING, BinaryIO

from docker.types import Mount
from rich.console import Console
from rich.markup import escape

from gitdump_runner.engine import ENGINE_ERRORS
from gitdump_runner.errors import ContainerError
from gitdump_runner.types import ContainerHandle, ContainerState, ImageHandle, Phase

if TYPE_CHECKING:
    import docker

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = "git-dumper"
DEFAULT_MOUNT_TARGET = "/git"
DEFAULT_PLATFORM = "linux"


def compose_entrypoint(
    url: str,
    command: str = DEFAULT_COMMAND,
    mount_target: str = DEFAULT_MOUNT_TARGET,
) -> list[str]:
    """Compose the container entrypoint.

    Args:
        url: Source .git URL.
        command: Dumper executable inside the image.
        mount_target: In-container destination directory.

    Returns:
        Entrypoint as list of strings.
    """
    return [command, url, mount_target]


def create_container(
    client: docker.DockerClient,
    image: ImageHandle,
    command: str = DEFAULT_COMMAND,
    mount_target: str = DEFAULT_MOUNT_TARGET,
    platform: str | None = DEFAULT_PLATFORM,
    name: str | None = None,
) -> ContainerHandle:
    """Create the dump container from a built image.

    Args:
        client: Docker client.
        image: Built image handle.
        command: Dumper executable inside the image.
        mount_target: In-container path the output directory is bound to.
        platform: Platform to request, e.g. 'linux'.
        name: Container name; a random UUID if not given.

    Returns:
        ContainerHandle in CREATED state.

    Raises:
        ContainerError: If the container cannot be created.
    """
    name = name or str(uuid.uuid4())
    entrypoint = compose_entrypoint(image.url, command, mount_target)

    logger.info("Creating container %s from image %s", name, image.image_id)
    logger.debug("Entrypoint: %s", entrypoint)
    logger.debug("Mount: %s -> %s", image.output_dir, mount_target)

    try:
        host_config = client.api.create_host_config(
            mounts=[
                Mount(
                    target=mount_target,
                    source=str(image.output_dir),
                    type="bind",
                )
            ]
        )
        body = client.api.create_container(
            image=image.image_id,
            entrypoint=entrypoint,
            host_config=host_config,
            name=name,
            platform=platform,
        )
    except ENGINE_ERRORS as e:
        raise ContainerError(
            f"Failed to create container: {e}", code="create_failed"
        ) from e

    return ContainerHandle(container_id=body["Id"], name=name)


def run_container(
    client: docker.DockerClient,
    handle: ContainerHandle,
    out: BinaryIO | None = None,
    console: Console | None = None,
) -> None:
    """Start a container, stream its output until exit, then remove it.

    Removal is only attempted once the log stream has ended; a failed start
    or log request leaves the container in place.

    Args:
        client: Docker client.
        handle: Handle from create_container; must be in CREATED state.
        out: Binary stream receiving container output (stdout by default).
        console: Console for status lines.

    Raises:
        ContainerError: On the first failing lifecycle call, or if the
            handle has already been run.
    """
    if handle.state is not ContainerState.CREATED:
        raise ContainerError(
            f"Container {handle.container_id} already {handle.state.value}",
            code="container_reused",
        )
    if out is None:
        out = sys.stdout.buffer
    if console is None:
        console = Console()
    container_id = handle.container_id

    console.print(
        f"<[green]{Phase.RUN.value}[/green]> <[yellow]ID[/yellow]> "
        f"Running container {escape(container_id)}",
        highlight=False,
    )

    try:
        client.api.start(container=container_id)
    except ENGINE_ERRORS as e:
        handle.state = ContainerState.FAILED
        raise ContainerError(
            f"Failed to start container {container_id}: {e}", code="start_failed"
        ) from e
    handle.state = ContainerState.RUNNING

    try:
        logs = client.api.logs(
            container=container_id,
            stdout=True,
            stderr=True,
            stream=True,
            follow=True,
        )
        for chunk in logs:
            out.write(chunk)
            out.flush()
    except ENGINE_ERRORS as e:
        handle.state = ContainerState.FAILED
        raise ContainerError(
            f"Failed to stream logs for container {container_id}: {e}",
            code="logs_failed",
        ) from e

    logger.info("Container %s finished, removing", container_id)
    try:
        client.api.remove_container(container=container_id, v=True, force=True)
    except ENGINE_ERRORS as e:
        handle.state = ContainerState.FAILED
        raise ContainerError(
            f"Failed to remove container {container_id}: {e}", code="remove_failed"
        ) from e
    handle.state = ContainerState.REMOVED


__all__ = [
    "DEFAULT_COMMAND",
    "DEFAULT_MOUNT_TARGET",
    "DEFAULT_PLATFORM",
    "compose_entrypoint",
    "create_container",
    "run_container",
]

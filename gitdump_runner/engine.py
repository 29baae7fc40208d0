"""Docker engine connection."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import docker
import requests
import urllib3
from docker.errors import DockerException

from gitdump_runner.errors import EngineConnectionError

if TYPE_CHECKING:
    from gitdump_runner.config import Settings

logger = logging.getLogger(__name__)

# Failures raised by docker-py calls. Streamed responses surface transport
# errors from requests and urllib3 directly.
ENGINE_ERRORS: tuple[type[Exception], ...] = (
    DockerException,
    requests.exceptions.RequestException,
    urllib3.exceptions.HTTPError,
)


def get_client(settings: Settings) -> docker.DockerClient:
    """Open a Docker client.

    Uses ``settings.docker_host`` when set, otherwise the standard
    DOCKER_HOST / DOCKER_TLS_VERIFY / DOCKER_CERT_PATH environment.

    Args:
        settings: Application settings.

    Returns:
        Connected DockerClient.

    Raises:
        EngineConnectionError: If the engine cannot be reached.
    """
    try:
        if settings.docker_host:
            logger.debug("Connecting to Docker engine at %s", settings.docker_host)
            return docker.DockerClient(
                base_url=settings.docker_host, timeout=settings.docker_timeout
            )
        logger.debug("Connecting to Docker engine from environment")
        return docker.from_env(timeout=settings.docker_timeout)
    except ENGINE_ERRORS as e:
        raise EngineConnectionError(f"Cannot connect to Docker engine: {e}") from e


__all__ = ["ENGINE_ERRORS", "get_client"]

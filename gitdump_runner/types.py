"""Shared type definitions for gitdump_runner.

This module contains dataclasses and enums shared across subpackages
to avoid circular imports.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path


class RunState(str, Enum):
    """State of a dump run."""

    CONFIGURING = "configuring"
    BUILDING = "building"
    CREATED = "created"
    RUNNING = "running"
    COMPLETED = "completed"
    FATAL = "fatal"


class ContainerState(str, Enum):
    """Lifecycle state of a created container."""

    CREATED = "created"
    RUNNING = "running"
    REMOVED = "removed"
    FAILED = "failed"


class Phase(str, Enum):
    """Console label for the phase an output line belongs to."""

    BUILD = "BUILD"
    RUN = "RUN"


@dataclass(frozen=True)
class DumpRequest:
    """Resolved inputs for a single dump run."""

    url: str
    output_dir: Path


@dataclass(frozen=True)
class ImageHandle:
    """A successfully built image plus the context it will run with."""

    image_id: str
    url: str
    output_dir: Path

    def __post_init__(self) -> None:
        """Validate the image ID after initialization."""
        if not self.image_id:
            raise ValueError("image_id must be provided")


@dataclass
class ContainerHandle:
    """A created container.

    The handle moves CREATED -> RUNNING -> REMOVED, or to FAILED on the
    first failing lifecycle call, and is never reused.
    """

    container_id: str
    name: str
    state: ContainerState = ContainerState.CREATED


@dataclass
class DumpResult:
    """Result of a completed dump run."""

    request: DumpRequest
    image_id: str
    container_id: str
    container_name: str
    state: RunState
    started_at: datetime
    finished_at: datetime
    history: list[RunState] = field(default_factory=list)


__all__ = [
    "ContainerHandle",
    "ContainerState",
    "DumpRequest",
    "DumpResult",
    "ImageHandle",
    "Phase",
    "RunState",
]

"""Resolve CLI inputs into a DumpRequest.

This module handles:
- Validating that a source URL and output path were given
- Expanding the home directory shorthand in the output path
- Converting the output path to an absolute path
- Creating the output directory (and parents) if missing
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from gitdump_runner.errors import ConfigError
from gitdump_runner.types import DumpRequest

logger = logging.getLogger(__name__)

# Mode for created output directories, before umask
OUTPUT_DIR_MODE = 0o777


def expand_home(path: str) -> str:
    """Replace the first '~' in a path with the user's home directory.

    Args:
        path: Path string, possibly containing '~'.

    Returns:
        Path string with the shorthand expanded.

    Raises:
        ConfigError: If the home directory cannot be determined.
    """
    if "~" not in path:
        return path
    try:
        home = Path.home()
    except RuntimeError as e:
        raise ConfigError(
            f"Cannot determine home directory: {e}", code="home_unresolved"
        ) from e
    return path.replace("~", str(home), 1)


def ensure_output_dir(output_dir: Path) -> None:
    """Create the output directory and any missing parents.

    Raises:
        ConfigError: If the directory cannot be created.
    """
    try:
        output_dir.mkdir(mode=OUTPUT_DIR_MODE, parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigError(
            f"Cannot create output directory {output_dir}: {e}",
            code="output_dir_error",
        ) from e


def resolve_request(url: str | None, output: str | None) -> DumpRequest:
    """Validate inputs and prepare the output directory.

    Both inputs are checked before anything touches the filesystem.

    Args:
        url: Source .git URL.
        output: Output directory as given by the user.

    Returns:
        DumpRequest with an absolute, existing output directory.

    Raises:
        ConfigError: If an input is missing or the directory cannot be created.
    """
    if not url:
        raise ConfigError("source URL must be specified", code="missing_url")
    if not output:
        raise ConfigError("output directory must be specified", code="missing_output")

    expanded = expand_home(output)
    if not os.path.isabs(expanded):
        expanded = os.path.abspath(expanded)
        logger.info("Resolved output directory: %s", expanded)

    output_dir = Path(expanded)
    ensure_output_dir(output_dir)

    return DumpRequest(url=url, output_dir=output_dir)


__all__ = ["OUTPUT_DIR_MODE", "ensure_output_dir", "expand_home", "resolve_request"]

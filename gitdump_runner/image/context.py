"""Build context provider.

The image is built from a gzipped tar context. By default it is created
from the Dockerfile shipped with this package; a prebuilt archive can be
supplied instead via GITDUMP_CONTEXT_ARCHIVE.
"""

from __future__ import annotations

import io
import logging
import tarfile
from pathlib import Path
from typing import BinaryIO

from gitdump_runner.errors import BuildContextError

logger = logging.getLogger(__name__)

# Directory holding the packaged Dockerfile
ASSETS_DIR = Path(__file__).resolve().parent / "assets"


def create_context_archive(directory: Path) -> bytes:
    """Pack every regular file under a directory into a tar.gz archive.

    Args:
        directory: Root of the build context.

    Returns:
        Gzipped tar archive bytes with paths relative to ``directory``.

    Raises:
        BuildContextError: If the directory is missing or unreadable.
    """
    if not directory.is_dir():
        raise BuildContextError(f"Build context directory not found: {directory}")

    buf = io.BytesIO()
    try:
        with tarfile.open(fileobj=buf, mode="w:gz") as tar:
            for path in sorted(directory.rglob("*")):
                if path.is_file():
                    tar.add(path, arcname=path.relative_to(directory).as_posix())
    except OSError as e:
        raise BuildContextError(f"Cannot pack build context {directory}: {e}") from e

    return buf.getvalue()


def open_build_context(archive_path: Path | None = None) -> BinaryIO:
    """Open the build context archive for reading.

    Args:
        archive_path: Prebuilt tar.gz context; the packaged one is used if None.

    Returns:
        Binary file object positioned at the start of the archive.

    Raises:
        BuildContextError: If the archive cannot be opened.
    """
    if archive_path is None:
        logger.debug("Using packaged build context from %s", ASSETS_DIR)
        return io.BytesIO(create_context_archive(ASSETS_DIR))

    logger.debug("Using build context archive %s", archive_path)
    try:
        return archive_path.open("rb")
    except OSError as e:
        raise BuildContextError(
            f"Cannot open build context {archive_path}: {e}"
        ) from e


__all__ = ["ASSETS_DIR", "create_context_archive", "open_build_context"]

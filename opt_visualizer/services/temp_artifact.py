"""Scoped scratch files for feeding text to the transform tool."""

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ..models.exceptions import IOFailure


logger = logging.getLogger(__name__)

ARTIFACT_PREFIX = "opt-visualizer-"
ARTIFACT_SUFFIX = ".mlir"


def default_temp_dir() -> Path:
    """Private scratch area under the system temp dir."""
    return Path(tempfile.gettempdir()) / "opt-visualizer"


def _remove(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


@contextmanager
def temp_artifact(content: str, directory: Path | None = None) -> Iterator[Path]:
    """Write content to a uniquely named file and yield its path.

    The file is deleted when the block exits, whether it returns or raises.

    Raises:
        IOFailure: the file could not be created, written or deleted
    """
    directory = directory or default_temp_dir()
    try:
        directory.mkdir(mode=0o700, parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(
            prefix=ARTIFACT_PREFIX, suffix=ARTIFACT_SUFFIX, dir=directory
        )
    except OSError as e:
        raise IOFailure(f"cannot create scratch file in {directory}: {e}", path=directory) from e

    path = Path(name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
    except (OSError, UnicodeError) as e:
        try:
            _remove(path)
        except OSError as cleanup_error:
            logger.warning(f"Failed to remove partial scratch file {path}: {cleanup_error}")
        raise IOFailure(f"cannot write scratch file {path}: {e}", path=path) from e

    logger.debug(f"Created scratch file {path} ({len(content)} chars)")
    try:
        yield path
    except BaseException:
        # Body failed: cleanup problems must not mask its error
        try:
            _remove(path)
        except OSError as cleanup_error:
            logger.warning(f"Failed to remove scratch file {path}: {cleanup_error}")
        raise
    else:
        try:
            _remove(path)
        except OSError as e:
            raise IOFailure(f"cannot delete scratch file {path}: {e}", path=path) from e

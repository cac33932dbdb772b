"""Temporary files carrying request payloads to the engine."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager, suppress
import logging
import os
from pathlib import Path
import tempfile

from prisma_engine.exceptions import StagingError

log = logging.getLogger(__name__)

_PREFIX = "prisma-"


def stage_input(payload: str, operation: str) -> Path:
    """Write ``payload`` to a new, uniquely named temp file and return its path.

    Raises:
        StagingError: If the file cannot be created or written. ``operation``
            labels the error so it reads differently from engine failures.
    """
    try:
        fd, name = tempfile.mkstemp(prefix=_PREFIX)
    except OSError as e:
        raise _staging_error(operation, e) from e

    path = Path(name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(payload)
    except OSError as e:
        remove_staged(path)
        raise _staging_error(operation, e) from e

    log.debug("Staged %d characters for %s at %s", len(payload), operation, path)
    return path


def _staging_error(operation: str, cause: OSError) -> StagingError:
    return StagingError(
        f"{operation} unable to write temp data model path: {cause}",
        operation=operation,
    )


def remove_staged(path: Path) -> None:
    """Delete a staged file; already-missing files are fine."""
    with suppress(FileNotFoundError):
        path.unlink()


@contextmanager
def staged_input(payload: str, operation: str) -> Iterator[Path]:
    """Stage ``payload`` for the duration of the block."""
    path = stage_input(payload, operation)
    try:
        yield path
    finally:
        remove_staged(path)

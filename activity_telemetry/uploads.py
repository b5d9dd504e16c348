"""Load uploaded activity files into canonical activities."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from .aggregation import build_activity
from .config import ACTIVITY_FILE_EXTENSIONS, MAX_ACTIVITY_FILE_MB
from .errors import ActivityFileError
from .models import Activity, FileInput
from .tcx import parse_tcx

LOGGER = logging.getLogger(__name__)

_BYTES_PER_MB = 1024 * 1024


def _check_extension(filename: str) -> None:
    if not filename.lower().endswith(ACTIVITY_FILE_EXTENSIONS):
        accepted = ", ".join(ACTIVITY_FILE_EXTENSIONS)
        raise ActivityFileError(
            f"Please select a TCX file ({accepted} extension): {filename}"
        )


def _check_size(size_bytes: int) -> None:
    size_mb = size_bytes / _BYTES_PER_MB
    if size_mb > MAX_ACTIVITY_FILE_MB:
        raise ActivityFileError(
            f"File too large ({size_mb:.1f}MB). Maximum supported size is "
            f"{MAX_ACTIVITY_FILE_MB:g}MB."
        )


def load_activity_upload(filename: str, content: Union[str, bytes]) -> Activity:
    """Validate and parse an uploaded file's content.

    Raises:
        ActivityFileError: Wrong extension, too large, or empty.
        MalformedDocument: The content is not a usable TCX document.
    """

    _check_extension(filename)
    raw = content.encode("utf-8") if isinstance(content, str) else content
    _check_size(len(raw))
    if not raw.strip():
        raise ActivityFileError("Empty TCX file")
    LOGGER.info("Parsing activity file %s (%d bytes)", filename, len(raw))
    return build_activity(FileInput(parse_tcx(raw)))


def load_activity_file(path: Union[str, Path]) -> Activity:
    """Read an activity file from disk and aggregate it.

    The size check runs on the file's stat before reading its content.
    """

    file_path = Path(path)
    _check_extension(file_path.name)
    try:
        _check_size(file_path.stat().st_size)
        content = file_path.read_bytes()
    except OSError as exc:
        raise ActivityFileError(f"Unable to read {file_path}: {exc}") from exc
    return load_activity_upload(file_path.name, content)

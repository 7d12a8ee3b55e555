"""Temp-file staging for captured screenshot data."""

from __future__ import annotations

import base64
import binascii
import logging
import tempfile
from pathlib import Path

from goldenshot.errors import StagingError

logger = logging.getLogger(__name__)

STAGED_FILENAME = "new.png"


def create_temp_folder() -> Path:
    """Create a fresh, uniquely named directory under the system temp dir."""
    try:
        return Path(tempfile.mkdtemp())
    except OSError as e:
        raise StagingError(str(e)) from e


def decode_screenshot(data: bytes | str) -> bytes:
    """Return raw image bytes.

    Playwright hands back raw PNG bytes; WebDriver-style drivers hand back a
    base64 string.
    """
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    # Some drivers wrap the encoding at 76 columns
    compact = "".join(data.split())
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as e:
        raise StagingError(f"screenshot data is not valid base64: {e}") from e


def write_screenshot(folder: Path, data: bytes | str) -> Path:
    """Write a screenshot into ``folder`` under a fixed name and return its path."""
    path = folder / STAGED_FILENAME
    payload = decode_screenshot(data)
    try:
        path.write_bytes(payload)
    except OSError as e:
        raise StagingError(str(e), path=str(path)) from e
    logger.debug("Staged screenshot (%d bytes) at %s", len(payload), path)
    return path


def stage_screenshot(data: bytes | str) -> Path:
    """Stage ``data`` in a new temp directory. Cleanup is left to the caller/OS."""
    return write_screenshot(create_temp_folder(), data)

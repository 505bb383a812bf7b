"""File helpers: reading, size checks and binary detection."""

from __future__ import annotations
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 1024
# Share of control characters above which content is treated as binary
CONTROL_CHAR_THRESHOLD = 0.30
_ALLOWED_CONTROLS = frozenset("\t\n\r")


class FileTooLargeError(OSError):
    """Raised when a file exceeds the configured size limit."""

    def __init__(self, path: str | Path, size: int, limit: int) -> None:
        super().__init__(f"file too large: {path} ({size} bytes, limit {limit})")
        self.path = str(path)
        self.size = size
        self.limit = limit


def read_file(path: str | Path) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def file_size(path: str | Path) -> int:
    """Size in bytes.  Raises FileNotFoundError / PermissionError as os.stat does."""
    return os.stat(path).st_size


def check_size(path: str | Path, limit: int | None) -> int:
    """Return the file size, raising FileTooLargeError above ``limit``."""
    size = file_size(path)
    if limit is not None and limit > 0 and size > limit:
        raise FileTooLargeError(path, size, limit)
    return size


def is_text_file(path: str | Path, *, sample_size: int = SAMPLE_SIZE) -> bool:
    """Classify a file as text by sampling its first ``sample_size`` bytes.

    Raises OSError when the file cannot be opened or read.
    """
    with open(path, "rb") as f:
        sample = f.read(sample_size + 1)

    truncated = len(sample) > sample_size
    sample = sample[:sample_size]
    if not sample:
        return True

    is_text = is_text_content(sample, truncated=truncated)
    if not is_text:
        logger.info(
            "binary file skipped: %s (%s)", path, binary_reason(sample, truncated=truncated),
        )
    return is_text


def is_text_content(data: bytes, *, truncated: bool = False) -> bool:
    """Heuristic text check.

    Binary when the data contains NUL, is not valid UTF-8, or more than 30%
    of its code points are control characters other than tab/LF/CR.  With
    ``truncated`` a multi-byte sequence cut off at the end of the sample is
    not counted as invalid.
    """
    return binary_reason(data, truncated=truncated) is None


def binary_reason(data: bytes, *, truncated: bool = False) -> str | None:
    """Why ``data`` looks binary, or None if it looks like text."""
    if not data:
        return None
    if b"\x00" in data:
        return "contains_null_bytes"

    text = _decode_sample(data, truncated)
    if text is None:
        return "invalid_utf8"
    if not text:
        return None

    controls = sum(1 for ch in text if ch < " " and ch not in _ALLOWED_CONTROLS)
    ratio = controls / len(text)
    if ratio > CONTROL_CHAR_THRESHOLD:
        return f"high_control_chars_{ratio * 100:.1f}%"
    return None


def _decode_sample(data: bytes, truncated: bool) -> str | None:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        # Only an incomplete sequence at the very end of a cut sample is fine
        if truncated and exc.reason == "unexpected end of data" and exc.end == len(data):
            return data[:exc.start].decode("utf-8")
        return None

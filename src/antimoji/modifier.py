"""File modifier — removes detected emojis from files on disk.

Writes are atomic: the new content goes to a temp file in the same
directory, is fsync'd, and then renamed over the target.  Any failure before
the rename leaves the original byte-for-byte intact.

Usage:
    config = ModifyConfig(replacement="", create_backup=True)
    result = modify_file("README.md", default_patterns(), config, Allowlist(["✅"]))
    result.emojis_removed, result.backup_path
"""

from __future__ import annotations
import logging
import os
import stat
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from .allowlist import Allowlist, apply_allowlist
from .detector import detect
from .fs import check_size, is_text_file, read_file
from .types import DetectionResult, PatternSet

logger = logging.getLogger(__name__)

_TMP_PREFIX = ".antimoji-tmp-"
_BACKUP_STAMP = "%Y%m%d%H%M%S"
DEFAULT_MODE = 0o644


@dataclass(slots=True)
class ModifyConfig:
    """Configuration for file modification."""
    replacement: str = ""
    create_backup: bool = False
    respect_allowlist: bool = True
    preserve_permissions: bool = True
    dry_run: bool = False
    max_file_size: int = 100 * 1024 * 1024   # 0 = unlimited


@dataclass(slots=True)
class ModifyResult:
    """Outcome of modifying one file."""
    file_path: str
    success: bool = False
    modified: bool = False
    emojis_removed: int = 0
    backup_path: str | None = None
    error: Exception | None = None


def modify_file(
    file_path: str | Path,
    patterns: PatternSet,
    config: ModifyConfig | None = None,
    allowlist: Allowlist | None = None,
) -> ModifyResult:
    """Remove emojis from one file.  Never raises; errors land in ``result.error``."""
    config = config or ModifyConfig()
    path = str(file_path)
    result = ModifyResult(file_path=path)

    try:
        check_size(path, config.max_file_size)
    except OSError as exc:
        result.error = exc
        return result

    try:
        if not is_text_file(path):
            result.success = True
            return result
        original = read_file(path)
    except OSError as exc:
        result.error = exc
        return result

    detection = detect(original, patterns)
    if config.respect_allowlist and allowlist is not None:
        # what remains is what gets removed
        detection = apply_allowlist(detection, allowlist)

    if detection.total_count == 0:
        result.success = True
        return result

    if config.create_backup:
        try:
            result.backup_path = create_backup(path, original)
        except OSError as exc:
            result.error = OSError(f"failed to create backup: {exc}")
            result.error.__cause__ = exc
            return result

    if config.dry_run:
        result.success = True
        result.modified = True
        result.emojis_removed = detection.total_count
        return result

    new_content = remove_emojis(original, detection, config.replacement)

    try:
        atomic_write_file(
            path, new_content, DEFAULT_MODE,
            preserve_existing=config.preserve_permissions,
        )
    except OSError as exc:
        logger.warning("failed to write %s: %s", path, exc)
        result.error = OSError(f"failed to write file: {exc}")
        result.error.__cause__ = exc
        return result

    logger.info("removed %d emoji(s) from %s", detection.total_count, path)
    result.success = True
    result.modified = True
    result.emojis_removed = detection.total_count
    return result


def remove_emojis(content: bytes, detection: DetectionResult, replacement: str = "") -> bytes:
    """Splice every match out of ``content``, right-to-left to keep offsets valid."""
    if not detection.matches:
        return content

    rep = replacement.encode("utf-8")
    buf = bytearray(content)
    for m in sorted(detection.matches, key=lambda m: m.start, reverse=True):
        if 0 <= m.start < m.end <= len(buf):
            buf[m.start:m.end] = rep
    return bytes(buf)


def backup_path_for(file_path: str | Path, when: datetime | None = None) -> str:
    """``dir/name.ext`` → ``dir/name.backup.YYYYMMDDHHMMSS.ext``."""
    p = Path(file_path)
    stamp = (when or datetime.now()).strftime(_BACKUP_STAMP)
    return str(p.with_name(f"{p.stem}.backup.{stamp}{p.suffix}"))


def create_backup(file_path: str | Path, content: bytes | None = None) -> str:
    """Copy ``file_path`` next to itself with the original permission bits.

    Returns the backup path.  ``content`` avoids re-reading when the caller
    already holds the bytes.
    """
    mode = stat.S_IMODE(os.stat(file_path).st_mode)
    if content is None:
        content = read_file(file_path)

    backup = backup_path_for(file_path)
    fd = os.open(backup, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    with os.fdopen(fd, "wb") as f:
        f.write(content)
    os.chmod(backup, mode)
    logger.debug("backup written: %s", backup)
    return backup


def atomic_write_file(
    file_path: str | Path,
    data: bytes,
    perm: int = DEFAULT_MODE,
    *,
    preserve_existing: bool = True,
) -> None:
    """Replace ``file_path`` with ``data`` via temp file + fsync + rename.

    The new file gets the existing file's permission bits when
    ``preserve_existing`` is set and the file exists, ``perm`` otherwise.
    On any error the temp file is removed and the exception propagates.
    """
    target = os.fspath(file_path)
    mode = perm
    if preserve_existing:
        try:
            mode = stat.S_IMODE(os.stat(target).st_mode)
        except FileNotFoundError:
            pass

    directory = os.path.dirname(os.path.abspath(target))
    fd, tmp_path = tempfile.mkstemp(prefix=_TMP_PREFIX, dir=directory)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, target)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
        raise

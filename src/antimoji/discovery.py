"""File discovery — expand CLI arguments into the list of files to process.

Rules, first match wins:
  1. a directory component in ``directory_ignore_list`` excludes the file
  2. ``file_ignore_list`` / ``exclude_patterns`` (plus a CLI exclude) exclude it
  3. if any include pattern exists (profile or CLI), the file must match one

Patterns are fnmatch globs tested against the file name and against the
path relative to the walked root.  ``**/`` may match zero directories.
"""

from __future__ import annotations
import fnmatch
import logging
import os
from pathlib import PurePosixPath

from .config import Profile

logger = logging.getLogger(__name__)


class DiscoveryError(ValueError):
    """Raised for arguments that cannot be expanded (e.g. a directory without recursion)."""


def discover_files(
    args: list[str],
    profile: Profile,
    *,
    recursive: bool | None = None,
    include: str = "",
    exclude: str = "",
) -> list[str]:
    """Expand files and directories into a sorted file list.

    Paths that do not exist are passed through so they surface as per-file
    errors downstream.
    """
    recursive = profile.recursive if recursive is None else recursive
    files: list[str] = []

    for arg in args:
        if not os.path.exists(arg):
            files.append(arg)
            continue

        if os.path.isdir(arg):
            if not recursive:
                raise DiscoveryError(f"directory {arg} requires --recursive")
            files.extend(_walk(arg, profile, include, exclude))
        elif should_include(arg, profile, include=include, exclude=exclude):
            files.append(arg)

    return files


def should_include(
    path: str,
    profile: Profile,
    *,
    include: str = "",
    exclude: str = "",
    root: str | None = None,
) -> bool:
    rel = os.path.relpath(path, root) if root else path
    posix = PurePosixPath(rel.replace(os.sep, "/"))
    name = posix.name

    for part in posix.parts[:-1]:
        if part in profile.directory_ignore_list:
            return False

    excludes = [*profile.file_ignore_list, *profile.exclude_patterns]
    if exclude:
        excludes.append(exclude)
    if any(_matches(p, str(posix), name) for p in excludes):
        return False

    includes = list(profile.include_patterns)
    if include:
        includes.append(include)
    if includes:
        return any(_matches(p, str(posix), name) for p in includes)
    return True


def _walk(root: str, profile: Profile, include: str, exclude: str) -> list[str]:
    found: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root, followlinks=profile.follow_symlinks):
        dirnames[:] = sorted(d for d in dirnames if d not in profile.directory_ignore_list)
        for fname in sorted(filenames):
            path = os.path.join(dirpath, fname)
            if not profile.follow_symlinks and os.path.islink(path):
                continue
            if should_include(path, profile, include=include, exclude=exclude, root=root):
                found.append(path)
    logger.debug("discovered %d files under %s", len(found), root)
    return found


def _matches(pattern: str, path: str, name: str) -> bool:
    if fnmatch.fnmatch(name, pattern) or fnmatch.fnmatch(path, pattern):
        return True
    # "**/x" also matches "x" at the top level
    if pattern.startswith("**/"):
        return _matches(pattern[3:], path, name)
    return False

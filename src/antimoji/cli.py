"""CLI interface for antimoji.

Usage:
    # Report emojis (stdout: JSON)
    antimoji scan -r docs/ README.md

    # Remove them, keeping a timestamped backup of each changed file
    antimoji clean -r --backup src/

    # See what would change
    antimoji clean --dry-run README.md

    # Use a named profile from ~/.config/antimoji/config.yaml
    antimoji --profile ci scan -r .
"""

from __future__ import annotations
import argparse
import json
import logging
import sys
from typing import Any

import yaml

from .config import (
    DEFAULT_CONFIG_PATH,
    ConfigError,
    Profile,
    allowlist_for_profile,
    get_profile,
    load_default,
    load_from_yaml,
    modify_config_for_profile,
    patterns_for_profile,
    processing_config_for_profile,
)
from .discovery import DiscoveryError, discover_files
from .modifier import ModifyResult
from .processor import Pipeline
from .types import ProcessResult


def _load_profile(args: argparse.Namespace) -> Profile:
    config = load_from_yaml(args.config) if args.config else load_default()
    return get_profile(config, args.profile)


def _pipeline(args: argparse.Namespace, profile: Profile) -> Pipeline:
    workers = args.workers if args.workers is not None else profile.max_workers
    return Pipeline(
        patterns=patterns_for_profile(profile),
        config=processing_config_for_profile(profile),
        workers=workers,
    )


def _files(args: argparse.Namespace, profile: Profile) -> list[str]:
    return discover_files(
        args.paths,
        profile,
        recursive=True if args.recursive else None,
        include=args.include,
        exclude=args.exclude,
    )


def _error(exc: Exception | None) -> str | None:
    return str(exc) if exc is not None else None


def _scan_entry(r: ProcessResult, allowed: set[int]) -> dict[str, Any]:
    return {
        "file": r.file_path,
        "error": _error(r.error),
        "total_count": r.detection.total_count,
        "unique_count": r.detection.unique_count,
        "matches": [
            {
                "emoji": m.emoji,
                "line": m.line,
                "column": m.column,
                "start": m.start,
                "end": m.end,
                "category": m.category.value,
                "allowed": i in allowed,
            }
            for i, m in enumerate(r.detection.matches)
        ],
    }


def _modify_entry(r: ModifyResult) -> dict[str, Any]:
    return {
        "file": r.file_path,
        "success": r.success,
        "modified": r.modified,
        "emojis_removed": r.emojis_removed,
        "backup_path": r.backup_path,
        "error": _error(r.error),
    }


def cmd_scan(args: argparse.Namespace) -> int:
    """Scan files and print a JSON report.  Returns the exit code."""
    profile = _load_profile(args)
    allowlist = allowlist_for_profile(profile, ignore=args.ignore_allowlist)
    results = _pipeline(args, profile).scan(_files(args, profile))

    files = []
    found = 0
    for r in sorted(results, key=lambda r: r.file_path):
        allowed: set[int] = set()
        if allowlist is not None:
            allowed = {i for i, m in enumerate(r.detection.matches) if allowlist.is_allowed(m.emoji)}
        found += r.detection.total_count - len(allowed)
        files.append(_scan_entry(r, allowed))

    json.dump({"files": files, "total_emojis": found}, sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")

    if profile.fail_on_found and found > profile.max_emoji_threshold:
        return profile.exit_code_on_found
    return 1 if any(r.error is not None for r in results) else 0


def cmd_clean(args: argparse.Namespace) -> int:
    """Remove emojis from files and print a JSON summary.  Returns the exit code."""
    profile = _load_profile(args)
    overrides: dict[str, Any] = {"dry_run": args.dry_run}
    if args.backup:
        overrides["create_backup"] = True
    if args.replace is not None:
        overrides["replacement"] = args.replace
    modify_config = modify_config_for_profile(profile, **overrides)
    allowlist = allowlist_for_profile(profile, ignore=args.ignore_allowlist)

    results = _pipeline(args, profile).clean(_files(args, profile), modify_config, allowlist)
    results.sort(key=lambda r: r.file_path)

    json.dump(
        {
            "files": [_modify_entry(r) for r in results],
            "modified": sum(1 for r in results if r.modified),
            "emojis_removed": sum(r.emojis_removed for r in results),
            "dry_run": modify_config.dry_run,
        },
        sys.stdout, indent=2, ensure_ascii=False,
    )
    sys.stdout.write("\n")
    return 0 if all(r.success for r in results) else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="antimoji",
        description="Find and remove emojis in source files",
    )
    parser.add_argument("--config", default="", help=f"YAML config path (default: {DEFAULT_CONFIG_PATH})")
    parser.add_argument("--profile", default="default", help="Config profile name")
    parser.add_argument("--workers", type=int, default=None, help="Worker threads (0 = one per CPU)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")

    sub = parser.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("paths", nargs="+", help="Files or directories")
        p.add_argument("-r", "--recursive", action="store_true", help="Descend into directories")
        p.add_argument("--include", default="", help="Only process files matching this glob")
        p.add_argument("--exclude", default="", help="Skip files matching this glob")
        p.add_argument("--ignore-allowlist", action="store_true", help="Treat allowed emojis like any other")

    scan = sub.add_parser("scan", help="Report emojis (JSON stdout)")
    add_common(scan)

    clean = sub.add_parser("clean", help="Remove emojis from files")
    add_common(clean)
    clean.add_argument("--backup", action="store_true", help="Write a timestamped backup first")
    clean.add_argument("--dry-run", action="store_true", help="Report without writing")
    clean.add_argument("--replace", default=None, help="Replacement text (default: remove)")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    cmds = {
        "scan": cmd_scan,
        "clean": cmd_clean,
    }
    try:
        return cmds[args.command](args)
    except (ConfigError, DiscoveryError, OSError, yaml.YAMLError) as exc:
        sys.stderr.write(f"antimoji: {exc}\n")
        return 2


if __name__ == "__main__":
    sys.exit(main())

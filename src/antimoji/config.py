"""YAML/dict config loader for antimoji.

Supports loading from a YAML file or a plain dict (for embedding in a
larger tool config).  Named profiles are layered over ``default``.

Example YAML:

    profiles:
      default:
        recursive: true
        unicode_emojis: true
        text_emoticons: true
        custom_patterns: [":shipit:"]
        emoji_allowlist: ["✅", "❌"]
        directory_ignore_list: [".git", "node_modules"]
        max_workers: 0            # 0 = one per CPU
      ci:
        fail_on_found: true
        max_emoji_threshold: 0
"""

from __future__ import annotations
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .allowlist import Allowlist
from .modifier import ModifyConfig
from .patterns import DEFAULT_CUSTOM, DEFAULT_EMOTICONS, DEFAULT_UNICODE_RANGES
from .types import PatternSet, ProcessingConfig

logger = logging.getLogger(__name__)

DEFAULT_PROFILE = "default"
DEFAULT_CONFIG_PATH = os.environ.get(
    "ANTIMOJI_CONFIG",
    str(Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "antimoji" / "config.yaml"),
)


class ConfigError(ValueError):
    """Malformed configuration or unknown profile."""


@dataclass
class Profile:
    """One named set of scan/clean settings."""
    # file discovery
    recursive: bool = True
    follow_symlinks: bool = False
    backup_files: bool = False
    include_patterns: list[str] = field(default_factory=list)   # empty = everything
    exclude_patterns: list[str] = field(default_factory=lambda: ["vendor/*", "node_modules/*", ".git/*"])
    file_ignore_list: list[str] = field(default_factory=lambda: [
        "*.min.js", "*.min.css", "vendor/**/*", "node_modules/**/*",
        ".git/**/*", "**/*.generated.*",
    ])
    directory_ignore_list: list[str] = field(default_factory=lambda: [
        ".git", "node_modules", "vendor", "dist", "build",
    ])

    # detection
    unicode_emojis: bool = True
    text_emoticons: bool = True
    custom_patterns: list[str] = field(default_factory=list)
    emoji_allowlist: list[str] = field(default_factory=list)

    # replacement
    replacement: str = ""

    # CI gating
    fail_on_found: bool = False
    max_emoji_threshold: int = 0
    exit_code_on_found: int = 1

    # performance
    max_workers: int = 0
    max_file_size: int = 100 * 1024 * 1024


_PROFILE_KEYS = frozenset(f.name for f in fields(Profile))
_LIST_KEYS = frozenset({
    "include_patterns", "exclude_patterns", "file_ignore_list",
    "directory_ignore_list", "custom_patterns", "emoji_allowlist",
})


def default_config() -> dict[str, Profile]:
    return {DEFAULT_PROFILE: Profile()}


def load_config(data: dict[str, Any] | None) -> dict[str, Profile]:
    """Normalize a config dict (from YAML or inline) into profiles."""
    data = data or {}
    if not isinstance(data, dict):
        raise ConfigError("config must be a mapping")
    # Support nested under "antimoji" key or flat
    if "antimoji" in data:
        data = data["antimoji"] or {}

    raw_profiles = data.get("profiles", {}) or {}
    if not isinstance(raw_profiles, dict):
        raise ConfigError("'profiles' must be a mapping of name → settings")

    base = _build_profile(raw_profiles.get(DEFAULT_PROFILE), Profile(), DEFAULT_PROFILE)
    profiles = {DEFAULT_PROFILE: base}
    for name, raw in raw_profiles.items():
        if name == DEFAULT_PROFILE:
            continue
        profiles[name] = _build_profile(raw, base, name)
    return profiles


def load_from_yaml(path: str | Path) -> dict[str, Profile]:
    """Load config from a YAML file."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    logger.debug("loaded config from %s", path)
    return load_config(data)


def load_default() -> dict[str, Profile]:
    """Config from DEFAULT_CONFIG_PATH if it exists, built-in defaults otherwise."""
    if os.path.isfile(DEFAULT_CONFIG_PATH):
        return load_from_yaml(DEFAULT_CONFIG_PATH)
    return default_config()


def get_profile(config: dict[str, Profile], name: str = "") -> Profile:
    name = name or DEFAULT_PROFILE
    try:
        return config[name]
    except KeyError:
        raise ConfigError(f"profile not found: {name}") from None


def _build_profile(raw: Any, base: Profile, name: str) -> Profile:
    if raw is None:
        return Profile(**asdict(base))
    if not isinstance(raw, dict):
        raise ConfigError(f"profile {name!r} must be a mapping")

    unknown = set(raw) - _PROFILE_KEYS
    if unknown:
        logger.warning("profile %r: ignoring unknown keys %s", name, sorted(unknown))

    values = asdict(base)
    for key in _PROFILE_KEYS & set(raw):
        value = raw[key]
        if key in _LIST_KEYS:
            if value is None:
                value = []
            elif isinstance(value, str):
                value = [value]
            elif not isinstance(value, list):
                raise ConfigError(f"profile {name!r}: {key} must be a list")
            value = [str(v) for v in value]
        values[key] = value

    profile = Profile(**values)
    if profile.max_workers < 0:
        raise ConfigError(f"profile {name!r}: max_workers must be >= 0")
    if profile.max_file_size < 0:
        raise ConfigError(f"profile {name!r}: max_file_size must be >= 0")
    return profile


# ----------------------------------------------------------------------
# Profile → runtime objects
# ----------------------------------------------------------------------

def patterns_for_profile(profile: Profile) -> PatternSet:
    """Built-in ranges/emoticons per the profile flags, plus its custom tokens."""
    custom = tuple(dict.fromkeys([*DEFAULT_CUSTOM, *profile.custom_patterns]))
    return PatternSet(
        unicode_ranges=DEFAULT_UNICODE_RANGES if profile.unicode_emojis else (),
        emoticons=DEFAULT_EMOTICONS if profile.text_emoticons else (),
        custom=custom,
    )


def processing_config_for_profile(profile: Profile) -> ProcessingConfig:
    return ProcessingConfig(
        enable_unicode=profile.unicode_emojis,
        enable_emoticons=profile.text_emoticons,
        max_file_size=profile.max_file_size,
    )


def modify_config_for_profile(profile: Profile, **overrides: Any) -> ModifyConfig:
    config = ModifyConfig(
        replacement=profile.replacement,
        create_backup=profile.backup_files,
        max_file_size=profile.max_file_size,
    )
    for key, value in overrides.items():
        setattr(config, key, value)
    return config


def should_use_allowlist(profile: Profile, *, respect: bool = True, ignore: bool = False) -> bool:
    """``ignore`` wins over ``respect``; an empty allowlist is never used."""
    if ignore:
        return False
    return respect and bool(profile.emoji_allowlist)


def allowlist_for_profile(
    profile: Profile,
    *,
    respect: bool = True,
    ignore: bool = False,
) -> Allowlist | None:
    if not should_use_allowlist(profile, respect=respect, ignore=ignore):
        logger.debug("allowlist not in use (respect=%s, ignore=%s)", respect, ignore)
        return None
    allowlist = Allowlist(profile.emoji_allowlist)
    logger.debug("allowlist configured with %d patterns", allowlist.size)
    return allowlist

"""Core types."""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum


class EmojiCategory(str, Enum):
    UNICODE = "unicode"      # pictographs, e.g. 😀 👍🏽
    EMOTICON = "emoticon"    # ASCII faces, e.g. :) ;-(
    CUSTOM = "custom"        # colon tokens, e.g. :rocket:


@dataclass(frozen=True, slots=True)
class EmojiMatch:
    """A single detected emoji occurrence."""
    emoji: str
    start: int             # byte offset
    end: int               # byte offset, exclusive
    line: int              # 1-based
    column: int            # 1-based
    category: EmojiCategory


@dataclass(frozen=True, slots=True)
class UnicodeRange:
    """Inclusive range of code points that count as emoji."""
    start: int
    end: int
    name: str

    def contains(self, cp: int) -> bool:
        return self.start <= cp <= self.end


@dataclass(frozen=True, slots=True)
class PatternSet:
    """Everything the detector treats as emoji."""
    unicode_ranges: tuple[UnicodeRange, ...] = ()
    emoticons: tuple[str, ...] = ()
    custom: tuple[str, ...] = ()


@dataclass(slots=True)
class DetectionResult:
    """Output of one detector run.

    Built incrementally with ``add_emoji`` and sealed with ``finalize``.
    """
    matches: list[EmojiMatch] = field(default_factory=list)
    total_count: int = 0
    unique_count: int = 0
    processed_bytes: int = 0
    duration: float = 0.0          # seconds
    success: bool = False

    def add_emoji(self, match: EmojiMatch) -> None:
        self.matches.append(match)
        self.total_count += 1

    def finalize(self) -> None:
        self.unique_count = len({m.emoji for m in self.matches})
        self.success = True


@dataclass(slots=True)
class ProcessingConfig:
    """Scan-side configuration."""
    enable_unicode: bool = True
    enable_emoticons: bool = True
    enable_custom: bool = True
    max_file_size: int = 100 * 1024 * 1024


@dataclass(slots=True)
class ProcessResult:
    """Result of scanning one file."""
    file_path: str
    detection: DetectionResult = field(default_factory=DetectionResult)
    error: Exception | None = None
    modified: bool = False
    backup_path: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

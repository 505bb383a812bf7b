"""Allowlist — emoji that are exempt from removal.

Lookups go through ``normalize`` so that "⚠" and "⚠️" (with variation
selector) are the same entry.

Usage:
    allow = Allowlist(["✅", "❌"])
    allow.is_allowed("✅")        # True
    "✅️" in allow           # True
"""

from __future__ import annotations
import logging
import unicodedata
from collections.abc import Iterable
from dataclasses import replace

from .types import DetectionResult, EmojiMatch

logger = logging.getLogger(__name__)

_STRIPPED = frozenset({
    0xFE0F, 0xFE0E,   # variation selectors
    0x200D, 0x200C,   # zero-width joiner / non-joiner
    0x00AD,           # soft hyphen
    0x034F,           # combining grapheme joiner
    0x061C,           # arabic letter mark
    0x115F, 0x1160,   # hangul fillers
    0x17B4, 0x17B5,   # khmer inherent vowels
    0x180E,           # mongolian vowel separator
    0x3164,           # hangul filler
    0xFEFF,           # zero width no-break space
})
_INVISIBLE_CATEGORIES = frozenset({"Cf", "Mn", "Me"})


def normalize(emoji: str) -> str:
    """Strip invisible code points and surrounding whitespace."""
    kept = [
        ch for ch in emoji
        if ord(ch) not in _STRIPPED
        and unicodedata.category(ch) not in _INVISIBLE_CATEGORIES
    ]
    return "".join(kept).strip()


class Allowlist:
    """Normalized, immutable set of allowed emoji strings."""

    __slots__ = ("_patterns", "_original")

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        self._original: tuple[str, ...] = tuple(patterns)
        self._patterns: frozenset[str] = frozenset(normalize(p) for p in self._original)

    @classmethod
    def build(cls, patterns: Iterable[str]) -> "Allowlist":
        return cls(patterns)

    def is_allowed(self, emoji: str) -> bool:
        if not emoji:
            return False
        return normalize(emoji) in self._patterns

    def __contains__(self, emoji: object) -> bool:
        return isinstance(emoji, str) and self.is_allowed(emoji)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def size(self) -> int:
        """Number of distinct normalized entries."""
        return len(self._patterns)

    @property
    def patterns(self) -> list[str]:
        """Copy of the patterns as supplied, before normalization."""
        return list(self._original)

    @property
    def is_empty(self) -> bool:
        return not self._patterns

    def __len__(self) -> int:
        return self.size

    def __repr__(self) -> str:
        return f"Allowlist({list(self._original)!r})"


def apply_allowlist(
    detection: DetectionResult,
    allowlist: Allowlist | None,
) -> DetectionResult:
    """Return a new result without the allowed matches.

    What remains is what a clean would remove.  Counts are recomputed;
    byte count, duration and success carry over.  Does NOT mutate
    ``detection``.  With no allowlist the input is returned as is.
    """
    if allowlist is None:
        return detection
    kept = [m for m in detection.matches if not allowlist.is_allowed(m.emoji)]
    logger.debug(
        "allowlist kept %d of %d matches", len(kept), len(detection.matches),
    )
    return _rebuild(detection, kept)


def _rebuild(detection: DetectionResult, matches: list[EmojiMatch]) -> DetectionResult:
    filtered = replace(detection, matches=[], total_count=0, unique_count=0)
    for m in matches:
        filtered.add_emoji(m)
    # finalize() forces success, so restore the carried-through flag
    success = detection.success
    filtered.finalize()
    filtered.success = success
    return filtered


def merge(a: Allowlist | None, b: Allowlist | None) -> Allowlist:
    """Union of two allowlists, re-normalized."""
    if a is None and b is None:
        return Allowlist()
    if a is None:
        return b  # type: ignore[return-value]
    if b is None:
        return a
    return Allowlist([*a.patterns, *b.patterns])


def default_allowlist() -> Allowlist:
    """Status marks that are commonly kept in docs and CI output."""
    return Allowlist([
        # status indicators
        "✅", "❌", "⚠️", "ℹ️",
        # version control / CI
        "🚀", "🎉", "⭐", "🔥", "🐛", "✨",
        # docs
        "📝", "📚", "💡", "📌",
        # colon codes
        ":white_check_mark:", ":x:", ":warning:", ":information_source:",
        ":rocket:", ":tada:", ":star:", ":fire:", ":bug:", ":sparkles:",
    ])

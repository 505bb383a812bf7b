"""Built-in emoji patterns.

The default set is part of the public contract: changing a range or
literal changes reported counts.
"""

from __future__ import annotations
from dataclasses import replace

from .types import PatternSet, ProcessingConfig, UnicodeRange

# (start, end, name), inclusive
_UNICODE_RANGES: list[tuple[int, int, str]] = [
    (0x1F600, 0x1F64F, "Emoticons"),
    (0x1F300, 0x1F5FF, "Miscellaneous Symbols"),
    (0x1F680, 0x1F6FF, "Transport and Map"),
    (0x1F1E0, 0x1F1FF, "Regional Indicators"),
    (0x1F900, 0x1F9FF, "Supplemental Symbols"),
    (0x1FA70, 0x1FAFF, "Extended Symbols A"),
    (0x2600, 0x26FF, "Miscellaneous Symbols"),
    (0x2700, 0x27BF, "Dingbats"),
]

_EMOTICONS: list[str] = [
    ":)", ":(", ":D", ":P", ":o", ":O", ";)", ";(",
    "=)", "=(", "=D", "=P", "=o", "=O", ">:)", ">:(",
    ":-)", ":-(", ":-D", ":-P", ":-o", ":-O", ";-)", ";-(",
]

_CUSTOM: list[str] = [
    ":smile:", ":frown:", ":thumbs_up:", ":thumbs_down:", ":heart:",
    ":star:", ":check:", ":cross:", ":warning:",
    ":fire:", ":rocket:", ":tada:", ":sparkles:", ":zap:",
]

DEFAULT_UNICODE_RANGES: tuple[UnicodeRange, ...] = tuple(
    UnicodeRange(start, end, name) for start, end, name in _UNICODE_RANGES
)
DEFAULT_EMOTICONS: tuple[str, ...] = tuple(_EMOTICONS)
DEFAULT_CUSTOM: tuple[str, ...] = tuple(_CUSTOM)


def default_patterns() -> PatternSet:
    """The built-in pattern set."""
    return PatternSet(
        unicode_ranges=DEFAULT_UNICODE_RANGES,
        emoticons=DEFAULT_EMOTICONS,
        custom=DEFAULT_CUSTOM,
    )


def filter_patterns(patterns: PatternSet, config: ProcessingConfig) -> PatternSet:
    """Drop the pattern groups disabled in ``config``."""
    return replace(
        patterns,
        unicode_ranges=patterns.unicode_ranges if config.enable_unicode else (),
        emoticons=patterns.emoticons if config.enable_emoticons else (),
        custom=patterns.custom if config.enable_custom else (),
    )


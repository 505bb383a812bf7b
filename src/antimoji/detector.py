"""Emoji detection — a single pass over code points plus literal searches.

Usage:
    from antimoji import detect, default_patterns

    result = detect("Hello 😀 world! :)".encode(), default_patterns())
    [(m.emoji, m.start, m.end) for m in result.matches]
    # [('😀', 6, 10), (':)', 18, 20)]

Offsets are byte offsets into the UTF-8 content so that callers can splice
the original bytes without re-encoding.  Invalid UTF-8 is tolerated: each bad
byte is carried as a single opaque code point and is never reported.
"""

from __future__ import annotations
import time
from bisect import bisect_left

from .types import DetectionResult, EmojiCategory, EmojiMatch, PatternSet

# Code points folded into the preceding emoji
_SKIN_TONE_FIRST = 0x1F3FB
_SKIN_TONE_LAST = 0x1F3FF
_ZWJ = 0x200D
_VS16 = 0xFE0F

# surrogateescape maps each undecodable byte to U+DC80..U+DCFF
_ESCAPED_FIRST = 0xDC80
_ESCAPED_LAST = 0xDCFF


def detect(content: bytes | str | None, patterns: PatternSet) -> DetectionResult:
    """Detect emojis in ``content``.  Never raises.

    Matches come back sorted by start offset and non-overlapping; when two
    candidates overlap the one that starts first wins.
    """
    if not content:
        result = DetectionResult()
        result.finalize()
        return result

    if isinstance(content, str):
        content = _encode(content)

    started = time.perf_counter()
    result = DetectionResult(processed_bytes=len(content))
    positions = _PositionIndex(content)

    candidates: list[EmojiMatch] = []
    candidates.extend(_scan_unicode(content, patterns))
    candidates.extend(_scan_literals(
        content, patterns.emoticons, EmojiCategory.EMOTICON, positions, bounded=True,
    ))
    candidates.extend(_scan_literals(
        content, patterns.custom, EmojiCategory.CUSTOM, positions, bounded=False,
    ))

    for match in remove_overlaps(sorted(candidates, key=lambda m: m.start)):
        result.add_emoji(match)

    result.duration = time.perf_counter() - started
    result.finalize()
    return result


def _encode(text: str) -> bytes:
    try:
        return text.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError:
        # lone surrogates outside the escape range come back as invalid bytes
        return text.encode("utf-8", "surrogatepass")


def remove_overlaps(matches: list[EmojiMatch]) -> list[EmojiMatch]:
    """Drop matches overlapping an earlier kept one.  Input must be sorted by start."""
    kept: list[EmojiMatch] = []
    for m in matches:
        if not kept or m.start >= kept[-1].end:
            kept.append(m)
    return kept


def is_modifier(cp: int) -> bool:
    """True for code points that extend the emoji before them."""
    return _SKIN_TONE_FIRST <= cp <= _SKIN_TONE_LAST or cp == _ZWJ or cp == _VS16


def _is_emoji(cp: int, patterns: PatternSet) -> bool:
    if _ESCAPED_FIRST <= cp <= _ESCAPED_LAST:
        return False
    return any(r.contains(cp) for r in patterns.unicode_ranges)


def _utf8_width(cp: int) -> int:
    if cp < 0x80:
        return 1
    if cp < 0x800:
        return 2
    if _ESCAPED_FIRST <= cp <= _ESCAPED_LAST:
        return 1
    if cp < 0x10000:
        return 3
    return 4


def _scan_unicode(content: bytes, patterns: PatternSet) -> list[EmojiMatch]:
    """Walk code points, tracking byte offset, line and column."""
    if not patterns.unicode_ranges:
        return []

    text = content.decode("utf-8", "surrogateescape")
    matches: list[EmojiMatch] = []
    offset = 0
    line = 1
    column = 1
    i = 0
    n = len(text)

    while i < n:
        cp = ord(text[i])
        if _is_emoji(cp, patterns):
            j = i + 1
            end = offset + _utf8_width(cp)
            while j < n and is_modifier(ord(text[j])):
                end += _utf8_width(ord(text[j]))
                j += 1
            matches.append(EmojiMatch(
                emoji=text[i:j],
                start=offset,
                end=end,
                line=line,
                column=column,
                category=EmojiCategory.UNICODE,
            ))
            column += j - i
            offset = end
            i = j
            continue

        offset += _utf8_width(cp)
        if cp == 0x0A:
            line += 1
            column = 1
        else:
            column += 1
        i += 1

    return matches


def _scan_literals(
    content: bytes,
    literals: tuple[str, ...],
    category: EmojiCategory,
    positions: _PositionIndex,
    *,
    bounded: bool,
) -> list[EmojiMatch]:
    """Exact, non-overlapping search for each literal."""
    matches: list[EmojiMatch] = []
    for literal in literals:
        if not literal:
            continue
        needle = literal.encode("utf-8")
        start = 0
        while True:
            idx = content.find(needle, start)
            if idx == -1:
                break
            end = idx + len(needle)
            if bounded and not _at_word_boundary(content, idx, end):
                start = idx + 1
                continue
            line, column = positions.locate(idx)
            matches.append(EmojiMatch(
                emoji=literal,
                start=idx,
                end=end,
                line=line,
                column=column,
                category=category,
            ))
            start = end
    return matches


def _at_word_boundary(content: bytes, start: int, end: int) -> bool:
    # bytes.isalnum() is ASCII-only
    if start > 0 and content[start - 1:start].isalnum():
        return False
    if end < len(content) and content[end:end + 1].isalnum():
        return False
    return True


class _PositionIndex:
    """Maps byte offsets to 1-based (line, column)."""

    __slots__ = ("_content", "_newlines")

    def __init__(self, content: bytes) -> None:
        self._content = content
        self._newlines: list[int] | None = None

    def locate(self, offset: int) -> tuple[int, int]:
        if self._newlines is None:
            self._newlines = [i for i, b in enumerate(self._content) if b == 0x0A]
        idx = bisect_left(self._newlines, offset)
        line_start = self._newlines[idx - 1] + 1 if idx else 0
        prefix = self._content[line_start:offset].decode("utf-8", "surrogateescape")
        return idx + 1, len(prefix) + 1

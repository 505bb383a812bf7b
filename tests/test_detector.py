"""Tests for the detector — code point scan, literal search, overlaps."""

from antimoji import EmojiCategory, PatternSet, UnicodeRange, default_patterns, detect
from antimoji.modifier import remove_emojis


PATTERNS = default_patterns()


def _assert_sorted_disjoint(result):
    for a, b in zip(result.matches, result.matches[1:]):
        assert a.start < b.start
        assert a.end <= b.start


# ── Unicode ──────────────────────────────────────────────────────────

def test_unicode_and_emoticon_positions():
    result = detect("Hello 😀 world! :)".encode(), PATTERNS)
    assert result.success
    assert result.total_count == 2
    face, smiley = result.matches
    assert (face.emoji, face.start, face.end) == ("😀", 6, 10)
    assert face.category is EmojiCategory.UNICODE
    assert (smiley.emoji, smiley.start, smiley.end) == (":)", 18, 20)
    assert smiley.category is EmojiCategory.EMOTICON


def test_skin_tone_is_absorbed():
    content = "👍🏽".encode()
    assert len(content) == 8
    result = detect(content, PATTERNS)
    assert result.total_count == 1
    m = result.matches[0]
    assert (m.start, m.end) == (0, 8)
    assert m.emoji == "👍🏽"
    assert m.category is EmojiCategory.UNICODE


def test_variation_selector_is_absorbed():
    result = detect("warn ⚠️ here".encode(), PATTERNS)
    assert result.total_count == 1
    assert result.matches[0].emoji == "⚠️"
    assert result.matches[0].end - result.matches[0].start == 6


def test_zwj_extends_only_over_modifiers():
    # the joiner folds into the first match; the second pictograph starts its own
    result = detect("\U0001F468\u200d\U0001F4BB", PATTERNS)
    assert [m.emoji for m in result.matches] == ["\U0001F468\u200d", "\U0001F4BB"]
    _assert_sorted_disjoint(result)


def test_regional_indicators():
    result = detect("flag 🇺🇸", PATTERNS)
    assert result.total_count == 2
    assert result.unique_count == 2


def test_line_and_column():
    result = detect("one\ntwo 🚀\n  🔥", PATTERNS)
    rocket, fire = result.matches
    assert (rocket.line, rocket.column) == (2, 5)
    assert (fire.line, fire.column) == (3, 3)


def test_str_and_bytes_agree():
    text = "ok ✅ and :D"
    assert detect(text, PATTERNS).matches == detect(text.encode(), PATTERNS).matches


# ── Emoticons / custom ───────────────────────────────────────────────

def test_emoticon_word_boundary():
    result = detect(b"smiley:)x", PATTERNS)
    assert result.total_count == 0


def test_emoticon_at_line_start_and_end():
    result = detect(b":) hi\nbye :(", PATTERNS)
    assert [m.emoji for m in result.matches] == [":)", ":("]
    assert (result.matches[1].line, result.matches[1].column) == (2, 5)


def test_custom_patterns_have_no_boundary_guard():
    result = detect(b"ship:rocket:it", PATTERNS)
    assert [m.emoji for m in result.matches] == [":rocket:"]
    assert result.matches[0].category is EmojiCategory.CUSTOM


def test_empty_literals_are_skipped():
    patterns = PatternSet(emoticons=("", ":)"), custom=("",))
    result = detect(b"a :) b", patterns)
    assert [m.emoji for m in result.matches] == [":)"]


def test_column_after_multibyte_prefix():
    result = detect("héllo :)", PATTERNS)
    assert result.matches[0].start == 7
    assert result.matches[0].column == 7


# ── Overlaps ─────────────────────────────────────────────────────────

def test_overlap_first_start_wins():
    # ">:)" starts before ":)" inside it
    result = detect(b"grr >:) ok", PATTERNS)
    assert [m.emoji for m in result.matches] == [">:)"]


def test_overlap_keeps_earlier_shorter_match():
    patterns = PatternSet(custom=("ab", "bcd"))
    result = detect(b"abcd", patterns)
    assert [m.emoji for m in result.matches] == ["ab"]


def test_matches_sorted_and_disjoint():
    text = "🎉 :) :rocket: 🚀 ;-) ✨✨ =D :fire:🔥 >:( 👍🏿"
    result = detect(text, PATTERNS)
    _assert_sorted_disjoint(result)
    assert result.unique_count <= result.total_count


# ── Counts / metadata ────────────────────────────────────────────────

def test_unique_count():
    result = detect("🔥 🔥 🚀", PATTERNS)
    assert result.total_count == 3
    assert result.unique_count == 2


def test_unique_equals_total_when_distinct():
    result = detect("🔥 🚀 :)", PATTERNS)
    assert result.unique_count == result.total_count == 3


def test_processed_bytes_and_duration():
    content = "abc 😀".encode()
    result = detect(content, PATTERNS)
    assert result.processed_bytes == len(content)
    assert result.duration >= 0


def test_empty_and_none_content():
    for content in (b"", "", None):
        result = detect(content, PATTERNS)
        assert result.success
        assert result.total_count == 0
        assert result.matches == []


def test_invalid_utf8_is_not_an_emoji():
    content = b"bad \xff\xfe bytes \xf0\x9f\x98\x80"
    result = detect(content, PATTERNS)
    assert result.total_count == 1
    m = result.matches[0]
    assert content[m.start:m.end] == "😀".encode()


def test_lone_surrogate_in_str_is_invalid_content():
    result = detect("a\ud800b 😀", PATTERNS)
    assert result.success
    assert [m.emoji for m in result.matches] == ["😀"]
    m = result.matches[0]
    assert (m.start, m.end) == (6, 10)
    assert m.column == 7


def test_escaped_bytes_in_str_match_bytes_input():
    content = b"x\xff :)"
    text = content.decode("utf-8", "surrogateescape")
    assert detect(text, PATTERNS).matches == detect(content, PATTERNS).matches


def test_invalid_bytes_never_flagged_even_with_wide_range():
    patterns = PatternSet(unicode_ranges=(UnicodeRange(0, 0x10FFFF, "everything"),))
    result = detect(b"\xff", patterns)
    assert result.total_count == 0


# ── Properties ───────────────────────────────────────────────────────

def test_removal_is_idempotent():
    content = "Deploy 🚀 done ✅ :) :rocket: 👍🏽".encode()
    cleaned = remove_emojis(content, detect(content, PATTERNS), "")
    assert detect(cleaned, PATTERNS).total_count == 0

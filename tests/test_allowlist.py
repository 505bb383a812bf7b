"""Tests for allowlist normalization, lookup, filtering and merging."""

from antimoji import Allowlist, apply_allowlist, default_patterns, detect, merge, normalize
from antimoji.allowlist import default_allowlist

CHECK = "✅"
CHECK_VS16 = "✅\ufe0f"
CROSS = "❌"
WARN = "⚠"
WARN_VS16 = "⚠\ufe0f"
GRIN = "\U0001F600"


# ── Normalization ────────────────────────────────────────────────────

def test_normalize_strips_variation_selectors():
    assert normalize(WARN_VS16) == WARN
    assert normalize("❤\ufe0e") == "❤"


def test_normalize_strips_joiners_and_invisibles():
    assert normalize("\U0001F468\u200d\U0001F4BB") == "\U0001F468\U0001F4BB"
    assert normalize("\u200c\u00ad\ufeff" + CHECK) == CHECK
    assert normalize("\u3164" + CHECK + "\u180e") == CHECK


def test_normalize_strips_combining_marks_and_whitespace():
    assert normalize("  e\u0301 ") == "e"
    assert normalize("1\u20e3") == "1"   # enclosing keycap


# ── Lookup ───────────────────────────────────────────────────────────

def test_is_allowed_ignores_variation_selector():
    allow = Allowlist([WARN])
    assert allow.is_allowed(WARN_VS16)
    assert WARN_VS16 in allow


def test_empty_string_never_allowed():
    allow = Allowlist(["", CHECK])
    assert not allow.is_allowed("")


def test_duplicates_collapse():
    allow = Allowlist.build([CHECK, CHECK, CHECK_VS16])
    assert allow.size == 1
    assert len(allow) == 1
    assert allow.patterns == [CHECK, CHECK, CHECK_VS16]


def test_patterns_is_a_copy():
    allow = Allowlist([CHECK])
    allow.patterns.append(CROSS)
    assert allow.patterns == [CHECK]


def test_is_empty():
    assert Allowlist().is_empty
    assert not Allowlist(["x"]).is_empty


def test_default_allowlist_has_status_marks():
    allow = default_allowlist()
    assert allow.is_allowed(CHECK)
    assert allow.is_allowed(WARN)
    assert allow.is_allowed(":warning:")


# ── Filtering ────────────────────────────────────────────────────────

def test_apply_allowlist_drops_allowed_matches():
    detection = detect(f"{CHECK} {GRIN}".encode(), default_patterns())
    filtered = apply_allowlist(detection, Allowlist([CHECK]))
    assert [m.emoji for m in filtered.matches] == [GRIN]


def test_apply_allowlist_recomputes_counts():
    detection = detect(f"Status: {CHECK} done, {GRIN} happy, {CROSS} failed, {GRIN}", default_patterns())
    filtered = apply_allowlist(detection, Allowlist([CHECK, CROSS]))
    assert [m.emoji for m in filtered.matches] == [GRIN, GRIN]
    assert filtered.total_count == 2
    assert filtered.unique_count == 1
    assert filtered.processed_bytes == detection.processed_bytes
    assert filtered.duration == detection.duration
    assert filtered.success == detection.success


def test_apply_allowlist_none_is_identity():
    detection = detect(GRIN, default_patterns())
    assert apply_allowlist(detection, None) is detection


def test_apply_allowlist_does_not_mutate_input():
    detection = detect(f"{CHECK} {GRIN}", default_patterns())
    apply_allowlist(detection, Allowlist([CHECK]))
    assert detection.total_count == 2
    assert len(detection.matches) == 2


def test_empty_allowlist_keeps_everything():
    detection = detect(f"{CHECK} {GRIN} :)", default_patterns())
    assert apply_allowlist(detection, Allowlist()).matches == detection.matches


def test_filtering_is_monotonic():
    detection = detect(f"{CHECK} {GRIN} :) :rocket: \U0001F680", default_patterns())
    for patterns in ([], [CHECK], [GRIN, ":)"], ["nothing"]):
        filtered = apply_allowlist(detection, Allowlist(patterns))
        assert len(filtered.matches) <= len(detection.matches)
        assert all(not Allowlist(patterns).is_allowed(m.emoji) for m in filtered.matches)


# ── Merge ────────────────────────────────────────────────────────────

def test_merge_unions_and_renormalizes():
    merged = merge(Allowlist([CHECK]), Allowlist([CHECK_VS16, CROSS]))
    assert merged.size == 2
    assert merged.is_allowed(CROSS)
    assert merged.patterns == [CHECK, CHECK_VS16, CROSS]


def test_merge_with_none():
    a = Allowlist([CHECK])
    assert merge(a, None) is a
    assert merge(None, a) is a
    assert merge(None, None).is_empty

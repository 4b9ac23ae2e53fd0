"""Grapheme segmentation and terminal width measurement.

The layout cache addresses text by UTF-8 byte offset, so the segmenter
yields ``(byte_offset, cluster, width)`` triples rather than plain clusters.
"""

from __future__ import annotations

import unicodedata
from typing import Callable, Iterator

import grapheme
import wcwidth as _wcwidth

# (byte_offset, cluster, width)
Segment = tuple[int, str, int]
Segmenter = Callable[[str, int], Iterator[Segment]]


# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Grapheme width
# ---------------------------------------------------------------------------


def grapheme_width(g: str, tab_stop: int = 8) -> int:
    """Return the terminal display width of a single grapheme cluster.

    Rules:
    1. A tab occupies *tab_stop* columns wherever it sits.
    2. Zero-width characters (control, combining marks, etc.) -> 0
    3. A regional indicator, alone or paired into a flag -> 2
    4. Emoji sequences (VS16 U+FE0F, ZWJ, skin tone modifier after the
       first codepoint) -> 2
    5. Otherwise the width of the first codepoint, so trailing combining
       marks never change a cluster's width.
    """
    if not g:
        return 0

    if len(g) == 1:
        if g == "\t":
            return tab_stop
        cp = ord(g)
        # Control characters, newlines included
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        if _is_regional_indicator(cp):
            return 2
        return max(_wcwidth.wcwidth(g), 0)

    cached = _width_cache.get(g)
    if cached is not None:
        return cached

    return _cache_width(g, _cluster_width(g))


def _is_regional_indicator(cp: int) -> bool:
    return 0x1F1E6 <= cp <= 0x1F1FF


def _cluster_width(g: str) -> int:
    last = len(g) - 1
    for i, ch in enumerate(g[1:], 1):
        cp = ord(ch)
        if cp == 0xFE0F:  # VS16
            return 2
        if cp == 0x200D and i < last:  # ZWJ joining two codepoints
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF:  # Skin tone modifiers
            return 2
        if _is_regional_indicator(cp):
            return 2
    # "\r\n", base + combining marks and friends
    return grapheme_width(g[0])


# ---------------------------------------------------------------------------
# Cluster boundaries
# ---------------------------------------------------------------------------

ZWJ = "\u200d"
# code points inspected after an edit boundary
_LOOKAHEAD = 8


def extends_cluster(ch: str) -> bool:
    """Whether *ch* attaches to the grapheme before it and can change its width.

    Plain combining marks are not included: they never change the width of
    the cluster they join.
    """
    cp = ord(ch)
    if cp in (0x200D, 0xFE0E, 0xFE0F):
        return True
    if 0x1F3FB <= cp <= 0x1F3FF or _is_regional_indicator(cp):
        return True
    return unicodedata.category(ch) == "Mc"


def may_join(before: str, after: str) -> bool:
    """Whether text ending in *before* followed by text starting with *after*
    can cluster differently from each side segmented alone.

    *after* holds the next few code points, so that a run of combining marks
    ending in a ZWJ is seen.
    """
    if before.endswith(ZWJ):
        return True
    if not after:
        return False
    if extends_cluster(after[0]):
        return True
    i = 0
    while i < len(after) and unicodedata.category(after[i]) in ("Mn", "Me"):
        i += 1
    if i == len(after):
        # a longer run of marks may still end in a ZWJ
        return i >= _LOOKAHEAD
    return i > 0 and after[i] == ZWJ


def chars_around(text: str, offset: int) -> tuple[str, str]:
    """The code point before byte *offset* of *text* and a few after it."""
    if text.isascii():
        return text[max(0, offset - 1) : offset], text[offset : offset + _LOOKAHEAD]
    data = text.encode("utf-8")
    before = data[max(0, offset - 4) : offset].decode("utf-8", "ignore")[-1:]
    after = data[offset : offset + 4 * _LOOKAHEAD].decode("utf-8", "ignore")
    return before, after[:_LOOKAHEAD]


# ---------------------------------------------------------------------------
# Segmentation
# ---------------------------------------------------------------------------


def byte_len(text: str) -> int:
    """Length of *text* in UTF-8 bytes."""
    if text.isascii():
        return len(text)
    return len(text.encode("utf-8"))


def segment(text: str, tab_stop: int = 8) -> Iterator[Segment]:
    """Yield ``(byte_offset, cluster, width)`` for each grapheme of *text*."""
    offset = 0
    for g in grapheme.graphemes(text):
        yield offset, g, grapheme_width(g, tab_stop)
        offset += byte_len(g)


def text_width(text: str, tab_stop: int = 8, segmenter: Segmenter = segment) -> int:
    """Sum of the cluster widths of *text* (no wrapping)."""
    return sum(width for _, _, width in segmenter(text, tab_stop))


def split_common_affixes(old: str, new: str) -> tuple[str, str, str]:
    """Strip the graphemes *old* and *new* share at both ends.

    Returns ``(prefix, old_middle, new_middle)``.
    """
    a = list(grapheme.graphemes(old))
    b = list(grapheme.graphemes(new))
    p = 0
    while p < len(a) and p < len(b) and a[p] == b[p]:
        p += 1
    s = 0
    while s < len(a) - p and s < len(b) - p and a[-1 - s] == b[-1 - s]:
        s += 1
    return "".join(a[:p]), "".join(a[p : len(a) - s]), "".join(b[p : len(b) - s])

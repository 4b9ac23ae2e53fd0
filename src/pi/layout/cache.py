"""Redraw optimisation: cache the mapping between byte offsets and screen cells.

The cache keeps one ``Entry`` per non-zero-width grapheme of the prompt and
of the edited text, sorted by byte offset. Sorting by offset also sorts by
screen position, so both directions of the mapping are a binary search away.

Edits are applied incrementally: the graphemes of the edited span are laid
out, and the entries after the edit are moved by a constant ``Shift``. The
shift is only checked, not trusted: when a wide grapheme would end up
astride the right edge (a wrap boundary moved) that entry is re-walked from
its predecessor and the shift is recomputed for the rest of the tail. Once
the shift is empty the remaining positions are unchanged and only their
offsets move.
"""

from __future__ import annotations

import logging
from bisect import bisect_left
from typing import Callable

from pi.layout.config import DEFAULT_TAB_STOP, LayoutOptions
from pi.layout.edits import Delete, Edit, Insert, Replace, Span, empty_span, full_repaint
from pi.layout.entry import (
    Entry,
    advance,
    check_entries,
    end_position,
    layout_entries,
    place,
    relayout,
)
from pi.layout.errors import LayoutArithmeticError, LayoutInvariantError
from pi.layout.graphemes import (
    ZWJ,
    Segmenter,
    byte_len,
    chars_around,
    extends_cluster,
    may_join,
    segment,
    split_common_affixes,
    text_width,
)
from pi.layout.position import ORIGIN, Position, Shift, shift
from pi.layout.prompt import Prompt, PromptContext, render_prompt

logger = logging.getLogger(__name__)


def _idx(e: Entry) -> int:
    return e.idx


class LayoutCache:
    """Layout of the prompt and the edited text on a ``columns`` wide screen.

    ``columns == 0`` means the terminal size is unknown: nothing is laid out
    and text edits only mark the cache dirty. When ``dirty`` is set the
    ``text`` entries lag behind the buffer; the next query rebuilds them from
    ``text_source``.

    Edits are reported after the buffer changed, so ``text_source`` already
    returns the edited text. It is also consulted when an edit may merge or
    split graphemes across its edges (emoji modifiers, ZWJ sequences, flags):
    such edits mark the cache dirty instead of being applied in place.
    """

    def __init__(
        self,
        tab_stop: int = DEFAULT_TAB_STOP,
        text_source: Callable[[], str] | None = None,
        segmenter: Segmenter = segment,
    ) -> None:
        self.prompt: list[Entry] = []
        self.text: list[Entry] = []
        self.columns = 0
        self.rows = 0
        self.tab_stop = tab_stop
        self.dirty = False
        self._prompt_text = ""
        self._text_source = text_source
        self._segmenter = segmenter

    @classmethod
    def from_options(
        cls, options: LayoutOptions, text_source: Callable[[], str] | None = None
    ) -> LayoutCache:
        cache = cls(options.tab_stop, text_source)
        if options.columns:
            cache.window_resized(options.columns, 0)
        return cache

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def cursor_position(self, cursor: int) -> Position:
        """Screen position of the byte offset *cursor* in the edited text."""
        self._ensure_fresh()
        if not self.text or cursor == 0:
            return self.prompt_size()
        i = bisect_left(self.text, cursor, key=_idx)
        if i < len(self.text) and self.text[i].idx == cursor:
            return self.text[i].pos
        if i == 0:
            # only zero width graphemes precede the cursor; a full re-render
            # puts them where the text starts, right after the prompt
            return self.prompt_size()
        if i == len(self.text):
            return self.shift_entry(self.text[-1])
        # we don't store zero width graphemes
        return self.text[i].pos

    def prompt_size(self) -> Position:
        """Position right after the prompt, where the text starts."""
        if self.prompt:
            return self.shift_entry(self.prompt[-1])
        return ORIGIN

    def text_end(self) -> Position:
        """Position right after the last grapheme of the text."""
        self._ensure_fresh()
        return self._text_end()

    def shift_entry(self, e: Entry) -> Position:
        return end_position(e, self.columns)

    def check_invariants(self) -> None:
        check_entries(self.prompt, self.columns, "prompt")
        check_entries(self.text, self.columns, "text")
        if self.text and self.text[0].pos < self.prompt_size():
            raise LayoutInvariantError("text starts inside the prompt")

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def apply(self, edit: Edit) -> Span:
        if isinstance(edit, Insert):
            return self.insert(edit.idx, edit.text)
        if isinstance(edit, Delete):
            return self.delete(edit.idx, edit.text)
        if isinstance(edit, Replace):
            return self.replace(edit.idx, edit.old, edit.new)
        raise TypeError(f"Unknown edit: {edit!r}")

    def insert(self, idx: int, text: str) -> Span:
        """*text* was inserted at byte offset *idx*. Returns the span to repaint."""
        if self._stale():
            return full_repaint(self.prompt_size())
        i = bisect_left(self.text, idx, key=_idx)
        at = self._position_at(i)
        if not text:
            return empty_span(at)
        if self._joins_neighbours(idx, text, ""):
            return self._invalidate(f"insert of {text!r} at {idx}")
        old_end = self._text_end()

        segments = list(self._segmenter(text, self.tab_stop))
        added, cursor = layout_entries(segments, at, self.columns, base=idx)
        self.text[i:i] = added
        settled = self._move_tail(
            i + len(added), cursor, Shift.delta(at, cursor), byte_len(text), True
        )

        start = at
        if segments[0][2] == 0 and i > 0:
            # leading marks combine with the previous grapheme
            start = self.text[i - 1].pos
        end = settled if settled is not None else max(old_end, self._text_end())
        return Span(start, end)

    insert_str = insert

    def insert_char(self, idx: int, ch: str) -> Span:
        return self.insert(idx, ch)

    def delete(self, idx: int, text: str) -> Span:
        """*text* was removed from byte offset *idx*. Returns the span to repaint."""
        if self._stale():
            return full_repaint(self.prompt_size())
        n = byte_len(text)
        i = bisect_left(self.text, idx, key=_idx)
        at = self._position_at(i)
        if n == 0:
            return empty_span(at)
        if self._joins_neighbours(idx, "", text):
            return self._invalidate(f"delete of {text!r} at {idx}")
        j = bisect_left(self.text, idx + n, key=_idx)
        old_end = self._text_end()

        removed = self.text[i:j]
        expected = text_width(text, self.tab_stop, self._segmenter)
        actual = sum(e.width for e in removed)
        if expected != actual:
            message = f"Deleting {text!r} at {idx}: cached width {actual} != {expected}"
            if self._text_source is None:
                raise LayoutArithmeticError(message)
            return self._invalidate(message)
        _, _, lead_width = next(iter(self._segmenter(text, self.tab_stop)))
        tail_start = self.shift_entry(removed[-1]) if removed else at
        del self.text[i:j]
        settled = self._move_tail(i, at, Shift.delta(tail_start, at), n, False)

        start = at
        if lead_width == 0 and i > 0:
            start = self.text[i - 1].pos
        end = settled if settled is not None else max(old_end, self._text_end())
        return Span(start, end)

    def replace(self, idx: int, old: str, new: str) -> Span:
        """*old* was replaced by *new* at byte offset *idx*.

        Same result as ``delete(idx, old)`` followed by ``insert(idx, new)``,
        but the graphemes both strings share at either end are left alone.
        """
        if self._stale():
            return full_repaint(self.prompt_size())
        if old == new:
            return empty_span(self.cursor_position(idx))
        prefix, old_mid, new_mid = split_common_affixes(old, new)
        at = idx + byte_len(prefix)
        span = self.delete(at, old_mid)
        return span.union(self.insert(at, new_mid))

    def _move_tail(
        self, start: int, cursor: Position, s: Shift, offset: int, forward: bool
    ) -> Position | None:
        """Move ``text[start:]`` after an edit.

        *cursor* is where the first tail grapheme may now start and *s* the
        expected displacement of the tail. Offsets move by *offset* bytes.
        Returns the position at which the old layout was met again, if any.
        """
        columns = self.columns
        settled: Position | None = None
        for e in self.text[start:]:
            e.idx = shift(e.idx, offset, forward)
            if settled is not None:
                continue
            candidate = e.pos.shift(s, columns)
            pos = place(cursor, e.width, columns)
            if candidate != pos:
                # a wrap boundary moved: re-walk from the previous grapheme
                s = Shift.delta(e.pos, pos)
            if s.is_empty():
                settled = e.pos
                continue
            e.pos = pos
            cursor = advance(pos, e.width, columns)
        return settled

    # ------------------------------------------------------------------
    # Full recompute paths
    # ------------------------------------------------------------------

    def window_resized(self, columns: int, rows: int) -> bool:
        """Relayout everything for a new width. Returns whether a repaint is needed."""
        if columns < 0:
            raise ValueError(f"columns must be non-negative, got {columns}")
        self.rows = rows
        if self.columns == columns:
            return False
        old_columns, self.columns = self.columns, columns
        logger.debug("Window resized: %d -> %d columns", old_columns, columns)

        if columns == 0:
            self.prompt.clear()
            if self.text:
                self.text.clear()
                self.dirty = True
            return True
        if old_columns == 0:
            self.prompt, _ = layout_entries(
                self._segmenter(self._prompt_text, self.tab_stop), ORIGIN, columns
            )
            relayout(self.text, self.prompt_size(), columns)
            return True

        changed, _ = relayout(self.prompt, ORIGIN, columns)
        if self.dirty:
            return True
        text_changed, _ = relayout(self.text, self.prompt_size(), columns)
        return changed or text_changed

    def prompt_updated(self, prompt: Prompt | str, ctx: PromptContext | None = None) -> bool:
        """Rebuild the prompt entries. Returns whether a repaint is needed."""
        text = render_prompt(prompt, ctx)
        changed = text != self._prompt_text
        self._prompt_text = text
        if self.columns == 0:
            return changed

        old_size = self.prompt_size()
        self.prompt, _ = layout_entries(
            self._segmenter(text, self.tab_stop), ORIGIN, self.columns
        )
        new_size = self.prompt_size()
        s = Shift.delta(old_size, new_size)
        if s.is_empty():
            return changed
        logger.debug("Prompt size changed: %s -> %s", old_size, new_size)
        if not self.dirty:
            # text begins right after the prompt
            self._move_tail(0, new_size, s, 0, True)
        return True

    def mark_dirty(self) -> None:
        """Flag the text entries as stale; they are rebuilt on the next query."""
        self.dirty = True

    def rebuild_text(self, text: str) -> None:
        """Discard the text entries and lay *text* out from scratch."""
        if self.columns == 0:
            self.text = []
            self.dirty = bool(text)
            return
        logger.debug("Rebuilding layout of %d bytes of text", byte_len(text))
        self.text, _ = layout_entries(
            self._segmenter(text, self.tab_stop), self.prompt_size(), self.columns
        )
        self.dirty = False

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _ensure_fresh(self) -> None:
        if not self.dirty or self.columns == 0:
            return
        if self._text_source is None:
            raise LayoutInvariantError("Text cache is dirty and has no text source")
        self.rebuild_text(self._text_source())

    def _joins_neighbours(self, idx: int, inserted: str, removed: str) -> bool:
        """Whether graphemes may merge or split across the edges of an edit at *idx*.

        Without a text source only the edited text itself can be inspected.
        """
        for s in (inserted, removed):
            if s and (extends_cluster(s[0]) or s.endswith(ZWJ)):
                return True
        if self._text_source is None:
            return False
        buffer = self._text_source()
        if buffer.isascii():
            return False
        for offset in {idx, idx + byte_len(inserted)}:
            if may_join(*chars_around(buffer, offset)):
                return True
        return False

    def _invalidate(self, reason: str) -> Span:
        logger.debug("Relayout needed after %s", reason)
        self.dirty = True
        return full_repaint(self.prompt_size())

    def _stale(self) -> bool:
        if self.columns == 0:
            self.text.clear()
            self.dirty = True
        return self.dirty

    def _position_at(self, i: int) -> Position:
        """Position following ``text[i - 1]``, or the prompt end when ``i == 0``."""
        if i == 0:
            return self.prompt_size()
        return self.shift_entry(self.text[i - 1])

    def _text_end(self) -> Position:
        return self._position_at(len(self.text))

"""Cached layout records and the wrap walk that positions them.

A grapheme that does not fit in what is left of the current row wraps
wholly to the next one; the cells it skips stay blank. A grapheme wider
than the whole screen is drawn clipped to one full row.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from pi.layout.errors import LayoutInvariantError
from pi.layout.graphemes import Segment
from pi.layout.position import ORIGIN, Position, Shift


@dataclass
class Entry:
    """Byte offset, width and screen position of one non-zero-width grapheme."""

    idx: int
    width: int
    pos: Position = field(default=ORIGIN)

    def __post_init__(self) -> None:
        # zero width graphemes do not impact layout and are never stored
        if self.width <= 0:
            raise LayoutInvariantError(f"Zero width entry at idx {self.idx}")


def cells(width: int, columns: int) -> int:
    """Number of cells a grapheme of *width* occupies on a *columns* wide screen."""
    return min(width, columns)


def place(cursor: Position, width: int, columns: int) -> Position:
    """Where a grapheme of *width* starts when the walk is at *cursor*."""
    if cursor.col + cells(width, columns) > columns:
        return Position(0, cursor.row + 1)
    return cursor


def advance(start: Position, width: int, columns: int) -> Position:
    """Position right after a grapheme of *width* drawn at *start*."""
    return start.shift(Shift.right_by(cells(width, columns), columns), columns)


def end_position(entry: Entry, columns: int) -> Position:
    """Position right after *entry*, wrapping when it ends on the last column."""
    end = entry.pos.col + cells(entry.width, columns)
    if end > columns:
        raise LayoutInvariantError(
            f"Invalid entry, col: {entry.pos.col} + width: {entry.width} > {columns}"
        )
    return advance(entry.pos, entry.width, columns)


def layout_entries(
    segments: Iterable[Segment],
    origin: Position,
    columns: int,
    base: int = 0,
) -> tuple[list[Entry], Position]:
    """Lay out *segments* from *origin*.

    Returns the new entries (offsets moved by *base*) and the position
    following the last one.
    """
    entries: list[Entry] = []
    cursor = origin
    for offset, _, width in segments:
        if width == 0:
            continue
        pos = place(cursor, width, columns)
        entries.append(Entry(base + offset, width, pos))
        cursor = advance(pos, width, columns)
    return entries, cursor


def relayout(entries: list[Entry], origin: Position, columns: int) -> tuple[bool, Position]:
    """Re-walk stored *entries* in place from *origin*.

    Returns whether any position moved and the position following the
    last entry.
    """
    changed = False
    cursor = origin
    for e in entries:
        pos = place(cursor, e.width, columns)
        if pos != e.pos:
            e.pos = pos
            changed = True
        cursor = advance(pos, e.width, columns)
    return changed, cursor


def check_entries(entries: list[Entry], columns: int, name: str = "entries") -> None:
    """Raise ``LayoutInvariantError`` unless *entries* are well formed."""
    prev: Entry | None = None
    for e in entries:
        if e.width <= 0:
            raise LayoutInvariantError(f"{name}: zero width entry at idx {e.idx}")
        if e.pos.col + cells(e.width, columns) > columns:
            raise LayoutInvariantError(f"{name}: entry at idx {e.idx} crosses the right edge")
        if prev is not None:
            if e.idx <= prev.idx:
                raise LayoutInvariantError(f"{name}: unsorted idx {prev.idx} >= {e.idx}")
            if e.pos < end_position(prev, columns):
                raise LayoutInvariantError(f"{name}: entry at idx {e.idx} overlaps its predecessor")
        prev = e

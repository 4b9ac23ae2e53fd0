"""Edit descriptors consumed by the layout cache and the spans it reports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from pi.layout.position import ORIGIN, Position


@dataclass(frozen=True)
class Insert:
    idx: int
    text: str


@dataclass(frozen=True)
class Delete:
    idx: int
    text: str


@dataclass(frozen=True)
class Replace:
    idx: int
    old: str
    new: str


Edit = Union[Insert, Delete, Replace]


@dataclass(frozen=True)
class Span:
    """Screen region ``[start, end)`` in reading order that needs repainting.

    ``end`` is ``None`` when everything from ``start`` onward must be redrawn.
    """

    start: Position
    end: Position | None

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    @property
    def is_open(self) -> bool:
        return self.end is None

    def contains(self, pos: Position) -> bool:
        return self.start <= pos and (self.end is None or pos < self.end)

    def union(self, other: Span) -> Span:
        if self.is_empty:
            return other
        if other.is_empty:
            return self
        start = min(self.start, other.start)
        if self.end is None or other.end is None:
            return Span(start, None)
        return Span(start, max(self.end, other.end))


def full_repaint(start: Position = ORIGIN) -> Span:
    return Span(start, None)


def empty_span(at: Position) -> Span:
    return Span(at, at)

"""Screen positions and wrap-aware displacements."""

from __future__ import annotations

from dataclasses import dataclass
from functools import total_ordering

from pi.layout.errors import LayoutArithmeticError, LayoutInvariantError


def shift(value: int, magnitude: int, positive: bool) -> int:
    """Add or subtract *magnitude* from *value*, refusing to go below zero."""
    if magnitude == 0:
        return value
    if positive:
        return value + magnitude
    if magnitude > value:
        raise LayoutArithmeticError(f"Underflow: {value} - {magnitude}")
    return value - magnitude


def delta(old: int, new: int) -> tuple[int, bool]:
    """Return ``(magnitude, positive)`` such that ``shift(old, ...) == new``."""
    if new > old:
        return new - old, True
    if new < old:
        return old - new, False
    return 0, True


@total_ordering
@dataclass(frozen=True)
class Position:
    """A cell on screen. ``row`` is relative to the first prompt line."""

    col: int = 0
    row: int = 0

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return (self.row, self.col) < (other.row, other.col)

    def shift(self, s: Shift, columns: int) -> Position:
        """Move by *s*, carrying column overflow/underflow into the row."""
        if s.is_empty():
            return self
        if columns <= 0:
            raise LayoutInvariantError("Cannot shift a position on a 0-column screen")
        offset = (s.width if s.right else -s.width) + (s.height if s.down else -s.height) * columns
        linear = shift(self.row * columns + self.col, abs(offset), offset >= 0)
        return Position(linear % columns, linear // columns)


@dataclass(frozen=True)
class Shift:
    """Displacement with an independent magnitude and direction per axis."""

    width: int = 0
    right: bool = True
    height: int = 0
    down: bool = True

    @staticmethod
    def right_by(width: int, columns: int) -> Shift:
        """Split a horizontal run of *width* cells into a column and a row shift."""
        if width == 0:
            return ZERO
        if width < columns:
            return Shift(width=width)
        # line wrapping
        return Shift(width=width % columns, height=width // columns)

    @staticmethod
    def delta(old: Position, new: Position) -> Shift:
        """Displacement that moves *old* onto *new*."""
        if old == new:
            return ZERO
        width, right = delta(old.col, new.col)
        height, down = delta(old.row, new.row)
        return Shift(width=width, right=right, height=height, down=down)

    def is_empty(self) -> bool:
        return self.width == 0 and self.height == 0


ZERO = Shift()
ORIGIN = Position()

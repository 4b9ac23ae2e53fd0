"""Exceptions raised when the layout cache detects internal corruption.

Neither class is meant to be caught by callers: both signal that the
cache (or the edit stream feeding it) is out of sync with the buffer.
"""

from __future__ import annotations


class LayoutError(Exception):
    """Base class for layout cache failures."""


class LayoutInvariantError(LayoutError, AssertionError):
    """A structural invariant of the cache does not hold."""


class LayoutArithmeticError(LayoutError, ArithmeticError):
    """Offset or position arithmetic underflowed, or an edit disagrees with the cache."""

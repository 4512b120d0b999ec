"""
clock.py - Height/day conversion

The host supplies a monotonically increasing height counter as the only clock.
Days are a fixed number of height increments (BLOCKS_PER_DAY); there is no
calendar awareness.
"""

from __future__ import annotations

from .core import BLOCKS_PER_DAY


def height_to_days(height: int) -> int:
    """Whole days covered by a height span (floor)."""
    return height // BLOCKS_PER_DAY


def days_to_height(days: int) -> int:
    """Height span covering a number of days."""
    return days * BLOCKS_PER_DAY

"""Test helpers for Abhyasa engine tests.

Import record factories from here:
    from tests.helpers import make_habit, make_log
"""

from .factories import (
    CHECKLIST_ITEMS,
    HABIT_ID,
    REFERENCE_DAY,
    day_offset,
    make_checklist_habit,
    make_habit,
    make_log,
    make_logs,
)

__all__ = [
    "CHECKLIST_ITEMS",
    "HABIT_ID",
    "REFERENCE_DAY",
    "day_offset",
    "make_checklist_habit",
    "make_habit",
    "make_log",
    "make_logs",
]

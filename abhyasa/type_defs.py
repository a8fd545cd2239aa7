"""Type definitions for Abhyasa habit records.

Records travel through the engines as plain dicts, the same shape the
persistence layer hands us. TypedDict documents the fixed keys for static
analysis only; it does NOT enforce anything at runtime, so the engines keep
their `.get()` defaults.

Closed variants (habit type, frequency, comparison, status) are Literal
aliases over the string values in const.py.

IMPORTANT: This file must NOT import from the engines or builders.
Only import from typing.
"""

from typing import Literal, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

HabitId = str  # opaque document id
LogId = str  # opaque document id
ChecklistItemId = str
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"
ISODate = str  # ISO 8601 date string (no time) "2026-01-18"

HabitType = Literal["binary", "count", "duration", "checklist"]
FrequencyType = Literal["daily", "specific_days", "weekly", "monthly"]
TargetComparison = Literal[
    "at_least",
    "less_than",
    "exactly",
    "any_value",
    "greater_than",
    "less_than_or_equal",
]
HabitLogStatus = Literal["done", "partial", "none"]
DayState = Literal["inactive", "future", "done", "partial", "missed"]
PeriodType = Literal["week", "month"]


# =============================================================================
# Habit
# =============================================================================


class HabitFrequencyData(TypedDict):
    """Tagged frequency variant.

    `days` is only meaningful for specific_days, `times` only for
    weekly/monthly.
    """

    type: FrequencyType
    days: NotRequired[list[int]]  # 0=Sunday..6=Saturday
    times: NotRequired[int]


class ChecklistItemData(TypedDict):
    """Checklist item definition on a checklist habit."""

    id: ChecklistItemId
    text: str


class HabitData(TypedDict):
    """Habit configuration record (never mutated by the engines)."""

    id: HabitId
    type: HabitType
    frequency: HabitFrequencyData
    start_date: ISODatetime | ISODate
    title: NotRequired[str]
    end_date: NotRequired[ISODatetime | ISODate | None]
    daily_target: NotRequired[float | None]
    daily_target_comparison: NotRequired[TargetComparison | None]
    total_target: NotRequired[float | None]
    total_target_comparison: NotRequired[TargetComparison | None]
    checklist: NotRequired[list[ChecklistItemData]]


# =============================================================================
# Habit Log
# =============================================================================


class HabitLogData(TypedDict):
    """One day's recorded progress against a habit."""

    id: LogId
    habit_id: HabitId
    date: ISODate
    value: NotRequired[float | None]  # count, or total minutes for duration
    completed_checklist_items: NotRequired[list[ChecklistItemId]]
    notes: NotRequired[str]
    status: NotRequired[str]  # legacy, ignored by the engines

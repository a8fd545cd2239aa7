# File: const.py
"""Constants for the Abhyasa habit engine.

This file centralizes record keys, enumerated values, defaults, legacy
aliases and error keys so the engines, builders and tests agree on a single
vocabulary. Values are the strings persisted in the document store.
"""

import logging
from typing import Final

# ------------------------------------------------------------------------------------------------
# General / Package Information
# ------------------------------------------------------------------------------------------------
# Logger
LOGGER = logging.getLogger(__package__)

# ------------------------------------------------------------------------------------------------
# Habit Types
# ------------------------------------------------------------------------------------------------
HABIT_TYPE_BINARY = "binary"
HABIT_TYPE_COUNT = "count"
HABIT_TYPE_DURATION = "duration"
HABIT_TYPE_CHECKLIST = "checklist"

HABIT_TYPE_OPTIONS = [
    HABIT_TYPE_BINARY,
    HABIT_TYPE_COUNT,
    HABIT_TYPE_DURATION,
    HABIT_TYPE_CHECKLIST,
]

# ------------------------------------------------------------------------------------------------
# Frequencies
# ------------------------------------------------------------------------------------------------
FREQUENCY_DAILY = "daily"
FREQUENCY_SPECIFIC_DAYS = "specific_days"
FREQUENCY_WEEKLY = "weekly"  # up to N times per calendar week
FREQUENCY_MONTHLY = "monthly"  # up to N times per calendar month

FREQUENCY_OPTIONS = [
    FREQUENCY_DAILY,
    FREQUENCY_SPECIFIC_DAYS,
    FREQUENCY_WEEKLY,
    FREQUENCY_MONTHLY,
]

# Frequencies carrying a "times" quota
QUOTA_FREQUENCIES: Final[frozenset[str]] = frozenset(
    {FREQUENCY_WEEKLY, FREQUENCY_MONTHLY}
)

# Weekday numbering used by stored specific_days (0=Sunday..6=Saturday)
WEEKDAY_SUNDAY = 0
WEEKDAY_SATURDAY = 6

# Period identifiers
PERIOD_WEEK = "week"
PERIOD_MONTH = "month"

# ------------------------------------------------------------------------------------------------
# Target Comparisons
# ------------------------------------------------------------------------------------------------
COMPARISON_AT_LEAST = "at_least"
COMPARISON_LESS_THAN = "less_than"
COMPARISON_EXACTLY = "exactly"
COMPARISON_ANY_VALUE = "any_value"
COMPARISON_GREATER_THAN = "greater_than"
COMPARISON_LESS_THAN_OR_EQUAL = "less_than_or_equal"

COMPARISON_OPTIONS = [
    COMPARISON_AT_LEAST,
    COMPARISON_LESS_THAN,
    COMPARISON_EXACTLY,
    COMPARISON_ANY_VALUE,
    COMPARISON_GREATER_THAN,
    COMPARISON_LESS_THAN_OR_EQUAL,
]

# Spellings found in older web and mobile documents
COMPARISON_ALIASES: Final[dict[str, str]] = {
    "greater_than_or_equal": COMPARISON_AT_LEAST,
    "at-least": COMPARISON_AT_LEAST,
    "equal": COMPARISON_EXACTLY,
    "less-than": COMPARISON_LESS_THAN,
    "any-value": COMPARISON_ANY_VALUE,
}

# ------------------------------------------------------------------------------------------------
# Log Status (computed, never read from storage)
# ------------------------------------------------------------------------------------------------
LOG_STATUS_DONE = "done"
LOG_STATUS_PARTIAL = "partial"
LOG_STATUS_NONE = "none"

# Calendar day states
DAY_STATE_INACTIVE = "inactive"
DAY_STATE_FUTURE = "future"
DAY_STATE_DONE = "done"
DAY_STATE_PARTIAL = "partial"
DAY_STATE_MISSED = "missed"

# ------------------------------------------------------------------------------------------------
# Record Keys (canonical snake_case records)
# ------------------------------------------------------------------------------------------------
DATA_HABIT_ID = "id"
DATA_HABIT_TITLE = "title"
DATA_HABIT_TYPE = "type"
DATA_HABIT_FREQUENCY = "frequency"
DATA_HABIT_START_DATE = "start_date"
DATA_HABIT_END_DATE = "end_date"
DATA_HABIT_DAILY_TARGET = "daily_target"
DATA_HABIT_DAILY_TARGET_COMPARISON = "daily_target_comparison"
DATA_HABIT_TOTAL_TARGET = "total_target"
DATA_HABIT_TOTAL_TARGET_COMPARISON = "total_target_comparison"
DATA_HABIT_CHECKLIST = "checklist"

DATA_FREQUENCY_TYPE = "type"
DATA_FREQUENCY_DAYS = "days"
DATA_FREQUENCY_TIMES = "times"

DATA_CHECKLIST_ITEM_ID = "id"
DATA_CHECKLIST_ITEM_TEXT = "text"

DATA_LOG_ID = "id"
DATA_LOG_HABIT_ID = "habit_id"
DATA_LOG_DATE = "date"
DATA_LOG_VALUE = "value"
DATA_LOG_COMPLETED_CHECKLIST_ITEMS = "completed_checklist_items"
DATA_LOG_NOTES = "notes"
DATA_LOG_STATUS_LEGACY = "status"

# ------------------------------------------------------------------------------------------------
# Document Keys (camelCase documents in the hosted store)
# ------------------------------------------------------------------------------------------------
DOC_HABIT_START_DATE = "startDate"
DOC_HABIT_END_DATE = "endDate"
DOC_HABIT_DAILY_TARGET = "dailyTarget"
DOC_HABIT_DAILY_TARGET_COMPARISON = "dailyTargetComparison"
DOC_HABIT_TOTAL_TARGET = "totalTarget"
DOC_HABIT_TOTAL_TARGET_COMPARISON = "totalTargetComparison"
DOC_LOG_HABIT_ID = "habitId"
DOC_LOG_COMPLETED_CHECKLIST_ITEMS = "completedChecklistItems"
DOC_LOG_COUNT_LEGACY = "count"  # older mobile alias for value

# ------------------------------------------------------------------------------------------------
# Defaults
# ------------------------------------------------------------------------------------------------
DEFAULT_DAILY_TARGET = 1
DEFAULT_TARGET_COMPARISON = COMPARISON_AT_LEAST
DEFAULT_FREQUENCY_TIMES = 1

# Float precision for rates and accumulated values
DATA_FLOAT_PRECISION = 2

# ------------------------------------------------------------------------------------------------
# Validation Error Keys
# ------------------------------------------------------------------------------------------------
ERROR_INVALID_HABIT_TYPE = "invalid_habit_type"
ERROR_INVALID_FREQUENCY = "invalid_frequency"
ERROR_INVALID_FREQUENCY_TIMES = "invalid_frequency_times"
ERROR_INVALID_FREQUENCY_DAYS = "invalid_frequency_days"
ERROR_INVALID_START_DATE = "invalid_start_date"
ERROR_END_BEFORE_START = "end_date_before_start_date"
ERROR_INVALID_DAILY_TARGET = "invalid_daily_target"
ERROR_INVALID_TOTAL_TARGET = "invalid_total_target"
ERROR_INVALID_COMPARISON = "invalid_comparison"
ERROR_INVALID_LOG_DATE = "invalid_log_date"
ERROR_INVALID_LOG_VALUE = "invalid_log_value"

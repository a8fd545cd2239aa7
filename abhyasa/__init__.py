"""Abhyasa habit evaluation engine.

Pure, stateless evaluation of habits and their daily logs:
- Is a habit in scope / due on a given day?
- What does a given day's log amount to (done / partial / none)?
- What are the streaks, completion rate and totals as of a reference day?

The engines only read plain habit/log records and return derived values.
Persistence, authentication and rendering belong to the caller.
"""

from .data_builders import (
    HabitValidationError,
    build_habit,
    build_habit_log,
    map_document_to_habit_data,
    map_document_to_log_data,
    validate_habit_data,
)
from .engines import (
    HabitContractError,
    HabitStats,
    HabitStatusResult,
    ScheduleEngine,
    StatisticsEngine,
    StatusEngine,
    TotalTargetProgress,
    classify_log,
    compute_stats,
    get_habits_for_date,
    is_date_active_for_statistics,
    should_display_on_date,
)

__version__ = "0.4.0"

__all__ = [
    "HabitContractError",
    "HabitStats",
    "HabitStatusResult",
    "HabitValidationError",
    "ScheduleEngine",
    "StatisticsEngine",
    "StatusEngine",
    "TotalTargetProgress",
    "build_habit",
    "build_habit_log",
    "classify_log",
    "compute_stats",
    "get_habits_for_date",
    "is_date_active_for_statistics",
    "map_document_to_habit_data",
    "map_document_to_log_data",
    "should_display_on_date",
    "validate_habit_data",
]

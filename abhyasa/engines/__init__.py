"""Engine modules for Abhyasa.

Contains the habit evaluation engines, in dependency order:
- status_engine: Per-log status classification (done / partial / none)
- schedule_engine: Active-window and recurrence predicates
- statistics_engine: Streaks, completion rate, totals and calendar states
"""

# Use relative imports within package to avoid mypy module resolution issues
from .schedule_engine import (
    ScheduleEngine,
    get_habits_for_date,
    is_date_active_for_statistics,
    should_display_on_date,
)
from .statistics_engine import (
    HabitStats,
    StatisticsEngine,
    TotalTargetProgress,
    compute_stats,
)
from .status_engine import (
    HabitContractError,
    HabitStatusResult,
    StatusEngine,
    classify_log,
)

__all__ = [
    "HabitContractError",
    "HabitStats",
    "HabitStatusResult",
    "ScheduleEngine",
    "StatisticsEngine",
    "StatusEngine",
    "TotalTargetProgress",
    "classify_log",
    "compute_stats",
    "get_habits_for_date",
    "is_date_active_for_statistics",
    "should_display_on_date",
]

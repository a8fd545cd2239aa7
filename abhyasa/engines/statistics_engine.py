"""Statistics Engine - Streaks, completion rate and totals for a habit.

This engine derives longitudinal statistics from a habit and its full log
history as of a reference day:
- Current streak (backward walk from the reference day)
- Best streak and completion rate (single forward walk from start_date)
- Days completed and accumulated progress (per habit type)
- Total-target progress and per-day calendar states

Design Principles:
    - Stateless: No caching, every call recomputes from the logs it is given
    - Deterministic: The clock is read only when reference_date is None
    - Total: Never raises on well-formed input; nothing in scope means zeros

Both walks move one calendar day at a time, so a call is O(days since
start) plus O(logs).
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import (
    dt_day_key,
    dt_end_of_month,
    dt_iter_days,
    dt_iter_days_backward,
    dt_to_day,
    dt_today_local,
)
from ..utils.math_utils import calculate_percentage, clamp, round_value
from .schedule_engine import ScheduleEngine
from .status_engine import (
    StatusEngine,
    ensure_habit,
    ensure_logs,
    filter_logs_for_habit,
)

if TYPE_CHECKING:
    from ..type_defs import DayState, HabitData, HabitLogData, TargetComparison


# =============================================================================
# RESULT STRUCTURES
# =============================================================================


@dataclass(frozen=True, slots=True)
class HabitStats:
    """Aggregate statistics for one habit as of a reference day.

    Attributes:
        current_streak: Consecutive in-scope done days ending at the reference day
        best_streak: Longest run of consecutive in-scope done days
        completion_rate: Done in-scope days / in-scope days * 100, 2 decimals
        days_completed: Number of distinct days classified done
        accumulated_progress: Sum of values (count/duration), done days (binary)
                              or completed items (checklist)
    """

    current_streak: int = 0
    best_streak: int = 0
    completion_rate: float = 0.0
    days_completed: int = 0
    accumulated_progress: float = 0.0

    def as_dict(self) -> dict[str, Any]:
        """Return the camelCase shape used by UI callers."""
        return {
            "currentStreak": self.current_streak,
            "bestStreak": self.best_streak,
            "completionRate": self.completion_rate,
            "daysCompleted": self.days_completed,
            "accumulatedProgress": self.accumulated_progress,
        }


@dataclass(frozen=True, slots=True)
class TotalTargetProgress:
    """Progress towards a habit's total (whole-lifetime) target."""

    progress: float
    target: float
    comparison: TargetComparison
    is_met: bool
    percentage: float


# =============================================================================
# STATISTICS ENGINE
# =============================================================================


class StatisticsEngine:
    """Pure logic engine for habit statistics.

    All methods are static. The engine does NOT persist anything; callers
    memoize per (habit, logs snapshot, reference day) if they need to.

    Example:
        stats = StatisticsEngine.compute_stats(
            habit, logs, reference_date=date(2026, 1, 19)
        )
        stats.current_streak  # 4
    """

    # ────────────────────────────────────────────────────────────────
    # Inputs
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def resolve_reference_date(
        reference_date: date | datetime | str | None = None,
    ) -> date:
        """Return the reference day, reading the clock only when none is given.

        An unparseable reference falls back to today as well.
        """
        if reference_date is not None:
            day = dt_to_day(reference_date)
            if day is not None:
                return day
            const.LOGGER.warning(
                "StatisticsEngine: Unparseable reference date %r, using today",
                reference_date,
            )
        return dt_today_local()

    @staticmethod
    def build_log_index(
        habit: HabitData | Mapping[str, Any],
        logs: Sequence[HabitLogData | Mapping[str, Any]],
    ) -> dict[str, Mapping[str, Any]]:
        """Index the habit's logs by ISO day key.

        Log dates are normalized (a timestamp becomes its local day). When
        several logs share a day the later one in the sequence wins. Logs of
        other habits and logs with unparseable dates are left out.
        """
        ensure_habit(habit)
        ensure_logs(logs)
        index: dict[str, Mapping[str, Any]] = {}
        for log in filter_logs_for_habit(habit, logs):
            log_day = dt_to_day(log.get(const.DATA_LOG_DATE))
            if log_day is None:
                const.LOGGER.debug(
                    "StatisticsEngine: Skipping log %s with unparseable date %r",
                    log.get(const.DATA_LOG_ID),
                    log.get(const.DATA_LOG_DATE),
                )
                continue
            index[dt_day_key(log_day)] = log
        return index

    # ────────────────────────────────────────────────────────────────
    # Totals
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def _accumulate(
        habit: Mapping[str, Any], day_logs: Sequence[Mapping[str, Any]]
    ) -> tuple[int, float]:
        """Return (days_completed, accumulated_progress) over one log per day."""
        habit_type = habit.get(const.DATA_HABIT_TYPE)
        days_completed = sum(
            1 for log in day_logs if StatusEngine.is_done(habit, log)
        )

        if habit_type in (const.HABIT_TYPE_COUNT, const.HABIT_TYPE_DURATION):
            progress = sum(StatusEngine.log_value(log) for log in day_logs)
        elif habit_type == const.HABIT_TYPE_BINARY:
            progress = float(days_completed)
        elif habit_type == const.HABIT_TYPE_CHECKLIST:
            progress = float(
                sum(
                    len(log.get(const.DATA_LOG_COMPLETED_CHECKLIST_ITEMS) or [])
                    for log in day_logs
                )
            )
        else:
            progress = 0.0

        return days_completed, round_value(progress, const.DATA_FLOAT_PRECISION)

    # ────────────────────────────────────────────────────────────────
    # Statistics
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def compute_stats(
        habit: HabitData | Mapping[str, Any],
        logs: Sequence[HabitLogData | Mapping[str, Any]],
        reference_date: date | datetime | str | None = None,
    ) -> HabitStats:
        """Compute streaks, completion rate and totals as of reference_date.

        Forward walk (start_date → reference day):
        - in-scope done day: extends the running streak, counts as completed
        - in-scope other day: resets the running streak
        - every in-scope day counts as expected
        - out-of-scope days are skipped entirely

        Backward walk (reference day → start_date): counts in-scope done days
        until the first in-scope day that is not done. An unlogged reference
        day therefore yields a current streak of 0.

        Totals sum every logged day up to the reference day, including days
        before start_date or after end_date.

        Args:
            habit: Habit record
            logs: All logs for the habit (may include other habits' logs)
            reference_date: "Today". Defaults to today in the local timezone.

        Returns:
            HabitStats (all zeros when nothing is in scope)

        Raises:
            HabitContractError: If habit is missing or logs is not a list/tuple.
        """
        ensure_habit(habit)
        ensure_logs(logs)
        today = StatisticsEngine.resolve_reference_date(reference_date)
        start_day, _end_day = ScheduleEngine.get_active_window(habit)
        if start_day is None or start_day > today:
            return HabitStats()

        index = StatisticsEngine.build_log_index(habit, logs)

        counted_logs = [
            log for key, log in index.items() if date.fromisoformat(key) <= today
        ]
        days_completed, accumulated = StatisticsEngine._accumulate(
            habit, counted_logs
        )

        def _is_done(day: date) -> bool:
            return StatusEngine.is_done(habit, index.get(dt_day_key(day)))

        # Forward walk: best streak and completion rate
        best_streak = 0
        running_streak = 0
        completed_days = 0
        expected_days = 0
        for day in dt_iter_days(start_day, today):
            if not ScheduleEngine.is_date_active_for_statistics(habit, day):
                continue
            expected_days += 1
            if _is_done(day):
                running_streak += 1
                completed_days += 1
                best_streak = max(best_streak, running_streak)
            else:
                running_streak = 0

        # Backward walk: current streak
        current_streak = 0
        for day in dt_iter_days_backward(today, start_day):
            if not ScheduleEngine.is_date_active_for_statistics(habit, day):
                continue
            if not _is_done(day):
                break
            current_streak += 1

        completion_rate = calculate_percentage(
            completed_days, expected_days, const.DATA_FLOAT_PRECISION
        )

        const.LOGGER.debug(
            "StatisticsEngine: Habit %s as of %s: current=%s best=%s rate=%s",
            habit.get(const.DATA_HABIT_ID),
            today,
            current_streak,
            best_streak,
            completion_rate,
        )

        return HabitStats(
            current_streak=current_streak,
            best_streak=best_streak,
            completion_rate=completion_rate,
            days_completed=days_completed,
            accumulated_progress=accumulated,
        )

    @staticmethod
    def evaluate_total_target(
        habit: HabitData | Mapping[str, Any],
        stats: HabitStats,
    ) -> TotalTargetProgress | None:
        """Compare accumulated progress against the habit's total target.

        Returns:
            TotalTargetProgress, or None when no positive total_target is set.
        """
        ensure_habit(habit)
        raw_target = habit.get(const.DATA_HABIT_TOTAL_TARGET)
        try:
            target = float(raw_target) if raw_target is not None else 0.0
        except (TypeError, ValueError):
            target = 0.0
        if target <= 0:
            return None

        comparison = StatusEngine.normalize_comparison(
            habit.get(const.DATA_HABIT_TOTAL_TARGET_COMPARISON)
        )
        progress = stats.accumulated_progress
        return TotalTargetProgress(
            progress=progress,
            target=target,
            comparison=comparison,
            is_met=StatusEngine.compare_value(progress, target, comparison),
            percentage=clamp(calculate_percentage(progress, target), 0.0, 100.0),
        )

    # ────────────────────────────────────────────────────────────────
    # Calendar
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def _day_state(
        habit: Mapping[str, Any],
        index: Mapping[str, Mapping[str, Any]],
        day: date,
        today: date,
    ) -> DayState:
        if not ScheduleEngine.is_date_active_for_statistics(habit, day):
            return const.DAY_STATE_INACTIVE  # type: ignore[return-value]
        if day > today:
            return const.DAY_STATE_FUTURE  # type: ignore[return-value]
        status = StatusEngine.classify_log(habit, index.get(dt_day_key(day))).status
        if status == const.LOG_STATUS_DONE:
            return const.DAY_STATE_DONE  # type: ignore[return-value]
        if status == const.LOG_STATUS_PARTIAL:
            return const.DAY_STATE_PARTIAL  # type: ignore[return-value]
        return const.DAY_STATE_MISSED  # type: ignore[return-value]

    @staticmethod
    def get_day_state(
        habit: HabitData | Mapping[str, Any],
        logs: Sequence[HabitLogData | Mapping[str, Any]],
        day: date | datetime | str,
        reference_date: date | datetime | str | None = None,
    ) -> DayState:
        """Return the calendar state of one day.

        inactive: outside statistics scope
        future:   in scope but after the reference day
        done / partial: per the status classifier
        missed:   in scope, on or before the reference day, nothing useful logged
        """
        index = StatisticsEngine.build_log_index(habit, logs)
        today = StatisticsEngine.resolve_reference_date(reference_date)
        check_day = dt_to_day(day)
        if check_day is None:
            return const.DAY_STATE_INACTIVE  # type: ignore[return-value]
        return StatisticsEngine._day_state(habit, index, check_day, today)

    @staticmethod
    def get_month_day_states(
        habit: HabitData | Mapping[str, Any],
        logs: Sequence[HabitLogData | Mapping[str, Any]],
        year: int,
        month: int,
        reference_date: date | datetime | str | None = None,
    ) -> dict[str, DayState]:
        """Return {ISO day: state} for every day of the given month."""
        index = StatisticsEngine.build_log_index(habit, logs)
        today = StatisticsEngine.resolve_reference_date(reference_date)
        first_day = date(year, month, 1)
        return {
            dt_day_key(day): StatisticsEngine._day_state(habit, index, day, today)
            for day in dt_iter_days(first_day, dt_end_of_month(first_day))
        }


# =============================================================================
# MODULE-LEVEL API
# =============================================================================


def compute_stats(
    habit: HabitData | Mapping[str, Any],
    logs: Sequence[HabitLogData | Mapping[str, Any]],
    reference_date: date | datetime | str | None = None,
) -> HabitStats:
    """See StatisticsEngine.compute_stats."""
    return StatisticsEngine.compute_stats(habit, logs, reference_date)

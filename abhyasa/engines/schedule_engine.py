"""Schedule Engine for Abhyasa.

Decides whether a habit is "in scope" on a calendar day. Two predicates are
kept deliberately separate:

- Statistics scope: was the day one on which the habit was expected at all?
  Weekly/monthly quotas are ignored here, every day of the window counts.
- Display scope: should the habit be shown as due on the day? Weekly/monthly
  habits drop off once the period's quota of done days has been reached.

Calendar arithmetic uses `dateutil.relativedelta` (Sunday-started weeks,
month-end clamping) via utils.dt_utils.

IMPORTANT: This module must NOT import from statistics_engine.py.
Only import from const.py, status_engine.py and utils.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import (
    dt_end_of_month,
    dt_end_of_week,
    dt_start_of_month,
    dt_start_of_week,
    dt_to_day,
    dt_weekday_number,
)
from .status_engine import StatusEngine, ensure_habit, ensure_logs

if TYPE_CHECKING:
    from ..type_defs import HabitData, HabitLogData, PeriodType


class ScheduleEngine:
    """Pure logic engine for habit activity windows and recurrence rules.

    All methods are static - no instance state, no clock access. Dates may be
    passed as `date`, `datetime` or strings; they are normalized to the local
    calendar day before any comparison.
    """

    # =========================================================================
    # WINDOW
    # =========================================================================

    @staticmethod
    def get_active_window(
        habit: HabitData | Mapping[str, Any],
    ) -> tuple[date | None, date | None]:
        """Return the habit's (first_day, last_day) window.

        last_day is None for open-ended habits. first_day is None when the
        stored start date cannot be parsed, in which case the habit is never
        active.
        """
        start_day = dt_to_day(habit.get(const.DATA_HABIT_START_DATE))
        if start_day is None:
            const.LOGGER.warning(
                "ScheduleEngine: Habit %s has unparseable start_date %r",
                habit.get(const.DATA_HABIT_ID),
                habit.get(const.DATA_HABIT_START_DATE),
            )
        end_day = dt_to_day(habit.get(const.DATA_HABIT_END_DATE))
        return start_day, end_day

    @staticmethod
    def is_within_active_window(
        habit: HabitData | Mapping[str, Any],
        day: date | datetime | str,
    ) -> bool:
        """Return whether the day falls inside [start_date, end_date].

        Start is inclusive from midnight, end is inclusive through the end of
        its day. A missing end_date means open-ended.
        """
        ensure_habit(habit)
        check_day = dt_to_day(day)
        start_day, end_day = ScheduleEngine.get_active_window(habit)
        if check_day is None or start_day is None:
            return False
        if check_day < start_day:
            return False
        return not (end_day is not None and check_day > end_day)

    # =========================================================================
    # PERIODS
    # =========================================================================

    @staticmethod
    def get_period_bounds(day: date, period: PeriodType | str) -> tuple[date, date]:
        """Return the (first_day, last_day) of the week or month containing day.

        Weeks run Sunday to Saturday.
        """
        if period == const.PERIOD_WEEK:
            return dt_start_of_week(day), dt_end_of_week(day)
        if period == const.PERIOD_MONTH:
            return dt_start_of_month(day), dt_end_of_month(day)
        raise ValueError(f"Unknown period: {period}")

    @staticmethod
    def count_completions_in_period(
        habit: HabitData | Mapping[str, Any],
        logs: Sequence[HabitLogData | Mapping[str, Any]],
        day: date | datetime | str,
        period: PeriodType | str,
    ) -> int:
        """Count distinct done days inside the week/month containing day.

        Logs of other habits and logs with unparseable dates are ignored.
        When several logs share a date the last one wins.
        """
        ensure_habit(habit)
        ensure_logs(logs)
        check_day = dt_to_day(day)
        if check_day is None:
            return 0

        first_day, last_day = ScheduleEngine.get_period_bounds(check_day, period)
        habit_id = habit.get(const.DATA_HABIT_ID)

        latest_by_day: dict[date, Mapping[str, Any]] = {}
        for log in logs:
            if log.get(const.DATA_LOG_HABIT_ID) not in (None, habit_id):
                continue
            log_day = dt_to_day(log.get(const.DATA_LOG_DATE))
            if log_day is None:
                const.LOGGER.debug(
                    "ScheduleEngine: Ignoring log %s with unparseable date %r",
                    log.get(const.DATA_LOG_ID),
                    log.get(const.DATA_LOG_DATE),
                )
                continue
            if first_day <= log_day <= last_day:
                latest_by_day[log_day] = log

        return sum(
            1 for log in latest_by_day.values() if StatusEngine.is_done(habit, log)
        )

    # =========================================================================
    # PREDICATES
    # =========================================================================

    @staticmethod
    def _frequency_days(frequency: Mapping[str, Any]) -> set[int]:
        """Return the stored weekdays as ints; unconvertible entries are dropped."""
        days: set[int] = set()
        for raw_day in frequency.get(const.DATA_FREQUENCY_DAYS) or []:
            try:
                days.add(int(raw_day))
            except (TypeError, ValueError):
                const.LOGGER.debug(
                    "ScheduleEngine: Ignoring invalid weekday %r", raw_day
                )
        return days

    @staticmethod
    def _frequency_times(frequency: Mapping[str, Any]) -> int:
        """Return the weekly/monthly quota as an int (default 1)."""
        raw_times = frequency.get(const.DATA_FREQUENCY_TIMES)
        if raw_times is None:
            return const.DEFAULT_FREQUENCY_TIMES
        try:
            return int(raw_times)
        except (TypeError, ValueError):
            const.LOGGER.warning(
                "ScheduleEngine: Invalid frequency times %r, using %s",
                raw_times,
                const.DEFAULT_FREQUENCY_TIMES,
            )
            return const.DEFAULT_FREQUENCY_TIMES

    @staticmethod
    def _matches_specific_days(habit: Mapping[str, Any], day: date) -> bool:
        frequency = habit.get(const.DATA_HABIT_FREQUENCY) or {}
        return dt_weekday_number(day) in ScheduleEngine._frequency_days(frequency)

    @staticmethod
    def is_date_active_for_statistics(
        habit: HabitData | Mapping[str, Any],
        day: date | datetime | str,
    ) -> bool:
        """Return whether the day is one the habit was expected to be acted on.

        Used as the denominator scope for streaks and completion rate.
        Weekly/monthly quotas do not narrow this scope.
        """
        if not ScheduleEngine.is_within_active_window(habit, day):
            return False

        check_day = dt_to_day(day)
        frequency_type = (habit.get(const.DATA_HABIT_FREQUENCY) or {}).get(
            const.DATA_FREQUENCY_TYPE
        )
        if frequency_type == const.FREQUENCY_DAILY:
            return True
        if frequency_type in const.QUOTA_FREQUENCIES:
            return True
        if frequency_type == const.FREQUENCY_SPECIFIC_DAYS:
            return ScheduleEngine._matches_specific_days(habit, check_day)  # type: ignore[arg-type]
        return False

    @staticmethod
    def should_display_on_date(
        habit: HabitData | Mapping[str, Any],
        day: date | datetime | str,
        logs: Sequence[HabitLogData | Mapping[str, Any]],
    ) -> bool:
        """Return whether the habit should be shown as due on the day.

        Weekly/monthly habits qualify only while the number of done days
        already logged in the containing week/month is below `times`.
        """
        ensure_logs(logs)
        if not ScheduleEngine.is_within_active_window(habit, day):
            return False

        check_day = dt_to_day(day)
        frequency = habit.get(const.DATA_HABIT_FREQUENCY) or {}
        frequency_type = frequency.get(const.DATA_FREQUENCY_TYPE)

        if frequency_type == const.FREQUENCY_DAILY:
            return True
        if frequency_type == const.FREQUENCY_SPECIFIC_DAYS:
            return ScheduleEngine._matches_specific_days(habit, check_day)  # type: ignore[arg-type]
        if frequency_type in const.QUOTA_FREQUENCIES:
            period = (
                const.PERIOD_WEEK
                if frequency_type == const.FREQUENCY_WEEKLY
                else const.PERIOD_MONTH
            )
            times = ScheduleEngine._frequency_times(frequency)
            done_in_period = ScheduleEngine.count_completions_in_period(
                habit, logs, check_day, period  # type: ignore[arg-type]
            )
            return done_in_period < times
        return False


# =============================================================================
# MODULE-LEVEL API
# =============================================================================


def is_date_active_for_statistics(
    habit: HabitData | Mapping[str, Any],
    day: date | datetime | str,
) -> bool:
    """See ScheduleEngine.is_date_active_for_statistics."""
    return ScheduleEngine.is_date_active_for_statistics(habit, day)


def should_display_on_date(
    habit: HabitData | Mapping[str, Any],
    day: date | datetime | str,
    logs: Sequence[HabitLogData | Mapping[str, Any]],
) -> bool:
    """See ScheduleEngine.should_display_on_date."""
    return ScheduleEngine.should_display_on_date(habit, day, logs)


def get_habits_for_date(
    habits: Sequence[HabitData | Mapping[str, Any]],
    logs: Sequence[HabitLogData | Mapping[str, Any]],
    day: date | datetime | str,
) -> list[HabitData | Mapping[str, Any]]:
    """Return the habits due on the day, in their original order.

    `logs` may mix several habits; each habit is judged against its own logs.
    """
    ensure_logs(logs)
    logs_by_habit: dict[Any, list[Mapping[str, Any]]] = {}
    for log in logs:
        logs_by_habit.setdefault(log.get(const.DATA_LOG_HABIT_ID), []).append(log)

    due: list[HabitData | Mapping[str, Any]] = []
    for habit in habits:
        ensure_habit(habit)
        habit_logs = logs_by_habit.get(habit.get(const.DATA_HABIT_ID), [])
        if ScheduleEngine.should_display_on_date(habit, day, habit_logs):
            due.append(habit)
    return due

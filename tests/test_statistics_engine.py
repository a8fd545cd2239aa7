"""Tests for StatisticsEngine.

Tests cover:
- Streaks (current via backward walk, best via forward walk)
- Completion rate over in-scope days
- Totals per habit type (days completed, accumulated progress)
- Window and reference-day edges (future start, ended habits, duplicates)
- Total-target evaluation
- Calendar day states
- Invariants over generated log patterns
"""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime
from typing import Any

from freezegun import freeze_time
import pytest

from abhyasa import const
from abhyasa.engines.statistics_engine import (
    HabitStats,
    StatisticsEngine,
    TotalTargetProgress,
    compute_stats,
)
from abhyasa.engines.status_engine import HabitContractError
from abhyasa.utils.dt_utils import dt_iter_days
from tests.helpers import (
    REFERENCE_DAY,
    day_offset,
    make_checklist_habit,
    make_habit,
    make_log,
    make_logs,
)

MON_WED_FRI = {
    const.DATA_FREQUENCY_TYPE: const.FREQUENCY_SPECIFIC_DAYS,
    const.DATA_FREQUENCY_DAYS: [1, 3, 5],
}


def _mon_wed_fri_habit() -> dict[str, Any]:
    """Mon/Wed/Fri habit starting Monday 2026-01-05, missed Monday the 12th."""
    return make_habit(frequency=MON_WED_FRI, start_date=date(2026, 1, 5))


def _mon_wed_fri_logs() -> list[dict[str, Any]]:
    return make_logs(
        date(2026, 1, day) for day in (5, 7, 9, 14, 16, 19, 21)
    )


def _count_habit(**fields: Any) -> dict[str, Any]:
    """Count habit (target 8) starting Monday 2026-01-19 unless overridden."""
    fields.setdefault("start_date", date(2026, 1, 19))
    fields.setdefault("daily_target", 8)
    return make_habit(const.HABIT_TYPE_COUNT, **fields)


def _count_logs() -> list[dict[str, Any]]:
    return [
        make_log(date(2026, 1, 19), 10),
        make_log(date(2026, 1, 20), 3),
        make_log(date(2026, 1, 21), 8),
    ]


# =============================================================================
# TEST: STREAKS AND COMPLETION RATE
# =============================================================================


class TestStreaks:
    """Current/best streak and completion rate."""

    def test_unlogged_today_breaks_current_streak(self) -> None:
        """Ten done days then nothing today: current 0, best 10, rate 90.91."""
        habit = make_habit(start_date=day_offset(-10))
        logs = make_logs(dt_iter_days(day_offset(-10), day_offset(-1)))

        stats = compute_stats(habit, logs, REFERENCE_DAY)

        assert stats == HabitStats(
            current_streak=0,
            best_streak=10,
            completion_rate=90.91,
            days_completed=10,
            accumulated_progress=10.0,
        )

    def test_unbroken_run_through_today(self) -> None:
        """Every day done: current equals best, rate 100."""
        habit = make_habit(start_date=day_offset(-10))
        logs = make_logs(dt_iter_days(day_offset(-10), REFERENCE_DAY))

        stats = compute_stats(habit, logs, REFERENCE_DAY)

        assert stats.current_streak == 11
        assert stats.best_streak == 11
        assert stats.completion_rate == 100.0

    def test_gap_resets_running_streak(self) -> None:
        """A missed day splits the history into two runs."""
        habit = make_habit(start_date=date(2026, 1, 11))
        logs = make_logs(dt_iter_days(date(2026, 1, 11), date(2026, 1, 15)))
        logs += make_logs(dt_iter_days(date(2026, 1, 17), REFERENCE_DAY))

        stats = compute_stats(habit, logs, REFERENCE_DAY)

        assert stats.current_streak == 5
        assert stats.best_streak == 5
        assert stats.completion_rate == 90.91

    def test_specific_days_skip_out_of_scope_days(self) -> None:
        """Tuesdays and Thursdays neither extend nor break a Mon/Wed/Fri streak."""
        stats = compute_stats(_mon_wed_fri_habit(), _mon_wed_fri_logs(), REFERENCE_DAY)

        assert stats.current_streak == 4
        assert stats.best_streak == 4
        assert stats.completion_rate == 87.5
        assert stats.days_completed == 7

    def test_out_of_scope_reference_day(self) -> None:
        """An unlogged reference day outside scope does not end the streak."""
        stats = compute_stats(
            _mon_wed_fri_habit(), _mon_wed_fri_logs(), date(2026, 1, 22)
        )

        assert stats.current_streak == 4

    def test_partial_day_breaks_streak(self) -> None:
        """Partial days count as not done for streaks and rate."""
        stats = compute_stats(_count_habit(), _count_logs(), REFERENCE_DAY)

        assert stats.current_streak == 1
        assert stats.best_streak == 1
        assert stats.completion_rate == 66.67

    def test_skipped_log_by_habit_type(self) -> None:
        """A legacy skipped log keeps a binary streak but breaks a count streak."""
        days = list(dt_iter_days(day_offset(-2), REFERENCE_DAY))
        logs = [
            make_log(days[0], 8),
            make_log(days[1], status="skipped"),
            make_log(days[2], 8),
        ]

        binary = compute_stats(
            make_habit(start_date=days[0]), logs, REFERENCE_DAY
        )
        count = compute_stats(_count_habit(start_date=days[0]), logs, REFERENCE_DAY)

        assert binary.current_streak == 3
        assert count.current_streak == 1
        assert count.best_streak == 1

    def test_weekly_habit_every_day_expected(self) -> None:
        """Quota frequencies count every window day in the rate."""
        habit = make_habit(
            frequency={
                const.DATA_FREQUENCY_TYPE: const.FREQUENCY_WEEKLY,
                const.DATA_FREQUENCY_TIMES: 2,
            },
            start_date=date(2026, 1, 18),
        )
        logs = make_logs([date(2026, 1, 18), date(2026, 1, 19)])

        stats = compute_stats(habit, logs, REFERENCE_DAY)

        assert stats.completion_rate == 50.0
        assert stats.best_streak == 2
        assert stats.current_streak == 0


# =============================================================================
# TEST: WINDOW AND REFERENCE EDGES
# =============================================================================


class TestWindowEdges:
    """Start/end dates and the reference day."""

    def test_future_start_returns_zeros(self) -> None:
        """A habit starting after the reference day has no statistics."""
        habit = make_habit(start_date=day_offset(5))
        logs = make_logs([REFERENCE_DAY, day_offset(-1), day_offset(6)])

        assert compute_stats(habit, logs, REFERENCE_DAY) == HabitStats()

    def test_unparseable_start_returns_zeros(self) -> None:
        """A broken start_date yields zeros instead of raising."""
        habit = make_habit(start_date="someday")

        assert compute_stats(habit, [make_log(REFERENCE_DAY)], REFERENCE_DAY) == (
            HabitStats()
        )

    def test_ended_habit(self) -> None:
        """Days after end_date are out of scope for streaks but still totalled."""
        habit = make_habit(start_date=date(2026, 1, 11), end_date="2026-01-15")
        logs = make_logs(dt_iter_days(date(2026, 1, 11), date(2026, 1, 15)))
        logs.append(make_log(date(2026, 1, 18)))

        stats = compute_stats(habit, logs, REFERENCE_DAY)

        assert stats.current_streak == 5
        assert stats.best_streak == 5
        assert stats.completion_rate == 100.0
        assert stats.days_completed == 6
        assert stats.accumulated_progress == 6.0

    def test_log_after_end_date_totalled(self) -> None:
        """A binary log past end_date counts as a completed day."""
        habit = make_habit(start_date=date(2026, 1, 11), end_date="2026-01-15")
        logs = make_logs([date(2026, 1, 12), date(2026, 1, 18)])

        stats = compute_stats(habit, logs, REFERENCE_DAY)

        assert stats.days_completed == 2
        assert stats.completion_rate == 20.0

    def test_log_before_start_date_totalled(self) -> None:
        """Values logged before an edited start_date stay in the totals."""
        habit = _count_habit(start_date=date(2026, 1, 20), daily_target=5)
        logs = [make_log(date(2026, 1, 10), 7), make_log(date(2026, 1, 20), 5)]

        stats = compute_stats(habit, logs, REFERENCE_DAY)

        assert stats.accumulated_progress == 12.0
        assert stats.days_completed == 2
        assert stats.best_streak == 1
        assert stats.completion_rate == 50.0

    def test_logs_after_reference_not_totalled(self) -> None:
        """Logs dated after the reference day are ignored."""
        habit = _count_habit()
        logs = [*_count_logs(), make_log(date(2026, 1, 25), 50)]

        assert compute_stats(habit, logs, REFERENCE_DAY).accumulated_progress == 21.0

    def test_duplicate_day_latest_wins(self) -> None:
        """When two logs share a day the later one is used."""
        habit = _count_habit(start_date=REFERENCE_DAY)
        logs = [make_log(REFERENCE_DAY, 3), make_log(REFERENCE_DAY, 9)]

        stats = compute_stats(habit, logs, REFERENCE_DAY)

        assert stats.current_streak == 1
        assert stats.days_completed == 1
        assert stats.accumulated_progress == 9.0

    def test_other_habits_and_bad_dates_ignored(self) -> None:
        """Logs of other habits and unparseable dates never count."""
        habit = make_habit(start_date=day_offset(-3))
        logs = [
            *make_logs(
                dt_iter_days(day_offset(-3), REFERENCE_DAY), habit_id="habit-2"
            ),
            make_log("yesterday-ish"),
        ]

        stats = compute_stats(habit, logs, REFERENCE_DAY)

        assert stats.current_streak == 0
        assert stats.best_streak == 0
        assert stats.completion_rate == 0.0
        assert stats.days_completed == 0

    def test_timestamp_log_dates_use_local_day(
        self, new_york_timezone: Any
    ) -> None:
        """A log stamped 03:00 UTC belongs to the previous New York day."""
        habit = make_habit(start_date=date(2026, 1, 20))
        logs = [make_log("2026-01-21T03:00:00+00:00")]

        stats = compute_stats(habit, logs, REFERENCE_DAY)

        assert stats.current_streak == 0
        assert stats.best_streak == 1

    @pytest.mark.parametrize(
        "reference",
        [REFERENCE_DAY, "2026-01-21", datetime(2026, 1, 21, 23, 59)],
    )
    def test_reference_date_forms(self, reference: Any) -> None:
        """date, ISO string and datetime references are equivalent."""
        habit = make_habit(start_date=day_offset(-2))
        logs = make_logs(dt_iter_days(day_offset(-2), REFERENCE_DAY))

        assert compute_stats(habit, logs, reference).current_streak == 3

    @freeze_time("2026-01-21 12:00:00")
    def test_reference_defaults_to_today(self) -> None:
        """Without a reference day the local clock's today is used."""
        habit = make_habit(start_date=day_offset(-10))
        logs = make_logs(dt_iter_days(day_offset(-10), day_offset(-1)))

        assert compute_stats(habit, logs) == compute_stats(habit, logs, REFERENCE_DAY)

    @freeze_time("2026-01-21 12:00:00")
    def test_unparseable_reference_falls_back(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """An unparseable reference is treated as today and logged."""
        assert StatisticsEngine.resolve_reference_date("soon") == REFERENCE_DAY
        assert "Unparseable reference date" in caplog.text


# =============================================================================
# TEST: TOTALS PER HABIT TYPE
# =============================================================================


class TestTotals:
    """days_completed and accumulated_progress per habit type."""

    def test_count_sums_values(self) -> None:
        """Count totals sum every logged value, partial days included."""
        stats = compute_stats(_count_habit(), _count_logs(), REFERENCE_DAY)

        assert stats.days_completed == 2
        assert stats.accumulated_progress == 21.0

    def test_duration_sums_minutes(self) -> None:
        """Duration totals sum minutes."""
        habit = make_habit(
            const.HABIT_TYPE_DURATION, start_date=date(2026, 1, 19), daily_target=30
        )
        logs = [make_log(date(2026, 1, 19), 45), make_log(date(2026, 1, 20), 15)]

        stats = compute_stats(habit, logs, REFERENCE_DAY)

        assert stats.accumulated_progress == 60.0
        assert stats.days_completed == 1
        assert stats.best_streak == 1
        assert stats.current_streak == 0
        assert stats.completion_rate == 33.33

    def test_binary_counts_done_days(self) -> None:
        """Binary progress is the number of done days."""
        habit = make_habit(start_date=day_offset(-2))
        logs = make_logs([day_offset(-2), REFERENCE_DAY])

        assert compute_stats(habit, logs, REFERENCE_DAY).accumulated_progress == 2.0

    def test_checklist_counts_items(self) -> None:
        """Checklist progress is the number of completed items across days."""
        habit = make_checklist_habit(start_date=date(2026, 1, 20))
        logs = [
            make_log(date(2026, 1, 20), completed_checklist_items=["stretch"]),
            make_log(
                REFERENCE_DAY,
                completed_checklist_items=["stretch", "plank", "squats"],
            ),
        ]

        stats = compute_stats(habit, logs, REFERENCE_DAY)

        assert stats.accumulated_progress == 4.0
        assert stats.days_completed == 1
        assert stats.current_streak == 1
        assert stats.completion_rate == 50.0

    def test_as_dict_shape(self) -> None:
        """as_dict uses the camelCase keys UI callers expect."""
        stats = compute_stats(_count_habit(), _count_logs(), REFERENCE_DAY)

        assert stats.as_dict() == {
            "currentStreak": 1,
            "bestStreak": 1,
            "completionRate": 66.67,
            "daysCompleted": 2,
            "accumulatedProgress": 21.0,
        }


# =============================================================================
# TEST: TOTAL TARGET
# =============================================================================


class TestTotalTarget:
    """evaluate_total_target against accumulated progress."""

    def test_met_and_clamped(self) -> None:
        """21 of 20 is met with percentage capped at 100."""
        habit = _count_habit(total_target=20)
        stats = compute_stats(habit, _count_logs(), REFERENCE_DAY)

        assert StatisticsEngine.evaluate_total_target(habit, stats) == (
            TotalTargetProgress(
                progress=21.0,
                target=20.0,
                comparison=const.COMPARISON_AT_LEAST,
                is_met=True,
                percentage=100.0,
            )
        )

    def test_alias_comparison(self) -> None:
        """A legacy alias on the total comparison is resolved."""
        habit = _count_habit(total_target=100, total_target_comparison="less-than")
        stats = compute_stats(habit, _count_logs(), REFERENCE_DAY)

        result = StatisticsEngine.evaluate_total_target(habit, stats)

        assert result is not None
        assert result.comparison == const.COMPARISON_LESS_THAN
        assert result.is_met is True
        assert result.percentage == 21.0

    @pytest.mark.parametrize("total_target", [None, 0, "n/a"])
    def test_no_target(self, total_target: Any) -> None:
        """Without a positive total target there is nothing to evaluate."""
        habit = _count_habit(total_target=total_target)

        assert StatisticsEngine.evaluate_total_target(habit, HabitStats()) is None


# =============================================================================
# TEST: CALENDAR STATES
# =============================================================================


class TestDayStates:
    """Calendar day states."""

    @pytest.mark.parametrize(
        ("day", "expected"),
        [
            (date(2026, 1, 4), const.DAY_STATE_INACTIVE),  # before start
            (date(2026, 1, 20), const.DAY_STATE_INACTIVE),  # Tuesday
            (date(2026, 1, 23), const.DAY_STATE_FUTURE),
            (date(2026, 1, 19), const.DAY_STATE_DONE),
            (date(2026, 1, 12), const.DAY_STATE_MISSED),
            ("not a day", const.DAY_STATE_INACTIVE),
        ],
    )
    def test_day_state(self, day: Any, expected: str) -> None:
        """Each scheduled day maps to one state."""
        state = StatisticsEngine.get_day_state(
            _mon_wed_fri_habit(), _mon_wed_fri_logs(), day, REFERENCE_DAY
        )

        assert state == expected

    def test_unlogged_reference_day_is_missed(self) -> None:
        """The reference day itself is missed when nothing was logged."""
        habit = make_habit(start_date=day_offset(-1))

        assert (
            StatisticsEngine.get_day_state(habit, [], REFERENCE_DAY, REFERENCE_DAY)
            == const.DAY_STATE_MISSED
        )

    def test_month_states(self) -> None:
        """A month view covers every day with the right state."""
        states = StatisticsEngine.get_month_day_states(
            _count_habit(), _count_logs(), 2026, 1, REFERENCE_DAY
        )

        assert len(states) == 31
        assert states["2026-01-18"] == const.DAY_STATE_INACTIVE
        assert states["2026-01-19"] == const.DAY_STATE_DONE
        assert states["2026-01-20"] == const.DAY_STATE_PARTIAL
        assert states["2026-01-21"] == const.DAY_STATE_DONE
        assert states["2026-01-31"] == const.DAY_STATE_FUTURE
        assert Counter(states.values()) == {
            const.DAY_STATE_INACTIVE: 18,
            const.DAY_STATE_DONE: 2,
            const.DAY_STATE_PARTIAL: 1,
            const.DAY_STATE_FUTURE: 10,
        }

    def test_february_length(self) -> None:
        """February 2026 has 28 entries."""
        states = StatisticsEngine.get_month_day_states(
            make_habit(), [], 2026, 2, REFERENCE_DAY
        )

        assert len(states) == 28
        assert set(states.values()) == {const.DAY_STATE_FUTURE}


# =============================================================================
# TEST: CONTRACT AND INVARIANTS
# =============================================================================


class TestContract:
    """Fail-fast on malformed arguments."""

    def test_missing_habit_raises(self) -> None:
        """compute_stats(None, ...) is a contract error."""
        with pytest.raises(HabitContractError) as exc_info:
            compute_stats(None, [], REFERENCE_DAY)  # type: ignore[arg-type]

        assert exc_info.value.argument == "habit"

    @pytest.mark.parametrize("logs", [None, "logs", {"date": "2026-01-21"}])
    def test_bad_logs_raise(self, logs: Any) -> None:
        """Logs must be a list or tuple."""
        with pytest.raises(HabitContractError) as exc_info:
            compute_stats(make_habit(), logs, REFERENCE_DAY)

        assert exc_info.value.argument == "logs"

    def test_tuple_logs_accepted(self) -> None:
        """A tuple of logs works like a list."""
        habit = make_habit(start_date=REFERENCE_DAY)

        assert compute_stats(habit, (make_log(REFERENCE_DAY),), REFERENCE_DAY) == (
            compute_stats(habit, [make_log(REFERENCE_DAY)], REFERENCE_DAY)
        )

    def test_inputs_not_mutated(self) -> None:
        """The engine never writes to habits or logs."""
        habit = _count_habit()
        logs = _count_logs()
        habit_before = repr(habit)
        logs_before = repr(logs)

        compute_stats(habit, logs, REFERENCE_DAY)
        StatisticsEngine.get_month_day_states(habit, logs, 2026, 1, REFERENCE_DAY)

        assert repr(habit) == habit_before
        assert repr(logs) == logs_before


# 14-day log patterns ending at the reference day, oldest day first
_PATTERNS = [
    "00000000000000",
    "11111111111111",
    "11111110111111",
    "10101010101010",
    "00000000000001",
    "11111111111110",
    "11001110011101",
]

_FREQUENCIES = [
    {const.DATA_FREQUENCY_TYPE: const.FREQUENCY_DAILY},
    MON_WED_FRI,
    {const.DATA_FREQUENCY_TYPE: const.FREQUENCY_WEEKLY, const.DATA_FREQUENCY_TIMES: 3},
    {const.DATA_FREQUENCY_TYPE: const.FREQUENCY_MONTHLY, const.DATA_FREQUENCY_TIMES: 5},
]


class TestInvariants:
    """Properties that hold for any history."""

    @pytest.mark.parametrize("pattern", _PATTERNS)
    @pytest.mark.parametrize("frequency", _FREQUENCIES)
    def test_stat_bounds(self, pattern: str, frequency: dict[str, Any]) -> None:
        """best >= current >= 0, rate within [0, 100], and repeat calls agree."""
        start = day_offset(-13)
        habit = make_habit(frequency=frequency, start_date=start)
        logs = make_logs(
            day
            for day, flag in zip(dt_iter_days(start, REFERENCE_DAY), pattern)
            if flag == "1"
        )

        stats = compute_stats(habit, logs, REFERENCE_DAY)

        assert stats.best_streak >= stats.current_streak >= 0
        assert 0.0 <= stats.completion_rate <= 100.0
        assert stats.days_completed == pattern.count("1")
        assert compute_stats(habit, logs, REFERENCE_DAY) == stats

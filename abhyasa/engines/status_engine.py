"""Status Engine - Pure classification of a single day's habit log.

This engine turns one habit plus one (possibly absent) log into a tri-state
completion verdict:
- done / partial / none
- progress fraction in [0, 1]
- is_complete flag

A stored `status` on a log is NEVER trusted; the verdict is always
recomputed from `value` / `completed_checklist_items` against the habit's
type and target. Two status vocabularies exist in older documents and this
is the one place they are reconciled.

ARCHITECTURE: Stateless, no clock access, no I/O. All methods are static.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from .. import const
from ..utils.math_utils import clamp, safe_ratio

if TYPE_CHECKING:
    from ..type_defs import HabitData, HabitLogData, HabitLogStatus, TargetComparison


# =============================================================================
# EXCEPTIONS
# =============================================================================


class HabitContractError(TypeError):
    """Raised when a caller hands the engines something that is not a habit or a log list.

    These are programmer errors. Returning zeroed statistics here would hide
    the bug, so every public engine entry point fails fast instead.

    Attributes:
        argument: Name of the offending argument ("habit" or "logs")
        received_type: Type name of what was actually passed
    """

    def __init__(self, argument: str, received_type: str) -> None:
        """Initialize HabitContractError."""
        self.argument = argument
        self.received_type = received_type
        super().__init__(
            f"Expected a valid {argument}, received {received_type}"
        )


def ensure_habit(habit: Any) -> None:
    """Fail fast unless habit is a habit record."""
    if not isinstance(habit, Mapping):
        raise HabitContractError("habit", type(habit).__name__)


def ensure_logs(logs: Any) -> None:
    """Fail fast unless logs is a list/tuple of log records (possibly empty)."""
    if not isinstance(logs, (list, tuple)):
        raise HabitContractError("logs", type(logs).__name__)


# =============================================================================
# RESULT STRUCTURE
# =============================================================================


@dataclass(frozen=True, slots=True)
class HabitStatusResult:
    """Classification of one day's log.

    Attributes:
        status: done / partial / none
        progress: Normalized progress fraction in [0, 1]
        is_complete: Whether the day's criterion was met
    """

    status: HabitLogStatus
    progress: float
    is_complete: bool

    def as_dict(self) -> dict[str, Any]:
        """Return the camelCase shape used by UI callers."""
        return {
            "status": self.status,
            "progress": self.progress,
            "isComplete": self.is_complete,
        }


_NO_PROGRESS = HabitStatusResult(
    status=const.LOG_STATUS_NONE, progress=0.0, is_complete=False
)


# =============================================================================
# STATUS ENGINE
# =============================================================================


class StatusEngine:
    """Pure logic engine for per-log status classification.

    All methods are static - no instance state.
    """

    # =========================================================================
    # VALUE ACCESS
    # =========================================================================

    @staticmethod
    def normalize_comparison(comparison: str | None) -> TargetComparison:
        """Normalize a stored comparison operator, resolving legacy aliases.

        Args:
            comparison: Raw stored value, e.g. "at-least", "greater_than_or_equal"

        Returns:
            Canonical comparison. Missing or unknown values fall back to at_least.
        """
        if not comparison:
            return const.DEFAULT_TARGET_COMPARISON  # type: ignore[return-value]
        key = str(comparison).strip().lower()
        key = const.COMPARISON_ALIASES.get(key, key)
        if key not in const.COMPARISON_OPTIONS:
            const.LOGGER.warning(
                "StatusEngine: Unknown target comparison %r, using %s",
                comparison,
                const.DEFAULT_TARGET_COMPARISON,
            )
            return const.DEFAULT_TARGET_COMPARISON  # type: ignore[return-value]
        return key  # type: ignore[return-value]

    @staticmethod
    def log_value(log: Mapping[str, Any]) -> float:
        """Return the numeric value of a log (legacy `count` as fallback, else 0)."""
        value = log.get(const.DATA_LOG_VALUE)
        if value is None:
            value = log.get(const.DOC_LOG_COUNT_LEGACY)
        try:
            return float(value) if value else 0.0
        except (TypeError, ValueError):
            return 0.0

    @staticmethod
    def daily_target(habit: Mapping[str, Any]) -> float:
        """Return the habit's daily target; a missing or zero target means 1."""
        target = habit.get(const.DATA_HABIT_DAILY_TARGET)
        try:
            return float(target) if target else float(const.DEFAULT_DAILY_TARGET)
        except (TypeError, ValueError):
            return float(const.DEFAULT_DAILY_TARGET)

    # =========================================================================
    # COMPARISON PRIMITIVES
    # =========================================================================

    @staticmethod
    def compare_value(value: float, target: float, comparison: str) -> bool:
        """Return whether value satisfies target under the comparison operator."""
        if comparison == const.COMPARISON_AT_LEAST:
            return value >= target
        if comparison == const.COMPARISON_LESS_THAN:
            return value < target
        if comparison == const.COMPARISON_EXACTLY:
            return value == target
        if comparison == const.COMPARISON_ANY_VALUE:
            return value > 0
        if comparison == const.COMPARISON_GREATER_THAN:
            return value > target
        if comparison == const.COMPARISON_LESS_THAN_OR_EQUAL:
            return value <= target
        return False

    @staticmethod
    def comparison_progress(value: float, target: float, comparison: str) -> float:
        """Return the progress fraction for a numeric value under the operator.

        Caps (less_than) and presence checks (any_value) report full progress
        as soon as anything is logged; ratio operators report value/target
        clamped to 1.
        """
        ratio = clamp(safe_ratio(value, target), 0.0, 1.0)
        if comparison == const.COMPARISON_AT_LEAST:
            return ratio
        if comparison in (const.COMPARISON_LESS_THAN, const.COMPARISON_ANY_VALUE):
            return 1.0 if value > 0 else 0.0
        if comparison in (
            const.COMPARISON_EXACTLY,
            const.COMPARISON_LESS_THAN_OR_EQUAL,
        ):
            return ratio if value > 0 else 0.0
        if comparison == const.COMPARISON_GREATER_THAN:
            return 1.0 if value > target else ratio
        return 0.0

    @staticmethod
    def _status_for(is_complete: bool, has_progress: bool) -> HabitLogStatus:
        if is_complete:
            return const.LOG_STATUS_DONE  # type: ignore[return-value]
        if has_progress:
            return const.LOG_STATUS_PARTIAL  # type: ignore[return-value]
        return const.LOG_STATUS_NONE  # type: ignore[return-value]

    # =========================================================================
    # PER-TYPE CLASSIFIERS
    # =========================================================================

    @staticmethod
    def classify_binary(
        habit: Mapping[str, Any], log: Mapping[str, Any]
    ) -> HabitStatusResult:
        """Binary: a log's presence is completion. There is no partial state."""
        return HabitStatusResult(
            status=const.LOG_STATUS_DONE, progress=1.0, is_complete=True
        )

    @staticmethod
    def classify_count(
        habit: Mapping[str, Any], log: Mapping[str, Any]
    ) -> HabitStatusResult:
        """Count: logged value against daily_target under the habit's comparison."""
        value = StatusEngine.log_value(log)
        target = StatusEngine.daily_target(habit)
        comparison = StatusEngine.normalize_comparison(
            habit.get(const.DATA_HABIT_DAILY_TARGET_COMPARISON)
        )
        is_complete = StatusEngine.compare_value(value, target, comparison)
        return HabitStatusResult(
            status=StatusEngine._status_for(is_complete, value > 0),
            progress=StatusEngine.comparison_progress(value, target, comparison),
            is_complete=is_complete,
        )

    @staticmethod
    def classify_duration(
        habit: Mapping[str, Any], log: Mapping[str, Any]
    ) -> HabitStatusResult:
        """Duration: total minutes, always at_least against daily_target."""
        value = StatusEngine.log_value(log)
        target = StatusEngine.daily_target(habit)
        is_complete = value >= target
        return HabitStatusResult(
            status=StatusEngine._status_for(is_complete, value > 0),
            progress=StatusEngine.comparison_progress(
                value, target, const.COMPARISON_AT_LEAST
            ),
            is_complete=is_complete,
        )

    @staticmethod
    def classify_checklist(
        habit: Mapping[str, Any], log: Mapping[str, Any]
    ) -> HabitStatusResult:
        """Checklist: completed item count against the habit's item count.

        A checklist habit with no items can never be completed.
        """
        total = len(habit.get(const.DATA_HABIT_CHECKLIST) or [])
        if total == 0:
            return _NO_PROGRESS

        completed = len(log.get(const.DATA_LOG_COMPLETED_CHECKLIST_ITEMS) or [])
        is_complete = completed == total
        return HabitStatusResult(
            status=StatusEngine._status_for(is_complete, completed > 0),
            progress=clamp(completed / total, 0.0, 1.0),
            is_complete=is_complete,
        )

    # One classifier per habit type
    CLASSIFIERS: ClassVar[
        dict[str, Callable[[Mapping[str, Any], Mapping[str, Any]], HabitStatusResult]]
    ] = {
        const.HABIT_TYPE_BINARY: classify_binary,
        const.HABIT_TYPE_COUNT: classify_count,
        const.HABIT_TYPE_DURATION: classify_duration,
        const.HABIT_TYPE_CHECKLIST: classify_checklist,
    }

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    @staticmethod
    def classify_log(
        habit: HabitData | Mapping[str, Any],
        log: HabitLogData | Mapping[str, Any] | None,
    ) -> HabitStatusResult:
        """Classify one day's log for a habit.

        Args:
            habit: Habit record (required)
            log: The day's log record, or None when nothing was logged

        Returns:
            HabitStatusResult. No log always yields none / 0 / False.

        Raises:
            HabitContractError: If habit is not a habit record.
        """
        ensure_habit(habit)
        if log is None:
            return _NO_PROGRESS

        habit_type = habit.get(const.DATA_HABIT_TYPE)
        classifier = StatusEngine.CLASSIFIERS.get(str(habit_type))
        if classifier is None:
            const.LOGGER.warning(
                "StatusEngine: Unknown habit type %r on habit %s",
                habit_type,
                habit.get(const.DATA_HABIT_ID),
            )
            return _NO_PROGRESS
        return classifier(habit, log)

    @staticmethod
    def is_done(
        habit: HabitData | Mapping[str, Any],
        log: HabitLogData | Mapping[str, Any] | None,
    ) -> bool:
        """Return whether the log classifies as done for the habit."""
        return StatusEngine.classify_log(habit, log).status == const.LOG_STATUS_DONE


# =============================================================================
# MODULE-LEVEL API
# =============================================================================


def classify_log(
    habit: HabitData | Mapping[str, Any],
    log: HabitLogData | Mapping[str, Any] | None,
) -> HabitStatusResult:
    """Classify one day's log for a habit (see StatusEngine.classify_log)."""
    return StatusEngine.classify_log(habit, log)


def filter_logs_for_habit(
    habit: Mapping[str, Any], logs: Sequence[Mapping[str, Any]]
) -> list[Mapping[str, Any]]:
    """Return the logs belonging to the habit.

    Logs without a habit_id are assumed to belong to the caller's habit.
    """
    habit_id = habit.get(const.DATA_HABIT_ID)
    return [
        log
        for log in logs
        if log.get(const.DATA_LOG_HABIT_ID) in (None, habit_id)
    ]
